"""
Shared engine and catalog instances for the API.

Built on first use so importing the app does not require the catalog files.
"""
from typing import Optional

from ..config.settings import get_settings
from ..engine import DiscountEngine
from ..services.catalog_service import ServiceCatalog

_engine: Optional[DiscountEngine] = None
_catalog: Optional[ServiceCatalog] = None


def get_engine() -> DiscountEngine:
    """Get the global engine instance."""
    global _engine
    if _engine is None:
        _engine = DiscountEngine(get_settings())
    return _engine


def get_catalog() -> ServiceCatalog:
    """Get the global catalog instance."""
    global _catalog
    if _catalog is None:
        _catalog = ServiceCatalog(get_settings())
    return _catalog
