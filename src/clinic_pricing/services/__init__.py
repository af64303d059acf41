"""Services subpackage - catalog lookup and order quoting."""
from .catalog_service import ServiceCatalog
from .order_service import OrderService, OrderLine, OrderQuote

__all__ = ['ServiceCatalog', 'OrderService', 'OrderLine', 'OrderQuote']
