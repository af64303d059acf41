"""
Catalog Service - CSV-backed service and customer lookup.

Stands in for the service/customer lookup collaborators. Customer rows
carry the live birthday usage counter as last exported; callers should not
treat a calculation as authoritative once another order for the same
customer may have completed.
"""
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..exceptions import CatalogError
from ..engine.models import Customer, Service

logger = logging.getLogger(__name__)

SERVICE_COLUMNS = [
    'id', 'name', 'category', 'base_price', 'duration',
    'package4_price', 'package8_price', 'package10_price',
    'allow_white_jade', 'allow_white_jade_double', 'allow_thymus', 'allow_power_shot',
]

CUSTOMER_COLUMNS = [
    'id', 'name', 'discount_class', 'birthday_usage_year', 'birthday_usage_count',
]


def _optional_number(value, field: str = 'value') -> Optional[float]:
    if pd.isna(value) or str(value).strip() == '':
        return None
    try:
        return float(value)
    except ValueError as e:
        raise CatalogError(f"{field} is not a number: {value!r}") from e


def _flag(value) -> bool:
    if pd.isna(value):
        return False
    return str(value).strip().lower() in ('true', '1', 'yes', 'y')


class ServiceCatalog:
    """Loads services.csv and customers.csv and resolves ids to engine models."""

    def __init__(self, settings: Optional[Settings] = None,
                 services_path: Optional[Path] = None,
                 customers_path: Optional[Path] = None):
        self.settings = settings or get_settings()
        self.services_path = services_path or self.settings.services_csv
        self.customers_path = customers_path or self.settings.customers_csv

        if not self.services_path.exists():
            raise FileNotFoundError(f"services.csv not found at {self.services_path}.")
        if not self.customers_path.exists():
            raise FileNotFoundError(f"customers.csv not found at {self.customers_path}.")

        self.services = self._load(self.services_path, SERVICE_COLUMNS)
        self.customers = self._load(self.customers_path, CUSTOMER_COLUMNS)
        logger.debug("Loaded %d services and %d customers", len(self.services), len(self.customers))

    def _load(self, path: Path, required: list[str]) -> pd.DataFrame:
        df = pd.read_csv(path, dtype=str)
        df.columns = [c.strip() for c in df.columns]
        missing = [c for c in required[:2] if c not in df.columns]
        if missing:
            raise CatalogError(f"{path.name} is missing column(s): {', '.join(missing)}")
        for col in df.columns:
            df[col] = df[col].map(lambda v: v.strip() if isinstance(v, str) else v)
        for col in required:
            if col not in df.columns:
                df[col] = None
        # Keep the first row when an id is duplicated
        df = df.drop_duplicates(subset='id', keep='first')
        return df.set_index('id', drop=False)

    def reload_data(self):
        """Reload both CSV files from disk."""
        self.__init__(self.settings, self.services_path, self.customers_path)

    def list_services(self) -> list[Service]:
        return [self._to_service(row) for _, row in self.services.iterrows()]

    def get_service(self, service_id: str) -> Service:
        service_id = str(service_id).strip()
        if service_id not in self.services.index:
            raise CatalogError(f"Service '{service_id}' not found")
        return self._to_service(self.services.loc[service_id])

    def get_customer(self, customer_id: str) -> Customer:
        customer_id = str(customer_id).strip()
        if customer_id not in self.customers.index:
            raise CatalogError(f"Customer '{customer_id}' not found")
        row = self.customers.loc[customer_id]
        year = _optional_number(row['birthday_usage_year'], f"{row['id']} birthday_usage_year")
        count = _optional_number(row['birthday_usage_count'], f"{row['id']} birthday_usage_count")
        return Customer(
            id=row['id'],
            name=row['name'] if pd.notna(row['name']) else '',
            discount_class=row['discount_class'] if pd.notna(row['discount_class']) else 'REGULAR',
            birthday_usage_year=int(year) if year is not None else None,
            birthday_usage_count=int(count) if count is not None else 0,
        )

    def _to_service(self, row: pd.Series) -> Service:
        base_price = _optional_number(row['base_price'], f"{row['id']} base_price")
        if base_price is None:
            raise CatalogError(f"Service '{row['id']}' has no base price")
        duration = _optional_number(row['duration'], f"{row['id']} duration")
        return Service(
            id=row['id'],
            name=row['name'],
            category=row['category'] if pd.notna(row['category']) else 'OTHER',
            base_price=base_price,
            duration=int(duration) if duration is not None else 0,
            package4_price=_optional_number(row['package4_price'], f"{row['id']} package4_price"),
            package8_price=_optional_number(row['package8_price'], f"{row['id']} package8_price"),
            package10_price=_optional_number(row['package10_price'], f"{row['id']} package10_price"),
            allow_white_jade=_flag(row['allow_white_jade']),
            allow_white_jade_double=_flag(row['allow_white_jade_double']),
            allow_thymus=_flag(row['allow_thymus']),
            allow_power_shot=_flag(row['allow_power_shot']),
        )
