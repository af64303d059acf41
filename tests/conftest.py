import os
import sys
from datetime import date

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from clinic_pricing.config.settings import DiscountPolicy
from clinic_pricing.engine import DiscountEngine, CalculationInput, Customer, Service

# Birthday counters in fixtures are pinned to this date's year
AS_OF = date(2026, 6, 1)


@pytest.fixture
def policy():
    return DiscountPolicy()


@pytest.fixture
def engine(policy):
    return DiscountEngine(policy=policy)


@pytest.fixture
def make_service():
    def _make(name="Vitamin Energy Drip", base_price=80000, **overrides):
        return Service(id=overrides.pop('id', 'SVC-T'), name=name, base_price=base_price, **overrides)
    return _make


@pytest.fixture
def make_customer():
    def _make(discount_class="REGULAR", usage_count=0, usage_year=AS_OF.year, **kwargs):
        return Customer(
            id=kwargs.pop('id', 'CUST-T'),
            name=kwargs.pop('name', 'Test Customer'),
            discount_class=discount_class,
            birthday_usage_year=usage_year,
            birthday_usage_count=usage_count,
        )
    return _make


@pytest.fixture
def make_input():
    def _make(service, customer, package_type="single", quantity=1, add_ons=None):
        return CalculationInput(
            service=service,
            customer=customer,
            package_type=package_type,
            quantity=quantity,
            add_ons=add_ons or [],
            as_of=AS_OF,
        )
    return _make
