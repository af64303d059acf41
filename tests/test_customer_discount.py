"""
Tests for customer class discounts.
"""
from datetime import date

import pytest

from clinic_pricing.engine.models import DiscountClass, PackageType
from clinic_pricing.engine.customer_discount import (
    birthday_uses_this_year, breakdown_for, calculate_customer_discount
)

AS_OF = date(2026, 6, 1)


@pytest.mark.parametrize("name", ["VIP Vascular Cleanse", "Premium Recovery", "Chelation", "Gut Restore"])
@pytest.mark.parametrize("tier", list(PackageType))
def test_regular_customer_never_discounted(engine, make_service, make_customer, make_input, name, tier):
    result = engine.calculate(make_input(make_service(name=name), make_customer("REGULAR"), tier))
    assert result.customer_discount == 0


class TestVip:

    def test_full_reference_price_on_vip_service(self, make_service, make_customer, policy):
        service = make_service(name="VIP White Jade", base_price=100000)
        assert calculate_customer_discount(make_customer("VIP"), service, 287654, policy, AS_OF) == 287654

    def test_zero_on_other_services(self, make_service, make_customer, policy):
        service = make_service(name="Premium Recovery")
        assert calculate_customer_discount(make_customer("VIP"), service, 120000, policy, AS_OF) == 0


class TestBirthday:

    def test_half_price_below_cap(self, make_service, make_customer, policy):
        customer = make_customer("BIRTHDAY", usage_count=7)
        service = make_service(name="Premium Recovery", base_price=120000)
        assert calculate_customer_discount(customer, service, 120000, policy, AS_OF) == 60000

    def test_zero_at_cap(self, make_service, make_customer, policy):
        customer = make_customer("BIRTHDAY", usage_count=8)
        service = make_service(name="Premium Recovery", base_price=120000)
        assert calculate_customer_discount(customer, service, 120000, policy, AS_OF) == 0

    def test_counter_from_previous_year_is_reset(self, make_service, make_customer, policy):
        customer = make_customer("BIRTHDAY", usage_count=8, usage_year=AS_OF.year - 1)
        service = make_service(name="Premium Immunity", base_price=120000)
        assert birthday_uses_this_year(customer, AS_OF.year) == 0
        assert calculate_customer_discount(customer, service, 120000, policy, AS_OF) == 60000

    def test_zero_on_non_premium_service(self, make_service, make_customer, policy):
        customer = make_customer("BIRTHDAY")
        service = make_service(name="Vitamin Energy Drip")
        assert calculate_customer_discount(customer, service, 80000, policy, AS_OF) == 0

    def test_counter_is_not_mutated(self, make_service, make_customer, policy):
        customer = make_customer("BIRTHDAY", usage_count=3)
        calculate_customer_discount(customer, make_service(name="Premium Recovery"), 120000, policy, AS_OF)
        assert customer.birthday_usage_count == 3


class TestEmployee:

    def test_half_price_on_any_service(self, make_service, make_customer, policy):
        service = make_service(name="Gut Restore", base_price=50000)
        assert calculate_customer_discount(make_customer("EMPLOYEE"), service, 50000, policy, AS_OF) == 25000

    def test_half_is_rounded(self, make_service, make_customer, policy):
        assert calculate_customer_discount(make_customer("EMPLOYEE"), make_service(), 33333, policy, AS_OF) == 16667


def test_breakdown_for_places_amount_in_class_field():
    breakdown = breakdown_for(DiscountClass.BIRTHDAY, 60000, package=32000)
    assert breakdown.birthday == 60000
    assert breakdown.package == 32000
    assert breakdown.vip == 0 and breakdown.employee == 0
    assert breakdown_for(DiscountClass.REGULAR, 0).total == 0


def test_customer_class_is_parsed_from_string(make_customer):
    assert make_customer("employee").discount_class == DiscountClass.EMPLOYEE
    assert make_customer("UNKNOWN").discount_class == DiscountClass.REGULAR
