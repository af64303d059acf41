"""
Customer Tier Discount Calculator.

Each calculator takes the same arguments and returns the discount its class
grants on a reference price, or zero when the customer is not of that class
or the service is not eligible. The birthday usage counter is only read.
"""
from datetime import date
from typing import Optional

from ..config.settings import DiscountPolicy
from .models import Customer, Service, DiscountClass, DiscountBreakdown
from .pricing import round_amount


def birthday_uses_this_year(customer: Customer, year: int) -> int:
    """Uses consumed in `year`; the counter resets when its year is stale."""
    if customer.birthday_usage_year != year:
        return 0
    return customer.birthday_usage_count


def birthday_cap_reached(customer: Customer, policy: DiscountPolicy, year: int) -> bool:
    return birthday_uses_this_year(customer, year) >= policy.birthday_annual_cap


def requested_birthday_discount(customer: Customer, service: Service, reference_price: float,
                                policy: DiscountPolicy) -> float:
    """Birthday discount the customer asks for, before the annual cap is applied."""
    if customer.discount_class != DiscountClass.BIRTHDAY:
        return 0
    if service.name not in policy.birthday_services:
        return 0
    return round_amount(reference_price * policy.birthday_rate)


def vip_discount(customer: Customer, service: Service, reference_price: float,
                 policy: DiscountPolicy, year: int) -> float:
    """Full reference price for VIP-exclusive services."""
    if customer.discount_class != DiscountClass.VIP:
        return 0
    if service.name not in policy.vip_services:
        return 0
    if policy.vip_rate >= 1:
        return reference_price
    return round_amount(reference_price * policy.vip_rate)


def birthday_discount(customer: Customer, service: Service, reference_price: float,
                      policy: DiscountPolicy, year: int) -> float:
    """Half price on premium services while the annual cap allows."""
    if birthday_cap_reached(customer, policy, year):
        return 0
    return requested_birthday_discount(customer, service, reference_price, policy)


def employee_discount(customer: Customer, service: Service, reference_price: float,
                      policy: DiscountPolicy, year: int) -> float:
    """Half price on any service."""
    if customer.discount_class != DiscountClass.EMPLOYEE:
        return 0
    return round_amount(reference_price * policy.employee_rate)


# Discount classes that can grant a customer-side discount, in generation order
CLASS_CALCULATORS = {
    DiscountClass.VIP: vip_discount,
    DiscountClass.BIRTHDAY: birthday_discount,
    DiscountClass.EMPLOYEE: employee_discount,
}


def calculate_customer_discount(
    customer: Customer,
    service: Service,
    reference_price: float,
    policy: DiscountPolicy,
    as_of: Optional[date] = None
) -> float:
    """Discount for the customer's own class. REGULAR always yields zero."""
    year = (as_of or date.today()).year
    calculator = CLASS_CALCULATORS.get(customer.discount_class)
    if calculator is None:
        return 0
    return calculator(customer, service, reference_price, policy, year)


def breakdown_for(discount_class: DiscountClass, amount: float, package: float = 0) -> DiscountBreakdown:
    """Breakdown with `amount` in the field belonging to `discount_class`."""
    if discount_class == DiscountClass.VIP:
        return DiscountBreakdown(vip=amount, package=package)
    if discount_class == DiscountClass.BIRTHDAY:
        return DiscountBreakdown(birthday=amount, package=package)
    if discount_class == DiscountClass.EMPLOYEE:
        return DiscountBreakdown(employee=amount, package=package)
    if discount_class == DiscountClass.REGULAR:
        return DiscountBreakdown(package=package)
    raise ValueError(f"Unhandled discount class: {discount_class}")
