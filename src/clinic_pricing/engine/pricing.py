"""
Pricing Base Resolver and Package Discount Calculator.

Resolves the nominal price of a service for a tier and quantity, and the
savings a package tier represents versus buying the same count as singles.
"""
import math

from ..config.settings import DiscountPolicy
from .models import Service, PackageType


TIER_MULTIPLIERS = {
    PackageType.SINGLE: 1,
    PackageType.PACKAGE4: 4,
    PackageType.PACKAGE8: 8,
    PackageType.PACKAGE10: 10,
}


def round_amount(value: float) -> int:
    """Round half away from zero to the nearest currency unit."""
    if value < 0:
        return -round_amount(-value)
    return int(math.floor(value + 0.5))


def resolve_base_price(service: Service, package_type, quantity: int) -> float:
    """
    Nominal total price for a tier and quantity.

    Uses the tier's override price when configured, otherwise
    base price × tier multiplier × quantity.
    """
    package_type = PackageType.parse(package_type)
    override = service.override_price(package_type)
    if override is not None:
        return override * quantity
    return standard_price(service, package_type, quantity)


def standard_price(service: Service, package_type, quantity: int) -> float:
    """Price of the same unit count bought as singles."""
    package_type = PackageType.parse(package_type)
    return service.base_price * TIER_MULTIPLIERS[package_type] * quantity


def calculate_package_discount(
    service: Service,
    package_type,
    quantity: int,
    policy: DiscountPolicy
) -> float:
    """
    Savings of a package tier versus singles.

    With an override price the discount is the difference to the standard
    price; without one the flat policy rate for the tier is applied.
    """
    package_type = PackageType.parse(package_type)
    if package_type == PackageType.SINGLE:
        return 0

    standard = standard_price(service, package_type, quantity)
    override = service.override_price(package_type)
    if override is not None:
        return max(0, standard - override * quantity)

    rate = policy.package_rates.get(package_type.value, 0)
    return round_amount(standard * rate)


def nominal_price(service: Service, package_type, quantity: int, policy: DiscountPolicy) -> float:
    """
    Service price before any discount, as reported to callers.

    When double application is disabled, override tiers are reported at their
    standard price so the package saving is subtracted only once.
    """
    if policy.double_apply_override_discount:
        return resolve_base_price(service, package_type, quantity)
    return standard_price(service, package_type, quantity)


def price_after_package(service: Service, package_type, quantity: int, policy: DiscountPolicy) -> float:
    """Reference price customer-class discounts are computed on."""
    nominal = nominal_price(service, package_type, quantity, policy)
    package_discount = calculate_package_discount(service, package_type, quantity, policy)
    return max(0, nominal - package_discount)


def discount_rate(discount: float, original_price: float) -> float:
    """Discount as a fraction of the original price; 0 when there is no price."""
    if original_price <= 0:
        return 0
    return discount / original_price
