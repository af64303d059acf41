"""
Conflict Detector - flags discount combinations that should not be auto-approved.

Every rule is evaluated independently against the breakdown values, so
synthetic breakdowns built by the optimizer are checked the same way as
real ones. All applicable conflicts are returned.
"""
import logging
from typing import Callable, Iterable, Optional

from ..config.settings import DiscountPolicy
from .models import (
    Conflict, ConflictKind, Customer, DiscountBreakdown, PackageType, Service, Severity
)
from .customer_discount import birthday_uses_this_year
from .pricing import resolve_base_price, discount_rate, round_amount

logger = logging.getLogger(__name__)

# (breakdown, customer, service, package_type, year) -> Conflict or None
ConflictRule = Callable[[DiscountBreakdown, Customer, Service, PackageType, int], Optional[Conflict]]

# Severity and approval requirement for each built-in kind
CONFLICT_POLICY = {
    ConflictKind.MULTIPLE_CUSTOMER_DISCOUNTS: (Severity.WARNING, True),
    ConflictKind.PACKAGE_WITH_FREE_TIER: (Severity.WARNING, True),
    ConflictKind.ANNUAL_CAP_EXCEEDED: (Severity.CRITICAL, True),
    ConflictKind.HIGH_DISCOUNT_RATE: (Severity.WARNING, False),
}


def _mark(amount: float) -> str:
    return 'O' if amount > 0 else 'X'


def make_conflict(kind: ConflictKind, description: str) -> Conflict:
    severity, requires_approval = CONFLICT_POLICY[kind]
    return Conflict(kind=kind, description=description, severity=severity,
                    requires_approval=requires_approval)


class ConflictDetector:
    """
    Classifies a discount breakdown into zero or more conflicts.

    Additional rules producing `ConflictKind.CUSTOM` conflicts may be supplied
    through `extra_rules`; they run after the built-in rules.
    """

    def __init__(self, policy: DiscountPolicy, extra_rules: Iterable[ConflictRule] = ()):
        self.policy = policy
        self.rules: list[ConflictRule] = [
            self._multiple_customer_discounts,
            self._package_with_free_tier,
            self._annual_cap_exceeded,
            self._high_discount_rate,
        ]
        self.rules.extend(extra_rules)

    def detect(
        self,
        breakdown: DiscountBreakdown,
        customer: Customer,
        service: Service,
        package_type,
        year: int
    ) -> list[Conflict]:
        """Run every rule and collect the conflicts that apply."""
        package_type = PackageType.parse(package_type)
        conflicts = []
        for rule in self.rules:
            conflict = rule(breakdown, customer, service, package_type, year)
            if conflict is not None:
                conflicts.append(conflict)
        if conflicts:
            logger.debug("Detected %d conflict(s) for customer %s / %s: %s",
                         len(conflicts), customer.id, service.name,
                         ", ".join(c.kind.value for c in conflicts))
        return conflicts

    def _multiple_customer_discounts(self, breakdown, customer, service, package_type, year):
        applied = sum(1 for amount in breakdown.customer_amounts if amount > 0)
        if applied <= 1:
            return None
        return make_conflict(
            ConflictKind.MULTIPLE_CUSTOMER_DISCOUNTS,
            f"Multiple customer discounts apply to {customer.name or customer.id} "
            f"(VIP: {_mark(breakdown.vip)}, birthday: {_mark(breakdown.birthday)}, "
            f"employee: {_mark(breakdown.employee)})"
        )

    def _package_with_free_tier(self, breakdown, customer, service, package_type, year):
        if breakdown.package > 0 and breakdown.vip > 0:
            return make_conflict(
                ConflictKind.PACKAGE_WITH_FREE_TIER,
                "Package discount stacked on a VIP free service"
            )
        return None

    def _annual_cap_exceeded(self, breakdown, customer, service, package_type, year):
        if breakdown.birthday <= 0:
            return None
        used = birthday_uses_this_year(customer, year)
        if used < self.policy.birthday_annual_cap:
            return None
        return make_conflict(
            ConflictKind.ANNUAL_CAP_EXCEEDED,
            f"Birthday discount annual cap ({self.policy.birthday_annual_cap}) exceeded. "
            f"Current uses: {used}"
        )

    def _high_discount_rate(self, breakdown, customer, service, package_type, year):
        combined = breakdown.package + breakdown.largest_customer
        # Measured against the tier's nominal single-unit price
        rate = discount_rate(combined, resolve_base_price(service, package_type, 1))
        if rate < self.policy.high_discount_threshold:
            return None
        return make_conflict(
            ConflictKind.HIGH_DISCOUNT_RATE,
            f"High discount rate applied ({round_amount(rate * 100)}%)"
        )


def requires_approval(conflicts: Iterable[Conflict]) -> bool:
    return any(c.requires_approval for c in conflicts)
