"""
Discount Combination Optimizer.

Enumerates every legal discount combination for a calculation input:
customer class alone, package tier alone, package tier stacked with a
customer class, and a no-discount floor. Candidates are generated as a
small Cartesian product, filtered to those with a positive discount,
tagged with conflicts, then ranked by discount amount.
"""
import itertools
import logging
from dataclasses import dataclass
from typing import Iterator

from ..config.settings import DiscountPolicy
from .models import (
    CalculationInput, DiscountBreakdown, DiscountClass, DiscountOption,
    OptimalResult, OptionKind, PackageType
)
from .conflicts import ConflictDetector, requires_approval
from .customer_discount import CLASS_CALCULATORS, breakdown_for
from .pricing import (
    calculate_package_discount, discount_rate, nominal_price, price_after_package, standard_price
)

logger = logging.getLogger(__name__)

PACKAGE_TIERS = (PackageType.PACKAGE4, PackageType.PACKAGE8, PackageType.PACKAGE10)

CLASS_LABELS = {
    DiscountClass.VIP: "VIP discount",
    DiscountClass.BIRTHDAY: "Birthday discount",
    DiscountClass.EMPLOYEE: "Employee discount",
}

NO_DISCOUNT_LABEL = "No discount"


@dataclass(frozen=True)
class _Candidate:
    """A discount combination before pricing and conflict tagging."""
    kind: OptionKind
    package_type: PackageType
    breakdown: DiscountBreakdown
    label: str

    @property
    def discount_amount(self) -> float:
        return self.breakdown.total


def _percent(rate: float) -> str:
    return f"{rate * 100:g}%"


def class_label(discount_class: DiscountClass, policy: DiscountPolicy) -> str:
    rate = {
        DiscountClass.VIP: policy.vip_rate,
        DiscountClass.BIRTHDAY: policy.birthday_rate,
        DiscountClass.EMPLOYEE: policy.employee_rate,
    }[discount_class]
    return f"{CLASS_LABELS[discount_class]} ({_percent(rate)})"


def tier_label(package_type: PackageType, policy: DiscountPolicy) -> str:
    visits = package_type.value.replace('package', '')
    rate = policy.package_rates.get(package_type.value, 0)
    return f"{visits}-visit package ({_percent(rate)})"


class DiscountOptimizer:
    """Builds and ranks the option set for the advisory path."""

    def __init__(self, policy: DiscountPolicy, detector: ConflictDetector = None):
        self.policy = policy
        self.detector = detector or ConflictDetector(policy)

    def eligible_tiers(self, service) -> list[PackageType]:
        """Package tiers offered for a service. The 10-visit tier is allow-listed."""
        tiers = []
        for tier in PACKAGE_TIERS:
            if tier == PackageType.PACKAGE10 and service.name not in self.policy.package10_services:
                continue
            tiers.append(tier)
        return tiers

    def optimize(self, request: CalculationInput) -> OptimalResult:
        """Price every candidate combination and pick the largest discount."""
        original_price = (
            nominal_price(request.service, request.package_type, request.quantity, self.policy)
            + request.add_on_total
        )

        options = [
            self._price(candidate, request, original_price)
            for candidate in self._generate(request)
        ]
        # sorted() is stable, so ties keep generation order
        ranked = sorted(options, key=lambda o: o.discount_amount, reverse=True)
        best = ranked[0]

        logger.debug("Optimized %s for customer %s: %d option(s), best '%s' (%s)",
                     request.service.name, request.customer.id, len(ranked),
                     best.label, best.discount_amount)

        return OptimalResult(
            original_price=original_price,
            best_option=best,
            all_options=ranked,
            can_auto_apply=not best.requires_approval,
        )

    def _generate(self, request: CalculationInput) -> Iterator[_Candidate]:
        """Yield candidates in fixed order, skipping those with no discount."""
        service, customer, quantity = request.service, request.customer, request.quantity
        year = request.year
        tiers = self.eligible_tiers(service)
        package_discounts = {
            tier: calculate_package_discount(service, tier, quantity, self.policy)
            for tier in tiers
        }

        # 1. Single tier + one customer class
        single_reference = standard_price(service, PackageType.SINGLE, quantity)
        for discount_class, calculator in CLASS_CALCULATORS.items():
            amount = calculator(customer, service, single_reference, self.policy, year)
            if amount > 0:
                yield _Candidate(
                    kind=OptionKind.CUSTOMER_ONLY,
                    package_type=PackageType.SINGLE,
                    breakdown=breakdown_for(discount_class, amount),
                    label=class_label(discount_class, self.policy),
                )

        # 2. Package tier alone
        for tier in tiers:
            if package_discounts[tier] > 0:
                yield _Candidate(
                    kind=OptionKind.PACKAGE_ONLY,
                    package_type=tier,
                    breakdown=DiscountBreakdown(package=package_discounts[tier]),
                    label=tier_label(tier, self.policy),
                )

        # 3. Package tier + customer class on the post-package price
        for tier, (discount_class, calculator) in itertools.product(tiers, CLASS_CALCULATORS.items()):
            package = package_discounts[tier]
            if package <= 0:
                continue
            reference = price_after_package(service, tier, quantity, self.policy)
            amount = calculator(customer, service, reference, self.policy, year)
            if amount <= 0:
                continue
            yield _Candidate(
                kind=OptionKind.COMBINATION,
                package_type=tier,
                breakdown=breakdown_for(discount_class, amount, package=package),
                label=f"{tier_label(tier, self.policy)} + {class_label(discount_class, self.policy)}",
            )

        # 4. Floor
        yield _Candidate(
            kind=OptionKind.CUSTOMER_ONLY,
            package_type=request.package_type,
            breakdown=DiscountBreakdown(),
            label=NO_DISCOUNT_LABEL,
        )

    def _price(self, candidate: _Candidate, request: CalculationInput, original_price: float) -> DiscountOption:
        conflicts = self.detector.detect(
            candidate.breakdown, request.customer, request.service, candidate.package_type, request.year
        )
        amount = candidate.discount_amount

        if candidate.kind == OptionKind.COMBINATION:
            # Stacking a package with a customer discount always needs sign-off
            approval = True
        elif candidate.kind in (OptionKind.CUSTOMER_ONLY, OptionKind.PACKAGE_ONLY):
            approval = requires_approval(conflicts)
        else:
            raise ValueError(f"Unhandled option kind: {candidate.kind}")

        return DiscountOption(
            kind=candidate.kind,
            label=candidate.label,
            original_price=original_price,
            discount_amount=amount,
            final_price=max(0, original_price - amount),
            discount_rate=discount_rate(amount, original_price),
            breakdown=candidate.breakdown,
            package_type=candidate.package_type,
            requires_approval=approval,
            conflicts=conflicts,
        )
