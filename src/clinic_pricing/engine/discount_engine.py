"""
Discount Engine - checkout and advisory entry points.

Pure and synchronous: every call is a deterministic computation over its
inputs. The customer's birthday usage counter is read from the snapshot
passed in and never written; the order-completion collaborator owns it.
"""
import logging
from dataclasses import replace
from typing import Iterable, Optional, Union

from ..config.settings import get_settings, Settings, DiscountPolicy
from ..exceptions import InvalidInputError
from .models import (
    ApprovalPayload, CalculationInput, DiscountCalculation, DiscountClass,
    DiscountOption, OptimalResult, SimulationResult
)
from .approval import build_approval_request
from .conflicts import ConflictDetector, ConflictRule, requires_approval
from .customer_discount import (
    birthday_cap_reached, birthday_uses_this_year, breakdown_for, calculate_customer_discount,
    requested_birthday_discount
)
from .optimizer import DiscountOptimizer
from .pricing import (
    calculate_package_discount, discount_rate, nominal_price, price_after_package
)

logger = logging.getLogger(__name__)


def validate_input(request: CalculationInput):
    """Reject inputs the engine assumes never reach it."""
    if request.service is None:
        raise InvalidInputError("Service is required")
    if request.customer is None:
        raise InvalidInputError("Customer is required")
    if request.quantity is None or request.quantity < 1:
        raise InvalidInputError(f"Quantity must be at least 1, got {request.quantity}")
    for add_on in request.add_ons:
        if add_on.quantity < 0 or add_on.unit_price < 0:
            raise InvalidInputError(f"Add-on {add_on.id} has a negative price or quantity")


class DiscountEngine:
    """
    Prices one service line for a customer.

    Resolution order for `calculate`:
    1. Nominal price for the tier and quantity, plus add-ons
    2. Package discount for the tier
    3. Customer class discount on the post-package service price
    4. Conflict detection on the resulting breakdown
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        policy: Optional[DiscountPolicy] = None,
        extra_rules: Iterable[ConflictRule] = ()
    ):
        if policy is None:
            self.settings = settings or get_settings()
            policy = self.settings.policy
        else:
            self.settings = settings
        self.policy = policy
        self.detector = ConflictDetector(policy, extra_rules)
        self.optimizer = DiscountOptimizer(policy, self.detector)

    def calculate(self, request: CalculationInput) -> DiscountCalculation:
        """
        Price one concrete combination (checkout path).

        Args:
            request: CalculationInput with service, customer, tier and quantity

        Returns:
            DiscountCalculation with breakdown, conflicts and trace
        """
        validate_input(request)
        service, customer = request.service, request.customer
        package_type, quantity = request.package_type, request.quantity

        service_price = nominal_price(service, package_type, quantity, self.policy)
        add_on_price = request.add_on_total
        original_price = service_price + add_on_price

        package_discount = calculate_package_discount(service, package_type, quantity, self.policy)
        reference_price = price_after_package(service, package_type, quantity, self.policy)
        customer_discount = calculate_customer_discount(
            customer, service, reference_price, self.policy, request.as_of
        )

        breakdown = breakdown_for(customer.discount_class, customer_discount, package=package_discount)
        # A birthday request over the annual cap is checked as if granted so the violation surfaces
        checked = breakdown
        if birthday_cap_reached(customer, self.policy, request.year):
            requested = requested_birthday_discount(customer, service, reference_price, self.policy)
            if requested > 0:
                checked = replace(breakdown, birthday=requested)
        conflicts = self.detector.detect(checked, customer, service, package_type, request.year)

        total_discount = package_discount + customer_discount
        result = DiscountCalculation(
            original_price=original_price,
            package_discount=package_discount,
            customer_discount=customer_discount,
            total_discount=total_discount,
            final_price=max(0, original_price - total_discount),
            discount_rate=discount_rate(total_discount, original_price),
            breakdown=breakdown,
            conflicts=conflicts,
            requires_approval=requires_approval(conflicts),
        )

        result.add_trace("Base Price", f"{service.name} {package_type.value} × {quantity}", f"{service_price:,.0f}")
        if add_on_price:
            result.add_trace("Add-ons", f"{len(request.add_ons)} add-on line(s)", f"{add_on_price:,.0f}")
        result.add_trace("Package Discount", f"Tier {package_type.value}", f"{package_discount:,.0f}")
        result.add_trace(
            "Customer Discount",
            f"{customer.discount_class.value} on {reference_price:,.0f}",
            f"{customer_discount:,.0f}"
        )
        for conflict in conflicts:
            result.add_trace("Conflict", f"{conflict.kind.value} ({conflict.severity.value})", conflict.description)
        result.add_trace("Final Price", "Original minus total discount", f"{result.final_price:,.0f}")

        logger.debug("Calculated %s for customer %s: original=%s discount=%s approval=%s",
                     service.name, customer.id, original_price, total_discount, result.requires_approval)
        return result

    def optimize(self, request: CalculationInput) -> OptimalResult:
        """Enumerate every legal combination and recommend the best (advisory path)."""
        validate_input(request)
        return self.optimizer.optimize(request)

    def build_approval_request(
        self,
        chosen: Union[DiscountCalculation, DiscountOption],
        request: CalculationInput,
        requested_by: str,
        staff_note: Optional[str] = None
    ) -> ApprovalPayload:
        """Prepare the payload for the external approval workflow."""
        if not requested_by:
            raise InvalidInputError("requested_by is required")
        return build_approval_request(chosen, request, requested_by, staff_note)

    def simulate(self, request: CalculationInput) -> SimulationResult:
        """Preview a calculation with staff-facing warnings before it is applied."""
        calculation = self.calculate(request)
        result = SimulationResult(calculation=calculation)
        customer, service = request.customer, request.service
        year = request.year

        if customer.discount_class == DiscountClass.BIRTHDAY and service.name in self.policy.birthday_services:
            cap = self.policy.birthday_annual_cap
            if birthday_cap_reached(customer, self.policy, year):
                result.warnings.append(f"Birthday discount annual cap ({cap}) reached.")
                result.can_apply = False
            elif customer.birthday_usage_year == year:
                remaining = cap - birthday_uses_this_year(customer, year)
                result.warnings.append(f"Birthday discount uses remaining: {remaining}")

        if customer.discount_class == DiscountClass.VIP and service.name not in self.policy.vip_services:
            result.warnings.append("This service is not eligible for the VIP discount.")

        return result
