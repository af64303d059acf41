"""
Order Service - quotes a multi-line order for one customer.

Each line is priced through the discount engine. The service proposes the
birthday counter update the order-completion collaborator should write, but
never writes it.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..exceptions import InvalidInputError
from ..engine import DiscountEngine
from ..engine.customer_discount import birthday_uses_this_year
from ..engine.models import (
    AddOnLine, CalculationInput, Customer, DiscountCalculation, DiscountClass, PackageType, Service
)
from ..engine.pricing import discount_rate

logger = logging.getLogger(__name__)


@dataclass
class OrderLine:
    """A single service line requested for an order."""
    service: Service
    package_type: PackageType = PackageType.SINGLE
    quantity: int = 1
    add_ons: list[AddOnLine] = field(default_factory=list)


@dataclass
class QuotedLine:
    """A priced order line."""
    service_id: str
    package_type: PackageType
    quantity: int
    unit_price: int
    total_price: float
    calculation: DiscountCalculation


@dataclass
class BirthdayUsageUpdate:
    """Counter write proposed to the persistence layer on order completion."""
    year: int
    previous_count: int
    new_count: int


@dataclass
class OrderQuote:
    """Complete quote for an order."""
    customer_id: str
    subtotal: float
    total_discount: float
    final_amount: float
    discount_rate: float
    lines: list[QuotedLine] = field(default_factory=list)
    applied_discount_class: Optional[DiscountClass] = None
    requires_approval: bool = False
    birthday_usage_update: Optional[BirthdayUsageUpdate] = None
    warnings: list[str] = field(default_factory=list)

    def add_warning(self, warning: str):
        """Add an order-level warning."""
        if warning not in self.warnings:
            self.warnings.append(warning)


class OrderService:
    """Quotes orders line by line through a DiscountEngine."""

    def __init__(self, engine: Optional[DiscountEngine] = None):
        self.engine = engine or DiscountEngine()

    def quote(self, customer: Customer, lines: list[OrderLine], as_of: Optional[date] = None) -> OrderQuote:
        """
        Price every line and total the order.

        Args:
            customer: Customer snapshot including the birthday usage counter
            lines: Requested service lines
            as_of: Date the birthday counter is evaluated against

        Returns:
            OrderQuote with per-line calculations and totals
        """
        if not lines:
            raise InvalidInputError("An order needs at least one line")
        as_of = as_of or date.today()
        quote = OrderQuote(customer_id=customer.id, subtotal=0, total_discount=0,
                           final_amount=0, discount_rate=0)

        birthday_units = 0
        for line in lines:
            request = CalculationInput(
                service=line.service,
                customer=customer,
                package_type=line.package_type,
                quantity=line.quantity,
                add_ons=list(line.add_ons),
                as_of=as_of,
            )
            calculation = self.engine.calculate(request)

            quote.lines.append(QuotedLine(
                service_id=line.service.id,
                package_type=request.package_type,
                quantity=line.quantity,
                unit_price=math.floor(calculation.final_price / line.quantity),
                total_price=calculation.final_price,
                calculation=calculation,
            ))
            quote.subtotal += calculation.original_price
            quote.total_discount += calculation.total_discount
            quote.requires_approval = quote.requires_approval or calculation.requires_approval
            for conflict in calculation.conflicts:
                quote.add_warning(conflict.description)

            if calculation.breakdown.birthday > 0:
                birthday_units += line.quantity

        quote.final_amount = sum(line.total_price for line in quote.lines)
        quote.discount_rate = discount_rate(quote.total_discount, quote.subtotal)
        if customer.discount_class != DiscountClass.REGULAR:
            quote.applied_discount_class = customer.discount_class

        if birthday_units:
            previous = birthday_uses_this_year(customer, as_of.year)
            remaining = max(0, self.engine.policy.birthday_annual_cap - previous)
            if birthday_units > remaining:
                quote.add_warning(
                    f"Birthday discount covers {birthday_units} unit(s) but only "
                    f"{remaining} annual use(s) remain."
                )
            quote.birthday_usage_update = BirthdayUsageUpdate(
                year=as_of.year,
                previous_count=previous,
                new_count=previous + birthday_units,
            )

        logger.debug("Quoted %d line(s) for customer %s: subtotal=%s discount=%s",
                     len(quote.lines), customer.id, quote.subtotal, quote.total_discount)
        return quote
