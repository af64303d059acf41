"""
Approval Request Builder.

Serializes a chosen calculation or option into the payload the external
approval workflow stores and later decides on.
"""
import logging
from typing import Optional, Union

from .models import ApprovalPayload, CalculationInput, DiscountCalculation, DiscountOption

logger = logging.getLogger(__name__)

CONFLICT_SEPARATOR = '; '


def describe_service(request: CalculationInput, package_type=None) -> dict:
    """Service/tier/quantity/add-on description stored with the request."""
    package_type = package_type or request.package_type
    return {
        'service_id': request.service.id,
        'service_name': request.service.name,
        'package_type': package_type.value,
        'quantity': request.quantity,
        'add_ons': [
            {
                'id': a.id,
                'name': a.name,
                'unit_price': a.unit_price,
                'quantity': a.quantity,
            }
            for a in request.add_ons
        ],
    }


def build_approval_request(
    chosen: Union[DiscountCalculation, DiscountOption],
    request: CalculationInput,
    requested_by: str,
    staff_note: Optional[str] = None
) -> ApprovalPayload:
    """
    Build the approval payload for a calculation (checkout path) or an
    optimizer option (advisory path).
    """
    if isinstance(chosen, DiscountCalculation):
        package_type = request.package_type
        discount = chosen.total_discount
    elif isinstance(chosen, DiscountOption):
        # The option may recommend a different tier than was requested
        package_type = chosen.package_type
        discount = chosen.discount_amount
    else:
        raise TypeError(f"Cannot build an approval request from {type(chosen).__name__}")

    payload = ApprovalPayload(
        customer_id=request.customer.id,
        service_details=describe_service(request, package_type),
        applied_discounts=chosen.breakdown.to_dict(),
        original_amount=chosen.original_price,
        discount_amount=discount,
        final_amount=chosen.final_price,
        conflict_reason=CONFLICT_SEPARATOR.join(c.description for c in chosen.conflicts),
        staff_note=staff_note,
        requested_by=requested_by,
    )
    logger.info("Approval request built for customer %s by %s (discount %s)",
                payload.customer_id, requested_by, payload.discount_amount)
    return payload
