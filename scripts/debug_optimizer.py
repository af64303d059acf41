import logging
import sys
from datetime import date
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from clinic_pricing.engine import DiscountEngine, CalculationInput
from clinic_pricing.services.catalog_service import ServiceCatalog

logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def debug(service_id: str = "SVC-003", customer_id: str = "CUST-003", package_type: str = "package4"):
    catalog = ServiceCatalog()
    engine = DiscountEngine()

    print("Loaded Services:")
    print(catalog.services[['id', 'name', 'base_price']].head(10))

    request = CalculationInput(
        service=catalog.get_service(service_id),
        customer=catalog.get_customer(customer_id),
        package_type=package_type,
        quantity=1,
        as_of=date.today(),
    )

    print(f"\n--- Checkout: {service_id} / {customer_id} / {package_type} ---")
    calculation = engine.calculate(request)
    print(calculation.get_trace_text())

    print("\n--- Options ---")
    result = engine.optimize(request)
    for option in result.all_options:
        flag = "APPROVAL" if option.requires_approval else "auto"
        print(f"{option.discount_amount:>10,.0f}  {option.final_price:>10,.0f}  [{flag}]  {option.label}")
    print(f"\nBest: {result.best_option.label} (can auto-apply: {result.can_auto_apply})")

    if not result.can_auto_apply:
        payload = engine.build_approval_request(result.best_option, request, requested_by="debug")
        print("\nApproval payload:")
        print(payload.to_dict())


if __name__ == "__main__":
    debug(*sys.argv[1:4])
