import logging
from datetime import date
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config.settings import get_settings
from ..engine import AddOnLine, CalculationInput, DiscountEngine
from ..exceptions import CatalogError, InvalidInputError, PricingError
from ..services.catalog_service import ServiceCatalog
from ..services.order_service import OrderLine, OrderService
from .state import get_catalog, get_engine

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Clinic Pricing API",
    description="Discount calculation and optimization for the clinic back office",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AddOnModel(BaseModel):
    id: str
    name: str = ""
    unit_price: float = Field(ge=0)
    quantity: int = Field(default=1, ge=0)


class CalcRequest(BaseModel):
    service_id: str
    customer_id: str
    package_type: str = "single"
    quantity: int = 1
    add_ons: List[AddOnModel] = Field(default_factory=list)
    as_of: Optional[date] = None


class ApprovalRequestBody(CalcRequest):
    requested_by: str
    staff_note: Optional[str] = None
    # Index into the optimizer's ranked options; omitted means the checkout calculation
    option_index: Optional[int] = None


class OrderLineModel(BaseModel):
    service_id: str
    package_type: str = "single"
    quantity: int = 1
    add_ons: List[AddOnModel] = Field(default_factory=list)


class OrderQuoteRequest(BaseModel):
    customer_id: str
    lines: List[OrderLineModel]
    as_of: Optional[date] = None


def _add_ons(models: List[AddOnModel]) -> list[AddOnLine]:
    return [AddOnLine(id=a.id, name=a.name, unit_price=a.unit_price, quantity=a.quantity) for a in models]


def _build_input(req: CalcRequest, catalog: ServiceCatalog) -> CalculationInput:
    return CalculationInput(
        service=catalog.get_service(req.service_id),
        customer=catalog.get_customer(req.customer_id),
        package_type=req.package_type,
        quantity=req.quantity,
        add_ons=_add_ons(req.add_ons),
        as_of=req.as_of,
    )


def _http_error(e: PricingError) -> HTTPException:
    if isinstance(e, CatalogError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidInputError):
        return HTTPException(status_code=422, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


@app.get("/")
async def root():
    return {"status": "online", "message": "Clinic Pricing API Active"}


@app.get("/services")
async def list_services(catalog: ServiceCatalog = Depends(get_catalog)):
    return jsonable_encoder(catalog.list_services())


@app.post("/calculate")
async def calculate(req: CalcRequest,
                    engine: DiscountEngine = Depends(get_engine),
                    catalog: ServiceCatalog = Depends(get_catalog)):
    try:
        result = engine.calculate(_build_input(req, catalog))
        return jsonable_encoder(result)
    except PricingError as e:
        raise _http_error(e)


@app.post("/optimize")
async def optimize(req: CalcRequest,
                   engine: DiscountEngine = Depends(get_engine),
                   catalog: ServiceCatalog = Depends(get_catalog)):
    try:
        result = engine.optimize(_build_input(req, catalog))
        return jsonable_encoder(result)
    except PricingError as e:
        raise _http_error(e)


@app.post("/simulate")
async def simulate(req: CalcRequest,
                   engine: DiscountEngine = Depends(get_engine),
                   catalog: ServiceCatalog = Depends(get_catalog)):
    try:
        result = engine.simulate(_build_input(req, catalog))
        return jsonable_encoder(result)
    except PricingError as e:
        raise _http_error(e)


@app.post("/approval-requests")
async def build_approval_request(req: ApprovalRequestBody,
                                 engine: DiscountEngine = Depends(get_engine),
                                 catalog: ServiceCatalog = Depends(get_catalog)):
    try:
        request = _build_input(req, catalog)
        if req.option_index is None:
            chosen = engine.calculate(request)
        else:
            options = engine.optimize(request).all_options
            if not 0 <= req.option_index < len(options):
                raise InvalidInputError(
                    f"option_index {req.option_index} out of range (0-{len(options) - 1})"
                )
            chosen = options[req.option_index]
        payload = engine.build_approval_request(chosen, request, req.requested_by, req.staff_note)
        return jsonable_encoder(payload.to_dict())
    except PricingError as e:
        raise _http_error(e)


@app.post("/orders/quote")
async def quote_order(req: OrderQuoteRequest,
                      engine: DiscountEngine = Depends(get_engine),
                      catalog: ServiceCatalog = Depends(get_catalog)):
    try:
        lines = [
            OrderLine(
                service=catalog.get_service(line.service_id),
                package_type=line.package_type,
                quantity=line.quantity,
                add_ons=_add_ons(line.add_ons),
            )
            for line in req.lines
        ]
        quote = OrderService(engine).quote(catalog.get_customer(req.customer_id), lines, req.as_of)
        return jsonable_encoder(quote)
    except PricingError as e:
        raise _http_error(e)


@app.get("/system/status")
async def get_status(engine: DiscountEngine = Depends(get_engine)):
    settings = get_settings()
    return {
        "engine_active": True,
        "policy_file": str(settings.policy_json) if settings.policy_json else None,
        "double_apply_override_discount": engine.policy.double_apply_override_discount,
        "birthday_annual_cap": engine.policy.birthday_annual_cap,
    }
