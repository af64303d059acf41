"""
Data models for the discount engine.

Uses dataclasses for structured, type-safe data representation.
Service and Customer are inputs owned by external collaborators; everything
else is a transient value produced within one calculation call.
"""
from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import Optional


class PackageType(str, Enum):
    """Package tier a service is purchased under."""
    SINGLE = 'single'
    PACKAGE4 = 'package4'
    PACKAGE8 = 'package8'
    PACKAGE10 = 'package10'

    @classmethod
    def parse(cls, value) -> 'PackageType':
        """Unknown tier strings degrade to single pricing."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            return cls.SINGLE


class DiscountClass(str, Enum):
    """Mutually exclusive customer category."""
    REGULAR = 'REGULAR'
    VIP = 'VIP'
    BIRTHDAY = 'BIRTHDAY'
    EMPLOYEE = 'EMPLOYEE'

    @classmethod
    def parse(cls, value) -> 'DiscountClass':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.REGULAR


class ConflictKind(str, Enum):
    MULTIPLE_CUSTOMER_DISCOUNTS = 'multiple-customer-discounts'
    PACKAGE_WITH_FREE_TIER = 'package-with-free-tier'
    ANNUAL_CAP_EXCEEDED = 'annual-cap-exceeded'
    HIGH_DISCOUNT_RATE = 'high-discount-rate'
    CUSTOM = 'custom'


class Severity(str, Enum):
    WARNING = 'warning'
    CRITICAL = 'critical'


class OptionKind(str, Enum):
    CUSTOMER_ONLY = 'customer-only'
    PACKAGE_ONLY = 'package-only'
    COMBINATION = 'combination'


@dataclass(frozen=True)
class Service:
    """A billable infusion service with optional per-tier override prices."""
    id: str
    name: str
    base_price: float
    category: str = 'OTHER'
    duration: int = 0
    package4_price: Optional[float] = None
    package8_price: Optional[float] = None
    package10_price: Optional[float] = None
    allow_white_jade: bool = False
    allow_white_jade_double: bool = False
    allow_thymus: bool = False
    allow_power_shot: bool = False

    def override_price(self, package_type: PackageType) -> Optional[float]:
        """Per-unit override price for a tier, or None when not configured."""
        price = {
            PackageType.PACKAGE4: self.package4_price,
            PackageType.PACKAGE8: self.package8_price,
            PackageType.PACKAGE10: self.package10_price,
        }.get(package_type)
        # A zero override means "not configured"
        return price if price else None


@dataclass(frozen=True)
class Customer:
    """Customer snapshot. The birthday counter is read here, never written."""
    id: str
    name: str = ''
    discount_class: DiscountClass = DiscountClass.REGULAR
    birthday_usage_year: Optional[int] = None
    birthday_usage_count: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'discount_class', DiscountClass.parse(self.discount_class))


@dataclass(frozen=True)
class AddOnLine:
    """Optional add-on priced additively and never discounted."""
    id: str
    unit_price: float
    quantity: int = 1
    name: str = ''

    @property
    def total(self) -> float:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class DiscountBreakdown:
    """Per-rule decomposition of a total discount."""
    vip: float = 0
    birthday: float = 0
    employee: float = 0
    package: float = 0
    add_on: float = 0

    @property
    def customer_amounts(self) -> tuple:
        return (self.vip, self.birthday, self.employee)

    @property
    def largest_customer(self) -> float:
        return max(self.customer_amounts)

    @property
    def total(self) -> float:
        return self.package + sum(self.customer_amounts) + self.add_on

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Conflict:
    """A discount combination that is redundant, over policy, or unusually generous."""
    kind: ConflictKind
    description: str
    severity: Severity
    requires_approval: bool


@dataclass
class TraceStep:
    """A single step in the calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class CalculationInput:
    """Everything one calculation needs from its callers."""
    service: Service
    customer: Customer
    package_type: PackageType = PackageType.SINGLE
    quantity: int = 1
    add_ons: list[AddOnLine] = field(default_factory=list)
    # Date the birthday counter is evaluated against; defaults to today
    as_of: Optional[date] = None

    def __post_init__(self):
        self.package_type = PackageType.parse(self.package_type)

    @property
    def add_on_total(self) -> float:
        return sum(a.total for a in self.add_ons)

    @property
    def year(self) -> int:
        return (self.as_of or date.today()).year


@dataclass
class DiscountCalculation:
    """Result of pricing one concrete combination (checkout path)."""
    original_price: float
    package_discount: float
    customer_discount: float
    total_discount: float
    final_price: float
    discount_rate: float
    breakdown: DiscountBreakdown
    conflicts: list[Conflict] = field(default_factory=list)
    requires_approval: bool = False
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this calculation."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class DiscountOption:
    """One priced candidate produced by the optimizer."""
    kind: OptionKind
    label: str
    original_price: float
    discount_amount: float
    final_price: float
    discount_rate: float
    breakdown: DiscountBreakdown
    package_type: PackageType = PackageType.SINGLE
    requires_approval: bool = False
    conflicts: list[Conflict] = field(default_factory=list)


@dataclass
class OptimalResult:
    """Every legal discount combination, best first."""
    original_price: float
    best_option: DiscountOption
    all_options: list[DiscountOption]
    can_auto_apply: bool


@dataclass
class SimulationResult:
    """Checkout preview: a calculation plus staff-facing warnings."""
    calculation: DiscountCalculation
    warnings: list[str] = field(default_factory=list)
    can_apply: bool = True


@dataclass
class ApprovalPayload:
    """Data handed to the external approval workflow. Status is tracked there."""
    customer_id: str
    service_details: dict
    applied_discounts: dict
    original_amount: float
    discount_amount: float
    final_amount: float
    conflict_reason: str
    requested_by: str
    staff_note: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)
