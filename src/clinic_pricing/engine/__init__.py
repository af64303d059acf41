"""Engine subpackage - discount calculation, conflict detection and optimization."""
from .discount_engine import DiscountEngine, validate_input
from .models import (
    AddOnLine, ApprovalPayload, CalculationInput, Conflict, ConflictKind, Customer,
    DiscountBreakdown, DiscountCalculation, DiscountClass, DiscountOption,
    OptimalResult, OptionKind, PackageType, Service, Severity, SimulationResult
)

__all__ = [
    'DiscountEngine', 'validate_input',
    'AddOnLine', 'ApprovalPayload', 'CalculationInput', 'Conflict', 'ConflictKind',
    'Customer', 'DiscountBreakdown', 'DiscountCalculation', 'DiscountClass',
    'DiscountOption', 'OptimalResult', 'OptionKind', 'PackageType', 'Service',
    'Severity', 'SimulationResult',
]
