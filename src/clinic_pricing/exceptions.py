"""
Custom exceptions
"""


class PricingError(Exception):
    """Base exception"""
    pass


class InvalidInputError(PricingError):
    """Calculation input failed boundary validation"""
    pass


class CatalogError(PricingError):
    """Unknown service or customer in the catalog"""
    pass
