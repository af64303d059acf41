"""Reports subpackage - discount usage statistics."""
from .discount_stats import summarize_by_class, monthly_breakdown

__all__ = ['summarize_by_class', 'monthly_breakdown']
