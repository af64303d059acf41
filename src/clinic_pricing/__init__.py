"""
Clinic Pricing Package

Discount calculation and optimization engine for an infusion clinic back office.
Prices a service/tier/quantity for a customer, flags discount combinations that
need managerial sign-off, and recommends the cheapest legal combination.
"""

__version__ = "1.0.0"
