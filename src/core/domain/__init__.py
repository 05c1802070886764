"""
Domain models and value objects.

Contains fundamental domain entities: Product, Customer and unit conversions.
"""

from src.core.domain.customer import Customer
from src.core.domain.product import Product, StockInvariantViolation
from src.core.domain.units import (
    GRAMS_PER_KG,
    REPORTED_WEIGHT_STEP_KG,
    kg_to_grams,
    line_amount,
    reported_amount,
    reported_weight_kg,
)

__all__ = [
    # Units module
    "GRAMS_PER_KG",
    "REPORTED_WEIGHT_STEP_KG",
    "kg_to_grams",
    "line_amount",
    "reported_amount",
    "reported_weight_kg",
    # Product model
    "Product",
    "StockInvariantViolation",
    # Customer model
    "Customer",
]
