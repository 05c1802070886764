"""
Contract Validation Module

Модуль для валидации JSON документов каталога и покупателя.
"""

from .validators import (
    CatalogValidator,
    ContractValidator,
    CustomerValidator,
    SchemaLoader,
    validate_catalog,
    validate_customer,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "CatalogValidator",
    "CustomerValidator",
    # Functions
    "validate_catalog",
    "validate_customer",
]
