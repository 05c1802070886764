"""Catalog — поиск товаров по идентичности (name) и загрузка каталога.

Каталог хранит живые экземпляры Product: корзина и checkout работают
с теми же объектами, поэтому остаток, прочитанный при checkout, всегда текущий.

Документы каталога и покупателя валидируются JSON Schema контрактом
до построения pydantic моделей.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List

from src.core.contracts import validate_catalog, validate_customer
from src.core.domain import Customer, Product

logger = logging.getLogger(__name__)


class UnknownProduct(KeyError):
    """Товар с таким name отсутствует в каталоге."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown product: {self.name!r}"


class Catalog:
    """In-memory каталог товаров в порядке загрузки."""

    def __init__(self, products: List[Product] | None = None):
        self._products: Dict[str, Product] = {}
        for product in products or []:
            self.register(product)

    def register(self, product: Product) -> None:
        """
        Добавление товара в каталог.

        Raises:
            ValueError: Если товар с таким name уже зарегистрирован
        """
        if product.name in self._products:
            raise ValueError(f"Duplicate product name in catalog: {product.name!r}")
        self._products[product.name] = product

    def get(self, name: str) -> Product:
        """
        Raises:
            UnknownProduct: Если товара нет в каталоге
        """
        try:
            return self._products[name]
        except KeyError:
            raise UnknownProduct(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._products

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products.values())

    def __len__(self) -> int:
        return len(self._products)

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "Catalog":
        """
        Построение каталога из JSON документа (schema: catalog).

        Raises:
            jsonschema.ValidationError: Если документ не соответствует схеме
            pydantic.ValidationError: Если товар нарушает ограничения модели
            ValueError: Если name товаров повторяются
        """
        validate_catalog(data)
        catalog = cls([Product.model_validate(item) for item in data["products"]])
        logger.debug("Catalog loaded: %d products", len(catalog))
        return catalog


def load_catalog(path: str | Path) -> Catalog:
    """Загрузка каталога из JSON файла."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return Catalog.from_document(data)


def customer_from_document(data: Dict[str, Any]) -> Customer:
    """
    Построение Customer из JSON документа (schema: customer).

    Raises:
        jsonschema.ValidationError: Если документ не соответствует схеме
    """
    validate_customer(data)
    return Customer(name=data["name"], balance=data["balance"])


def load_customer(path: str | Path) -> Customer:
    """Загрузка покупателя из JSON файла."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return customer_from_document(data)
