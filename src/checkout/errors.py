"""Checkout errors — таксономия бизнес-отказов корзины и checkout.

Все отказы восстановимы и сообщаются вызывающему коду в структурированном
виде (kind + название товара, где применимо):
- Cart.add() бросает исключение, корзина остаётся без изменений
- checkout() не бросает, а возвращает CheckoutResult с CheckoutFailure
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    """Вид отказа."""

    INVALID_QUANTITY = "invalid_quantity"
    EXPIRED_PRODUCT = "expired_product"
    INSUFFICIENT_STOCK = "insufficient_stock"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    EMPTY_CART = "empty_cart"


@dataclass(frozen=True)
class CheckoutFailure:
    """Структурированный отказ: вид, товар (если применимо), сообщение."""

    kind: FailureKind
    product_name: Optional[str]
    message: str


class CheckoutError(Exception):
    """Базовый класс бизнес-отказов."""

    kind: FailureKind

    def __init__(self, message: str, product_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.product_name = product_name

    def to_failure(self) -> CheckoutFailure:
        return CheckoutFailure(
            kind=self.kind,
            product_name=self.product_name,
            message=self.message,
        )


class InvalidQuantity(CheckoutError):
    kind = FailureKind.INVALID_QUANTITY

    def __init__(self, quantity: object, product_name: Optional[str] = None):
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}", product_name)
        self.quantity = quantity


class ExpiredProduct(CheckoutError):
    kind = FailureKind.EXPIRED_PRODUCT

    def __init__(self, product_name: str):
        super().__init__(f"{product_name} is expired", product_name)


class InsufficientStock(CheckoutError):
    kind = FailureKind.INSUFFICIENT_STOCK

    def __init__(self, product_name: str, requested: int, available: int):
        super().__init__(f"Not enough stock for {product_name}", product_name)
        self.requested = requested
        self.available = available


class InsufficientBalance(CheckoutError):
    kind = FailureKind.INSUFFICIENT_BALANCE

    def __init__(self, required: float, balance: float):
        super().__init__("Insufficient balance")
        self.required = required
        self.balance = balance


class EmptyCart(CheckoutError):
    kind = FailureKind.EMPTY_CART

    def __init__(self):
        super().__init__("Cart is empty")
