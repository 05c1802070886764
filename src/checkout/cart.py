"""Cart — накопление намерений покупки с валидацией против текущего остатка.

Порядок проверок add():
1. quantity — целое (не bool) и > 0     → InvalidQuantity
2. товар не просрочен на момент now     → ExpiredProduct
3. накопленное количество <= остаток    → InsufficientStock

Остаток при add() не резервируется: две корзины могут претендовать на один
и тот же остаток, конфликт проявляется при checkout (авторитетная проверка).
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Tuple

from src.checkout.clock import Clock, SystemClock
from src.checkout.errors import ExpiredProduct, InsufficientStock, InvalidQuantity
from src.core.domain import Product

logger = logging.getLogger(__name__)


def is_valid_quantity(quantity: object) -> bool:
    """Количество — целое положительное число; bool и float не принимаются."""
    return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity > 0


@dataclass(frozen=True)
class CartLine:
    """Строка корзины: живой товар и запрошенное количество."""

    product: Product
    quantity: int

    @property
    def name(self) -> str:
        return self.product.name


class Cart:
    """Корзина покупателя. Порядок строк = порядок первого добавления."""

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()
        self._lines: Dict[str, CartLine] = {}

    def add(self, product: Product, quantity: int, now: Optional[datetime] = None) -> CartLine:
        """
        Добавление товара в корзину.

        Args:
            product: Товар каталога
            quantity: Количество (> 0)
            now: Текущий момент (по умолчанию из Clock)

        Returns:
            Итоговая строка корзины для этого товара

        Raises:
            InvalidQuantity, ExpiredProduct, InsufficientStock
        """
        if not is_valid_quantity(quantity):
            raise InvalidQuantity(quantity, product.name)

        if product.is_expired(now or self._clock.now()):
            raise ExpiredProduct(product.name)

        existing = self._lines.get(product.name)
        requested = quantity + (existing.quantity if existing else 0)
        if requested > product.quantity:
            raise InsufficientStock(product.name, requested, product.quantity)

        line = CartLine(product=product, quantity=requested)
        self._lines[product.name] = line
        logger.debug("Cart add: %s x%d (line total %d)", product.name, quantity, requested)
        return line

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines.values())

    def quantity_of(self, name: str) -> int:
        line = self._lines.get(name)
        return line.quantity if line else 0

    def is_empty(self) -> bool:
        return not self._lines

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)
