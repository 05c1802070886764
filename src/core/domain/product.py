"""
Product — Модель позиции каталога

Pydantic модель товара с записью возможностей (capabilities):
- perishable: товар имеет момент истечения срока годности (expires_at)
- shippable: товар имеет физический вес (weight_kg) и попадает в посылку

Все четыре комбинации выражаются одним типом, без подкласса на комбинацию.
Модель мутабельна только в части остатка (quantity), остаток уменьшается
исключительно при успешном checkout.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.core.math.numerical_safeguards import is_valid_float


# =============================================================================
# EXCEPTIONS
# =============================================================================


class StockInvariantViolation(Exception):
    """
    Критическое нарушение инварианта остатка: quantity < 0.

    Уменьшение остатка ниже нуля — дефект вызывающего кода (проверка
    остатка должна предшествовать списанию), а не допустимое состояние.
    """

    pass


# =============================================================================
# PRODUCT MODEL
# =============================================================================


class Product(BaseModel):
    """
    Модель товара каталога.

    Идентичность — name (уникально в рамках запуска).
    """

    name: str = Field(..., min_length=1, description="Название товара (идентичность)")
    price: float = Field(..., ge=0, description="Цена за единицу")
    quantity: int = Field(..., ge=0, description="Доступный остаток (шт.)")

    # Capabilities
    expires_at: Optional[datetime] = Field(
        default=None, description="Момент истечения срока годности (perishable)"
    )
    weight_kg: Optional[float] = Field(
        default=None, gt=0, description="Вес единицы в кг (shippable)"
    )

    model_config = {"validate_assignment": True}

    @field_validator("price")
    @classmethod
    def validate_price_finite(cls, v: float) -> float:
        """Цена не может быть NaN/Inf."""
        if not is_valid_float(v):
            raise ValueError(f"price must be finite, got {v}")
        return v

    @field_validator("weight_kg")
    @classmethod
    def validate_weight_finite(cls, v: Optional[float]) -> Optional[float]:
        """Вес не может быть NaN/Inf."""
        if v is not None and not is_valid_float(v):
            raise ValueError(f"weight_kg must be finite, got {v}")
        return v

    @field_validator("expires_at")
    @classmethod
    def normalize_expiry_tz(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive datetime трактуется как UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_perishable(self) -> bool:
        return self.expires_at is not None

    @property
    def is_shippable(self) -> bool:
        return self.weight_kg is not None

    def is_expired(self, now: datetime) -> bool:
        """
        Проверка истечения срока годности.

        Args:
            now: Текущий момент (от Clock)

        Returns:
            True если товар perishable и expires_at строго раньше now
        """
        if self.expires_at is None:
            return False
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return self.expires_at < now

    def reduce_quantity(self, amount: int) -> None:
        """
        Списание остатка.

        Args:
            amount: Количество к списанию (> 0)

        Raises:
            ValueError: Если amount не целое положительное
            StockInvariantViolation: Если остаток ушёл бы ниже нуля
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValueError(f"amount must be a positive integer, got {amount!r}")

        if amount > self.quantity:
            raise StockInvariantViolation(
                f"Cannot reduce stock of {self.name!r} by {amount}: "
                f"only {self.quantity} available"
            )

        self.quantity = self.quantity - amount
