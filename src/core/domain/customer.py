"""
Customer — Модель счёта покупателя

Баланс никогда не уходит в минус: checkout отказывает при недостатке средств,
а deduct_balance защищает инвариант на уровне модели.

Сравнение баланса с суммой выполняется с epsilon-толерантностью: сумма
checkout накапливается как float (0.1 + 0.2 = 0.30000000000000004), и
покупатель с балансом ровно 0.3 не должен получать отказ из-за хвоста.
"""

from pydantic import BaseModel, Field, field_validator

from src.core.math.numerical_safeguards import is_close, is_valid_float, validate_non_negative


class Customer(BaseModel):
    """Покупатель: имя и баланс (может быть дробным)."""

    name: str = Field(..., min_length=1, description="Имя покупателя")
    balance: float = Field(..., ge=0, description="Баланс счёта")

    model_config = {"validate_assignment": True}

    @field_validator("balance")
    @classmethod
    def validate_balance_finite(cls, v: float) -> float:
        if not is_valid_float(v):
            raise ValueError(f"balance must be finite, got {v}")
        return v

    def can_afford(self, amount: float) -> bool:
        return self.balance >= amount or is_close(self.balance, amount)

    def deduct_balance(self, amount: float) -> None:
        """
        Списание суммы с баланса.

        Сумма, равная балансу с точностью до float-шума, обнуляет баланс.

        Args:
            amount: Сумма к списанию (>= 0)

        Raises:
            ValueError: Если amount отрицательна или превышает баланс
        """
        validate_non_negative(amount, "amount")

        if not self.can_afford(amount):
            raise ValueError(
                f"Cannot deduct {amount:.2f} from balance {self.balance:.2f} "
                f"of customer {self.name!r}"
            )

        self.balance = max(self.balance - amount, 0.0)
