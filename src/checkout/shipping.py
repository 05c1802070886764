"""Shipping — расчёт стоимости доставки и манифест посылки.

Тариф:
    shipping_fee = ceil(total_weight_kg / step_kg) * fee_per_step
    default: step_kg = 0.1 (100 г), fee_per_step = 3 → 30 за кг с округлением вверх до 100 г

Каждая физическая единица shippable товара — отдельный ShipmentUnit:
строка 3 × 0.4 кг даёт три единицы по 0.4 кг, а не одну на 1.2 кг.

Калькулятор stateless, без глобального состояния.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from src.checkout.cart import CartLine
from src.core.domain import kg_to_grams, reported_weight_kg
from src.core.math.numerical_safeguards import (
    ceil_with_tolerance,
    validate_non_negative,
    validate_positive,
)


# =============================================================================
# SHIPMENT UNIT
# =============================================================================


@dataclass(frozen=True)
class ShipmentUnit:
    """Одна физическая единица shippable товара."""

    name: str
    weight_kg: float


def collect_shipment_units(lines: Iterable[CartLine]) -> List[ShipmentUnit]:
    """
    Разворачивание shippable строк корзины в единицы посылки.

    Порядок: порядок строк, внутри строки — quantity одинаковых единиц.
    Строки без веса (не shippable) пропускаются.
    """
    units: List[ShipmentUnit] = []
    for line in lines:
        weight_kg = line.product.weight_kg
        if weight_kg is None:
            continue
        units.extend(ShipmentUnit(name=line.name, weight_kg=weight_kg) for _ in range(line.quantity))
    return units


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class ShippingConfig:
    """Конфигурация тарифа доставки.

    Параметры:
    - step_kg: гранулярность округления веса вверх
    - fee_per_step: стоимость одного шага
    """

    step_kg: float = 0.1
    fee_per_step: float = 3.0


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class ShipmentManifest:
    """Манифест посылки для Shipment presenter.

    summary: (name, count) в порядке первого появления товара
    unit_weights_g: вес каждой единицы в граммах (усечение), в порядке сбора
    total_weight_kg: итоговый вес, кг, один знак после запятой
    """

    summary: Tuple[Tuple[str, int], ...]
    unit_weights_g: Tuple[int, ...]
    total_weight_kg: float


@dataclass(frozen=True)
class ShippingQuote:
    """Результат расчёта доставки."""

    total_weight_kg: float
    shipping_fee: float
    unit_count: int

    # None если посылки нет (нет shippable единиц)
    manifest: Optional[ShipmentManifest]

    # Детали
    details: str

    @property
    def has_shipment(self) -> bool:
        return self.manifest is not None


# =============================================================================
# CALCULATOR
# =============================================================================


class ShippingCalculator:
    """Stateless калькулятор доставки."""

    def __init__(self, config: ShippingConfig | None = None):
        self.config = config or ShippingConfig()
        validate_positive(self.config.step_kg, "step_kg")
        validate_non_negative(self.config.fee_per_step, "fee_per_step")

    def fee_for_weight(self, total_weight_kg: float) -> float:
        """
        Стоимость доставки для итогового веса.

        Examples:
            1.1 кг → ceil(11) * 3 = 33
            0.8 кг → ceil(8) * 3 = 24
            0.0 кг → 0
        """
        validate_non_negative(total_weight_kg, "total_weight_kg")
        steps = ceil_with_tolerance(total_weight_kg / self.config.step_kg)
        return steps * self.config.fee_per_step

    def quote(self, units: Sequence[ShipmentUnit]) -> ShippingQuote:
        """
        Расчёт доставки для набора единиц.

        Args:
            units: Единицы посылки в порядке сбора

        Returns:
            ShippingQuote; для пустого набора fee = 0, weight = 0, manifest = None
        """
        if not units:
            return ShippingQuote(
                total_weight_kg=0.0,
                shipping_fee=0.0,
                unit_count=0,
                manifest=None,
                details="No shippable units",
            )

        total_weight_kg = sum(unit.weight_kg for unit in units)
        shipping_fee = self.fee_for_weight(total_weight_kg)

        return ShippingQuote(
            total_weight_kg=total_weight_kg,
            shipping_fee=shipping_fee,
            unit_count=len(units),
            manifest=self.build_manifest(units, total_weight_kg),
            details=(
                f"{len(units)} units, weight={total_weight_kg:.3f}kg, "
                f"fee={shipping_fee:.2f}"
            ),
        )

    def build_manifest(
        self,
        units: Sequence[ShipmentUnit],
        total_weight_kg: float,
    ) -> ShipmentManifest:
        """Группировка единиц по name для summary, веса — поштучно."""
        counts: dict[str, int] = {}
        for unit in units:
            counts[unit.name] = counts.get(unit.name, 0) + 1

        return ShipmentManifest(
            summary=tuple(counts.items()),
            unit_weights_g=tuple(kg_to_grams(unit.weight_kg) for unit in units),
            total_weight_kg=reported_weight_kg(total_weight_kg),
        )
