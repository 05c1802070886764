"""
Units — Централизованный модуль конверсии денежных и весовых единиц

Единственный допустимый способ преобразований между:
- суммами (float, валюта) и отчётными суммами (int, отброшенная дробная часть)
- весом в килограммах и весом в граммах
- весом в килограммах и отчётным весом (кг, один знак после запятой)

ЗАПРЕЩЕНО округлять суммы для чека: отчётная сумма всегда усечение, не округление.
"""

from typing import Final

from src.core.math.numerical_safeguards import (
    round_to_epsilon,
    truncate_with_tolerance,
    validate_non_negative,
)


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

GRAMS_PER_KG: Final[int] = 1000

# Шаг отображения итогового веса посылки (0.1 кг)
REPORTED_WEIGHT_STEP_KG: Final[float] = 0.1


# =============================================================================
# ДЕНЬГИ
# =============================================================================


def reported_amount(amount: float) -> int:
    """
    Отчётная сумма: усечение до целого (не округление).

    Args:
        amount: Сумма в валюте (может быть дробной)

    Returns:
        Целая часть суммы

    Examples:
        >>> reported_amount(99.99)
        99
        >>> reported_amount(274.0)
        274
    """
    return truncate_with_tolerance(amount)


def line_amount(unit_price: float, quantity: int) -> float:
    """
    Сумма строки чека: цена за единицу × количество.

    Raises:
        ValueError: Если цена отрицательна или NaN/Inf
    """
    validate_non_negative(unit_price, "unit_price")
    return unit_price * quantity


# =============================================================================
# ВЕС
# =============================================================================


def kg_to_grams(weight_kg: float) -> int:
    """
    Конверсия: вес в кг → целые граммы (усечение).

    Examples:
        >>> kg_to_grams(0.4)
        400
        >>> kg_to_grams(0.29)
        290
    """
    validate_non_negative(weight_kg, "weight_kg")
    return truncate_with_tolerance(weight_kg * GRAMS_PER_KG)


def reported_weight_kg(weight_kg: float) -> float:
    """
    Отчётный вес посылки: кг, округление до одного знака после запятой.

    Examples:
        >>> reported_weight_kg(0.8)
        0.8
        >>> reported_weight_kg(8.15)
        8.2
    """
    validate_non_negative(weight_kg, "weight_kg")
    return round_to_epsilon(weight_kg, REPORTED_WEIGHT_STEP_KG)
