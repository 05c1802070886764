"""
Numerical Safeguards — Safe Math Primitives для денежных и весовых расчётов

Модуль обеспечивает численную устойчивость расчётов checkout:
- NaN/Inf проверки для предотвращения распространения невалидных значений
- Epsilon-защиты для floor/ceil, чтобы артефакты двоичного float
  ((0.1 + 0.2) * 10 = 3.0000000000000004) не сдвигали результат на целый шаг
- Валидация входных значений (положительные, неотрицательные)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. NaN/Inf никогда не пропагируют в суммы и вес
2. floor/ceil всегда учитывают машинную точность
3. Все операции детерминированы и воспроизводимы
"""

import math
from typing import Final

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Epsilon для общих вычислений и сравнений
EPS_CALC: Final[float] = 1e-12

# Абсолютная толерантность для floor/ceil денежных сумм и веса.
# Значения из каталога имеют не более 2-3 знаков после запятой,
# поэтому ошибка накопления всегда много меньше 1e-9.
EPS_ROUNDING: Final[float] = 1e-9

# Epsilon для сравнения float
EPS_FLOAT_COMPARE_REL: Final[float] = 1e-9
EPS_FLOAT_COMPARE_ABS: Final[float] = 1e-12


# =============================================================================
# NaN/Inf ПРОВЕРКИ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли float валидным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение валидное (finite), False если NaN или Inf
    """
    return math.isfinite(value)


# =============================================================================
# EPSILON-СРАВНЕНИЯ FLOAT
# =============================================================================


def is_close(
    a: float,
    b: float,
    rel_tol: float = EPS_FLOAT_COMPARE_REL,
    abs_tol: float = EPS_FLOAT_COMPARE_ABS,
) -> bool:
    """
    Сравнение float с учётом машинной точности.

    Алгоритм:
        abs(a - b) <= max(rel_tol * max(abs(a), abs(b)), abs_tol)
    """
    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


# =============================================================================
# EPSILON-ОКРУГЛЕНИЕ
# =============================================================================


def floor_with_tolerance(value: float, tol: float = EPS_ROUNDING) -> int:
    """
    floor с epsilon-защитой.

    Значение, отстоящее от следующего целого не более чем на tol,
    считается равным этому целому.

    Args:
        value: Значение для округления вниз
        tol: Абсолютная толерантность (default: EPS_ROUNDING)

    Returns:
        Целое число шагов

    Raises:
        ValueError: Если value NaN/Inf

    Examples:
        >>> floor_with_tolerance(99.99)
        99
        >>> floor_with_tolerance(289.99999999999997)
        290
    """
    if not is_valid_float(value):
        raise ValueError(f"value must be a valid float (not NaN/Inf), got {value}")

    return math.floor(value + tol)


def ceil_with_tolerance(value: float, tol: float = EPS_ROUNDING) -> int:
    """
    ceil с epsilon-защитой.

    Значение, превышающее целое не более чем на tol, считается
    равным этому целому.

    Examples:
        >>> ceil_with_tolerance(11.000000000000002)
        11
        >>> ceil_with_tolerance(7.2)
        8
        >>> ceil_with_tolerance(0.0)
        0
    """
    if not is_valid_float(value):
        raise ValueError(f"value must be a valid float (not NaN/Inf), got {value}")

    return math.ceil(value - tol)


def truncate_with_tolerance(value: float, tol: float = EPS_ROUNDING) -> int:
    """
    Отбрасывание дробной части (к нулю) с epsilon-защитой.

    Для неотрицательных значений эквивалентно floor_with_tolerance,
    для отрицательных — ceil_with_tolerance.
    """
    if value < 0:
        return ceil_with_tolerance(value, tol)
    return floor_with_tolerance(value, tol)


def round_to_epsilon(value: float, eps: float) -> float:
    """
    Округление значения до ближайшего кратного epsilon (round half away from zero).

    Examples:
        >>> round_to_epsilon(0.75, 0.1)
        0.8
        >>> round_to_epsilon(1.23456789, 0.01)
        1.23
    """
    if eps <= 0:
        raise ValueError(f"eps must be positive, got {eps}")

    ratio = value / eps

    if ratio >= 0:
        steps = math.floor(ratio + 0.5 + EPS_ROUNDING)
    else:
        steps = math.ceil(ratio - 0.5 - EPS_ROUNDING)

    # Повторное round убирает хвост вида 0.30000000000000004
    decimals = max(0, -math.floor(math.log10(eps)))
    return round(steps * eps, decimals)


# =============================================================================
# ВАЛИДАЦИЯ И ПРОВЕРКИ
# =============================================================================


def validate_positive(value: float, name: str, eps: float = EPS_CALC) -> None:
    """
    Валидация, что значение положительное.

    Raises:
        ValueError: Если value <= eps или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value <= eps:
        raise ValueError(f"{name} must be positive (> {eps}), got {value}")


def validate_non_negative(value: float, name: str) -> None:
    """
    Валидация, что значение неотрицательное.

    Raises:
        ValueError: Если value < 0 или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
