"""
Integer Safeguards — Точная целочисленная арифметика сумм

Модуль обеспечивает точность всех операций над суммами (units):
- Только int, никаких float в суммах (нет rounding drift)
- Проверка переполнения относительно представимого диапазона (uint256)
- Floor-деление с явной проверкой знаменателя
- Валидация моментов времени (finite, не NaN/Inf)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Сумма никогда не бывает отрицательной или float
2. Выход за max_value → ArithmeticOverflow (никогда не молчаливый wrap/clamp)
3. Деление на ноль никогда не происходит (ValueError до деления)
4. Все операции детерминированы и воспроизводимы
"""

import math
from numbers import Real
from typing import Final

from vestledger.core.errors import ArithmeticOverflow

# =============================================================================
# ДИАПАЗОНЫ
# =============================================================================

# Максимальная представимая сумма (on-chain uint256)
MAX_AMOUNT_UINT256: Final[int] = 2**256 - 1

# Знаменатель процентов в десятых долях: 1000 = 100.0%
PERCENT_TENTHS_DENOMINATOR: Final[int] = 1000


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_amount(
    value: int,
    name: str,
    max_value: int = MAX_AMOUNT_UINT256,
    allow_zero: bool = True,
) -> int:
    """
    Валидация суммы: целое, неотрицательное, в пределах max_value.

    bool отвергается явно (в Python bool является подклассом int).

    Args:
        value: Проверяемая сумма
        name: Имя параметра (для сообщения об ошибке)
        max_value: Максимально представимая сумма
        allow_zero: Допускается ли 0

    Returns:
        value без изменений

    Raises:
        ValueError: Если value не int, отрицательное или 0 при allow_zero=False
        ArithmeticOverflow: Если value > max_value
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer amount, got {value!r}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")

    if value == 0 and not allow_zero:
        raise ValueError(f"{name} must be positive, got 0")

    if value > max_value:
        raise ArithmeticOverflow(f"{name} {value} exceeds representable maximum {max_value}")

    return value


def validate_percent_tenths(value: int, name: str = "cliff_percent_tenths") -> int:
    """
    Валидация процента в десятых долях (0..1000).

    Raises:
        ValueError: Если value не int или вне [0, 1000]
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")

    if value < 0 or value > PERCENT_TENTHS_DENOMINATOR:
        raise ValueError(
            f"{name} must be within [0, {PERCENT_TENTHS_DENOMINATOR}], got {value}"
        )

    return value


def validate_timestamp(now: float, name: str = "now") -> float:
    """
    Валидация момента времени, переданного вызывающим.

    Допускаются int и float (например, дробные секунды), но не NaN/Inf.

    Raises:
        ValueError: Если now не число или не finite
    """
    if isinstance(now, bool) or not isinstance(now, Real):
        raise ValueError(f"{name} must be a real number, got {now!r}")

    if not math.isfinite(now):
        raise ValueError(f"{name} must be finite (not NaN/Inf), got {now}")

    return now


# =============================================================================
# CHECKED-АРИФМЕТИКА
# =============================================================================


def checked_add(a: int, b: int, max_value: int = MAX_AMOUNT_UINT256) -> int:
    """
    Сложение с проверкой переполнения.

    Raises:
        ArithmeticOverflow: Если a + b > max_value
    """
    result = a + b
    if result > max_value:
        raise ArithmeticOverflow(f"Sum {a} + {b} exceeds representable maximum {max_value}")
    return result


def checked_sub(a: int, b: int) -> int:
    """
    Вычитание без ухода в отрицательную область.

    Raises:
        ArithmeticOverflow: Если b > a (underflow)
    """
    if b > a:
        raise ArithmeticOverflow(f"Subtraction underflow: {a} - {b} < 0")
    return a - b


def checked_mul(a: int, b: int, max_value: int = MAX_AMOUNT_UINT256) -> int:
    """
    Умножение с проверкой переполнения.

    Raises:
        ArithmeticOverflow: Если a * b > max_value
    """
    result = a * b
    if result > max_value:
        raise ArithmeticOverflow(
            f"Product {a} * {b} exceeds representable maximum {max_value}"
        )
    return result


def floor_div(numerator: int, denominator: int) -> int:
    """
    Целочисленное floor-деление с явной защитой знаменателя.

    Raises:
        ValueError: Если denominator <= 0
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive, got {denominator}")
    return numerator // denominator


def mul_div_floor(
    value: int,
    numerator: int,
    denominator: int,
    max_value: int = MAX_AMOUNT_UINT256,
) -> int:
    """
    floor(value * numerator / denominator) без промежуточных float.

    Промежуточное произведение проверяется на переполнение так же,
    как это делает on-chain арифметика.

    Examples:
        >>> mul_div_floor(1000, 200, 1000)
        200
        >>> mul_div_floor(999, 333, 1000)
        332
    """
    return floor_div(checked_mul(value, numerator, max_value), denominator)


def clamp_amount(value: int, min_value: int = 0, max_value: int | None = None) -> int:
    """
    Ограничение целой суммы диапазоном [min_value, max_value].

    Examples:
        >>> clamp_amount(-5)
        0
        >>> clamp_amount(15, 0, 10)
        10
    """
    result = max(value, min_value)
    if max_value is not None:
        result = min(result, max_value)
    return result
