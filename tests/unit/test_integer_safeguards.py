"""
Тесты для Integer Safeguards — точная целочисленная арифметика

Проверяет:
1. Валидацию сумм (int, ≥ 0, ≤ max, bool отвергается)
2. Checked-арифметику и ArithmeticOverflow
3. Floor-деление без float
4. Валидацию моментов времени
"""

import pytest

from vestledger.core.errors import ArithmeticOverflow
from vestledger.core.math.integer_safeguards import (
    MAX_AMOUNT_UINT256,
    PERCENT_TENTHS_DENOMINATOR,
    checked_add,
    checked_mul,
    checked_sub,
    clamp_amount,
    floor_div,
    mul_div_floor,
    validate_amount,
    validate_percent_tenths,
    validate_timestamp,
)


class TestValidateAmount:
    """Тесты validate_amount"""

    def test_valid_amounts_pass(self) -> None:
        assert validate_amount(0, "x") == 0
        assert validate_amount(10**30, "x") == 10**30
        assert validate_amount(MAX_AMOUNT_UINT256, "x") == MAX_AMOUNT_UINT256

    def test_float_rejected(self) -> None:
        with pytest.raises(ValueError, match="integer amount"):
            validate_amount(1.0, "x")

    def test_bool_rejected(self) -> None:
        """bool — подкласс int, но не сумма"""
        with pytest.raises(ValueError, match="integer amount"):
            validate_amount(True, "x")

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            validate_amount(-1, "x")

    def test_zero_rejected_when_disallowed(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            validate_amount(0, "x", allow_zero=False)

    def test_above_max_overflows(self) -> None:
        with pytest.raises(ArithmeticOverflow):
            validate_amount(MAX_AMOUNT_UINT256 + 1, "x")
        with pytest.raises(ArithmeticOverflow):
            validate_amount(101, "x", max_value=100)


class TestValidatePercentTenths:
    def test_bounds(self) -> None:
        assert validate_percent_tenths(0) == 0
        assert validate_percent_tenths(PERCENT_TENTHS_DENOMINATOR) == 1000

    def test_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            validate_percent_tenths(1001)
        with pytest.raises(ValueError):
            validate_percent_tenths(-1)


class TestValidateTimestamp:
    def test_int_and_float_accepted(self) -> None:
        assert validate_timestamp(0) == 0
        assert validate_timestamp(1599.999999) == 1599.999999

    def test_nan_inf_rejected(self) -> None:
        for bad in (float("nan"), float("inf"), float("-inf")):
            with pytest.raises(ValueError, match="finite"):
                validate_timestamp(bad)

    def test_non_number_rejected(self) -> None:
        with pytest.raises(ValueError, match="real number"):
            validate_timestamp("600")
        with pytest.raises(ValueError, match="real number"):
            validate_timestamp(None)


class TestCheckedArithmetic:
    """Тесты checked_add / checked_sub / checked_mul"""

    def test_add_within_range(self) -> None:
        assert checked_add(2, 3) == 5
        assert checked_add(MAX_AMOUNT_UINT256 - 1, 1) == MAX_AMOUNT_UINT256

    def test_add_overflow(self) -> None:
        with pytest.raises(ArithmeticOverflow):
            checked_add(MAX_AMOUNT_UINT256, 1)

    def test_sub_underflow(self) -> None:
        assert checked_sub(5, 5) == 0
        with pytest.raises(ArithmeticOverflow, match="underflow"):
            checked_sub(4, 5)

    def test_mul_overflow(self) -> None:
        assert checked_mul(10, 10, max_value=100) == 100
        with pytest.raises(ArithmeticOverflow):
            checked_mul(10, 11, max_value=100)


class TestDivision:
    """Floor-деление без float"""

    def test_floor_div(self) -> None:
        assert floor_div(800, 8) == 100
        assert floor_div(1000, 7) == 142

    def test_floor_div_zero_denominator(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            floor_div(1, 0)

    def test_mul_div_floor_exact_for_huge_values(self) -> None:
        """Для сумм > 2**53 float потерял бы точность"""
        total = 10**27 + 1
        assert mul_div_floor(total, 333, 1000) == (total * 333) // 1000

    def test_mul_div_floor_examples(self) -> None:
        assert mul_div_floor(1000, 200, 1000) == 200
        assert mul_div_floor(999, 333, 1000) == 332


class TestClampAmount:
    def test_clamp(self) -> None:
        assert clamp_amount(-5) == 0
        assert clamp_amount(5) == 5
        assert clamp_amount(15, 0, 10) == 10
