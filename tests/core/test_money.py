from decimal import Decimal

import pytest

from src.core.exceptions import InvalidInputError
from src.shared.utils.money import round_money, to_decimal


class TestRoundMoney:
    """Tests for round_money function."""

    def test_round_half_up(self):
        assert round_money(Decimal("100.005")) == Decimal("100.01")
        assert round_money(Decimal("100.004")) == Decimal("100.00")
        assert round_money(10.125) == Decimal("10.13")
        assert round_money(10.115) == Decimal("10.12")

    def test_from_string_and_int(self):
        assert round_money("175000") == Decimal("175000.00")
        assert round_money(0) == Decimal("0.00")

    def test_negative_halves_round_toward_positive(self):
        assert round_money(Decimal("-10.125")) == Decimal("-10.12")
        assert round_money(Decimal("-10.126")) == Decimal("-10.13")

    def test_precision(self):
        """Result always has 2 decimal places."""
        assert str(round_money(10)) == "10.00"
        assert str(round_money(10.1)) == "10.10"


class TestToDecimal:
    """Tests for to_decimal conversion."""

    def test_float_goes_through_str(self):
        assert to_decimal(33.335, "unit_price") == Decimal("33.335")
        assert to_decimal(0.07, "vat_rate") == Decimal("0.07")

    def test_accepts_numeric_strings_and_ints(self):
        assert to_decimal(" 2500000 ", "unit_price") == Decimal("2500000")
        assert to_decimal(3, "quantity") == Decimal("3")

    @pytest.mark.parametrize(
        "value",
        [float("nan"), float("inf"), Decimal("NaN"), Decimal("-Infinity"), "abc", None, True, [1]],
    )
    def test_rejects_non_finite_and_non_numeric(self, value):
        with pytest.raises(InvalidInputError) as exc_info:
            to_decimal(value, "line_items.0.quantity")

        assert exc_info.value.status_code == 422
        assert exc_info.value.details == {"field": "line_items.0.quantity"}
