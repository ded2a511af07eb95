"""Tests for Decimal money helpers and amount parsing."""

from decimal import Decimal

import pytest

from microcompta.utils.amount_parser import parse_amount
from microcompta.utils.money import (
    amount_ttc,
    apply_rate,
    format_amount,
    round_cents,
    round_whole,
    to_decimal,
)


class TestToDecimal:
    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_passes_through(self):
        value = Decimal("12.345")
        assert to_decimal(value) is value


class TestRounding:
    def test_format_pads_two_decimals(self):
        assert format_amount(Decimal("1234.5")) == "1234.50"
        assert format_amount(0) == "0.00"

    def test_format_rounds_half_up(self):
        assert format_amount(Decimal("0.005")) == "0.01"
        assert format_amount(Decimal("2.675")) == "2.68"

    def test_negative_zero_is_plain_zero(self):
        assert format_amount(Decimal("-0.001")) == "0.00"
        assert round_cents(Decimal("-0.004")) == Decimal("0.00")

    def test_round_whole_halves_go_up(self):
        assert round_whole(Decimal("2.5")) == 3
        assert round_whole(Decimal("-2.5")) == -2
        assert round_whole(Decimal("199.49")) == 199
        assert round_whole(Decimal("-0.4")) == 0

    def test_round_whole_returns_int(self):
        assert isinstance(round_whole(Decimal("10")), int)


def test_apply_rate():
    assert apply_rate(Decimal("1000"), Decimal("22")) == Decimal("220")
    assert apply_rate(Decimal("50"), 0) == Decimal("0")


def test_amount_ttc():
    assert amount_ttc(Decimal("1000"), Decimal("20")) == Decimal("1200.00")
    assert amount_ttc(Decimal("99.99"), Decimal("5.5")) == Decimal("105.49")
    assert amount_ttc(Decimal("100"), Decimal("0")) == Decimal("100.00")


class TestParseAmount:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("123.45", Decimal("123.45")),
            ("123,45", Decimal("123.45")),
            ("1 234,56", Decimal("1234.56")),
            ("1.234,56", Decimal("1234.56")),
            ("1,234.56", Decimal("1234.56")),
            ("€123.45", Decimal("123.45")),
            ("123,45 €", Decimal("123.45")),
            ("-80", Decimal("-80")),
            ("(50.00)", Decimal("-50.00")),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_amount(text) == expected

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="Empty"):
            parse_amount("  ")

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_amount("abc")

    def test_non_finite_raises(self):
        with pytest.raises(ValueError):
            parse_amount("nan")
