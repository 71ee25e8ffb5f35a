"""Tests for amount parsing and formatting."""

from decimal import Decimal

import pytest

from finai.utils.amount_parser import (
    format_money,
    from_minor_units,
    parse_amount,
    to_minor_units,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", "123.45"),
        ("123", "123.00"),
        ("R$ 123,45", "123.45"),
        ("1.234,56", "1234.56"),
        ("1,234.56", "1234.56"),
        ("$ 10", "10.00"),
        ("(50.00)", "-50.00"),
        ("0.005", "0.01"),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == Decimal(expected)


@pytest.mark.parametrize("text", ["", "   ", "abc", "R$"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_minor_units():
    assert to_minor_units(Decimal("12.34")) == 1234
    assert to_minor_units(Decimal("0.1")) == 10
    assert from_minor_units(1234) == Decimal("12.34")
    assert from_minor_units(0) == Decimal("0.00")


def test_format_money():
    assert format_money(Decimal("1234.5")) == "R$ 1,234.50"
    assert format_money(Decimal("-20"), "USD") == "-$ 20.00"
    assert format_money(Decimal("3"), "JPY") == "JPY 3.00"


@pytest.mark.parametrize("minor", [150.7, 150.0, "150", None, True])
def test_from_minor_units_rejects_non_integers(minor):
    with pytest.raises(TypeError):
        from_minor_units(minor)
