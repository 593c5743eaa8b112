# tests/test_validators.py
from __future__ import annotations

import math

import pytest

from dca.errors import DecodeError, ValidationError
from dca.validators import (
    compute_volume,
    format_volume,
    parse_quote,
    validate_amount,
    validate_purchase,
    validate_volume,
)


@pytest.mark.parametrize("amount, expected", [(10000, 0.002), (500, 0.0001)])
def test_compute_volume_examples(amount, expected):
    assert compute_volume(amount, parse_quote("50000.0")) == pytest.approx(expected)


@pytest.mark.parametrize("quote", [0.5, 1.0, 123.45, 50000.0, 1e7])
@pytest.mark.parametrize("amount", [1, 99, 2500, 10**9])
def test_compute_volume_formula(amount, quote):
    volume = compute_volume(amount, quote)
    assert volume > 0
    assert volume == pytest.approx((1 / quote) / 100 * amount)


def test_parse_quote_rejects_garbage():
    for raw in ("abc", None, "", "0", "-1", "nan", "inf"):
        with pytest.raises(DecodeError):
            parse_quote(raw)


def test_validate_amount():
    assert validate_amount(2500) == 2500
    assert validate_amount(" 2500 ") == 2500
    assert validate_purchase("100").amount_in_cents == 100
    for bad in (0, -5, "1.5", "ten", True):
        with pytest.raises(ValidationError):
            validate_amount(bad)


def test_validate_volume_rejects_non_positive():
    for bad in (0.0, -0.1, math.nan, math.inf):
        with pytest.raises(ValidationError):
            validate_volume(bad)


def test_format_volume_never_uses_exponent():
    assert format_volume(0.002) == "0.002"
    assert format_volume(1e-05) == "0.00001"
    assert format_volume(2.0) == "2"
    assert format_volume(0.00012345678901234) == "0.00012345678901234"
    assert "e" not in format_volume(1e-9).lower()
