"""Unit tests for money formatting"""

from enrollment_gateway.utils.money import format_usd


def test_format_whole_dollars():
    assert format_usd(2_025_000) == "$20,250"
    assert format_usd(30_000) == "$300"
    assert format_usd(0) == "$0"


def test_format_with_cents():
    assert format_usd(2_025_050) == "$20,250.50"
    assert format_usd(5) == "$0.05"


def test_format_negative_amount():
    """Test discounts render with a leading minus"""
    assert format_usd(-2_400_000) == "-$24,000"
