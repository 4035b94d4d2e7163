import pytest

from adsreport.formatting import (
    format_int,
    format_money,
    format_money_string,
    format_percent,
    truncate,
    truncate_urn,
)


def test_format_percent_source_example():
    assert format_percent(100 / 10000) == "1.00%"


def test_format_money_source_example():
    assert format_money(200 / 100) == "$2.00"


@pytest.mark.parametrize("n", [0, 7, 999, 1000, 1234567, 10**12])
def test_format_int_preserves_digits(n):
    assert format_int(n).replace(",", "") == str(n)


def test_format_int_grouping():
    assert format_int(1234567) == "1,234,567"


@pytest.mark.parametrize("amount", ["2", "12.34", "0.5", "1000"])
def test_format_money_string_matches_money(amount):
    assert format_money_string(amount) == format_money(float(amount))


def test_format_money_string_empty_is_zero():
    assert format_money_string("") == format_money(0.0)


def test_format_money_string_unparseable_passthrough():
    assert format_money_string("n/a") == "n/a"


def test_format_money_negative_sign_first():
    assert format_money(-2.0).startswith("-$")
    assert format_money(-2.0)[1:] == format_money(2.0)


@pytest.mark.parametrize("text", ["", "short", "exactly-ten"])
def test_truncate_short_unchanged(text):
    assert truncate(text, 30) == text


@pytest.mark.parametrize("width", [2, 5, 19, 30])
def test_truncate_long_has_width(width):
    text = "x" * 50
    out = truncate(text, width)
    assert len(out) == width
    assert out.endswith("…")
    assert text.startswith(out[:-1])


def test_truncate_urn_non_urn_unchanged():
    assert truncate_urn("ACTIVE", 4) == "ACTIVE"


def test_truncate_urn_keeps_tail():
    assert truncate_urn("urn:li:sponsoredCampaign:123456789", 4) == "sponsoredCampaign:…6789"


def test_truncate_urn_short_id_kept_whole():
    out = truncate_urn("urn:li:sponsoredCampaign:42", 4)
    assert out.endswith(":42")
    assert "…" not in out