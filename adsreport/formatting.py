"""Small text helpers for terminal tables."""

from __future__ import annotations

_URN_NAMESPACE = "urn:li:"
_ELLIPSIS = "…"


def format_int(value: int) -> str:
    """Render an integer with thousands separators."""
    return f"{value:,}"


def format_money(value: float) -> str:
    """Render a dollar amount with two decimals."""
    if value < 0:
        return f"-${-value:,.2f}"
    return f"${value:,.2f}"


def format_money_string(amount: str) -> str:
    """Render a decimal amount string as money; unparseable text is returned as is."""
    if not amount:
        return format_money(0.0)
    try:
        return format_money(float(amount))
    except ValueError:
        return amount


def format_percent(ratio: float) -> str:
    """Render a ratio (0.01) as a percentage (1.00%)."""
    return f"{ratio * 100:.2f}%"


def truncate(text: str, width: int) -> str:
    """Cut text to at most width characters, marking the cut with an ellipsis."""
    if len(text) <= width:
        return text
    if width <= 1:
        return text[:max(width, 0)]
    return text[: width - 1] + _ELLIPSIS


def truncate_urn(urn: str, keep: int) -> str:
    """Shorten a URN to its type and the last keep characters of its id.

    Values that are not URNs are returned unchanged.
    """
    if not urn.startswith(_URN_NAMESPACE):
        return urn
    body = urn[len(_URN_NAMESPACE):]
    kind, sep, ident = body.rpartition(":")
    if not sep:
        return body
    if len(ident) > keep > 0:
        ident = _ELLIPSIS + ident[-keep:]
    return f"{kind}:{ident}"