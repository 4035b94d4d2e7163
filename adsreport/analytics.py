"""Analytics queries: argument checks, row shaping and terminal/JSON rendering."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Sequence

from .annotate import Flag, format_row_flags
from .formatting import (
    format_int,
    format_money,
    format_money_string,
    format_percent,
    truncate,
    truncate_urn,
)
from .models import AnalyticsRow

DEFAULT_WINDOW_DAYS = 30
REACH_MAX_DAYS = 92

DEMOGRAPHIC_PIVOTS = frozenset(
    {
        "JOB_FUNCTION",
        "INDUSTRY",
        "SENIORITY",
        "COMPANY_SIZE",
        "COUNTRY",
        "REGION",
        "MEMBER_JOB_FUNCTION",
        "MEMBER_SENIORITY",
        "MEMBER_INDUSTRY",
        "MEMBER_COMPANY_SIZE",
        "MEMBER_JOB_TITLE",
        "MEMBER_COMPANY",
        "MEMBER_COUNTRY",
        "MEMBER_COUNTRY_V2",
        "MEMBER_REGION",
        "MEMBER_REGION_V2",
    }
)

PIVOT_ALIASES = {
    "JOB_FUNCTION": "MEMBER_JOB_FUNCTION",
    "SENIORITY": "MEMBER_SENIORITY",
    "INDUSTRY": "MEMBER_INDUSTRY",
    "COMPANY_SIZE": "MEMBER_COMPANY_SIZE",
    "COUNTRY": "MEMBER_COUNTRY_V2",
    "REGION": "MEMBER_REGION_V2",
    "JOB_TITLE": "MEMBER_JOB_TITLE",
    "COMPANY": "MEMBER_COMPANY",
}

GRANULARITIES = ("ALL", "DAILY", "MONTHLY")
COMPARE_METRICS = ("spend", "impressions", "clicks", "ctr", "cpc")

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

_HEADER_DERIVED = "PIVOT                          IMPR    CLICKS  CTR     CPC      CPM        SPEND      LEADS  CPL"
_HEADER_PLAIN = "PIVOT                          IMPR    CLICKS    SPEND      CONV  LEADS"


def canonicalize_pivot(pivot: str) -> str:
    """Map a short demographic pivot to its MEMBER_ form; others pass through."""
    return PIVOT_ALIASES.get(pivot, pivot)


def validate_pivot(pivot: str) -> str:
    """Upper-case and check a demographic pivot, returning the canonical name."""
    upper = (pivot or "").upper()
    if upper not in DEMOGRAPHIC_PIVOTS:
        raise ValueError(
            f"invalid --pivot {upper!r} (want JOB_FUNCTION, INDUSTRY, SENIORITY, "
            "COMPANY_SIZE, COUNTRY, REGION, or MEMBER_* variants)"
        )
    return canonicalize_pivot(upper)


def _parse_date(value: str, flag: str) -> date:
    if _DATE_RE.fullmatch(value):
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            pass
    raise ValueError(f"invalid date: --{flag} {value!r} (want YYYY-MM-DD)")


def parse_date_range(
    start: str | None = None, end: str | None = None, today: date | None = None
) -> tuple[date, date]:
    """Resolve --start/--end; end defaults to today, start to 30 days before end."""
    if today is None:
        today = datetime.now(timezone.utc).date()
    end_date = _parse_date(end, "end") if end else today
    start_date = _parse_date(start, "start") if start else end_date - timedelta(days=DEFAULT_WINDOW_DAYS)
    if start_date > end_date:
        raise ValueError("invalid date range: --start is after --end")
    return start_date, end_date


def parse_granularity(value: str | None) -> str:
    """Normalise --granularity to ALL, DAILY or MONTHLY (empty means ALL)."""
    if not value:
        return "ALL"
    upper = value.upper()
    if upper not in GRANULARITIES:
        raise ValueError(f"invalid --granularity {value!r} (want DAILY, MONTHLY, or ALL)")
    return upper


def validate_reach_range(start: date, end: date) -> None:
    """Reject reach windows longer than the API allows."""
    if end - start > timedelta(days=REACH_MAX_DAYS):
        raise ValueError(f"reach queries are limited to {REACH_MAX_DAYS} days")


def pivot_display(row: AnalyticsRow) -> str:
    """Best available pivot identifier: first pivotValues entry, else pivotValue."""
    if row.pivot_values:
        return row.pivot_values[0]
    return row.pivot_value


def limit_rows(rows: Sequence[AnalyticsRow], limit: int | None) -> list[AnalyticsRow]:
    """Keep at most limit rows; a limit of 0 or None keeps them all."""
    if limit and limit > 0:
        return list(rows[:limit])
    return list(rows)


def _row_line(row: AnalyticsRow, derived: bool) -> str:
    pivot = truncate(truncate_urn(pivot_display(row), 4), 30)
    impr = format_int(row.impressions)
    clicks = format_int(row.clicks)
    spend = format_money_string(row.cost_in_usd)
    if derived:
        d = row.derived_metrics()
        return (
            f"{pivot:<30} {impr:>7} {clicks:>7} {format_percent(d['ctr']):>7} "
            f"{format_money(d['cpc']):>8} {format_money(d['cpm']):>10} {spend:>10} "
            f"{row.leads:6d} {format_money(d['cpl']):>9}"
        )
    return f"{pivot:<30} {impr:>7} {clicks:>7} {spend:>10} {row.conversions:5d} {row.one_click_leads:6d}"


def format_analytics_rows(
    rows: Sequence[AnalyticsRow],
    derived: bool = True,
    flags: Sequence[Sequence[Flag | str]] | None = None,
) -> str:
    """Render rows as a terminal table; a FLAG column is added when flags is given."""
    annotate = flags is not None
    header = _HEADER_DERIVED if derived else _HEADER_PLAIN
    if annotate:
        header += "        FLAG" if derived else "  FLAG"
    lines = [header]
    for i, row in enumerate(rows):
        line = _row_line(row, derived)
        if annotate:
            tag = format_row_flags(flags[i]) if i < len(flags) else ""
            line += f"  {tag}"
        lines.append(line)
    return "\n".join(lines) + "\n"


def analytics_json(
    rows: Sequence[AnalyticsRow], derived: bool = False, annotate: bool = False
) -> list[dict[str, Any]]:
    """JSON-ready rows, optionally with a _derived metrics map and _flags list."""
    from .annotate import annotations_for

    out = []
    flags = annotations_for(rows) if annotate else []
    for i, row in enumerate(rows):
        item = row.to_dict()
        if derived:
            item["_derived"] = row.derived_metrics()
        if annotate and i < len(flags):
            item["_flags"] = [str(tag) for tag in flags[i]]
        out.append(item)
    return out


def format_reach_rows(rows: Sequence[AnalyticsRow]) -> str:
    """Render reach rows: impressions, approximate member reach and penetration."""
    lines = ["IMPR    MEMBER_REACH  AUDIENCE_PEN"]
    lines.extend(
        f"{row.impressions:7d} {row.member_reach:12d} {row.audience_penetration:12.6f}" for row in rows
    )
    return "\n".join(lines) + "\n"


def normalize_metric(metric: str | None) -> str:
    """Lower-case a compare metric, defaulting to spend, and check it."""
    value = (metric or "").lower() or "spend"
    if value not in COMPARE_METRICS:
        raise ValueError(f"invalid --metric {value!r} (want spend, impressions, clicks, ctr, or cpc)")
    return value


def resolve_compare_targets(
    a: str | None = None, b: str | None = None, group_a: str | None = None, group_b: str | None = None
) -> tuple[str, str, str]:
    """Work out what to compare: ("campaign" | "group", first id, second id)."""
    campaign_mode = bool(a or b)
    group_mode = bool(group_a or group_b)
    if campaign_mode and group_mode:
        raise ValueError("--a/--b and --group-a/--group-b are mutually exclusive")
    if not campaign_mode and not group_mode:
        raise ValueError(
            "provide --a and --b (campaigns) or --group-a and --group-b (campaign groups)"
        )
    if campaign_mode:
        if not (a and b):
            raise ValueError("--a and --b campaign ids required")
        return "campaign", a, b
    if not (group_a and group_b):
        raise ValueError("--group-a and --group-b campaign group ids required")
    return "group", group_a, group_b


def first_row(rows: Sequence[AnalyticsRow]) -> AnalyticsRow:
    """The first row, or an empty row when there are none."""
    return rows[0] if rows else AnalyticsRow()


def metric_value(row: AnalyticsRow, metric: str) -> float:
    """Numeric value of a compare metric for a row (0 for unknown metrics)."""
    if metric == "impressions":
        return float(row.impressions)
    if metric == "clicks":
        return float(row.clicks)
    if metric == "spend":
        return row.cost
    if metric == "ctr":
        return row.clicks / row.impressions if row.impressions else 0.0
    if metric == "cpc":
        return row.cost / row.clicks if row.clicks else 0.0
    return 0.0


def format_compare(
    a_id: str, b_id: str, rows_a: Sequence[AnalyticsRow], rows_b: Sequence[AnalyticsRow], metric: str
) -> str:
    """Side-by-side comparison of two entities with the relative change of a metric."""
    a = first_row(rows_a)
    b = first_row(rows_b)
    av = metric_value(a, metric)
    bv = metric_value(b, metric)
    delta = (bv - av) / av * 100 if av != 0 else 0.0
    label = f"metric ({metric}):"
    return (
        f"                       A={a_id}        B={b_id}\n"
        f"Impressions:           {format_int(a.impressions):>12}  {format_int(b.impressions):>12}\n"
        f"Clicks:                {format_int(a.clicks):>12}  {format_int(b.clicks):>12}\n"
        f"Cost (USD):            {format_money_string(a.cost_in_usd):>12}  "
        f"{format_money_string(b.cost_in_usd):>12}\n"
        f"{label:<22} {av:12.2f}  {bv:12.2f}  Δ={delta:+.0f}%\n"
    )