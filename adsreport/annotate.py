"""Outlier tagging for analytics rows (best/worst CPL and CTR, low CTR, high CPL)."""

from __future__ import annotations

from enum import Enum
from statistics import median as _median
from typing import Iterable, Sequence

from .models import AnalyticsRow


class Flag(str, Enum):
    """Tags attached to analytics rows; the value is the wire name."""

    BEST_CPL = "best_cpl"
    WORST_CPL = "worst_cpl"
    BEST_CTR = "best_ctr"
    WORST_CTR = "worst_ctr"
    LOW_CTR = "low_ctr"
    HIGH_CPL = "high_cpl"

    def __str__(self) -> str:
        return self.value


_LABELS = {
    Flag.BEST_CPL: "🟢 best CPL",
    Flag.WORST_CPL: "🔴 worst CPL",
    Flag.BEST_CTR: "🟢 best CTR",
    Flag.WORST_CTR: "🔴 worst CTR",
    Flag.LOW_CTR: "⚠️ low CTR",
    Flag.HIGH_CPL: "⚠️ high CPL",
}

_LOW_CTR_FACTOR = 0.7
_HIGH_CPL_FACTOR = 2.5


def median(values: Iterable[float]) -> float:
    """Median of the values, or 0 when there are none."""
    data = list(values)
    return _median(data) if data else 0.0


def _extremes(candidates: list[tuple[int, float]]) -> tuple[int | None, int | None]:
    """Index of the first highest and first lowest value."""
    if not candidates:
        return None, None
    high = low = candidates[0]
    for item in candidates[1:]:
        if item[1] > high[1]:
            high = item
        if item[1] < low[1]:
            low = item
    return high[0], low[0]


def annotations_for(rows: Sequence[AnalyticsRow]) -> list[list[Flag]]:
    """Return one list of flags per row, in row order."""
    if not rows:
        return []
    metrics = [row.derived_metrics() for row in rows]
    with_impr = [(i, m["ctr"]) for i, (row, m) in enumerate(zip(rows, metrics)) if row.impressions > 0]
    with_leads = [(i, m["cpl"]) for i, (row, m) in enumerate(zip(rows, metrics)) if row.leads > 0]

    median_ctr = median(v for _, v in with_impr)
    median_cpl = median(v for _, v in with_leads)
    best_ctr, worst_ctr = _extremes(with_impr)
    worst_cpl, best_cpl = _extremes(with_leads)
    several = len(rows) > 1

    out: list[list[Flag]] = []
    for i, (row, m) in enumerate(zip(rows, metrics)):
        tags: list[Flag] = []
        if several and i == best_cpl:
            tags.append(Flag.BEST_CPL)
        if several and i == worst_cpl and best_cpl != worst_cpl:
            tags.append(Flag.WORST_CPL)
        if several and i == best_ctr:
            tags.append(Flag.BEST_CTR)
        if several and i == worst_ctr and best_ctr != worst_ctr:
            tags.append(Flag.WORST_CTR)
        if row.impressions > 0 and median_ctr > 0 and m["ctr"] < median_ctr * _LOW_CTR_FACTOR:
            tags.append(Flag.LOW_CTR)
        if row.leads > 0 and median_cpl > 0 and m["cpl"] > median_cpl * _HIGH_CPL_FACTOR:
            tags.append(Flag.HIGH_CPL)
        out.append(tags)
    return out


def format_row_flags(tags: Iterable[Flag | str]) -> str:
    """Render tags as a short, comma separated, emoji-decorated string."""
    parts = []
    for tag in tags:
        try:
            parts.append(_LABELS[Flag(tag)])
        except ValueError:
            continue
    return ", ".join(parts)