"""Account health check: turns campaigns, analytics, conversions and audiences into findings."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from .analytics import pivot_display
from .annotate import median
from .audiences import AUDIENCE_MATCHING_FACET
from .formatting import format_int, format_money, format_percent
from .models import AnalyticsRow, Audience, Campaign, Conversion

_ACTIVE = "ACTIVE"
_ARCHIVED = "ARCHIVED"

_BROKEN_ATTRIBUTION_SPEND = 100.0
_BURNING_SPEND = 500.0
_LOW_CTR_MIN_IMPRESSIONS = 5000
_LOW_CTR_THRESHOLD = 0.003
_CPL_OUTLIER_FACTOR = 3.0
_LEARNING_BUDGET = 30.0
_TOP_N = 3
_PACING_DAYS = 30


class Severity(str, Enum):
    """How urgent a finding is."""

    CRITICAL = "critical"
    IMPORTANT = "important"
    INFO = "info"

    def __str__(self) -> str:
        return self.value


_RANK = {Severity.CRITICAL: 0, Severity.IMPORTANT: 1, Severity.INFO: 2}


@dataclass
class Finding:
    """One entry of the audit report."""

    severity: Severity
    category: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"severity": str(self.severity), "category": self.category, "message": self.message}


@dataclass
class AuditReport:
    """The audited account, the period covered and the findings."""

    account_id: int
    account_name: str
    period_start: date
    period_end: date
    findings: list[Finding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "account": {"id": self.account_id, "name": self.account_name},
            "periodStart": self.period_start.isoformat(),
            "periodEnd": self.period_end.isoformat(),
            "findings": [f.to_dict() for f in self.findings],
        }


def campaign_urn(campaign_id: int) -> str:
    """Canonical sponsoredCampaign URN for an id."""
    return f"urn:li:sponsoredCampaign:{campaign_id}"


def severity_rank(severity: Severity | str) -> int:
    """Sort key: critical before important before info; unknown values last."""
    try:
        return _RANK[Severity(severity)]
    except ValueError:
        return len(_RANK)


def _amount(text: str) -> float | None:
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


def top_campaigns_by_metric(
    campaigns: Iterable[Campaign], by_urn: Mapping[str, float], n: int, desc: bool = True
) -> list[tuple[str, float]]:
    """Up to n (name, value) pairs with a positive metric, ranked by value."""
    rows = [
        (c.name, value)
        for c in campaigns
        if (value := by_urn.get(campaign_urn(c.id), 0.0)) > 0
    ]
    rows.sort(key=lambda item: item[1], reverse=desc)
    return rows[:n]


def top_campaigns_by_leads(
    campaigns: Iterable[Campaign],
    leads_by_urn: Mapping[str, int],
    conv_by_urn: Mapping[str, int],
    n: int,
) -> list[tuple[str, float]]:
    """Up to n (name, total) pairs ranked by one-click leads plus conversions."""
    rows = []
    for c in campaigns:
        urn = campaign_urn(c.id)
        total = leads_by_urn.get(urn, 0) + conv_by_urn.get(urn, 0)
        if total > 0:
            rows.append((c.name, float(total)))
    rows.sort(key=lambda item: item[1], reverse=True)
    return rows[:n]


def compute_audit_findings(
    campaigns: Sequence[Campaign] | None,
    analytics: Sequence[AnalyticsRow] | None,
    conversions: Sequence[Conversion] | None,
    audiences: Sequence[Audience] | None,
    analytics_error: BaseException | None = None,
    conversions_error: BaseException | None = None,
    audiences_error: BaseException | None = None,
) -> list[Finding]:
    """Run every check and return findings ordered by severity (stable within each).

    A data source that failed to load (its error is set) has its checks skipped.
    """
    campaigns = list(campaigns or [])
    out: list[Finding] = []

    spend: dict[str, float] = defaultdict(float)
    conv: dict[str, int] = defaultdict(int)
    leads: dict[str, int] = defaultdict(int)
    impressions: dict[str, int] = defaultdict(int)
    clicks: dict[str, int] = defaultdict(int)
    for row in analytics or []:
        urn = pivot_display(row)
        spend[urn] += row.cost
        conv[urn] += row.conversions
        leads[urn] += row.one_click_leads
        impressions[urn] += row.impressions
        clicks[urn] += row.clicks

    if conversions_error is None:
        out.extend(
            Finding(Severity.CRITICAL, "conversion", f"Conversion rule '{c.name}' ({c.id}) is disabled")
            for c in conversions or []
            if not c.enabled
        )

    active = [c for c in campaigns if c.status == _ACTIVE]
    analytics_ok = analytics_error is None

    if analytics_ok:
        broken = 0
        burning: list[str] = []
        for c in active:
            urn = campaign_urn(c.id)
            no_results = conv[urn] == 0 and leads[urn] == 0
            if spend[urn] > _BROKEN_ATTRIBUTION_SPEND and no_results:
                broken += 1
            if spend[urn] > _BURNING_SPEND and no_results:
                burning.append(
                    f"'{c.name}' spent {format_money(spend[urn])} with 0 leads/conversions in last 30d"
                )
        if broken > 0 and broken == len(active):
            out.append(
                Finding(
                    Severity.CRITICAL,
                    "tracking",
                    f"{broken} of {len(active)} active campaigns report 0 conversions and 0 leads"
                    " — attribution may be broken",
                )
            )
        out.extend(Finding(Severity.CRITICAL, "spend", message) for message in burning)

        cpls = []
        for c in active:
            urn = campaign_urn(c.id)
            total = leads[urn] + conv[urn]
            if total > 0:
                cpls.append(spend[urn] / total)
        median_cpl = median(cpls)
        for c in active:
            urn = campaign_urn(c.id)
            impr = impressions[urn]
            if impr > _LOW_CTR_MIN_IMPRESSIONS:
                ctr = clicks[urn] / impr
                if ctr < _LOW_CTR_THRESHOLD:
                    out.append(
                        Finding(
                            Severity.IMPORTANT,
                            "creative",
                            f"'{c.name}' CTR {format_percent(ctr)} on {format_int(impr)} impressions"
                            " — creative fatigue or audience mismatch",
                        )
                    )
            total = leads[urn] + conv[urn]
            if total > 0 and median_cpl > 0:
                cpl = spend[urn] / total
                if cpl > _CPL_OUTLIER_FACTOR * median_cpl:
                    out.append(
                        Finding(
                            Severity.IMPORTANT,
                            "spend",
                            f"'{c.name}' CPL {format_money(cpl)} — outlier"
                            f" (account median {format_money(median_cpl)})",
                        )
                    )

    budgets: list[float] = []
    for c in active:
        if c.daily_budget is None:
            continue
        value = _amount(c.daily_budget.amount)
        if value is None:
            continue
        budgets.append(value)
        if value < _LEARNING_BUDGET:
            out.append(
                Finding(
                    Severity.IMPORTANT,
                    "budget",
                    f"'{c.name}' daily budget {format_money(value)} — below $30 learning threshold",
                )
            )

    used_segments = {
        segment
        for c in active
        if c.targeting_criteria is not None
        for segment in c.targeting_criteria.included_facets().get(AUDIENCE_MATCHING_FACET, [])
    }
    if audiences_error is None:
        out.extend(
            Finding(
                Severity.IMPORTANT,
                "audience",
                f"Matched audience '{a.name}' ({a.matched_count} members) is defined but unused"
                " by any active campaign",
            )
            for a in audiences or []
            if f"urn:li:adSegment:{a.id}" not in used_segments and a.status != _ARCHIVED
        )

    if analytics_ok and active:
        top_spend = top_campaigns_by_metric(active, spend, _TOP_N, True)
        if top_spend:
            parts = ", ".join(f"{name} ({format_money(value)})" for name, value in top_spend)
            out.append(Finding(Severity.INFO, "top", "Top by spend: " + parts))
        top_leads = top_campaigns_by_leads(active, leads, conv, _TOP_N)
        if top_leads:
            parts = ", ".join(f"{name} ({int(value)})" for name, value in top_leads)
            out.append(Finding(Severity.INFO, "top", "Top by leads: " + parts))
        monthly_cap = sum(budgets) * _PACING_DAYS
        if monthly_cap > 0:
            total_spend = sum(spend.values())
            pct = total_spend / monthly_cap * 100
            out.append(
                Finding(
                    Severity.INFO,
                    "pacing",
                    f"Budget utilization: {format_money(total_spend)} spend / "
                    f"{format_money(monthly_cap)} cap ({pct:.0f}%)",
                )
            )

    out.sort(key=lambda f: severity_rank(f.severity))
    return out


_GROUPS = (
    ("CRITICAL", Severity.CRITICAL, "🔴"),
    ("IMPORTANT", Severity.IMPORTANT, "🟡"),
    ("INFO", Severity.INFO, "🟢"),
)


def format_audit_report(report: AuditReport) -> str:
    """Render the report as a terminal checklist grouped by severity."""
    parts = [
        f"Account audit: {report.account_name} ({report.account_id})\n",
        f"Period: {report.period_start.isoformat()} — {report.period_end.isoformat()}\n\n",
    ]
    grouped: dict[str, list[Finding]] = defaultdict(list)
    for finding in report.findings:
        grouped[str(finding.severity)].append(finding)
    for label, severity, icon in _GROUPS:
        items = grouped.get(str(severity))
        if not items:
            continue
        parts.append(f"{icon} {label} ({len(items)})\n")
        parts.extend(f"  • {f.message}\n" for f in items)
        parts.append("\n")
    if not report.findings:
        parts.append("✓ No issues detected.\n")
    return "".join(parts)