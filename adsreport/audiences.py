"""Matched-audience reporting: which segments campaigns use and what they spend."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from .analytics import pivot_display
from .formatting import format_money, truncate, truncate_urn
from .models import AnalyticsRow, Audience, Campaign

AUDIENCE_MATCHING_FACET = "urn:li:adTargetingFacet:audienceMatchingSegments"
DEFAULT_STATUS = "ACTIVE"

_CAMPAIGN_PREFIX = "urn:li:sponsoredCampaign:"
_INT_RE = re.compile(r"[+-]?\d+")


@dataclass
class SegmentCampaign:
    """A campaign that references a segment."""

    id: int
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class SegmentUse:
    """Usage of one matched-audience segment across campaigns."""

    segment: str
    campaigns: list[SegmentCampaign] = field(default_factory=list)
    name: str = ""
    spend: float = 0.0
    percent_of_account: float = 0.0

    @property
    def campaign_count(self) -> int:
        return len(self.campaigns)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"segment": self.segment}
        if self.name:
            out["name"] = self.name
        out["campaignCount"] = self.campaign_count
        out["campaigns"] = [ref.to_dict() for ref in self.campaigns]
        if self.spend:
            out["spend"] = self.spend
        if self.percent_of_account:
            out["percentOfAccount"] = self.percent_of_account
        return out


def aggregate_segment_usage(campaigns: Iterable[Campaign], status: str = DEFAULT_STATUS) -> list[SegmentUse]:
    """Group campaigns by the matched segments they target.

    Only campaigns whose status matches (case-insensitively; an empty status
    matches all) are counted; campaigns without targeting are skipped. The
    result is ordered by descending campaign count, then by segment URN.
    """
    wanted = (status or "").casefold()
    by_segment: dict[str, list[SegmentCampaign]] = {}
    for campaign in campaigns:
        if wanted and campaign.status.casefold() != wanted:
            continue
        if campaign.targeting_criteria is None:
            continue
        segments = campaign.targeting_criteria.included_facets().get(AUDIENCE_MATCHING_FACET, [])
        for segment in dict.fromkeys(segments):
            by_segment.setdefault(segment, []).append(SegmentCampaign(campaign.id, campaign.name))
    usage = [SegmentUse(segment=seg, campaigns=refs) for seg, refs in by_segment.items()]
    usage.sort(key=lambda u: (-u.campaign_count, u.segment))
    return usage


def _campaign_id(urn: str) -> int | None:
    if not urn.startswith(_CAMPAIGN_PREFIX):
        return None
    ident = urn[len(_CAMPAIGN_PREFIX):]
    return int(ident) if _INT_RE.fullmatch(ident) else None


def enrich_with_spend(usage: list[SegmentUse], rows: Iterable[AnalyticsRow]) -> float:
    """Fill in spend and share of account spend per segment; return account spend.

    A campaign's spend counts towards every segment it uses, so the shares
    need not add up to 100%. The list is re-ordered in place by descending
    spend, keeping the previous order among equal values.
    """
    spend_by_campaign: dict[int, float] = {}
    account = 0.0
    for row in rows:
        cost = row.cost
        account += cost
        campaign_id = _campaign_id(pivot_display(row))
        if campaign_id is not None:
            spend_by_campaign[campaign_id] = spend_by_campaign.get(campaign_id, 0.0) + cost
    for use in usage:
        use.spend = sum(spend_by_campaign.get(ref.id, 0.0) for ref in use.campaigns)
        if account > 0:
            use.percent_of_account = use.spend / account * 100
    usage.sort(key=lambda u: -u.spend)
    return account


def segment_usage_json(usage: Sequence[SegmentUse], account_spend: float | None = None) -> Any:
    """JSON-ready usage: a plain list, or an envelope with accountSpend when given."""
    segments = [use.to_dict() for use in usage]
    if account_spend is None:
        return segments
    return {"accountSpend": account_spend, "segments": segments}


def _empty_message(status: str, account_id: str) -> str:
    return f"No matched-audience segments referenced by {status} campaigns in account {account_id}.\n"


def _campaign_names(use: SegmentUse) -> str:
    return ", ".join(ref.name for ref in use.campaigns)


def format_segment_usage(usage: Sequence[SegmentUse], status: str, account_id: str) -> str:
    """Terminal table of segments and the campaigns that use them."""
    if not usage:
        return _empty_message(status, account_id)
    lines = ["SEGMENT                                  CAMPAIGNS  USED BY"]
    lines.extend(
        f"{truncate(use.segment, 40):<40} {use.campaign_count:9d}  {_campaign_names(use)}" for use in usage
    )
    return "\n".join(lines) + "\n"


def format_segment_usage_with_spend(
    usage: Sequence[SegmentUse], account_spend: float, status: str, account_id: str
) -> str:
    """Terminal table of segments with their spend and share of account spend."""
    if not usage:
        return _empty_message(status, account_id)
    lines = [
        f"Account 30d spend: {format_money(account_spend)}",
        "SEGMENT                                  CAMPAIGNS  SPEND       % ACCOUNT  USED BY",
    ]
    for use in usage:
        percent = f"{use.percent_of_account:.0f}%"
        lines.append(
            f"{truncate(truncate_urn(use.segment, 4), 40):<40} {use.campaign_count:9d}  "
            f"{format_money(use.spend):>10}  {percent:>8}  {_campaign_names(use)}"
        )
    return "\n".join(lines) + "\n"


def format_audiences(audiences: Sequence[Audience], account_id: str) -> str:
    """Terminal table of the account's matched and lookalike audiences."""
    if not audiences:
        return f"No matched or lookalike audiences for account {account_id}.\n"
    lines = ["ID         NAME                TYPE         STATUS    AUDIENCE  MATCHED"]
    lines.extend(
        f"{a.id:<10d} {truncate(a.name, 19):<19} {truncate(a.type, 12):<12} {a.status:<9} "
        f"{a.audience_count:8d} {a.matched_count:8d}"
        for a in audiences
    )
    return "\n".join(lines) + "\n"