"""Typed records for the ads API payloads used by the reporting code."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    return int(value) if value else 0


def _float(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    return float(value) if value else 0.0


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _parse_amount(amount: str) -> float:
    try:
        return float(amount)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class Money:
    """A currency amount as the API sends it: a decimal string plus a code."""

    amount: str = ""
    currency_code: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Money":
        return cls(amount=_str(data, "amount"), currency_code=_str(data, "currencyCode"))

    def to_dict(self) -> dict[str, Any]:
        return {"currencyCode": self.currency_code, "amount": self.amount}


@dataclass
class DateRange:
    """A schedule window in epoch milliseconds; zero means unbounded."""

    start: int = 0
    end: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DateRange":
        return cls(start=_int(data, "start"), end=_int(data, "end"))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.start:
            out["start"] = self.start
        if self.end:
            out["end"] = self.end
        return out


@dataclass
class AnalyticsRow:
    """One element of an analytics response."""

    pivot: str = ""
    pivot_value: str = ""
    pivot_values: list[str] = field(default_factory=list)
    date_range: dict[str, Any] | None = None
    impressions: int = 0
    clicks: int = 0
    cost_in_usd: str = ""
    conversions: int = 0
    one_click_leads: int = 0
    member_reach: int = 0
    audience_penetration: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalyticsRow":
        date_range = data.get("dateRange")
        return cls(
            pivot=_str(data, "pivot"),
            pivot_value=_str(data, "pivotValue"),
            pivot_values=[str(v) for v in data.get("pivotValues") or []],
            date_range=dict(date_range) if date_range else None,
            impressions=_int(data, "impressions"),
            clicks=_int(data, "clicks"),
            cost_in_usd=_str(data, "costInUsd"),
            conversions=_int(data, "externalWebsiteConversions"),
            one_click_leads=_int(data, "oneClickLeads"),
            member_reach=_int(data, "approximateMemberReach"),
            audience_penetration=_float(data, "audiencePenetration"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.date_range:
            out["dateRange"] = self.date_range
        if self.pivot:
            out["pivot"] = self.pivot
        if self.pivot_value:
            out["pivotValue"] = self.pivot_value
        if self.pivot_values:
            out["pivotValues"] = list(self.pivot_values)
        out["impressions"] = self.impressions
        out["clicks"] = self.clicks
        if self.cost_in_usd:
            out["costInUsd"] = self.cost_in_usd
        out["externalWebsiteConversions"] = self.conversions
        out["oneClickLeads"] = self.one_click_leads
        if self.member_reach:
            out["approximateMemberReach"] = self.member_reach
        if self.audience_penetration:
            out["audiencePenetration"] = self.audience_penetration
        return out

    @property
    def leads(self) -> int:
        """One-click leads plus website conversions."""
        return self.one_click_leads + self.conversions

    @property
    def cost(self) -> float:
        """Spend in USD as a number (0 when missing or malformed)."""
        return _parse_amount(self.cost_in_usd)

    def derived_metrics(self) -> dict[str, float]:
        """CTR, CPC, CPM and CPL; a metric with a zero denominator is 0."""
        cost = self.cost
        leads = self.leads
        return {
            "ctr": self.clicks / self.impressions if self.impressions else 0.0,
            "cpc": cost / self.clicks if self.clicks else 0.0,
            "cpm": cost / self.impressions * 1000 if self.impressions else 0.0,
            "cpl": cost / leads if leads else 0.0,
        }


@dataclass
class TargetingCriteria:
    """Targeting rules: a list of AND-ed clauses, each mapping facet to values."""

    include: list[dict[str, list[str]]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TargetingCriteria":
        include = data.get("include") or {}
        clauses = [
            {facet: [str(v) for v in values or []] for facet, values in (clause.get("or") or {}).items()}
            for clause in include.get("and") or []
        ]
        return cls(include=clauses)

    def included_facets(self) -> dict[str, list[str]]:
        """Merge every included clause into one facet-to-values mapping."""
        merged: dict[str, list[str]] = {}
        for clause in self.include:
            for facet, values in clause.items():
                merged.setdefault(facet, []).extend(values)
        return merged


@dataclass
class Campaign:
    """An ad campaign."""

    id: int = 0
    name: str = ""
    status: str = ""
    account: str = ""
    campaign_group: str = ""
    type: str = ""
    objective_type: str = ""
    cost_type: str = ""
    daily_budget: Money | None = None
    targeting_criteria: TargetingCriteria | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Campaign":
        budget = data.get("dailyBudget")
        targeting = data.get("targetingCriteria")
        return cls(
            id=_int(data, "id"),
            name=_str(data, "name"),
            status=_str(data, "status"),
            account=_str(data, "account"),
            campaign_group=_str(data, "campaignGroup"),
            type=_str(data, "type"),
            objective_type=_str(data, "objectiveType"),
            cost_type=_str(data, "costType"),
            daily_budget=Money.from_dict(budget) if budget else None,
            targeting_criteria=TargetingCriteria.from_dict(targeting) if targeting else None,
        )


@dataclass
class CampaignGroup:
    """A campaign group."""

    id: int = 0
    name: str = ""
    status: str = ""
    account: str = ""
    total_budget: Money | None = None
    run_schedule: DateRange | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CampaignGroup":
        budget = data.get("totalBudget")
        schedule = data.get("runSchedule")
        return cls(
            id=_int(data, "id"),
            name=_str(data, "name"),
            status=_str(data, "status"),
            account=_str(data, "account"),
            total_budget=Money.from_dict(budget) if budget else None,
            run_schedule=DateRange.from_dict(schedule) if schedule else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name, "status": self.status}
        if self.account:
            out["account"] = self.account
        if self.total_budget is not None:
            out["totalBudget"] = self.total_budget.to_dict()
        if self.run_schedule is not None:
            out["runSchedule"] = self.run_schedule.to_dict()
        return out


@dataclass
class Conversion:
    """A conversion rule."""

    id: int = 0
    name: str = ""
    enabled: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Conversion":
        return cls(id=_int(data, "id"), name=_str(data, "name"), enabled=bool(data.get("enabled", False)))


@dataclass
class Audience:
    """A matched or lookalike audience segment."""

    id: int = 0
    name: str = ""
    type: str = ""
    status: str = ""
    audience_count: int = 0
    matched_count: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Audience":
        return cls(
            id=_int(data, "id"),
            name=_str(data, "name"),
            type=_str(data, "type"),
            status=_str(data, "status"),
            audience_count=_int(data, "audienceCount"),
            matched_count=_int(data, "matchedCount"),
        )