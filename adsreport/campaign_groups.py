"""Campaign group listing, creation, partial updates and deletion planning."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from .formatting import truncate
from .models import CampaignGroup, DateRange, Money

_ACCOUNT_URN_PREFIX = "urn:li:sponsoredAccount:"
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_DRAFT = "DRAFT"
_PENDING_DELETION = "PENDING_DELETION"


def _parse_day_millis(value: str, flag: str) -> int:
    if _DATE_RE.fullmatch(value):
        try:
            day = datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        except ValueError:
            pass
        else:
            return int(day.timestamp()) * 1000
    raise ValueError(f"invalid date: --{flag} {value!r} (want YYYY-MM-DD)")


def _millis_to_date(millis: int) -> str:
    if not millis:
        return ""
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).strftime("%Y-%m-%d")


def _schedule_bounds(schedule: DateRange | None) -> tuple[str, str]:
    if schedule is None:
        return "", ""
    return _millis_to_date(schedule.start), _millis_to_date(schedule.end)


def _money_text(money: Money | None) -> str:
    if money is None:
        return ""
    return f"{money.amount} {money.currency_code}".strip()


def _groups_path(account_id: str) -> str:
    return f"/adAccounts/{account_id}/adCampaignGroups"


def parse_date_range_millis(start: str | None = None, end: str | None = None) -> DateRange:
    """Turn YYYY-MM-DD bounds into a schedule in epoch milliseconds; either may be empty."""
    schedule = DateRange()
    if start:
        schedule.start = _parse_day_millis(start, "start")
    if end:
        schedule.end = _parse_day_millis(end, "end")
    return schedule


def unique_account_urns(groups: Iterable[CampaignGroup]) -> list[str]:
    """Distinct non-empty account URNs of the groups, in first-seen order."""
    return list(dict.fromkeys(g.account for g in groups if g.account))


def filter_groups(
    groups: Iterable[CampaignGroup], status: str | None = None, limit: int | None = None
) -> list[CampaignGroup]:
    """Keep groups whose status matches (case-insensitively), then apply the limit."""
    wanted = (status or "").casefold()
    kept = [g for g in groups if not wanted or g.status.casefold() == wanted]
    if limit and limit > 0:
        kept = kept[:limit]
    return kept


def build_create_input(
    account_id: str,
    name: str,
    total_budget: int,
    currency: str = "USD",
    status: str = _DRAFT,
    start: str | None = None,
    end: str | None = None,
) -> dict[str, Any]:
    """Request body for creating a campaign group; status defaults to DRAFT."""
    payload: dict[str, Any] = {
        "account": _ACCOUNT_URN_PREFIX + str(account_id),
        "name": name,
        "status": status or _DRAFT,
        "totalBudget": Money(amount=str(total_budget), currency_code=currency).to_dict(),
    }
    if start or end:
        payload["runSchedule"] = parse_date_range_millis(start, end).to_dict()
    return payload


@dataclass(frozen=True)
class FieldDiff:
    """A field whose value changes from old to new."""

    name: str
    old: str
    new: str


@dataclass
class UpdatePlan:
    """The partial update computed for a campaign group, with its visible diff."""

    account_id: str
    group_id: str
    group_name: str
    patch: dict[str, Any] = field(default_factory=dict)
    diffs: list[FieldDiff] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.diffs)

    @property
    def header(self) -> str:
        return f"Updating campaign group {self.group_id} ({self.group_name})"

    @property
    def summary(self) -> str:
        return f"POST {_groups_path(self.account_id)}/{self.group_id}"

    def payload(self) -> dict[str, Any]:
        """Request body of the partial update."""
        return {"patch": {"$set": dict(self.patch)}}


def plan_update(
    account_id: str,
    current: CampaignGroup,
    name: str | None = None,
    status: str | None = None,
    total_budget: int | None = None,
    currency: str = "USD",
    start: str | None = None,
    end: str | None = None,
) -> UpdatePlan:
    """Compare requested values with the current group; only real changes are kept.

    None (or an empty date) means the value was not given.
    """
    plan = UpdatePlan(account_id=str(account_id), group_id=str(current.id), group_name=current.name)

    if status is not None and status != current.status:
        plan.patch["status"] = status
        plan.diffs.append(FieldDiff("status", current.status, status))
    if name is not None and name != current.name:
        plan.patch["name"] = name
        plan.diffs.append(FieldDiff("name", current.name, name))
    if total_budget is not None:
        new_money = Money(amount=str(total_budget), currency_code=currency)
        old_text = _money_text(current.total_budget)
        new_text = _money_text(new_money)
        if old_text != new_text:
            plan.patch["totalBudget"] = new_money.to_dict()
            plan.diffs.append(FieldDiff("totalBudget", old_text, new_text))
    if start or end:
        schedule = parse_date_range_millis(start, end)
        old_start, old_end = _schedule_bounds(current.run_schedule)
        new_start = _millis_to_date(schedule.start)
        new_end = _millis_to_date(schedule.end)
        changed = False
        if start and new_start != old_start:
            plan.diffs.append(FieldDiff("start", old_start, new_start))
            changed = True
        if end and new_end != old_end:
            plan.diffs.append(FieldDiff("end", old_end, new_end))
            changed = True
        if changed:
            plan.patch["runSchedule"] = schedule.to_dict()
    return plan


def format_diff(header: str, diffs: Iterable[FieldDiff]) -> str:
    """Render a header followed by one "field: old  →  new" line per change."""
    lines = [header]
    lines.extend(f"  {d.name}: {d.old}  →  {d.new}" for d in diffs)
    return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class DeletePlan:
    """How a campaign group is removed: hard delete for drafts, otherwise a status change."""

    account_id: str
    group_id: str
    hard: bool

    @property
    def method(self) -> str:
        return "DELETE" if self.hard else "POST"

    @property
    def path(self) -> str:
        return f"{_groups_path(self.account_id)}/{self.group_id}"

    @property
    def summary(self) -> str:
        suffix = "" if self.hard else " (soft-delete)"
        return f"{self.method} {self.path}{suffix}"

    @property
    def payload(self) -> dict[str, Any]:
        if self.hard:
            return {"id": self.group_id}
        return {"patch": {"$set": {"status": _PENDING_DELETION}}}

    @property
    def message(self) -> str:
        if self.hard:
            return f"Deleted campaign group {self.group_id}"
        return (
            f"Campaign group {self.group_id} set to {_PENDING_DELETION} "
            "(non-draft cannot be hard-deleted)"
        )


def plan_delete(account_id: str, group: CampaignGroup) -> DeletePlan:
    """Drafts are deleted outright; any other group is marked PENDING_DELETION."""
    return DeletePlan(account_id=str(account_id), group_id=str(group.id), hard=group.status == _DRAFT)


def format_groups(groups: Sequence[CampaignGroup], account_id: str) -> str:
    """Terminal table of campaign groups, or a hint when there are none."""
    if not groups:
        return (
            f"No campaign groups in account {account_id}.\n"
            "Create one with: linkedin-ads campaign-groups create --name ... --total-budget ...\n"
        )
    lines = ["ID         NAME                STATUS    ACCOUNT"]
    lines.extend(f"{g.id:<10d} {truncate(g.name, 19):<19} {g.status:<9} {g.account}" for g in groups)
    return "\n".join(lines) + "\n"


def format_group(group: CampaignGroup) -> str:
    """Terminal view of a single campaign group."""
    return (
        f"ID:      {group.id}\n"
        f"Name:    {group.name}\n"
        f"Status:  {group.status}\n"
        f"Account: {group.account}\n"
    )