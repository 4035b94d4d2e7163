import json

import pytest

from adsreport.campaign_groups import (
    FieldDiff,
    build_create_input,
    filter_groups,
    format_diff,
    format_group,
    format_groups,
    parse_date_range_millis,
    plan_delete,
    plan_update,
    unique_account_urns,
)
from adsreport.models import CampaignGroup, DateRange, Money

ACCOUNT = "urn:li:sponsoredAccount:777"
JAN_1_2026_MS = 1767225600000


def group(gid, name, status, account=ACCOUNT, **kwargs):
    return CampaignGroup(id=gid, name=name, status=status, account=account, **kwargs)


def test_status_filter_with_limit_keeps_matching():
    groups = [
        group(1, "A1", "ACTIVE"),
        group(2, "P1", "PAUSED"),
        group(3, "A2", "ACTIVE"),
        group(4, "P2", "PAUSED"),
    ]
    got = filter_groups(groups, "ACTIVE", 1)
    assert [g.id for g in got] == [1]
    assert got[0].status == "ACTIVE"


def test_filter_is_case_insensitive_and_no_limit_keeps_all():
    groups = [group(1, "A1", "ACTIVE"), group(2, "P1", "PAUSED"), group(3, "A2", "ACTIVE")]
    assert [g.id for g in filter_groups(groups, "active", 0)] == [1, 3]
    assert [g.id for g in filter_groups(groups, "", None)] == [1, 2, 3]


def test_create_input_defaults_to_draft():
    payload = build_create_input("777", "Q2", 5000, "USD", "", None, None)
    assert payload["name"] == "Q2"
    assert payload["status"] == "DRAFT"
    assert payload["account"] == ACCOUNT
    assert payload["totalBudget"] == {"currencyCode": "USD", "amount": "5000"}
    assert "runSchedule" not in payload


def test_create_input_with_schedule():
    payload = build_create_input("777", "Q2", 10, "EUR", "ACTIVE", "2026-01-01", None)
    assert payload["status"] == "ACTIVE"
    assert payload["runSchedule"] == {"start": JAN_1_2026_MS}


def test_update_only_status_payload():
    current = group(111, "Q1", "PAUSED")
    plan = plan_update("777", current, status="ACTIVE")
    assert json.dumps(plan.payload(), separators=(",", ":")) == '{"patch":{"$set":{"status":"ACTIVE"}}}'
    assert plan.summary == "POST /adAccounts/777/adCampaignGroups/111"


def test_update_shows_diff():
    current = group(12345, "Q2 Brand", "ACTIVE")
    plan = plan_update("777", current, status="PAUSED")
    text = format_diff(plan.header, plan.diffs)
    assert "status: ACTIVE  →  PAUSED" in text
    assert "Updating campaign group 12345" in text
    assert plan.changed is True


def test_update_no_changes():
    current = group(12345, "Q2", "ACTIVE")
    plan = plan_update("777", current, status="ACTIVE")
    assert plan.changed is False
    assert plan.diffs == []
    assert plan.payload() == {"patch": {"$set": {}}}


def test_update_name_change():
    plan = plan_update("777", group(1, "Old", "ACTIVE"), name="New")
    assert plan.diffs == [FieldDiff("name", "Old", "New")]
    assert plan.patch == {"name": "New"}


def test_update_budget_change_and_same_budget():
    current = group(1, "G", "ACTIVE", total_budget=Money(amount="5000", currency_code="USD"))
    same = plan_update("777", current, total_budget=5000, currency="USD")
    assert same.changed is False
    changed = plan_update("777", current, total_budget=6000, currency="USD")
    assert changed.patch["totalBudget"] == {"currencyCode": "USD", "amount": "6000"}
    assert [d.name for d in changed.diffs] == ["totalBudget"]


def test_update_schedule():
    current = group(1, "G", "ACTIVE", run_schedule=DateRange(start=JAN_1_2026_MS))
    assert plan_update("777", current, start="2026-01-01").changed is False
    plan = plan_update("777", current, start="2026-02-01")
    assert plan.diffs == [FieldDiff("start", "2026-01-01", "2026-02-01")]
    assert "runSchedule" in plan.patch


def test_update_bad_date_raises():
    with pytest.raises(ValueError, match="invalid date"):
        plan_update("777", group(1, "G", "ACTIVE"), end="2026/01/31")


def test_delete_draft_is_hard_delete():
    plan = plan_delete("777", group(123, "Draft CG", "DRAFT"))
    assert plan.hard is True
    assert plan.method == "DELETE"
    assert plan.summary == "DELETE /adAccounts/777/adCampaignGroups/123"
    assert plan.message == "Deleted campaign group 123"


def test_delete_non_draft_is_soft_delete():
    plan = plan_delete("777", group(123, "Active CG", "ACTIVE"))
    assert plan.hard is False
    assert plan.method == "POST"
    assert "PENDING_DELETION" in json.dumps(plan.payload)
    assert "PENDING_DELETION" in plan.message
    assert plan.summary.endswith("(soft-delete)")


def test_empty_state_terminal():
    text = format_groups([], "777")
    assert "No campaign groups in account 777" in text
    assert "campaign-groups create" in text


def test_groups_table():
    text = format_groups([group(111, "Q1", "ACTIVE")], "777")
    lines = text.splitlines()
    assert lines[0].startswith("ID")
    assert lines[1].startswith("111")
    assert lines[1].endswith(ACCOUNT)


def test_format_group():
    text = format_group(group(111, "Q1", "ACTIVE"))
    assert text == f"ID:      111\nName:    Q1\nStatus:  ACTIVE\nAccount: {ACCOUNT}\n"


def test_parse_date_range_millis():
    schedule = parse_date_range_millis("2026-01-01", "")
    assert schedule.start == JAN_1_2026_MS
    assert schedule.end == 0


def test_parse_date_range_millis_invalid():
    with pytest.raises(ValueError, match="invalid date: --start"):
        parse_date_range_millis("2026/01/01", None)


def test_unique_account_urns():
    groups = [
        group(1, "a", "ACTIVE", account="urn:li:sponsoredAccount:1"),
        group(2, "b", "ACTIVE", account=""),
        group(3, "c", "ACTIVE", account="urn:li:sponsoredAccount:1"),
        group(4, "d", "ACTIVE", account="urn:li:sponsoredAccount:2"),
    ]
    assert unique_account_urns(groups) == ["urn:li:sponsoredAccount:1", "urn:li:sponsoredAccount:2"]