import pytest

from adsreport.annotate import Flag, annotations_for, format_row_flags, median
from adsreport.models import AnalyticsRow


def test_annotations_best_worst():
    rows = [
        AnalyticsRow(impressions=10000, clicks=100, cost_in_usd="100", one_click_leads=10),
        AnalyticsRow(impressions=10000, clicks=100, cost_in_usd="200", one_click_leads=5),
        AnalyticsRow(impressions=10000, clicks=100, cost_in_usd="1000", one_click_leads=1),
    ]
    flags = annotations_for(rows)
    assert len(flags) == 3
    assert Flag.BEST_CPL in flags[0]
    assert Flag.WORST_CPL in flags[2]
    assert Flag.HIGH_CPL in flags[2]


def test_annotations_equal_ctr_has_no_worst_ctr():
    rows = [
        AnalyticsRow(impressions=10000, clicks=100, cost_in_usd="100", one_click_leads=10),
        AnalyticsRow(impressions=10000, clicks=100, cost_in_usd="200", one_click_leads=5),
    ]
    flags = annotations_for(rows)
    assert Flag.BEST_CTR in flags[0]
    assert all(Flag.WORST_CTR not in tags for tags in flags)


def test_annotations_low_ctr():
    rows = [
        AnalyticsRow(impressions=10000, clicks=100, cost_in_usd="100", one_click_leads=1),
        AnalyticsRow(impressions=10000, clicks=100, cost_in_usd="100", one_click_leads=1),
        AnalyticsRow(impressions=10000, clicks=5, cost_in_usd="100", one_click_leads=1),
    ]
    flags = annotations_for(rows)
    assert Flag.LOW_CTR in flags[2]
    assert Flag.WORST_CTR in flags[2]


def test_annotations_two_rows_best_and_worst_cpl():
    rows = [
        AnalyticsRow(impressions=10000, clicks=100, cost_in_usd="100", one_click_leads=10,
                     pivot_values=["urn:li:sponsoredCampaign:1"]),
        AnalyticsRow(impressions=10000, clicks=100, cost_in_usd="1000", one_click_leads=1,
                     pivot_values=["urn:li:sponsoredCampaign:2"]),
    ]
    flags = annotations_for(rows)
    assert "best CPL" in format_row_flags(flags[0])
    assert "worst CPL" in format_row_flags(flags[1])


def test_annotations_single_row_has_no_extremes():
    flags = annotations_for([AnalyticsRow(impressions=100, clicks=1, cost_in_usd="10", one_click_leads=1)])
    assert flags == [[]]


def test_annotations_empty():
    assert annotations_for([]) == []


def test_rows_without_impressions_or_leads_untagged():
    rows = [AnalyticsRow(), AnalyticsRow(cost_in_usd="50")]
    assert annotations_for(rows) == [[], []]


@pytest.mark.parametrize(
    "values, expected",
    [([], 0.0), ([5.0], 5.0), ([3.0, 1.0, 2.0], 2.0), ([1.0, 2.0, 3.0, 4.0], 2.5)],
)
def test_median(values, expected):
    assert median(values) == pytest.approx(expected)


def test_median_does_not_mutate_input():
    values = [3.0, 1.0, 2.0]
    median(values)
    assert values == [3.0, 1.0, 2.0]


def test_format_row_flags_labels():
    assert format_row_flags([Flag.BEST_CPL, Flag.LOW_CTR]) == "🟢 best CPL, ⚠️ low CTR"
    assert format_row_flags(["worst_ctr", "high_cpl"]) == "🔴 worst CTR, ⚠️ high CPL"


def test_format_row_flags_empty_and_unknown():
    assert format_row_flags([]) == ""
    assert format_row_flags(["nonsense"]) == ""


@pytest.mark.parametrize(
    "wire, label",
    [
        ("best_cpl", "🟢 best CPL"),
        ("worst_cpl", "🔴 worst CPL"),
        ("best_ctr", "🟢 best CTR"),
        ("worst_ctr", "🔴 worst CTR"),
        ("low_ctr", "⚠️ low CTR"),
        ("high_cpl", "⚠️ high CPL"),
    ],
)
def test_flag_wire_values_render_labels(wire, label):
    assert format_row_flags([Flag(wire)]) == label