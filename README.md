# adsreport

Helpers that turn advertising campaign data into readable reports. The
package renders analytics tables, tags outlier rows, reports which audience
segments campaigns use, runs account health audits, and plans changes to
campaign groups.

The package takes decoded API records (plain dicts passed through the
`from_dict` constructors) and returns text tables or JSON-ready structures.

## Install

```
pip install .
pip install ".[test]"   # with the test dependencies
```

The package has no runtime dependencies beyond the standard library.

## Modules

- `adsreport.models`: dataclasses `Money`, `DateRange`, `AnalyticsRow`,
  `TargetingCriteria`, `Campaign`, `CampaignGroup`, `Conversion` and
  `Audience`, each built with `from_dict`. `AnalyticsRow.derived_metrics()`
  returns `ctr`, `cpc`, `cpm` and `cpl`. A metric whose denominator is zero
  comes back as 0. `TargetingCriteria.included_facets()` merges the included
  clauses into one mapping from facet to values.
- `adsreport.formatting`: `format_int`, `format_money`,
  `format_money_string`, `format_percent`, `truncate` and `truncate_urn`.
- `adsreport.annotate`: `annotations_for(rows)` returns one list of `Flag`
  values per row. The flags mark the best and worst CPL and CTR, a CTR below
  70% of the median, and a CPL above 2.5 times the median.
  `format_row_flags` renders a list of flags as a short label, and `median`
  is the median helper the other modules use.
- `adsreport.analytics`: validates input with `parse_date_range`,
  `parse_granularity`, `validate_pivot` / `canonicalize_pivot`,
  `validate_reach_range` (92 days at most), `normalize_metric` and
  `resolve_compare_targets`. Each raises `ValueError` on bad input. It
  renders `format_analytics_rows`, whose optional FLAG column appears when
  `flags` is given, along with `format_reach_rows` and `format_compare`.
  `analytics_json` builds JSON rows with optional `_derived` and `_flags`
  keys.
- `adsreport.audiences`: `aggregate_segment_usage` groups campaigns by the
  matched-audience segments they target, using the `ACTIVE` status filter by
  default. `enrich_with_spend` adds the spend and the share of account spend
  for each segment. `segment_usage_json`, `format_segment_usage`,
  `format_segment_usage_with_spend` and `format_audiences` render the results.
- `adsreport.audit`: `compute_audit_findings` returns `Finding` objects
  ordered by `Severity`. The checks cover:
  - disabled conversion rules;
  - broken attribution;
  - campaigns that spend with no results;
  - low CTR;
  - CPL outliers;
  - daily budgets under $30;
  - unused audiences;
  - top campaigns by spend and by leads;
  - budget pacing.

  If a data source failed to load, pass its error and the checks that need it
  are skipped. `format_audit_report` prints an `AuditReport` grouped by
  severity.
- `adsreport.campaign_groups`: functions for campaign groups.
  - `filter_groups` and `unique_account_urns` select groups and collect their
    account URNs.
  - `format_groups` and `format_group` render them.
  - `build_create_input` builds the body for a new group.
  - `parse_date_range_millis` turns dates into a schedule in epoch
    milliseconds.
  - `plan_update` compares the requested values with the current group and
    returns an `UpdatePlan` with a `FieldDiff` list and the patch payload.
    `format_diff` renders that diff.
  - `plan_delete` returns a `DeletePlan`. A draft group gets a hard delete;
    any other group is set to `PENDING_DELETION`.

## Example

```python
from adsreport.models import AnalyticsRow
from adsreport.analytics import format_analytics_rows
from adsreport.annotate import annotations_for

rows = [
    AnalyticsRow.from_dict({"impressions": 10000, "clicks": 100,
                            "costInUsd": "100", "oneClickLeads": 10}),
    AnalyticsRow.from_dict({"impressions": 10000, "clicks": 100,
                            "costInUsd": "1000", "oneClickLeads": 1}),
]
print(format_analytics_rows(rows, True, annotations_for(rows)))
```

## What it does not do

The package provides no command-line program and no API client, and it does
not store a token or a configuration. It never makes network requests.
Fetching records, sending the create, update and delete payloads it builds,
and asking the user for confirmation are left to the caller.

## Tests

```
pytest
```