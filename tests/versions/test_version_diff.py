"""
Tests for the version diff tool.
"""

import pytest

from conftest import make_uuid
from oekodata.errors import VersionNotFound
from oekodata.versions import VersionDiff, diff_records, field_statistics, format_report
from oekodata.versions.diff import numeric_change

V5 = "2022/1:2022, Version 5"
V6 = "2024/1:2024, Version 6"


class TestNumericChange:

    def test_signed_deltas(self):
        change = numeric_change("gwp_total", 200.0, 150.0)
        assert change.absolute_delta == -50.0
        assert change.percent_delta == pytest.approx(-25.0)

    def test_zero_baseline(self):
        assert numeric_change("gwp_total", 0.0, 3.0).percent_delta == 100.0

    def test_unchanged_value(self):
        assert numeric_change("gwp_total", 1.5, 1.5) is None
        assert numeric_change("gwp_total", None, None) is None

    def test_missing_side_has_no_delta(self):
        change = numeric_change("gwp_total", None, 2.0)
        assert change.absolute_delta is None
        assert change.percent_delta is None


class TestDiffRecords:

    def test_identical_sets_have_no_changes(self, make_material):
        materials = [make_material(1), make_material(2)]
        result = diff_records(materials, list(materials), V5, V5)

        assert not result.has_changes
        assert len(result.unchanged) == 2

    def test_added_removed_changed(self, make_material):
        old = [make_material(1), make_material(2), make_material(3)]
        new = [make_material(1), make_material(2, gwp_total=99.0, unit="m2"), make_material(4)]

        result = diff_records(old, new, V5, V6)

        assert [m.uuid for m in result.added] == [make_uuid(4)]
        assert [m.uuid for m in result.removed] == [make_uuid(3)]
        assert len(result.changed) == 1
        fields = {c.field for c in result.changed[0].changes}
        assert fields == {"gwp_total", "unit"}
        assert result.unchanged == [make_uuid(1)]

    def test_uuid_matching_ignores_case(self, make_material):
        old = [make_material(1)]
        new = [make_material(1, uuid=make_uuid(1).upper())]
        result = diff_records(old, new)
        assert not result.added and not result.removed

    def test_to_dict_summary(self, make_material):
        result = diff_records([make_material(1)], [make_material(2)], V5, V6)
        data = result.to_dict()
        assert data['summary'] == {'added_count': 1, 'removed_count': 1, 'changed_count': 0}
        assert data['from'] == V5 and data['to'] == V6


class TestVersionDiff:

    def test_diff_between_promoted_versions(self, store, make_material):
        store.promote(V5, [make_material(1, gwp_total=10.0)], {'publish_date': '2022-05-01'})
        store.promote(V6, [make_material(1, gwp_total=12.0)], {'publish_date': '2024-06-01'})

        result = VersionDiff(store).diff(V5, V6)

        change = result.changed[0].changes[0]
        assert change.field == "gwp_total"
        assert change.absolute_delta == pytest.approx(2.0)
        assert change.percent_delta == pytest.approx(20.0)

    def test_diff_of_version_with_itself_is_empty(self, store, make_material):
        store.promote(V5, [make_material(1), make_material(2)])
        assert not VersionDiff(store).diff(V5, V5).has_changes

    def test_unknown_label(self, store, make_material):
        store.promote(V5, [make_material(1)])
        with pytest.raises(VersionNotFound):
            VersionDiff(store).diff(V5, "Version 99")

    def test_sequential_diffs_oldest_first(self, store, make_material):
        store.promote(V6, [make_material(1), make_material(2)], {'publish_date': '2024-06-01'})
        store.promote(V5, [make_material(1)], {'publish_date': '2022-05-01'})
        store.promote("Version 7", [make_material(2)], {'publish_date': '2025-01-10'})

        results = VersionDiff(store).diff_sequential()

        assert [(r.from_label, r.to_label) for r in results] == [(V5, V6), (V6, "Version 7")]
        assert len(results[0].added) == 1
        assert len(results[1].removed) == 1

    def test_diff_does_not_touch_pending(self, store, make_material):
        store.promote(V5, [make_material(1)])
        VersionDiff(store).diff(V5, V5)
        assert store.get_pending() is None
        assert store.current_label() == V5


class TestReport:

    def test_report_lists_changes_and_statistics(self, make_material):
        old = [make_material(1), make_material(2)]
        new = [make_material(1, gwp_total=50.0), make_material(2, gwp_total=70.0)]
        result = diff_records(old, new, V5, V6)

        stats = field_statistics(result)
        assert stats[0].field == "gwp_total" and stats[0].count == 2

        report = format_report(result, max_materials=1)
        assert f"Comparing {V5} -> {V6}" in report
        assert "Changed:   2" in report
        assert "... and 1 more" in report
        assert "gwp_total: 2 changes" in report
