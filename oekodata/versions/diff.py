# Oekodata - Version Diff
# =======================
# Audit of material changes between two promoted versions
"""
Read-only comparison of promoted versions.

Materials are matched by normalized UUID over the union of both versions.
Numeric fields report absolute and percentage deltas, text fields report
old and new values. The pending slot is never read.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..ingest.models import Material, NUMERIC_FIELDS, TEXT_FIELDS
from ..ingest.number_parsing import normalize_uuid
from .store import VersionedStore

logger = logging.getLogger(__name__)


@dataclass
class FieldChange:
    """A single differing field of one material."""
    field: str
    old: Any
    new: Any
    numeric: bool = False
    absolute_delta: Optional[float] = None
    percent_delta: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'field': self.field, 'old': self.old, 'new': self.new}
        if self.numeric:
            data['absolute_delta'] = self.absolute_delta
            data['percent_delta'] = self.percent_delta
        return data


@dataclass
class MaterialChange:
    uuid: str
    name: str
    changes: List[FieldChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'uuid': self.uuid,
            'name': self.name,
            'changes': [c.to_dict() for c in self.changes],
        }


@dataclass
class DiffResult:
    """Result of comparing two versions."""
    from_label: str
    to_label: str
    added: List[Material] = field(default_factory=list)
    removed: List[Material] = field(default_factory=list)
    changed: List[MaterialChange] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.changed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'from': self.from_label,
            'to': self.to_label,
            'added': [m.to_dict() for m in self.added],
            'removed': [m.to_dict() for m in self.removed],
            'changed': [c.to_dict() for c in self.changed],
            'unchanged_count': len(self.unchanged),
            'has_changes': self.has_changes,
            'summary': {
                'added_count': len(self.added),
                'removed_count': len(self.removed),
                'changed_count': len(self.changed),
            }
        }


@dataclass
class FieldStatistic:
    field: str
    count: int
    mean_percent_delta: Optional[float] = None


def numeric_change(name: str, old: Optional[float], new: Optional[float]) -> Optional[FieldChange]:
    if old == new:
        return None
    if old is None or new is None:
        return FieldChange(name, old, new, numeric=True)
    delta = new - old
    if old == 0:
        percent = 100.0 if new != 0 else 0.0
    else:
        percent = delta / abs(old) * 100
    return FieldChange(name, old, new, numeric=True,
                       absolute_delta=delta, percent_delta=percent)


def compare_material(old: Material, new: Material) -> List[FieldChange]:
    changes = []
    for name in NUMERIC_FIELDS:
        change = numeric_change(name, getattr(old, name), getattr(new, name))
        if change:
            changes.append(change)
    for name in TEXT_FIELDS:
        before, after = getattr(old, name), getattr(new, name)
        if before != after:
            changes.append(FieldChange(name, before, after))
    return changes


def diff_records(old: List[Material], new: List[Material],
                 from_label: str = "", to_label: str = "") -> DiffResult:
    """Compare two record sets by normalized UUID."""
    old_by_uuid = {normalize_uuid(m.uuid): m for m in old}
    new_by_uuid = {normalize_uuid(m.uuid): m for m in new}

    keys = list(old_by_uuid)
    keys += [k for k in new_by_uuid if k not in old_by_uuid]

    result = DiffResult(from_label, to_label)
    for key in keys:
        before, after = old_by_uuid.get(key), new_by_uuid.get(key)
        if before is None:
            result.added.append(after)
        elif after is None:
            result.removed.append(before)
        else:
            changes = compare_material(before, after)
            if changes:
                result.changed.append(MaterialChange(after.uuid, after.display_name, changes))
            else:
                result.unchanged.append(after.uuid)
    return result


class VersionDiff:
    """
    Diff tool over the versioned store.

    Example:
        tool = VersionDiff(store)
        result = tool.diff("2022/1:2022, Version 5", "2024/1:2024, Version 6")
        print(format_report(result))
    """

    def __init__(self, store: VersionedStore):
        self.store = store

    def diff(self, label_a: str, label_b: str) -> DiffResult:
        """Raises VersionNotFound when either label is unknown."""
        result = diff_records(
            self.store.get_by_label(label_a),
            self.store.get_by_label(label_b),
            label_a, label_b,
        )
        logger.info(f"Diff {label_a} -> {label_b}: +{len(result.added)} "
                    f"-{len(result.removed)} ~{len(result.changed)}")
        return result

    def diff_sequential(self) -> List[DiffResult]:
        """Diff every pair of neighbouring versions, oldest first by publish date."""
        versions = list(reversed(self.store.list_history()))
        return [
            self.diff(older.version, newer.version)
            for older, newer in zip(versions, versions[1:])
        ]


def field_statistics(result: DiffResult) -> List[FieldStatistic]:
    """Per-field change counts and mean percentage delta, most changed first."""
    counts: Dict[str, int] = defaultdict(int)
    percents: Dict[str, List[float]] = defaultdict(list)
    for material in result.changed:
        for change in material.changes:
            counts[change.field] += 1
            if change.percent_delta is not None:
                percents[change.field].append(change.percent_delta)

    stats = []
    for name, count in counts.items():
        values = percents.get(name)
        mean = sum(values) / len(values) if values else None
        stats.append(FieldStatistic(name, count, mean))
    return sorted(stats, key=lambda s: (-s.count, s.field))


def format_report(result: DiffResult, max_materials: int = 20) -> str:
    """Plain-text audit report for one diff."""
    lines = [
        f"Comparing {result.from_label} -> {result.to_label}",
        "=" * 60,
        f"Added:     {len(result.added)}",
        f"Removed:   {len(result.removed)}",
        f"Changed:   {len(result.changed)}",
        f"Unchanged: {len(result.unchanged)}",
    ]

    if result.added:
        lines.append("")
        lines.append("Added materials:")
        lines.extend(f"  + {m.uuid} {m.display_name}" for m in result.added[:max_materials])
    if result.removed:
        lines.append("")
        lines.append("Removed materials:")
        lines.extend(f"  - {m.uuid} {m.display_name}" for m in result.removed[:max_materials])

    if result.changed:
        lines.append("")
        lines.append("Changed materials:")
        for material in result.changed[:max_materials]:
            lines.append(f"  ~ {material.uuid} {material.name}")
            for change in material.changes:
                if change.percent_delta is not None:
                    lines.append(f"      {change.field}: {change.old} -> {change.new} "
                                 f"({change.percent_delta:+.2f}%)")
                else:
                    lines.append(f"      {change.field}: {change.old!r} -> {change.new!r}")
        if len(result.changed) > max_materials:
            lines.append(f"  ... and {len(result.changed) - max_materials} more")

        lines.append("")
        lines.append("Field summary:")
        for stat in field_statistics(result):
            mean = f", avg {stat.mean_percent_delta:+.2f}%" if stat.mean_percent_delta is not None else ""
            lines.append(f"  {stat.field}: {stat.count} changes{mean}")

    return "\n".join(lines)
