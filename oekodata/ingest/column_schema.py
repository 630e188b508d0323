# Oekodata - Column Schema
# ========================
# Positional column table for the KBOB materials sheet
"""
Fixed column-index table for the materials worksheet.

Header wording changes slightly from release to release while the column
order has stayed put, so rows are mapped by position. HEADER_CHECKS lists a
few header tokens that must still sit at their expected index; the
normalizer verifies them before mapping any row.
"""

from dataclasses import dataclass
from typing import List, Tuple

from .models import INDICATOR_FIELDS

# Sheet titles that identify the materials worksheet (case-insensitive substrings)
SHEET_NAME_PATTERNS: List[str] = ["baumaterialien", "matériaux", "materiaux"]

# Text in column A that marks the header row
HEADER_MARKER = "id-nummer"

# Rows above the header row that may hold grouped/merged headings
HEADER_LOOKBACK = 2


@dataclass(frozen=True)
class ColumnSpec:
    """One source column and the Material field it feeds."""
    field: str
    index: int
    kind: str  # text, number, density, uuid
    header_hint: str = ""


MATERIAL_COLUMNS: List[ColumnSpec] = [
    ColumnSpec("legacy_id", 0, "text", "ID-Nummer"),
    ColumnSpec("uuid", 1, "uuid", "UUID-Nummer"),
    ColumnSpec("name_de", 2, "text", "BAUMATERIALIEN"),
    ColumnSpec("disposal_id", 3, "text", "ID-Nummer Entsorgung"),
    ColumnSpec("disposal_name_de", 4, "text", "Entsorgung"),
    ColumnSpec("density", 5, "density", "Rohdichte/Flächenmasse"),
    ColumnSpec("unit", 6, "text", "Bezug"),
] + [
    ColumnSpec(name, 7 + offset, "number")
    for offset, name in enumerate(INDICATOR_FIELDS)
] + [
    ColumnSpec("name_fr", 29, "text", "MATÉRIAUX DE CONSTRUCTION"),
    ColumnSpec("disposal_name_fr", 30, "text", "Élimination"),
]

# (column index, lower-case tokens any of which must appear in that column's header text)
HEADER_CHECKS: List[Tuple[int, Tuple[str, ...]]] = [
    (0, ("id-nummer",)),
    (1, ("uuid",)),
    (2, ("baumaterial",)),
    (29, ("matériaux", "materiaux")),
]
