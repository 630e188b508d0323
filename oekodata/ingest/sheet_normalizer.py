# Oekodata - Spreadsheet Normalizer
# =================================
# Turns the published KBOB workbook into canonical Material records
"""
Spreadsheet normalizer for the KBOB materials workbook.

Features:
- Locates the materials sheet by its localized title
- Finds the header row by the "ID-Nummer" marker in column A
- Verifies known header labels against the positional column table
- Maps rows by column index, skipping subtotal/footer rows without a UUID
- Drops duplicate UUIDs so one version never holds two records per UUID
"""

import io
import logging
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ..errors import HeaderNotFound, ParseFailure, SheetNotFound
from .column_schema import (
    HEADER_CHECKS,
    HEADER_LOOKBACK,
    HEADER_MARKER,
    MATERIAL_COLUMNS,
    SHEET_NAME_PATTERNS,
    ColumnSpec,
)
from .models import Material
from .number_parsing import (
    clean_text,
    is_uuid,
    normalize_uuid,
    parse_density,
    parse_number,
)

logger = logging.getLogger(__name__)


class SheetNormalizer:
    """
    Pure transformation from workbook bytes to an ordered list of materials.

    Example:
        normalizer = SheetNormalizer()
        materials = normalizer.normalize(Path("kbob.xlsx").read_bytes())
    """

    def __init__(self, strict_layout: bool = True,
                 columns: Optional[List[ColumnSpec]] = None):
        self.strict_layout = strict_layout
        self.columns = columns or MATERIAL_COLUMNS

    def normalize(self, data: bytes) -> List[Material]:
        """
        Parse workbook bytes into materials, in spreadsheet order.

        Raises:
            ParseFailure: workbook unreadable or no valid rows
            SheetNotFound: no worksheet with a known materials title
            HeaderNotFound: header row missing or columns moved
        """
        try:
            excel = pd.ExcelFile(io.BytesIO(data))
        except Exception as e:
            raise ParseFailure(f"unreadable workbook ({e})") from e

        sheet_name = self.find_sheet(excel.sheet_names)
        try:
            df = pd.read_excel(excel, sheet_name=sheet_name, header=None, dtype=object)
        except Exception as e:
            raise ParseFailure(f"could not read sheet '{sheet_name}' ({e})") from e

        rows = df.values.tolist()
        header_idx = self.find_header_row(rows)
        self.verify_layout(rows, header_idx)

        materials = self._map_rows(rows[header_idx + 1:], first_row=header_idx + 2)
        if not materials:
            raise ParseFailure(f"sheet '{sheet_name}' contains no valid material rows")

        logger.info(f"Normalized {len(materials)} materials from sheet '{sheet_name}'")
        return materials

    @staticmethod
    def find_sheet(sheet_names: Sequence[str]) -> str:
        for name in sheet_names:
            lowered = str(name).lower()
            if any(pattern in lowered for pattern in SHEET_NAME_PATTERNS):
                return name
        raise SheetNotFound(list(map(str, sheet_names)), SHEET_NAME_PATTERNS)

    @staticmethod
    def find_header_row(rows: List[List[Any]]) -> int:
        for idx, row in enumerate(rows):
            first = clean_text(row[0]) if row else None
            if first and HEADER_MARKER in first.lower():
                return idx
        raise HeaderNotFound(f"No row has '{HEADER_MARKER}' in its first column")

    def verify_layout(self, rows: List[List[Any]], header_idx: int) -> None:
        """Check that known header labels still sit at their expected columns."""
        window = rows[max(0, header_idx - HEADER_LOOKBACK):header_idx + 1]
        mismatches = []
        for col, tokens in HEADER_CHECKS:
            texts = [
                (clean_text(row[col]) or "").lower()
                for row in window if col < len(row)
            ]
            if not any(token in text for text in texts for token in tokens):
                found = " | ".join(t for t in texts if t) or "(empty)"
                mismatches.append(f"column {col}: expected {'/'.join(tokens)}, found {found}")

        if not mismatches:
            return
        if self.strict_layout:
            raise HeaderNotFound("Header labels do not match the column table", mismatches)
        for mismatch in mismatches:
            logger.warning(f"Layout check: {mismatch}")

    def _map_rows(self, rows: List[List[Any]], first_row: int) -> List[Material]:
        materials: List[Material] = []
        seen = set()

        for offset, row in enumerate(rows):
            row_number = first_row + offset
            uuid_cell = clean_text(row[1]) if len(row) > 1 else None
            if not is_uuid(uuid_cell):
                logger.debug(f"Skipping row {row_number}: invalid UUID {uuid_cell!r}")
                continue

            try:
                material = self._build_material(row)
            except Exception as e:
                logger.warning(f"Skipping row {row_number}: {e}")
                continue

            if not material.name_de and not material.name_fr:
                logger.debug(f"Skipping row {row_number}: no name")
                continue

            key = normalize_uuid(material.uuid)
            if key in seen:
                logger.warning(f"Skipping row {row_number}: duplicate UUID {material.uuid}")
                continue
            seen.add(key)
            materials.append(material)

        return materials

    def _build_material(self, row: List[Any]) -> Material:
        values: Dict[str, Any] = {}
        for spec in self.columns:
            cell = row[spec.index] if spec.index < len(row) else None
            if spec.kind == "number":
                values[spec.field] = parse_number(cell)
            elif spec.kind == "density":
                density = parse_density(cell)
                values["density"] = density.raw
                values["density_min"] = density.min
                values["density_max"] = density.max
            else:
                values[spec.field] = clean_text(cell)
        return Material(**values)


def preview(materials: List[Material], count: int = 3) -> List[Dict[str, Any]]:
    """First few records as plain dicts, for operator messages."""
    return [m.to_dict() for m in materials[:max(0, count)]]
