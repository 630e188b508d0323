# Oekodata Ingest Module
"""
Spreadsheet ingestion: cell parsing, the positional column table and the
normalizer that produces canonical Material records.
"""

from .models import (
    Material,
    INDICATOR_FIELDS,
    NUMERIC_FIELDS,
    TEXT_FIELDS,
    materials_to_dicts,
    materials_from_dicts,
)
from .number_parsing import (
    DensityRange,
    parse_number,
    parse_density,
    normalize_uuid,
    is_uuid,
    clean_text,
)
from .column_schema import (
    ColumnSpec,
    MATERIAL_COLUMNS,
    HEADER_CHECKS,
    SHEET_NAME_PATTERNS,
)
from .sheet_normalizer import SheetNormalizer, preview

__all__ = [
    # Models
    'Material',
    'INDICATOR_FIELDS',
    'NUMERIC_FIELDS',
    'TEXT_FIELDS',
    'materials_to_dicts',
    'materials_from_dicts',
    # Cell parsing
    'DensityRange',
    'parse_number',
    'parse_density',
    'normalize_uuid',
    'is_uuid',
    'clean_text',
    # Column table
    'ColumnSpec',
    'MATERIAL_COLUMNS',
    'HEADER_CHECKS',
    'SHEET_NAME_PATTERNS',
    # Normalizer
    'SheetNormalizer',
    'preview',
]
