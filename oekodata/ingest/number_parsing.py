# Oekodata - Cell Value Parsing
# =============================
# Tolerant parsing of numbers, densities and identifiers from spreadsheet cells
"""
Helpers that turn loosely formatted spreadsheet cells into typed values.

The source workbook mixes decimal commas and points, uses apostrophes and
thin spaces as thousands separators, and writes "-" for missing values.
"""

import math
import numbers
import re
from dataclasses import dataclass
from typing import Any, Optional

UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE
)

# Apostrophes and any unicode whitespace (covers no-break and thin spaces)
_GROUPING_CHARS = re.compile(r"['’\s]")
_RANGE_PATTERN = re.compile(r'^\d+-\d+$')
_DENSITY_RANGE = re.compile(r"^([\d\s'’.,]+?)\s*[-–]\s*([\d\s'’.,]+)$")
_PLAIN_FLOAT = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')
_THOUSANDS_AFTER_COMMA = re.compile(r'^\d{3}(\D|$)')
_NON_NUMERIC = re.compile(r'[^\d.\-]')

MISSING_MARKERS = {"", "-", "–", "—", "n/a", "na"}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a spreadsheet cell into a number.

    Numeric cells pass through. Text cells are cleaned: grouping characters
    are removed, a comma followed by exactly three digits and then a
    non-digit (or the end) is a thousands separator, any other comma is the
    decimal separator. Ranges such as "20-25" are not a single number and
    give None.

    Examples:
        parse_number("1'234,5")  -> 1234.5
        parse_number("1,234")    -> 1234.0
        parse_number("0,5")      -> 0.5
        parse_number("-")        -> None
    """
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, numbers.Real):
        return float(value)

    text = _GROUPING_CHARS.sub("", str(value))
    if text.lower() in MISSING_MARKERS:
        return None
    if _RANGE_PATTERN.match(text):
        return None
    if _PLAIN_FLOAT.match(text):
        return float(text)

    if "," in text:
        if "." in text and text.rfind(",") > text.rfind("."):
            # 1.234,5 style
            text = text.replace(".", "").replace(",", ".")
        else:
            idx = text.index(",")
            if _THOUSANDS_AFTER_COMMA.match(text[idx + 1:]):
                text = text.replace(",", "")
            else:
                text = text[:idx] + "." + text[idx + 1:].replace(",", "")

    text = _NON_NUMERIC.sub("", text)
    if not text or text in ("-", ".", "-."):
        return None
    try:
        return float(text)
    except ValueError:
        return None


@dataclass
class DensityRange:
    """Raw density text plus its parsed bounds."""
    raw: Optional[str]
    min: Optional[float]
    max: Optional[float]


def parse_density(value: Any) -> DensityRange:
    """Parse a density cell that may be a single value or a 'min-max' range."""
    if _is_missing(value):
        return DensityRange(None, None, None)

    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        raw = str(int(value)) if float(value).is_integer() else str(value)
        return DensityRange(raw, float(value), float(value))

    raw = str(value).strip()
    if raw.lower() in MISSING_MARKERS:
        return DensityRange(None, None, None)

    match = _DENSITY_RANGE.match(raw)
    if match:
        low = parse_number(match.group(1))
        high = parse_number(match.group(2))
        return DensityRange(raw, low, high)

    number = parse_number(raw)
    return DensityRange(raw, number, number)


def normalize_uuid(value: Any) -> str:
    """Canonical form used for every UUID comparison and lookup."""
    if value is None:
        return ""
    return re.sub(r'[^0-9A-Za-z]', '', str(value)).upper()


def is_uuid(value: Any) -> bool:
    """True for a hyphenated UUID with valid version and variant nibbles."""
    if value is None:
        return False
    return bool(UUID_PATTERN.match(str(value).strip()))


def clean_text(value: Any) -> Optional[str]:
    """Trimmed string for a text cell, None for empty cells."""
    if _is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None
