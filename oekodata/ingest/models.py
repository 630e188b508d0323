# Oekodata - Material Model
# =========================
"""Canonical record type for one construction material."""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

# Environmental indicators, in the order they appear in the source sheet.
INDICATOR_FIELDS: List[str] = [
    "ubp21_total",
    "ubp21_production",
    "ubp21_disposal",
    "primary_energy_total",
    "primary_energy_production_total",
    "primary_energy_production_energetic",
    "primary_energy_production_material",
    "primary_energy_disposal",
    "primary_energy_renewable_total",
    "primary_energy_renewable_production_total",
    "primary_energy_renewable_production_energetic",
    "primary_energy_renewable_production_material",
    "primary_energy_renewable_disposal",
    "primary_energy_non_renewable_total",
    "primary_energy_non_renewable_production_total",
    "primary_energy_non_renewable_production_energetic",
    "primary_energy_non_renewable_production_material",
    "primary_energy_non_renewable_disposal",
    "gwp_total",
    "gwp_production",
    "gwp_disposal",
    "biogenic_carbon",
]

# Fields compared numerically by the diff tool
NUMERIC_FIELDS: List[str] = INDICATOR_FIELDS + ["density_min", "density_max"]

# Fields compared as plain text by the diff tool
TEXT_FIELDS: List[str] = ["density", "unit", "name_de", "name_fr"]


@dataclass
class Material:
    """One row of the dataset. Indicators are None when not measured."""
    uuid: str
    legacy_id: Optional[str] = None
    name_de: Optional[str] = None
    name_fr: Optional[str] = None
    disposal_id: Optional[str] = None
    disposal_name_de: Optional[str] = None
    disposal_name_fr: Optional[str] = None
    density: Optional[str] = None
    density_min: Optional[float] = None
    density_max: Optional[float] = None
    unit: Optional[str] = None
    ubp21_total: Optional[float] = None
    ubp21_production: Optional[float] = None
    ubp21_disposal: Optional[float] = None
    primary_energy_total: Optional[float] = None
    primary_energy_production_total: Optional[float] = None
    primary_energy_production_energetic: Optional[float] = None
    primary_energy_production_material: Optional[float] = None
    primary_energy_disposal: Optional[float] = None
    primary_energy_renewable_total: Optional[float] = None
    primary_energy_renewable_production_total: Optional[float] = None
    primary_energy_renewable_production_energetic: Optional[float] = None
    primary_energy_renewable_production_material: Optional[float] = None
    primary_energy_renewable_disposal: Optional[float] = None
    primary_energy_non_renewable_total: Optional[float] = None
    primary_energy_non_renewable_production_total: Optional[float] = None
    primary_energy_non_renewable_production_energetic: Optional[float] = None
    primary_energy_non_renewable_production_material: Optional[float] = None
    primary_energy_non_renewable_disposal: Optional[float] = None
    gwp_total: Optional[float] = None
    gwp_production: Optional[float] = None
    gwp_disposal: Optional[float] = None
    biogenic_carbon: Optional[float] = None

    @property
    def display_name(self) -> str:
        return self.name_de or self.name_fr or ""

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Material":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def materials_to_dicts(materials: List[Material]) -> List[Dict[str, Any]]:
    return [m.to_dict() for m in materials]


def materials_from_dicts(data: List[Dict[str, Any]]) -> List[Material]:
    return [Material.from_dict(d) for d in data]
