"""
Registration Record Model

Enterprise rules:
- One row of the monthly extract
- Immutable once parsed
- region_class is assigned at parse time and never recomputed
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import List

import pandas as pd


# Positional column contract of the source extract
COLUMNS = (
    "manufacturer",
    "model",
    "variant",
    "count",
    "fuel_type",
    "engine_cc",
    "vehicle_class",
    "sale_month",
    "sale_year",
    "office_code",
    "office_name",
    "city_name",
    "district_name",
    "state_code",
    "state_name",
)


@dataclass(frozen=True)
class VehicleRecord:
    manufacturer: str
    model: str
    variant: str
    count: int
    fuel_type: str
    engine_cc: str
    vehicle_class: str
    sale_month: int
    sale_year: str
    office_code: str
    office_name: str
    city_name: str
    district_name: str
    state_code: str
    state_name: str
    region_class: str = "Rural"


FRAME_COLUMNS = list(COLUMNS) + ["region_class"]


def records_to_frame(records: List[VehicleRecord]) -> pd.DataFrame:
    """Columnar view of the records, in input order."""
    if not records:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame([asdict(r) for r in records], columns=FRAME_COLUMNS)
