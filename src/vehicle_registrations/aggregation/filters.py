"""
Record filtering.

All set criteria are ANDed; None means "no restriction". Filtering never
touches the source list, it returns a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from vehicle_registrations.data.records import VehicleRecord


@dataclass(frozen=True)
class RecordFilter:
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    variant: Optional[str] = None
    fuel_type: Optional[str] = None
    engine_cc: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    office: Optional[str] = None
    office_classification: Optional[str] = None
    month: Optional[int] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def matches(self, r: VehicleRecord) -> bool:
        if self.manufacturer is not None and r.manufacturer != self.manufacturer:
            return False
        if self.model is not None and r.model != self.model:
            return False
        if self.variant is not None and r.variant != self.variant:
            return False
        if self.fuel_type is not None and r.fuel_type != self.fuel_type:
            return False
        if self.engine_cc is not None and r.engine_cc != self.engine_cc:
            return False
        if self.state is not None and r.state_name != self.state:
            return False
        if self.city is not None and r.city_name != self.city:
            return False
        if self.office is not None and r.office_name != self.office:
            return False
        if (
            self.office_classification is not None
            and r.region_class != self.office_classification
        ):
            return False
        if self.month is not None and r.sale_month != self.month:
            return False
        return True


def apply_filter(
    records: Iterable[VehicleRecord], criteria: Optional[RecordFilter] = None
) -> List[VehicleRecord]:
    if criteria is None or criteria.is_empty():
        return list(records)
    return [r for r in records if criteria.matches(r)]


_FRAME_COLUMNS = (
    ("manufacturer", "manufacturer"),
    ("model", "model"),
    ("variant", "variant"),
    ("fuel_type", "fuel_type"),
    ("engine_cc", "engine_cc"),
    ("state", "state_name"),
    ("city", "city_name"),
    ("office", "office_name"),
    ("office_classification", "region_class"),
    ("month", "sale_month"),
)


def filter_frame(df: pd.DataFrame, criteria: Optional[RecordFilter] = None) -> pd.DataFrame:
    """Same predicate as RecordFilter.matches, applied to a records frame."""
    if criteria is None or criteria.is_empty() or df.empty:
        return df

    mask = pd.Series(True, index=df.index)
    for attr, column in _FRAME_COLUMNS:
        value = getattr(criteria, attr)
        if value is not None:
            mask &= df[column] == value
    return df[mask]


def resolve_time_range(time_range: Optional[str], months: Sequence[int]) -> Optional[int]:
    """
    Map a dashboard time range onto a single month filter.

    current_month -> latest loaded month
    last_month    -> second latest (or the only month)
    quarter / all -> None (every loaded month)
    """
    if not months or time_range in (None, "all", "quarter"):
        return None

    ordered = sorted(months, reverse=True)
    if time_range == "current_month":
        return ordered[0]
    if time_range == "last_month":
        return ordered[1] if len(ordered) > 1 else ordered[0]

    raise ValueError(f"Unsupported time range: {time_range!r}")
