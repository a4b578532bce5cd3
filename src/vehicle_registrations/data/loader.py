# src/vehicle_registrations/data/loader.py
"""
Dataset ownership and loading.

RegistrationDataset holds the parsed records for every loaded month.
DatasetLoader is the load-once cache in front of it: the first load() fetches
and parses each month, later calls reuse the result until reset().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from vehicle_registrations.aggregation.filters import RecordFilter, apply_filter
from vehicle_registrations.classification.regions import available_classifications
from vehicle_registrations.data.parser import leading_int, parse_records
from vehicle_registrations.data.records import VehicleRecord
from vehicle_registrations.exceptions import DataFetchError, DataNotLoadedError
from vehicle_registrations.utils.config import config
from vehicle_registrations.utils.logger import get_logger

logger = get_logger(__name__)

Fetcher = Callable[[int], str]


@dataclass(frozen=True)
class UniqueValues:
    manufacturers: List[str] = field(default_factory=list)
    models: List[str] = field(default_factory=list)
    variants: List[str] = field(default_factory=list)
    fuel_types: List[str] = field(default_factory=list)
    engine_ccs: List[str] = field(default_factory=list)
    states: List[str] = field(default_factory=list)
    cities: List[str] = field(default_factory=list)
    offices: List[str] = field(default_factory=list)
    office_classifications: List[str] = field(default_factory=list)


def _cc_sort_key(value: str):
    """Buckets with a numeric prefix first, by that number; the rest alphabetically."""
    number = leading_int(value)
    if number is None:
        return (1, 0, value)
    return (0, number, value)


class RegistrationDataset:
    def __init__(self):
        self._records: List[VehicleRecord] = []
        self._by_month: Dict[int, List[VehicleRecord]] = {}

    @classmethod
    def from_texts(cls, texts: Mapping[int, str]) -> "RegistrationDataset":
        dataset = cls()
        dataset.load_months(texts)
        return dataset

    def load_months(self, texts: Mapping[int, str]) -> None:
        """Parse each month independently, then concatenate in month order."""
        by_month = {month: parse_records(texts[month]) for month in sorted(texts)}

        self._by_month = by_month
        self._records = [r for month in sorted(by_month) for r in by_month[month]]

    @property
    def records(self) -> List[VehicleRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def by_month(self, month: int) -> List[VehicleRecord]:
        return list(self._by_month.get(month, []))

    def available_months(self) -> List[int]:
        return sorted(self._by_month)

    def filtered(self, criteria: Optional[RecordFilter] = None) -> List[VehicleRecord]:
        return apply_filter(self._records, criteria)

    def unique_values(self, criteria: Optional[RecordFilter] = None) -> UniqueValues:
        """Distinct filter options among records matching `criteria`."""
        data = self.filtered(criteria)

        def distinct(attr: str) -> List[str]:
            return sorted({getattr(r, attr) for r in data})

        present = {r.region_class for r in data}
        return UniqueValues(
            manufacturers=distinct("manufacturer"),
            models=distinct("model"),
            variants=distinct("variant"),
            fuel_types=distinct("fuel_type"),
            engine_ccs=sorted({r.engine_cc for r in data if r.engine_cc}, key=_cc_sort_key),
            states=distinct("state_name"),
            cities=distinct("city_name"),
            offices=distinct("office_name"),
            office_classifications=sorted(c for c in available_classifications() if c in present),
        )

    def total_vehicles(self) -> int:
        return sum(r.count for r in self._records)


def read_month_file(month: int) -> str:
    """Default fetcher: the configured CSV file for `month`."""
    path: Path = config.month_path(month)
    return path.read_text(encoding="utf-8")


class DatasetLoader:
    def __init__(self, fetch: Fetcher = read_month_file, months: Optional[Iterable[int]] = None):
        self._fetch = fetch
        self._months = sorted(months if months is not None else config.MONTH_FILES)
        self._dataset: Optional[RegistrationDataset] = None

    def load(self) -> RegistrationDataset:
        if self._dataset is not None:
            return self._dataset

        texts: Dict[int, str] = {}
        for month in self._months:
            try:
                texts[month] = self._fetch(month)
            except Exception as e:
                logger.error("Error loading month %s: %s", month, e)
                raise DataFetchError(month, e) from e

        dataset = RegistrationDataset.from_texts(texts)
        self._dataset = dataset

        logger.info(
            "Data loaded | records=%s | vehicles=%s | months=%s | manufacturers=%s | states=%s",
            len(dataset),
            dataset.total_vehicles(),
            dataset.available_months(),
            len({r.manufacturer for r in dataset.records}),
            len({r.state_name for r in dataset.records}),
        )
        return dataset

    @property
    def is_loaded(self) -> bool:
        return self._dataset is not None

    @property
    def dataset(self) -> RegistrationDataset:
        if self._dataset is None:
            raise DataNotLoadedError("Data not loaded yet. Call load() first.")
        return self._dataset

    def reset(self) -> None:
        self._dataset = None
