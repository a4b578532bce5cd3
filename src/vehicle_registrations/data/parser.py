# src/vehicle_registrations/data/parser.py
"""
Lenient parser for the monthly registration extract.

- Header row is ignored
- Blank rows are skipped
- Rows with fewer than 15 fields are dropped without error
- count / month take the leading integer of the field, 0 when there is none
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from vehicle_registrations.classification.regions import classify_region
from vehicle_registrations.data.records import COLUMNS, VehicleRecord
from vehicle_registrations.utils.logger import get_logger

logger = get_logger(__name__)


def split_csv_line(line: str) -> List[str]:
    """
    Split on commas outside double quotes. Quote characters toggle the
    literal state and are not kept in the field.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)

    fields.append("".join(current))
    return fields


_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def leading_int(value: Optional[str]) -> Optional[int]:
    """Integer prefix of `value` ('12.0' -> 12, '110cc' -> 110), or None."""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


def _to_int(value: str) -> int:
    parsed = leading_int(value)
    return parsed if parsed is not None else 0


def build_record(values: Sequence[str]) -> VehicleRecord:
    v = [x.strip() for x in values[: len(COLUMNS)]]

    region = classify_region(
        office_name=v[10],
        city=v[11],
        district=v[12],
        state=v[14],
    )

    return VehicleRecord(
        manufacturer=v[0],
        model=v[1],
        variant=v[2],
        count=max(_to_int(v[3]), 0),
        fuel_type=v[4],
        engine_cc=v[5],
        vehicle_class=v[6],
        sale_month=_to_int(v[7]),
        sale_year=v[8],
        office_code=v[9],
        office_name=v[10],
        city_name=v[11],
        district_name=v[12],
        state_code=v[13],
        state_name=v[14],
        region_class=region.classification.value,
    )


def parse_records(text: Optional[str]) -> List[VehicleRecord]:
    """Parse one extract (header + data rows) into records, in file order."""
    if not text:
        return []

    # Rows end at "\n" only; a trailing "\r" goes with the per-line strip
    lines = text.split("\n")
    records: List[VehicleRecord] = []
    skipped = 0

    for line in lines[1:]:
        line = line.strip()
        if not line:
            continue

        values = split_csv_line(line)
        if len(values) < len(COLUMNS):
            skipped += 1
            continue

        records.append(build_record(values))

    if skipped:
        logger.debug("Skipped %s malformed rows", skipped)

    return records
