"""Shared pieces of the raw record sources.

Raw data is partitioned into one CSV file per calendar day:

    <user_id>/<energy_type>/<data_type>/1/<YYYYMMDD>-<YYYYMMDD>.csv

Each file has a ``timestamp (UTC)`` column (``YYYY-MM-DD HH:MM``) plus the
type-specific columns.
"""

import csv
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, timezone
from typing import Protocol

from ..exceptions import RetrievalError
from ..models import DataType, EnergyType

TIMESTAMP_COLUMN = "timestamp (UTC)"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
METER_ID = "1"


class RecordSource(Protocol):
    """Something that can return the raw rows for a set of day partitions."""

    def retrieve(
        self,
        user_id: str,
        energy_type: EnergyType,
        data_type: DataType,
        dates: Sequence[date],
    ) -> list[dict]: ...


def partition_filename(day: date) -> str:
    """Get the CSV filename covering a single day."""
    next_day = day + timedelta(days=1)
    return f"{day.strftime('%Y%m%d')}-{next_day.strftime('%Y%m%d')}.csv"


def partition_path(user_id: str, energy_type: EnergyType, data_type: DataType, day: date) -> str:
    """Get the partition path relative to the data root."""
    return "/".join(
        [user_id, energy_type.value, data_type.value, METER_ID, partition_filename(day)]
    )


def parse_timestamp(value: str) -> datetime:
    """Parse a CSV timestamp as a UTC instant."""
    return datetime.strptime(value.strip(), TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def parse_rows(lines: Iterable[str], source: str) -> list[dict]:
    """Parse CSV lines into dicts, adding a parsed ``timestamp`` field."""
    rows = []
    reader = csv.DictReader(lines)
    try:
        for row in reader:
            try:
                timestamp = parse_timestamp(row[TIMESTAMP_COLUMN])
            except (KeyError, TypeError, ValueError) as e:
                raise RetrievalError(
                    f"Bad timestamp on line {reader.line_num} of {source}: {e}"
                ) from e
            rows.append({**row, "timestamp": timestamp})
    except csv.Error as e:
        raise RetrievalError(f"Bad CSV on line {reader.line_num} of {source}: {e}") from e
    return rows
