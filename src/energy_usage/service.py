"""Half-hourly usage series for a household."""

import logging
from collections.abc import Sequence
from datetime import date, datetime

from .buckets import DEFAULT_TIMEZONE, buckets_for, partitions_for, to_instant
from .collectors.base import RecordSource
from .models import BUCKET_LENGTH, CombinedRecord, DataType, EnergyType, UsageRecord
from .merge import merge_series
from .tariffs import build_tariff_index
from .usage import calculate_usage, parse_consumption

logger = logging.getLogger(__name__)


def load_usage(
    source: RecordSource,
    user_id: str,
    energy_type: EnergyType,
    days: Sequence[date],
    buckets: Sequence[datetime],
    conflicts: str = "last",
) -> list[UsageRecord]:
    """Retrieve and reconcile one energy type's consumption and tariffs."""
    tariff_rows = source.retrieve(user_id, energy_type, DataType.TARIFF, days)
    consumption_rows = source.retrieve(user_id, energy_type, DataType.CONSUMPTION, days)
    logger.debug(
        "Retrieved %d tariff and %d consumption rows for %s",
        len(tariff_rows),
        len(consumption_rows),
        energy_type.value,
    )

    tariffs = build_tariff_index(energy_type, tariff_rows, conflicts)
    readings = parse_consumption(energy_type, consumption_rows)
    return calculate_usage(energy_type, readings, tariffs, buckets)


def fetch_usage(
    user_id: str,
    start,
    end,
    source: RecordSource,
    tz: str = DEFAULT_TIMEZONE,
    conflicts: str = "last",
) -> list[CombinedRecord]:
    """Compute combined electricity and gas usage for every half hour.

    Covers [day start of start, end) in the given timezone. start and end may
    be datetimes, epoch seconds or ISO strings. Raises an EnergyUsageError if
    any bucket cannot be resolved; no partial series is returned.
    """
    start = to_instant(start)
    end = to_instant(end)
    buckets = buckets_for(start, end, tz)

    # The first bucket's rate is recorded one bucket before the day start
    days = partitions_for(buckets[0] - BUCKET_LENGTH, end, tz)
    logger.debug(
        "Fetching usage for %s: %d buckets over %d partitions", user_id, len(buckets), len(days)
    )

    electricity = load_usage(source, user_id, EnergyType.ELECTRICITY, days, buckets, conflicts)
    gas = load_usage(source, user_id, EnergyType.GAS, days, buckets, conflicts)
    return merge_series(electricity, gas)
