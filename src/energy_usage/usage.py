"""Per-bucket consumption and cost calculation."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime

from .exceptions import MalformedRecordError, MissingReadingError, MissingTariffError
from .models import BUCKET_LENGTH, ConsumptionReading, EnergyType, UsageRecord
from .tariffs import TariffIndex
from .units import m3_to_kwh

logger = logging.getLogger(__name__)

CONSUMPTION_COLUMNS = {
    EnergyType.ELECTRICITY: "energyConsumption (kWh)",
    EnergyType.GAS: "energyConsumption (m3)",
}


def parse_readings(energy_type: EnergyType, rows: Iterable[Mapping]) -> list[ConsumptionReading]:
    """Parse raw consumption rows into readings in source units."""
    column = CONSUMPTION_COLUMNS[energy_type]
    readings = []
    for row in rows:
        try:
            quantity = float(row[column])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedRecordError(
                f"Bad {energy_type.value} consumption at {row['timestamp'].isoformat()}: "
                f"{row.get(column)!r}"
            ) from e
        readings.append(ConsumptionReading(instant=row["timestamp"], quantity=quantity))
    return readings


def parse_consumption(energy_type: EnergyType, rows: Iterable[Mapping]) -> dict[datetime, float]:
    """Parse raw consumption rows into kWh keyed by reading instant.

    Gas readings are converted from m3. If two rows share an instant the later
    one wins.
    """
    consumption: dict[datetime, float] = {}
    for reading in parse_readings(energy_type, rows):
        kwh = m3_to_kwh(reading.quantity) if energy_type is EnergyType.GAS else reading.quantity

        previous = consumption.get(reading.instant)
        if previous is not None and previous != kwh:
            logger.warning(
                "Duplicate %s reading at %s: %s -> %s",
                energy_type.value,
                reading.instant.isoformat(),
                previous,
                kwh,
            )
        consumption[reading.instant] = kwh
    return consumption


def calculate_usage(
    energy_type: EnergyType,
    readings: Mapping[datetime, float],
    tariffs: TariffIndex,
    buckets: Sequence[datetime],
) -> list[UsageRecord]:
    """Calculate usage and cost for every bucket.

    The reading is taken at the bucket start and the rate one bucket earlier.
    Raises a LookupFailure on the first bucket that cannot be resolved.
    """
    records = []
    for bucket in buckets:
        usage_kwh = readings.get(bucket)
        if usage_kwh is None:
            raise MissingReadingError(energy_type, bucket)

        rate_instant = bucket - BUCKET_LENGTH
        rate = tariffs.get(rate_instant)
        if rate is None:
            raise MissingTariffError(energy_type, bucket, rate_instant)

        records.append(UsageRecord(bucket_start=bucket, usage_kwh=usage_kwh, cost=usage_kwh * rate))
    return records
