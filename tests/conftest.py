import csv
from datetime import date, datetime, timedelta, timezone

import pytest

from energy_usage.collectors.base import TIMESTAMP_COLUMN, TIMESTAMP_FORMAT, partition_path
from energy_usage.models import BUCKET_LENGTH, DataType, EnergyType

T0 = datetime(2024, 1, 15, tzinfo=timezone.utc)

TARIFF_FIELDS = [
    TIMESTAMP_COLUMN,
    "chargeType",
    "standingCharge (pence per day)",
    "touPrice (pence per kWh)",
]


@pytest.fixture
def t0():
    """Midnight UTC at the start of the test day."""
    return T0


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def write_partition(data_dir):
    """Write raw CSV rows to the partition file for a day."""

    def _write(user_id, energy_type, data_type, day, fieldnames, rows):
        path = data_dir / partition_path(user_id, energy_type, data_type, day)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)
        return path

    return _write


def tou_row(instant, rate):
    return {
        TIMESTAMP_COLUMN: instant.strftime(TIMESTAMP_FORMAT),
        "chargeType": "touPrice",
        "standingCharge (pence per day)": "",
        "touPrice (pence per kWh)": str(rate),
    }


def standing_row(instant, charge):
    return {
        TIMESTAMP_COLUMN: instant.strftime(TIMESTAMP_FORMAT),
        "chargeType": "standingCharge",
        "standingCharge (pence per day)": str(charge),
        "touPrice (pence per kWh)": "",
    }


@pytest.fixture
def household(write_partition):
    """Write one full UTC day (2024-01-15) of readings and tariffs for user "1".

    Electricity: 0.5 kWh per half hour at 20p/kWh, standing charge 50p/day.
    Gas: 0.1 m3 per half hour at 6p/kWh, standing charge 30p/day.
    The rate for the first bucket lives in the previous day's partition.
    """
    prev_day = date(2024, 1, 14)
    day = date(2024, 1, 15)
    instants = [T0 + i * BUCKET_LENGTH for i in range(48)]

    for energy_type, column, quantity, rate, charge in [
        (EnergyType.ELECTRICITY, "energyConsumption (kWh)", "0.5", 20.0, 50.0),
        (EnergyType.GAS, "energyConsumption (m3)", "0.1", 6.0, 30.0),
    ]:
        write_partition(
            "1",
            energy_type,
            DataType.CONSUMPTION,
            day,
            [TIMESTAMP_COLUMN, column],
            [{TIMESTAMP_COLUMN: i.strftime(TIMESTAMP_FORMAT), column: quantity} for i in instants],
        )
        write_partition(
            "1",
            energy_type,
            DataType.TARIFF,
            prev_day,
            TARIFF_FIELDS,
            [tou_row(T0 - timedelta(minutes=30), rate)],
        )
        write_partition(
            "1",
            energy_type,
            DataType.TARIFF,
            day,
            TARIFF_FIELDS,
            [standing_row(T0, charge)] + [tou_row(i, rate) for i in instants],
        )

    return {"user_id": "1", "day": day, "instants": instants}
