"""Data models for meter readings, tariffs and computed usage."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

BUCKET_LENGTH = timedelta(minutes=30)


class EnergyType(str, Enum):
    ELECTRICITY = "electricity"
    GAS = "gas"


class DataType(str, Enum):
    CONSUMPTION = "consumption"
    TARIFF = "tariff"


class ChargeKind(str, Enum):
    """Values of the raw ``chargeType`` column."""

    STANDING_CHARGE = "standingCharge"
    TOU_PRICE = "touPrice"


@dataclass(frozen=True)
class ConsumptionReading:
    """A single meter sample in source units (kWh or m3)."""

    instant: datetime
    quantity: float


@dataclass(frozen=True)
class TariffChange:
    """A rate taking effect at an instant until the next change of the same kind."""

    instant: datetime
    charge_kind: ChargeKind
    rate: float  # pence per kWh, or pence per day for standing charges


@dataclass(frozen=True)
class UsageRecord:
    """Consumption and cost for one energy type in one half-hour bucket."""

    bucket_start: datetime
    usage_kwh: float
    cost: float  # pence

    @property
    def cost_display(self) -> str:
        return format_cost(self.cost)


@dataclass(frozen=True)
class CombinedRecord:
    """Electricity and gas usage for one half-hour bucket."""

    timestamp: datetime
    electricity_cost: float
    electricity_consumption: float
    gas_cost: float
    gas_consumption: float

    def to_dict(self) -> dict:
        """Render in the JSON shape served to charting clients."""
        return {
            "timestamp": int(self.timestamp.timestamp()),
            "electricityCost": format_cost(self.electricity_cost),
            "electricityConsumption": self.electricity_consumption,
            "gasCost": format_cost(self.gas_cost),
            "gasConsumption": self.gas_consumption,
        }


def format_cost(pence: float) -> str:
    """Round a cost to two decimal places for display.

    Exact halves round away from zero (12.125 -> "12.13").
    """
    rounded = Decimal(pence).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        rounded = abs(rounded)
    return f"{rounded:f}"
