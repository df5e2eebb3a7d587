"""Tariff record parsing and point-in-time rate lookup."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

from .exceptions import MalformedRecordError, TariffConflictError
from .models import ChargeKind, EnergyType, TariffChange

logger = logging.getLogger(__name__)

CHARGE_TYPE_COLUMN = "chargeType"
TOU_PRICE_COLUMN = "touPrice (pence per kWh)"
STANDING_CHARGE_COLUMN = "standingCharge (pence per day)"

CONFLICT_POLICIES = ("last", "error")


@dataclass
class TariffIndex:
    """Time-of-use rates and standing charges for one energy type, keyed by instant.

    Lookups are exact: an instant without a record has no rate.
    """

    energy_type: EnergyType
    rates: dict[datetime, float] = field(default_factory=dict)
    standing_charges: dict[datetime, float] = field(default_factory=dict)

    def get(self, instant: datetime) -> float | None:
        """Get the time-of-use rate (pence/kWh) recorded at an instant."""
        return self.rates.get(instant)

    def __contains__(self, instant: datetime) -> bool:
        return instant in self.rates

    def __len__(self) -> int:
        return len(self.rates)


def parse_tariff_rows(rows: Iterable[Mapping]) -> list[TariffChange]:
    """Parse raw tariff rows into tariff changes, skipping unknown charge types."""
    changes = []
    for row in rows:
        try:
            kind = ChargeKind(row[CHARGE_TYPE_COLUMN])
        except ValueError:
            logger.debug("Skipping tariff row with charge type %r", row[CHARGE_TYPE_COLUMN])
            continue

        column = TOU_PRICE_COLUMN if kind is ChargeKind.TOU_PRICE else STANDING_CHARGE_COLUMN
        try:
            rate = float(row[column])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedRecordError(
                f"Bad {kind.value} value at {row['timestamp'].isoformat()}: {row.get(column)!r}"
            ) from e
        changes.append(TariffChange(instant=row["timestamp"], charge_kind=kind, rate=rate))
    return changes


def build_tariff_index(
    energy_type: EnergyType, rows: Iterable[Mapping], conflicts: str = "last"
) -> TariffIndex:
    """Build a tariff index from raw tariff rows.

    With conflicts="last", a later row at an instant already seen replaces the
    earlier one, so rows must be supplied in chronological partition order.
    With conflicts="error", differing time-of-use rates at one instant raise
    TariffConflictError and the rates no longer depend on row order. Standing
    charges never take part in costing, so their duplicates are only logged.
    """
    if conflicts not in CONFLICT_POLICIES:
        raise ValueError(f"Unknown tariff conflict policy: {conflicts!r}")

    index = TariffIndex(energy_type)
    for change in parse_tariff_rows(rows):
        target = index.rates if change.charge_kind is ChargeKind.TOU_PRICE else index.standing_charges

        previous = target.get(change.instant)
        if previous is not None and previous != change.rate:
            if conflicts == "error" and change.charge_kind is ChargeKind.TOU_PRICE:
                raise TariffConflictError(energy_type, change.instant, (previous, change.rate))
            logger.warning(
                "Replacing %s %s at %s: %s -> %s",
                energy_type.value,
                change.charge_kind.value,
                change.instant.isoformat(),
                previous,
                change.rate,
            )
        target[change.instant] = change.rate

    logger.debug(
        "Built %s tariff index: %d rates, %d standing charges",
        energy_type.value,
        len(index.rates),
        len(index.standing_charges),
    )
    return index
