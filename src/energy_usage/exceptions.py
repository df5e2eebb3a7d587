"""Errors raised while computing usage series."""

from datetime import datetime

from .models import EnergyType


class EnergyUsageError(Exception):
    """Base exception for usage computation errors."""
    pass


class MalformedRequestError(EnergyUsageError, ValueError):
    """The requested interval cannot be resolved or is empty."""
    pass


class RetrievalError(EnergyUsageError):
    """Raw records could not be retrieved from storage."""
    pass


class MalformedRecordError(RetrievalError):
    """A retrieved row has a missing or non-numeric value."""
    pass


class LookupFailure(EnergyUsageError, LookupError):
    """A value required for a bucket is absent from the retrieved data."""

    what = "value"

    def __init__(self, energy_type: EnergyType, bucket: datetime, instant: datetime | None = None):
        self.energy_type = energy_type
        self.bucket = bucket
        self.instant = instant or bucket
        super().__init__(
            f"No {energy_type.value} {self.what} at {self.instant.isoformat()} "
            f"(bucket {bucket.isoformat()})"
        )


class MissingReadingError(LookupFailure):
    what = "consumption reading"


class MissingTariffError(LookupFailure):
    what = "time-of-use rate"


class StructuralMismatchError(EnergyUsageError):
    """Electricity and gas series do not cover the same buckets."""

    def __init__(self, missing_electricity: list[datetime], missing_gas: list[datetime]):
        self.missing_electricity = missing_electricity
        self.missing_gas = missing_gas
        super().__init__(
            f"Bucket sets differ: {len(missing_electricity)} missing from electricity, "
            f"{len(missing_gas)} missing from gas"
        )


class TariffConflictError(EnergyUsageError):
    """Two tariff records at the same instant disagree on the rate."""

    def __init__(self, energy_type: EnergyType, instant: datetime, rates: tuple[float, float]):
        self.energy_type = energy_type
        self.instant = instant
        self.rates = rates
        super().__init__(
            f"Conflicting {energy_type.value} rates at {instant.isoformat()}: "
            f"{rates[0]} vs {rates[1]}"
        )
