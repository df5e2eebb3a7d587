"""Combine electricity and gas usage into one series."""

from collections.abc import Sequence

from .exceptions import StructuralMismatchError
from .models import CombinedRecord, UsageRecord


def merge_series(
    electricity: Sequence[UsageRecord], gas: Sequence[UsageRecord]
) -> list[CombinedRecord]:
    """Merge per-type usage into combined records in ascending bucket order."""
    by_bucket_elec = {r.bucket_start: r for r in electricity}
    by_bucket_gas = {r.bucket_start: r for r in gas}

    missing_electricity = sorted(by_bucket_gas.keys() - by_bucket_elec.keys())
    missing_gas = sorted(by_bucket_elec.keys() - by_bucket_gas.keys())
    duplicated = len(by_bucket_elec) != len(electricity) or len(by_bucket_gas) != len(gas)
    if missing_electricity or missing_gas or duplicated:
        raise StructuralMismatchError(missing_electricity, missing_gas)

    return [
        CombinedRecord(
            timestamp=bucket,
            electricity_cost=by_bucket_elec[bucket].cost,
            electricity_consumption=by_bucket_elec[bucket].usage_kwh,
            gas_cost=by_bucket_gas[bucket].cost,
            gas_consumption=by_bucket_gas[bucket].usage_kwh,
        )
        for bucket in sorted(by_bucket_elec)
    ]
