import logging
from datetime import timedelta

import pytest

from energy_usage.exceptions import MalformedRecordError, TariffConflictError
from energy_usage.models import ChargeKind, EnergyType
from energy_usage.tariffs import build_tariff_index, parse_tariff_rows


def tariff(instant, kind, rate):
    """A raw tariff row as returned by a record source."""
    return {
        "timestamp": instant,
        "chargeType": kind,
        "standingCharge (pence per day)": str(rate) if kind == "standingCharge" else "",
        "touPrice (pence per kWh)": str(rate) if kind == "touPrice" else "",
    }


def test_parse_tariff_rows(t0):
    changes = parse_tariff_rows([tariff(t0, "touPrice", 24.5), tariff(t0, "standingCharge", 53.1)])

    assert [c.charge_kind for c in changes] == [ChargeKind.TOU_PRICE, ChargeKind.STANDING_CHARGE]
    assert [c.rate for c in changes] == [24.5, 53.1]


def test_build_tariff_index_separates_standing_charges(t0):
    rows = [
        tariff(t0, "standingCharge", 53.1),
        tariff(t0, "touPrice", 24.5),
        tariff(t0 + timedelta(hours=7), "touPrice", 7.5),
    ]
    index = build_tariff_index(EnergyType.ELECTRICITY, rows)

    assert index.energy_type is EnergyType.ELECTRICITY
    assert index.rates == {t0: 24.5, t0 + timedelta(hours=7): 7.5}
    assert index.standing_charges == {t0: 53.1}
    assert len(index) == 2


def test_build_tariff_index_round_trip(t0):
    """Looking up each record's own instant returns its rate exactly."""
    rates = [19.87, 7.5, 31.04, 0.1 + 0.2]
    rows = [tariff(t0 + i * timedelta(minutes=30), "touPrice", r) for i, r in enumerate(rates)]
    index = build_tariff_index(EnergyType.GAS, rows)

    for row, rate in zip(rows, rates):
        assert row["timestamp"] in index
        assert index.get(row["timestamp"]) == rate


def test_build_tariff_index_lookup_is_exact(t0):
    index = build_tariff_index(EnergyType.ELECTRICITY, [tariff(t0, "touPrice", 20.0)])

    assert index.get(t0 + timedelta(minutes=30)) is None
    assert index.get(t0 - timedelta(minutes=30)) is None


def test_build_tariff_index_last_write_wins(t0, caplog):
    rows = [tariff(t0, "touPrice", 20.0), tariff(t0, "touPrice", 25.0)]

    with caplog.at_level(logging.WARNING):
        index = build_tariff_index(EnergyType.ELECTRICITY, rows)

    assert index.get(t0) == 25.0
    assert "Replacing electricity touPrice" in caplog.text


def test_build_tariff_index_error_policy_rejects_conflicts(t0):
    rows = [tariff(t0, "touPrice", 20.0), tariff(t0, "touPrice", 25.0)]

    with pytest.raises(TariffConflictError) as exc_info:
        build_tariff_index(EnergyType.GAS, rows, conflicts="error")

    assert exc_info.value.instant == t0
    assert exc_info.value.rates == (20.0, 25.0)


def test_build_tariff_index_error_policy_accepts_identical_duplicates(t0):
    rows = [tariff(t0, "touPrice", 20.0), tariff(t0, "touPrice", 20.0)]
    index = build_tariff_index(EnergyType.GAS, rows, conflicts="error")

    assert index.rates == {t0: 20.0}


def test_build_tariff_index_skips_unknown_charge_types(t0):
    rows = [tariff(t0, "touPrice", 20.0), tariff(t0, "exitFee", 1000.0)]
    index = build_tariff_index(EnergyType.ELECTRICITY, rows)

    assert index.rates == {t0: 20.0}
    assert index.standing_charges == {}


def test_build_tariff_index_unknown_policy(t0):
    with pytest.raises(ValueError, match="conflict policy"):
        build_tariff_index(EnergyType.ELECTRICITY, [], conflicts="first")


def test_build_tariff_index_error_policy_logs_standing_charge_conflicts(t0, caplog):
    """Standing charges never enter the cost, so conflicts there are not fatal."""
    rows = [
        tariff(t0, "standingCharge", 50.0),
        tariff(t0, "standingCharge", 53.1),
        tariff(t0, "touPrice", 20.0),
    ]

    with caplog.at_level(logging.WARNING):
        index = build_tariff_index(EnergyType.ELECTRICITY, rows, conflicts="error")

    assert index.standing_charges == {t0: 53.1}
    assert index.rates == {t0: 20.0}
    assert "Replacing electricity standingCharge" in caplog.text


@pytest.mark.parametrize("kind", ["touPrice", "standingCharge"])
def test_parse_tariff_rows_bad_rate(t0, kind):
    row = tariff(t0, kind, 0)
    column = "touPrice (pence per kWh)" if kind == "touPrice" else "standingCharge (pence per day)"
    row[column] = "TBC"

    with pytest.raises(MalformedRecordError, match=kind):
        parse_tariff_rows([row])
