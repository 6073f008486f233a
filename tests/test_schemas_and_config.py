import json

import pytest
from pydantic import ValidationError

from marginiq.config.benchmarks import DEFAULT_BENCHMARKS, BenchmarkBand, load_benchmarks
from marginiq.schemas import FinancialPeriod


@pytest.mark.parametrize("raw,expected", [("mar", "March"), ("SEPTEMBER", "September"), (" Dec ", "December")])
def test_month_names_are_normalised(raw, expected) -> None:
    assert FinancialPeriod(month=raw, year=2025).month == expected


def test_unknown_month_is_rejected() -> None:
    with pytest.raises(ValidationError):
        FinancialPeriod(month="Smarch", year=2025)


def test_negative_money_is_rejected() -> None:
    with pytest.raises(ValidationError):
        FinancialPeriod(month="May", year=2025, revenue=-1)


def test_camel_case_round_trip() -> None:
    period = FinancialPeriod.model_validate({"month": "May", "year": 2025, "foodCost": 120, "totalCovers": 12})

    assert period.food_cost == 120
    assert period.model_dump(by_alias=True)["totalCovers"] == 12
    assert period.total_costs == pytest.approx(120)


def test_benchmark_band_must_be_ordered() -> None:
    with pytest.raises(ValidationError):
        BenchmarkBand(low=40, target=30, high=35)


def test_default_table_is_immutable() -> None:
    with pytest.raises(ValidationError):
        DEFAULT_BENCHMARKS.wages.current_hourly_rate = 20


def test_load_benchmarks_override(tmp_path) -> None:
    override = tmp_path / "benchmarks.json"
    override.write_text(json.dumps({"wages": {"current_hourly_rate": 12.71, "projected_hourly_rate": 13.50}}))

    table = load_benchmarks(str(override))

    assert table.wages.projected_hourly_rate == pytest.approx(13.50)
    assert table.uk.food_cost_pct.high == DEFAULT_BENCHMARKS.uk.food_cost_pct.high


def test_load_benchmarks_missing_file_uses_defaults(tmp_path) -> None:
    assert load_benchmarks(str(tmp_path / "missing.json")) is DEFAULT_BENCHMARKS


def test_load_benchmarks_rejects_unknown_keys(tmp_path) -> None:
    override = tmp_path / "benchmarks.json"
    override.write_text(json.dumps({"wagez": {}}))

    with pytest.raises(ValidationError):
        load_benchmarks(str(override))
