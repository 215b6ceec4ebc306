import json
from pathlib import Path

import pytest

from eafcalc.api import (
    CalcInputs,
    coerce_parameters,
    run_calculation,
    summary_dict,
    write_run_log,
)
from eafcalc.models import ProcessParameters


def test_run_calculation_with_aliases():
    out = run_calculation(CalcInputs(
        intensities={"lime": 40, "electricity": "380"},
        energy_inputs={"electricity": 40.0},
        preset="original",
    ))
    amounts = {i.name: i.amount for i in out.line_items}
    assert amounts["石灰"] == pytest.approx(40 * 768)
    assert amounts["电力"] == pytest.approx(380 * 768)
    assert out.energy.total_energy_tce == pytest.approx(40.0 * 1.229)
    assert out.meta["preset"] == "original"
    assert out.meta["dropped_materials"] == []


def test_factor_override_is_session_local():
    base = run_calculation(CalcInputs(intensities={"电极": 2.0}, preset="original"))
    bumped = run_calculation(CalcInputs(
        intensities={"电极": 2.0}, preset="original", factor_overrides={"electrode": 7.326},
    ))
    delta = bumped.totals.total_emissions_t - base.totals.total_emissions_t
    assert delta == pytest.approx(1536 * (7.326 - 3.663))
    # a fresh run without overrides sees the defaults again
    again = run_calculation(CalcInputs(intensities={"电极": 2.0}, preset="original"))
    assert again.totals.total_emissions_t == base.totals.total_emissions_t


def test_emissions_frame_has_total_row():
    out = run_calculation(CalcInputs(preset="original"))
    df = out.emissions
    assert "TOTAL" in df.index
    assert df.loc["TOTAL", "CO2 (t)"] == pytest.approx(out.totals.total_emissions_t)
    assert df.loc["TOTAL", "CO2 (kg/t steel)"] == pytest.approx(out.totals.per_ton_kg_co2)


def test_zero_output_is_flagged():
    out = run_calculation(CalcInputs(params=ProcessParameters(cycle_minutes=0)))
    assert out.meta["per_ton_fallback"] is True
    assert out.totals.per_ton_kg_co2 == 0.0


def test_coerce_parameters_defaults_and_garbage():
    p = coerce_parameters({"cycle_minutes": "45", "annual_days": "", "bogus": 1})
    assert p.cycle_minutes == 45.0
    assert p.annual_days == 0.0
    assert p.furnace_capacity_t == 100.0


def test_summary_and_run_log(tmp_path):
    out = run_calculation(CalcInputs(preset="reconciled"))
    summary = summary_dict(out)
    assert summary["daily_furnace_count"] == pytest.approx(24.0)
    assert len(summary["top_items"]) == 5
    path = write_run_log(str(tmp_path / "logs"), {"summary": summary})
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    assert data["summary"]["annual_output_10kt"] == pytest.approx(76.8)


def test_meta_lists_applied_overrides_by_table_key():
    out = run_calculation(CalcInputs(
        preset="original", factor_overrides={"electrode": 7.326, "not_a_material": 1.0},
    ))
    assert out.meta["overridden_materials"] == ["电极"]
