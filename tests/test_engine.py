import math

import pytest

from eafcalc.core.engine import (
    aggregate_totals,
    calculate,
    compute_annual_output,
    compute_emissions,
    compute_material_amounts,
    rank_top_n,
    to_chart_rows,
)
from eafcalc.models import EmissionLineItem, ProcessParameters

HOT_METAL = "铁水、生铁"
SCRAP = "废钢"
STEAM = "蒸汽回收"


def test_annual_output_reference_plant(params):
    a = compute_annual_output(params)
    assert a.daily_furnace_count == pytest.approx(24.0)
    assert a.daily_output_t == pytest.approx(2400.0)
    assert a.annual_output_10kt == pytest.approx(76.8)
    assert f"{a.annual_output_10kt:.4f}" == "76.8000"


def test_charge_split_amounts_in_tonnes(params, original):
    res = calculate(params, {}, original)
    assert res.amounts[HOT_METAL] == pytest.approx(1.087 * 0.3 * 76.8 * 10000)
    assert res.amounts[SCRAP] == pytest.approx(1.087 * 0.7 * 76.8 * 10000)


@pytest.mark.parametrize("frac", [0.0, 0.25, 0.7, 1.0])
def test_charge_mass_identity(original, frac):
    p = ProcessParameters(scrap_fraction=frac)
    amounts = compute_material_amounts({}, p, 76.8, original)
    assert amounts[HOT_METAL] + amounts[SCRAP] == pytest.approx(1.087 * 76.8 * 10000)


def test_unit_conversion_kg_vs_tonne(params, original):
    # kg-like units are divided by 1000; t/t is not
    amounts = compute_material_amounts({"石灰": 40.0, "电力": 380.0}, params, 76.8, original)
    assert amounts["石灰"] == pytest.approx(40.0 * 768000 / 1000)
    assert amounts["电力"] == pytest.approx(380.0 * 768000 / 1000)

    tonne_table = original.with_overrides({"合金": {"unit": "t/t"}})
    amounts = compute_material_amounts({"合金": 0.02}, params, 76.8, tonne_table)
    assert amounts["合金"] == pytest.approx(0.02 * 768000)


def test_charge_keys_ignore_intensity_entries(params, original):
    res = calculate(params, {HOT_METAL: 999.0, SCRAP: 999.0}, original)
    assert res.amounts[HOT_METAL] == pytest.approx(1.087 * 0.3 * 768000)
    assert res.amounts[SCRAP] == pytest.approx(1.087 * 0.7 * 768000)


def test_emissions_apply_factor_and_multiplier(params, original):
    amounts = compute_material_amounts({STEAM: 100.0}, params, 76.8, original)
    items = {i.name: i for i in compute_emissions(amounts, original)}
    # original revision folds the 0.0026 steam adjustment into the multiplier
    assert items[STEAM].emission_t == pytest.approx(76800 * 0.110 * 0.0026)


def test_totals_and_per_ton(params, original):
    res = calculate(params, {"电极": 2.0}, original)
    expected = (
        1.087 * 0.3 * 768000 * 1.73932
        + 1.087 * 0.7 * 768000 * 0.0154
        + 2.0 * 768 * 3.663
    )
    assert res.totals.total_emissions_t == pytest.approx(expected)
    assert res.totals.per_ton_kg_co2 == pytest.approx(expected * 1000 / 768000)
    assert res.totals.per_ton_fallback is False


def test_unknown_material_contributes_nothing(params, original):
    base = calculate(params, {"石灰": 40.0}, original)
    with_unknown = calculate(params, {"石灰": 40.0, "unobtainium": 1e9}, original)
    assert with_unknown.totals.total_emissions_t == base.totals.total_emissions_t
    assert "unobtainium" not in with_unknown.amounts
    assert with_unknown.dropped == ["unobtainium"]


@pytest.mark.parametrize("field", ["furnace_capacity_t", "cycle_minutes", "annual_days"])
def test_zero_inputs_give_finite_per_ton(original, field):
    p = ProcessParameters(**{field: 0.0})
    res = calculate(p, {"石灰": 40.0}, original)
    assert math.isfinite(res.totals.per_ton_kg_co2)
    assert math.isfinite(res.annual.daily_furnace_count)
    assert res.totals.per_ton_fallback is True


def test_aggregate_totals_fallback_divisor():
    items = [EmissionLineItem("x", 1.0, 5.0)]
    t = aggregate_totals(items, 0.0)
    assert t.per_ton_kg_co2 == pytest.approx(5.0 * 1000)
    assert t.per_ton_fallback


def test_negative_factor_reduces_total_and_ranks_low(params, reconciled):
    base = calculate(params, {"石灰": 40.0, "电极": 2.0}, reconciled)
    res = calculate(params, {"石灰": 40.0, "电极": 2.0, STEAM: 100.0}, reconciled)
    steam = next(i for i in res.line_items if i.name == STEAM)
    assert steam.emission_t == pytest.approx(76800 * -0.110)
    assert res.totals.total_emissions_t == pytest.approx(base.totals.total_emissions_t + steam.emission_t)

    ranked = rank_top_n(res.line_items, n=len(res.line_items))
    assert ranked[-1].name == STEAM
    assert STEAM not in [i.name for i in res.top_items]


def test_rank_top_n_signed_order():
    items = [
        EmissionLineItem("a", 0, 3.0),
        EmissionLineItem("b", 0, -50.0),
        EmissionLineItem("c", 0, 10.0),
        EmissionLineItem("d", 0, 0.0),
    ]
    assert [i.name for i in rank_top_n(items, 3)] == ["c", "a", "d"]
    assert rank_top_n(items, 0) == []


def test_calculate_is_idempotent(params, reconciled):
    intens = {"石灰": "40", "电力": 380, STEAM: 12.5}
    r1 = calculate(params, intens, reconciled)
    r2 = calculate(params, intens, reconciled)
    assert r1 == r2


def test_invalid_intensity_is_zero(params, original):
    res = calculate(params, {"石灰": "abc", "电极": None, "合金": ""}, original)
    amounts = res.amounts
    assert amounts["石灰"] == 0.0 and amounts["电极"] == 0.0 and amounts["合金"] == 0.0


def test_chart_rows_per_ton_view(params, original):
    res = calculate(params, {}, original)
    absolute = to_chart_rows(res.line_items)
    per_ton = to_chart_rows(res.line_items, per_ton=True, annual_output_10kt=76.8)
    assert [r["name"] for r in absolute] == [i.name for i in res.line_items]
    assert sum(r["value"] for r in per_ton) == pytest.approx(res.totals.per_ton_kg_co2)
