import pytest

from eafcalc.core.engine import compute_energy, energy_frame


def test_energy_totals_and_per_ton(original):
    res = compute_energy({"天然气": 2.0, "电力": 40.0, "蒸汽回收": 100.0}, original.energy)
    expected = 2.0 * 12.143 + 40.0 * 1.229 + 100.0 * -0.0943
    assert res.total_energy_tce == pytest.approx(expected)
    assert res.per_ton_energy_tce == pytest.approx(expected / 10)


def test_energy_unknown_carrier_and_bad_input():
    res = compute_energy({"gas": "n/a", "coal": 5}, {"gas": 2.0})
    assert [i.name for i in res.items] == ["gas"]
    assert res.total_energy_tce == 0.0


def test_energy_frame_total_row(original):
    res = compute_energy({"碳粉": 3.0}, original.energy)
    df = energy_frame(res)
    assert df.loc["TOTAL", "Energy (tce)"] == pytest.approx(3.0 * 0.9714)
