import pytest

from eafcalc.api import CalcInputs, run_calculation
from eafcalc.reporting.pdf_report import report_lines, render_pdf_report, write_pdf_report
from eafcalc.scenarios.sweep import plot_sweep, sweep_scrap_fraction


@pytest.fixture(scope="module")
def run_out():
    return run_calculation(CalcInputs(intensities={"lime": 40, "electrode": 2}, preset="original"))


def test_report_lines_show_formulas(run_out):
    lines = report_lines(run_out)
    assert lines[0].endswith("24.00")
    assert lines[2].endswith("76.8000")


def test_render_pdf_report(run_out, tmp_path):
    data = render_pdf_report(run_out)
    assert data.startswith(b"%PDF")
    path = tmp_path / "r.pdf"
    write_pdf_report(run_out, path)
    assert path.read_bytes().startswith(b"%PDF")


def test_scrap_sweep_is_monotonic_for_original():
    df = sweep_scrap_fraction(CalcInputs(preset="original"), points=5)
    assert list(df["scrap_fraction"]) == [0.0, 0.25, 0.5, 0.75, 1.0]
    # hot metal carries the larger factor, so more scrap means less CO2
    assert df["per_ton_kg_co2"].is_monotonic_decreasing


def test_plot_sweep_writes_png(tmp_path):
    df = sweep_scrap_fraction(CalcInputs(), points=3)
    out = plot_sweep(df, tmp_path / "s.png")
    assert out.exists() and out.stat().st_size > 0


def test_failed_render_closes_figure(run_out, monkeypatch):
    import matplotlib.pyplot as plt
    from matplotlib.figure import Figure
    from eafcalc.reporting.pdf_report import ReportExportError

    def boom(self, *args, **kwargs):
        raise RuntimeError("disk full")

    plt.close("all")
    monkeypatch.setattr(Figure, "savefig", boom)
    with pytest.raises(ReportExportError):
        render_pdf_report(run_out)
    assert plt.get_fignums() == []
