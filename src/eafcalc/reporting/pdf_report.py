"""One-page PDF snapshot of a calculator run (matplotlib, headless)."""
from __future__ import annotations

import io
import logging
from typing import List

import matplotlib
matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt

from eafcalc.core.viz import COLORS

logger = logging.getLogger(__name__)

# CJK-capable fonts first so Chinese material names render when available
FONT_FALLBACK = ["Noto Sans CJK SC", "Source Han Sans SC", "SimHei", "Microsoft YaHei", "DejaVu Sans"]


class ReportExportError(RuntimeError):
    """Raised when the PDF report can't be rendered."""


def report_lines(out) -> List[str]:
    """Formula lines shown at the top of the report."""
    a = out.annual
    return [
        f"Daily heats = 1440 / cycle = {a.daily_furnace_count:.2f}",
        f"Daily output (t) = capacity × daily heats = {a.daily_output_t:.2f}",
        f"Annual output (10,000 t) = daily output × days / 10000 = {a.annual_output_10kt:.4f}",
        f"Total emissions: {out.totals.total_emissions_t:,.2f} t CO₂",
        f"Emissions per tonne of steel: {out.totals.per_ton_kg_co2:,.3f} kg CO₂/t",
        f"Total energy: {out.energy.total_energy_tce:,.3f} tce"
        f"   per tonne: {out.energy.per_ton_energy_tce:,.4f}",
    ]


def render_pdf_report(out, title: str = "EAF carbon report") -> bytes:
    """Render ``RunOutputs`` to PDF bytes.

    Raises:
        ReportExportError: if matplotlib fails to build or save the figure
    """
    fig = None
    try:
        with plt.rc_context({"font.sans-serif": FONT_FALLBACK, "font.family": "sans-serif"}):
            fig = plt.figure(figsize=(8.27, 11.69))  # A4 portrait
            fig.suptitle(title, fontsize=14, y=0.97)

            ax_txt = fig.add_axes([0.06, 0.78, 0.88, 0.16]); ax_txt.axis("off")
            for k, line in enumerate(report_lines(out)):
                ax_txt.text(0.0, 1.0 - k * 0.17, line, fontsize=10, va="top")

            ax_tab = fig.add_axes([0.06, 0.42, 0.88, 0.34]); ax_tab.axis("off")
            rows = [[i.name, f"{i.amount:,.2f}", f"{i.emission_t:,.3f}"] for i in out.line_items]
            if rows:
                tab = ax_tab.table(cellText=rows, colLabels=["Material", "Amount (t)", "CO₂ (t)"],
                                   loc="upper center", cellLoc="right", colLoc="center")
                tab.auto_set_font_size(False); tab.set_fontsize(8)

            ax_pie = fig.add_axes([0.2, 0.04, 0.6, 0.34])
            top = [i for i in out.top_items if i.emission_t > 0]
            if top:
                ax_pie.pie(
                    [i.emission_t for i in top],
                    labels=[f"{i.name}: {round(i.emission_t)}" for i in top],
                    colors=[COLORS[k % len(COLORS)] for k in range(len(top))],
                    textprops={"fontsize": 8},
                )
            ax_pie.set_title("Top emitters (t CO₂)", fontsize=10)

            buf = io.BytesIO()
            fig.savefig(buf, format="pdf")
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("PDF export failed: %s", e)
        raise ReportExportError(str(e)) from e
    finally:
        if fig is not None:
            plt.close(fig)
    return buf.getvalue()


def write_pdf_report(out, path, title: str = "EAF carbon report") -> None:
    data = render_pdf_report(out, title=title)
    with open(path, "wb") as f:
        f.write(data)
