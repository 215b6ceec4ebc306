"""Scrap-fraction sweep: how totals move as the charge shifts from hot metal to scrap."""
from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import numpy as np
import pandas as pd

from eafcalc.api import CalcInputs, run_calculation

logger = logging.getLogger(__name__)


def sweep_scrap_fraction(inputs: CalcInputs, points: int = 11) -> pd.DataFrame:
    """Evaluate ``inputs`` at ``points`` evenly spaced scrap fractions in [0, 1].

    Everything except the scrap fraction is held fixed. Returns one row per
    fraction with total and per-ton emissions.
    """
    points = max(2, int(points))
    rows = []
    for frac in np.linspace(0.0, 1.0, points):
        scn = replace(inputs, params=replace(inputs.params, scrap_fraction=float(frac)))
        out = run_calculation(scn)
        rows.append({
            "scrap_fraction": float(frac),
            "total_emissions_t": out.totals.total_emissions_t,
            "per_ton_kg_co2": out.totals.per_ton_kg_co2,
        })
    df = pd.DataFrame(rows)
    logger.debug("Scrap sweep: %d points, per-ton range %.3f..%.3f",
                 len(df), df["per_ton_kg_co2"].min(), df["per_ton_kg_co2"].max())
    return df


def plot_sweep(df: pd.DataFrame, out_png: str | Path, title: str = "Emissions vs scrap fraction") -> Path:
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    out_png = Path(out_png)
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(df["scrap_fraction"], df["per_ton_kg_co2"], marker="o")
    ax.set_xlabel("Scrap fraction of charge")
    ax.set_ylabel("kg CO₂ / t steel")
    ax.set_title(title)
    ax.grid(alpha=0.2)
    plt.tight_layout()
    plt.savefig(out_png, dpi=160)
    plt.close(fig)
    return out_png
