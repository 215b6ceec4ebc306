# -*- coding: utf-8 -*-
"""
api.py
Central API between the front ends (Streamlit app, CLI) and the core engine.

- CalcInputs / RunOutputs dataclasses
- run_calculation(...) resolves the factor preset, layers session overrides,
  coerces inputs and runs the emissions and energy aggregators
- summary_dict(...) flattens the headline figures for logs and the CLI
- write_run_log(...) helper for simple JSON logs
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd

from eafcalc.models import (
    AnnualOutput,
    EmissionLineItem,
    EnergyResult,
    ProcessParameters,
    Totals,
)
from eafcalc.core.engine import calculate, compute_energy, emissions_frame, energy_frame, to_chart_rows
from eafcalc.core.factors import FactorTable, get_preset
from eafcalc.core.transforms import coerce_number, coerce_table, resolve_names

logger = logging.getLogger(__name__)


@dataclass
class CalcInputs:
    """One calculator evaluation.

    Args:
        params: furnace configuration
        intensities: material → per-ton intensity (natural unit); aliases allowed
        energy_inputs: carrier → quantity for the 10,000 t reference basis
        preset: factor preset name (None → default preset)
        factor_overrides: material → number or {unit, emission_factor, multiplier}
        energy_factor_overrides: carrier → number or {unit, factor}
    """
    params: ProcessParameters = field(default_factory=ProcessParameters)
    intensities: Dict[str, Any] = field(default_factory=dict)
    energy_inputs: Dict[str, Any] = field(default_factory=dict)
    preset: Optional[str] = None
    factor_overrides: Dict[str, Any] = field(default_factory=dict)
    energy_factor_overrides: Dict[str, Any] = field(default_factory=dict)
    top_n: int = 5


@dataclass
class RunOutputs:
    """Complete results of one evaluation.

    Attributes:
        annual: daily heats, daily output (t) and annual output (10,000 t)
        line_items: per-material emissions in factor-table order
        totals: total t CO2 and kg CO2 per t steel
        top_items: line items ranked by signed emissions
        energy: per-carrier tce, total and per-ton energy
        emissions: DataFrame view of line_items with a TOTAL row
        energy_table: DataFrame view of energy with a TOTAL row
        factors: the (possibly overridden) factor table that was used
        meta: run metadata (preset, dropped keys, fallback flags)
    """
    annual: AnnualOutput
    line_items: List[EmissionLineItem]
    totals: Totals
    top_items: List[EmissionLineItem]
    energy: EnergyResult
    emissions: pd.DataFrame
    energy_table: pd.DataFrame
    factors: FactorTable
    meta: Dict[str, Any] = field(default_factory=dict)

    def chart_rows(self, per_ton: bool = False) -> List[Dict[str, float]]:
        return to_chart_rows(self.line_items, per_ton=per_ton,
                             annual_output_10kt=self.annual.annual_output_10kt)


def coerce_parameters(raw: Dict[str, Any], base: Optional[ProcessParameters] = None) -> ProcessParameters:
    """Build ProcessParameters from loosely typed values; blanks fall back to 0."""
    base = base or ProcessParameters()
    known = asdict(base)
    values = {k: coerce_number(raw[k]) if k in raw else v for k, v in known.items()}
    unknown = set(raw) - set(known)
    if unknown:
        logger.debug("Unknown process parameters ignored: %s", sorted(unknown))
    return ProcessParameters(**values)


def resolve_factors(inputs: CalcInputs) -> FactorTable:
    base = get_preset(inputs.preset)
    mat_ov = resolve_names(inputs.factor_overrides or {}, base.material_aliases)
    en_ov = resolve_names(inputs.energy_factor_overrides or {}, base.energy_aliases)
    return base.with_overrides(mat_ov, en_ov)


def run_calculation(inputs: CalcInputs) -> RunOutputs:
    """
    Execute the calculator for the given inputs.
    Steps:
      1) Resolve preset and layer factor overrides (defaults untouched)
      2) Map alias names to table keys and coerce numbers
      3) Emissions chain: annual output → amounts → line items → totals
      4) Energy chain on its own factor table
    Raises:
        FactorTableError: if the preset can't be found or read
    """
    factors = resolve_factors(inputs)
    intensities = coerce_table(resolve_names(inputs.intensities or {}, factors.material_aliases))
    energy_inputs = coerce_table(resolve_names(inputs.energy_inputs or {}, factors.energy_aliases))

    result = calculate(inputs.params, intensities, factors, top_n=inputs.top_n)
    energy = compute_energy(energy_inputs, factors.energy)

    meta = {
        "preset": factors.name,
        "dropped_materials": result.dropped,
        "dropped_energy_carriers": [k for k in energy_inputs if k not in factors.energy],
        "per_ton_fallback": result.totals.per_ton_fallback,
        "overridden_materials": list(factors.overridden_materials),
    }
    if result.totals.per_ton_fallback:
        logger.info("Annual output is zero; per-ton emissions are not meaningful for this run")

    return RunOutputs(
        annual=result.annual,
        line_items=result.line_items,
        totals=result.totals,
        top_items=result.top_items,
        energy=energy,
        emissions=emissions_frame(result),
        energy_table=energy_frame(energy),
        factors=factors,
        meta=meta,
    )


def summary_dict(out: RunOutputs) -> Dict[str, Any]:
    """Headline scalars (JSON-able)."""
    return {
        "daily_furnace_count": out.annual.daily_furnace_count,
        "daily_output_t": out.annual.daily_output_t,
        "annual_output_10kt": out.annual.annual_output_10kt,
        "total_emissions_t": out.totals.total_emissions_t,
        "per_ton_kg_co2": out.totals.per_ton_kg_co2,
        "total_energy_tce": out.energy.total_energy_tce,
        "per_ton_energy_tce": out.energy.per_ton_energy_tce,
        "top_items": [{"name": i.name, "value": i.emission_t} for i in out.top_items],
    }


def write_run_log(log_dir: str, payload: Dict[str, Any]) -> str:
    """
    Write a compact JSON log (inputs + headline results). Returns the file path.

    Log files are named with UTC timestamp: run_YYYYMMDDTHHMMSSZ.json
    """
    os.makedirs(log_dir, exist_ok=True)
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    fpath = os.path.join(log_dir, f"run_{ts}.json")
    with open(fpath, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    return fpath


__all__ = [
    "CalcInputs",
    "RunOutputs",
    "coerce_parameters",
    "resolve_factors",
    "run_calculation",
    "summary_dict",
    "write_run_log",
]
