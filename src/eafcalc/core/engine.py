"""
Core computation engine for the EAF calculator. The main entry point is
'calculate', which turns furnace parameters and per-ton consumption
intensities into annual material amounts, itemized CO2 emissions and totals.
Every function here is pure: the factor table is passed in, nothing is cached
or mutated, and bad numbers are coerced to 0 instead of raising.
Energy (tce) is computed by 'compute_energy', which shares nothing with the
emissions path apart from the coercion helper.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd

from eafcalc.models import (
    AnnualOutput,
    EmissionLineItem,
    EmissionResult,
    EnergyLineItem,
    EnergyResult,
    ProcessParameters,
    Totals,
)
from eafcalc.core.factors import FactorTable
from eafcalc.core.transforms import coerce_number

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 1440.0
TEN_KT = 10000.0               # annual output is reported in units of 10,000 t
KG_PER_T = 1000.0
ENERGY_REFERENCE_BASIS = 10.0  # energy inputs are given for a 10,000 t basis


def compute_annual_output(params: ProcessParameters) -> AnnualOutput:
    """daily heats = 1440 / cycle; annual output in 10,000 t."""
    cycle = coerce_number(params.cycle_minutes)
    capacity = coerce_number(params.furnace_capacity_t)
    days = coerce_number(params.annual_days)

    daily_count = MINUTES_PER_DAY / cycle if cycle > 0 else 0.0
    daily_output = capacity * daily_count
    annual = daily_output * days / TEN_KT
    return AnnualOutput(
        daily_furnace_count=daily_count,
        daily_output_t=daily_output,
        annual_output_10kt=annual,
    )


def compute_material_amounts(
    intensities: Mapping[str, object],
    params: ProcessParameters,
    annual_output_10kt: float,
    factors: FactorTable,
) -> Dict[str, float]:
    """Annual tonnes of each material in the factor table.

    kg-like units (kg/t, kWh/t, Nm³/t) are divided by 1000, ``t/t`` is not.
    Hot metal and scrap always come from the charge split and replace any
    intensity given under the same name. Keys unknown to the factor table
    are dropped.
    """
    annual_t = coerce_number(annual_output_10kt) * TEN_KT
    amounts: Dict[str, float] = {}
    for material, mf in factors.materials.items():
        if material in factors.derived_keys:
            continue
        divisor = 1.0 if mf.tonne_based else KG_PER_T
        amounts[material] = coerce_number(intensities.get(material)) * annual_t / divisor

    ratio = coerce_number(params.steel_to_metal_ratio)
    frac = coerce_number(params.scrap_fraction)
    if factors.hot_metal_key:
        amounts[factors.hot_metal_key] = ratio * (1.0 - frac) * annual_t
    if factors.scrap_key:
        amounts[factors.scrap_key] = ratio * frac * annual_t
    return amounts


def compute_emissions(amounts: Mapping[str, float], factors: FactorTable) -> List[EmissionLineItem]:
    """emission = amount × factor × multiplier; negatives are kept as credits."""
    items: List[EmissionLineItem] = []
    for material, amount in amounts.items():
        mf = factors.materials.get(material)
        factor = mf.emission_factor if mf is not None else 0.0
        multiplier = mf.multiplier if mf is not None else 1.0
        items.append(EmissionLineItem(
            name=material,
            amount=float(amount),
            emission_t=float(amount) * factor * multiplier,
        ))
    return items


def aggregate_totals(items: Iterable[EmissionLineItem], annual_output_10kt: float) -> Totals:
    """Total t CO2 and kg CO2 per t of steel.

    A zero annual output would make the per-ton figure undefined; the
    denominator falls back to 1 and the result is flagged.
    """
    total = sum(i.emission_t for i in items)
    denom = coerce_number(annual_output_10kt) * TEN_KT
    fallback = denom == 0
    if fallback:
        logger.debug("Annual output is zero; per-ton emissions use a divisor of 1")
        denom = 1.0
    return Totals(
        total_emissions_t=total,
        per_ton_kg_co2=total * KG_PER_T / denom,
        per_ton_fallback=fallback,
    )


def rank_top_n(items: Iterable[EmissionLineItem], n: int = 5) -> List[EmissionLineItem]:
    """Largest first by signed value, so credits sink to the bottom."""
    return sorted(items, key=lambda i: i.emission_t, reverse=True)[:max(0, int(n))]


def compute_energy(
    energy_inputs: Mapping[str, object],
    energy_factors: Mapping[str, object],
) -> EnergyResult:
    """tce per carrier = input × factor; per-ton = total / 10.

    ``energy_factors`` maps carrier → EnergyFactor (or a bare number).
    Carriers without a factor are skipped.
    """
    items: List[EnergyLineItem] = []
    for carrier, ef in energy_factors.items():
        factor = coerce_number(getattr(ef, "factor", ef))
        qty = coerce_number(energy_inputs.get(carrier))
        items.append(EnergyLineItem(name=carrier, quantity=qty, energy_tce=qty * factor))
    unknown = [k for k in energy_inputs if k not in energy_factors]
    if unknown:
        logger.debug("Energy carriers without a factor ignored: %s", unknown)
    total = sum(i.energy_tce for i in items)
    return EnergyResult(
        items=items,
        total_energy_tce=total,
        per_ton_energy_tce=total / ENERGY_REFERENCE_BASIS,
    )


def calculate(
    params: ProcessParameters,
    intensities: Mapping[str, object],
    factors: FactorTable,
    top_n: int = 5,
) -> EmissionResult:
    """Run the full emissions chain for one set of inputs."""
    annual = compute_annual_output(params)
    amounts = compute_material_amounts(intensities, params, annual.annual_output_10kt, factors)
    items = compute_emissions(amounts, factors)
    totals = aggregate_totals(items, annual.annual_output_10kt)
    dropped = [k for k in intensities if k not in factors.materials]
    if dropped:
        logger.debug("Intensities without a factor entry ignored: %s", dropped)
    return EmissionResult(
        annual=annual,
        amounts=amounts,
        line_items=items,
        totals=totals,
        top_items=rank_top_n(items, top_n),
        dropped=dropped,
    )


# ===================================================================
#                      Chart / table shaping
# ===================================================================
def to_chart_rows(
    items: Iterable[EmissionLineItem],
    per_ton: bool = False,
    annual_output_10kt: Optional[float] = None,
) -> List[Dict[str, float]]:
    """``{name, value}`` pairs; per-ton view is kg CO2 per t of steel."""
    scale = 1.0
    if per_ton:
        denom = coerce_number(annual_output_10kt) * TEN_KT or 1.0
        scale = KG_PER_T / denom
    return [{"name": i.name, "value": i.emission_t * scale} for i in items]


def emissions_frame(result: EmissionResult) -> pd.DataFrame:
    """Line items as a DataFrame with a TOTAL row (t, t CO2, kg CO2/t)."""
    denom = result.annual.annual_output_t or 1.0
    df = pd.DataFrame(
        [(i.name, i.amount, i.emission_t) for i in result.line_items],
        columns=["Material", "Amount (t)", "CO2 (t)"],
    ).set_index("Material")
    df["CO2 (kg/t steel)"] = df["CO2 (t)"] * KG_PER_T / denom
    df.loc["TOTAL"] = [float("nan"), df["CO2 (t)"].sum(), df["CO2 (kg/t steel)"].sum()]
    return df


def energy_frame(energy: EnergyResult) -> pd.DataFrame:
    df = pd.DataFrame(
        [(i.name, i.quantity, i.energy_tce) for i in energy.items],
        columns=["Carrier", "Quantity", "Energy (tce)"],
    ).set_index("Carrier")
    df.loc["TOTAL"] = [float("nan"), energy.total_energy_tce]
    return df


__all__ = [
    "compute_annual_output",
    "compute_material_amounts",
    "compute_emissions",
    "aggregate_totals",
    "rank_top_n",
    "compute_energy",
    "calculate",
    "to_chart_rows",
    "emissions_frame",
    "energy_frame",
]
