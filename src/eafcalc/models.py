"""Shared domain models for the EAF calculator."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

TONNE_BASED_UNIT = "t/t"


# ===================================================================
#                           Data Models
# ===================================================================
@dataclass(frozen=True)
class MaterialFactor:
    """Emission factor entry for one charge/consumable material.

    Attributes:
        unit: natural unit of the per-ton intensity; only ``"t/t"`` is
            treated as tonne-based, anything else is scaled by 1/1000.
        emission_factor: CO2 per unit of material (negative for credits).
        multiplier: applied after the factor to reconcile unit bases.
    """

    unit: str
    emission_factor: float
    multiplier: float = 1.0

    @property
    def tonne_based(self) -> bool:
        return self.unit.strip() == TONNE_BASED_UNIT


@dataclass(frozen=True)
class EnergyFactor:
    """Standard-coal conversion coefficient for one energy carrier."""

    unit: str
    factor: float

    @property
    def quantity_unit(self) -> str:
        """Unit of the entered quantity: ``tce/10^4 kWh`` -> ``10^4 kWh``."""
        _, sep, rest = self.unit.partition("/")
        return rest.strip() if sep else self.unit


@dataclass(frozen=True)
class ProcessParameters:
    """Furnace configuration entered by the user."""

    furnace_capacity_t: float = 100.0       # t per heat
    cycle_minutes: float = 60.0             # tap-to-tap
    annual_days: float = 320.0
    steel_to_metal_ratio: float = 1.087     # charge per t of steel
    scrap_fraction: float = 0.7             # scrap share of the charge


@dataclass(frozen=True)
class AnnualOutput:
    daily_furnace_count: float
    daily_output_t: float
    annual_output_10kt: float

    @property
    def annual_output_t(self) -> float:
        return self.annual_output_10kt * 10000.0


@dataclass(frozen=True)
class EmissionLineItem:
    name: str
    amount: float           # t of material per year
    emission_t: float       # t CO2 per year


@dataclass(frozen=True)
class Totals:
    total_emissions_t: float
    per_ton_kg_co2: float
    per_ton_fallback: bool = False


@dataclass(frozen=True)
class EnergyLineItem:
    name: str
    quantity: float
    energy_tce: float


@dataclass(frozen=True)
class EnergyResult:
    items: List[EnergyLineItem]
    total_energy_tce: float
    per_ton_energy_tce: float


@dataclass(frozen=True)
class EmissionResult:
    """Everything the aggregator derives from one set of inputs."""

    annual: AnnualOutput
    amounts: Dict[str, float]
    line_items: List[EmissionLineItem]
    totals: Totals
    top_items: List[EmissionLineItem] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)
