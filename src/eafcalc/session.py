"""Immutable calculator session and the reducer that advances it.

Front ends keep exactly one ``SessionState`` per user session and replace it
with ``reduce(state, event)`` on every input change; results are derived
from the current state with ``evaluate``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Union

from eafcalc.api import CalcInputs, RunOutputs, run_calculation
from eafcalc.models import ProcessParameters
from eafcalc.core.transforms import coerce_number, is_blank

logger = logging.getLogger(__name__)

PARAMETER_FIELDS = tuple(f.name for f in fields(ProcessParameters))


@dataclass(frozen=True)
class SessionState:
    params: ProcessParameters = field(default_factory=ProcessParameters)
    intensities: Dict[str, float] = field(default_factory=dict)
    energy_inputs: Dict[str, float] = field(default_factory=dict)
    factor_overrides: Dict[str, float] = field(default_factory=dict)
    preset: Optional[str] = None

    def to_inputs(self) -> CalcInputs:
        return CalcInputs(
            params=self.params,
            intensities=dict(self.intensities),
            energy_inputs=dict(self.energy_inputs),
            preset=self.preset,
            factor_overrides=dict(self.factor_overrides),
        )


# -----------------------------
# Events
# -----------------------------
@dataclass(frozen=True)
class SetParameter:
    name: str
    raw: Any


@dataclass(frozen=True)
class SetIntensity:
    material: str
    raw: Any


@dataclass(frozen=True)
class SetEnergyInput:
    carrier: str
    raw: Any


@dataclass(frozen=True)
class SetFactorOverride:
    material: str
    raw: Any


@dataclass(frozen=True)
class ClearFactorOverride:
    material: str


@dataclass(frozen=True)
class SelectPreset:
    name: Optional[str]


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[
    SetParameter, SetIntensity, SetEnergyInput, SetFactorOverride,
    ClearFactorOverride, SelectPreset, Reset,
]


def _set_entry(table: Dict[str, float], key: str, raw: Any) -> Dict[str, float]:
    """Copy of ``table`` with ``key`` set; a blank value removes it."""
    out = dict(table)
    if is_blank(raw):
        out.pop(key, None)
    else:
        out[key] = coerce_number(raw)
    return out


def reduce(state: SessionState, event: Event) -> SessionState:
    """Return the state after ``event``; ``state`` itself is never modified."""
    if isinstance(event, SetParameter):
        if event.name not in PARAMETER_FIELDS:
            logger.debug("Ignoring unknown parameter %r", event.name)
            return state
        params = replace(state.params, **{event.name: coerce_number(event.raw)})
        return replace(state, params=params)
    if isinstance(event, SetIntensity):
        return replace(state, intensities=_set_entry(state.intensities, event.material, event.raw))
    if isinstance(event, SetEnergyInput):
        return replace(state, energy_inputs=_set_entry(state.energy_inputs, event.carrier, event.raw))
    if isinstance(event, SetFactorOverride):
        return replace(state, factor_overrides=_set_entry(state.factor_overrides, event.material, event.raw))
    if isinstance(event, ClearFactorOverride):
        return replace(state, factor_overrides=_set_entry(state.factor_overrides, event.material, None))
    if isinstance(event, SelectPreset):
        return replace(state, preset=event.name or None)
    if isinstance(event, Reset):
        return SessionState()
    raise TypeError(f"Unsupported session event: {event!r}")


def evaluate(state: SessionState) -> RunOutputs:
    return run_calculation(state.to_inputs())


__all__ = [
    "SessionState",
    "SetParameter",
    "SetIntensity",
    "SetEnergyInput",
    "SetFactorOverride",
    "ClearFactorOverride",
    "SelectPreset",
    "Reset",
    "reduce",
    "evaluate",
]
