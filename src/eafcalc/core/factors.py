"""Versioned emission/energy factor tables.

Each preset is one YAML file (see ``eafcalc/data/presets``). Loaded presets
are cached process-wide and exposed read-only; per-session changes go
through ``FactorTable.with_overrides`` which layers an override mapping on
top of the defaults instead of editing them.
"""
from __future__ import annotations

import logging
import os
from collections import ChainMap
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from eafcalc.models import EnergyFactor, MaterialFactor
from eafcalc.core.io import find_preset_file, list_preset_files, load_preset_document
from eafcalc.core.transforms import coerce_number

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "original"


class FactorTableError(LookupError):
    """Raised when a preset can't be located or holds no usable materials."""


@dataclass(frozen=True)
class FactorTable:
    name: str
    materials: Mapping[str, MaterialFactor]
    energy: Mapping[str, EnergyFactor]
    hot_metal_key: str
    scrap_key: str
    description: str = ""
    title: str = ""                                 # display name from the YAML
    material_aliases: Mapping[str, str] = field(default_factory=dict)
    energy_aliases: Mapping[str, str] = field(default_factory=dict)
    overridden_materials: tuple = ()

    @property
    def derived_keys(self) -> tuple:
        """Materials whose amounts come from the charge split, not intensities."""
        return (self.hot_metal_key, self.scrap_key)

    def input_materials(self) -> List[str]:
        return [m for m in self.materials if m not in self.derived_keys]

    def with_overrides(
        self,
        material_overrides: Optional[Mapping[str, Any]] = None,
        energy_overrides: Optional[Mapping[str, Any]] = None,
    ) -> "FactorTable":
        """Return a table whose lookups check the overrides before the defaults.

        A numeric override replaces ``emission_factor`` (or ``factor`` for
        energy carriers); a mapping may set any field of the entry. Overrides
        for names absent from the defaults are ignored.
        """
        if not material_overrides and not energy_overrides:
            return self
        mat_layer: Dict[str, MaterialFactor] = {}
        for name, ov in (material_overrides or {}).items():
            base = self.materials.get(name)
            if base is None:
                logger.debug("Ignoring factor override for unknown material %r", name)
                continue
            mat_layer[name] = _override_material(base, ov)
        en_layer: Dict[str, EnergyFactor] = {}
        for name, ov in (energy_overrides or {}).items():
            base = self.energy.get(name)
            if base is None:
                logger.debug("Ignoring factor override for unknown carrier %r", name)
                continue
            en_layer[name] = _override_energy(base, ov)
        return replace(
            self,
            materials=ChainMap(mat_layer, self.materials),
            energy=ChainMap(en_layer, self.energy),
            overridden_materials=tuple(sorted(set(self.overridden_materials) | set(mat_layer))),
        )


def _override_material(base: MaterialFactor, ov: Any) -> MaterialFactor:
    if isinstance(ov, Mapping):
        return MaterialFactor(
            unit=str(ov.get("unit", base.unit)),
            emission_factor=coerce_number(ov.get("emission_factor", base.emission_factor)),
            multiplier=coerce_number(ov.get("multiplier", base.multiplier), default=1.0),
        )
    return replace(base, emission_factor=coerce_number(ov))


def _override_energy(base: EnergyFactor, ov: Any) -> EnergyFactor:
    if isinstance(ov, Mapping):
        return EnergyFactor(
            unit=str(ov.get("unit", base.unit)),
            factor=coerce_number(ov.get("factor", base.factor)),
        )
    return replace(base, factor=coerce_number(ov))


# ===================================================================
#                         Preset loading
# ===================================================================
def table_from_document(name: str, doc: Mapping[str, Any]) -> FactorTable:
    """Build a FactorTable from a parsed preset mapping.

    Rows missing a unit or factor are skipped with a warning rather than
    failing the whole preset.
    """
    materials: Dict[str, MaterialFactor] = {}
    material_aliases: Dict[str, str] = {}
    energy_aliases: Dict[str, str] = {}
    for key, row in (doc.get("materials") or {}).items():
        key = str(key).strip()
        if not isinstance(row, Mapping) or "unit" not in row or "emission_factor" not in row:
            logger.warning("Preset %s: skipping malformed material row %r", name, key)
            continue
        materials[key] = MaterialFactor(
            unit=str(row["unit"]),
            emission_factor=coerce_number(row["emission_factor"]),
            multiplier=coerce_number(row.get("multiplier", 1.0), default=1.0),
        )
        for a in row.get("aliases") or []:
            material_aliases[str(a).strip().lower()] = key

    energy: Dict[str, EnergyFactor] = {}
    for key, row in (doc.get("energy") or {}).items():
        key = str(key).strip()
        if not isinstance(row, Mapping) or "factor" not in row:
            logger.warning("Preset %s: skipping malformed energy row %r", name, key)
            continue
        energy[key] = EnergyFactor(unit=str(row.get("unit", "")), factor=coerce_number(row["factor"]))
        for a in row.get("aliases") or []:
            energy_aliases[str(a).strip().lower()] = key

    hot_metal_key = str(doc.get("hot_metal_key", "")).strip()
    scrap_key = str(doc.get("scrap_key", "")).strip()
    for k in (hot_metal_key, scrap_key):
        if k and k not in materials:
            logger.warning("Preset %s: charge material %r has no factor entry", name, k)

    return FactorTable(
        name=name,
        title=str(doc.get("name") or name),
        description=str(doc.get("description") or ""),
        materials=MappingProxyType(materials),
        energy=MappingProxyType(energy),
        hot_metal_key=hot_metal_key,
        scrap_key=scrap_key,
        material_aliases=MappingProxyType(material_aliases),
        energy_aliases=MappingProxyType(energy_aliases),
    )


def load_preset(name_or_path: str | Path) -> FactorTable:
    """Load a preset by name or path (uncached).

    The table is keyed by the file stem so it round-trips through
    ``list_presets`` and ``--preset``.

    Raises:
        FactorTableError: missing file, unreadable YAML, or no valid material rows
    """
    path = find_preset_file(name_or_path)
    if path is None:
        raise FactorTableError(f"Factor preset '{name_or_path}' not found")
    try:
        doc = load_preset_document(path)
    except ValueError as e:
        raise FactorTableError(f"Factor preset '{path.stem}' is unreadable: {e}") from e
    table = table_from_document(path.stem, doc)
    if not table.materials:
        raise FactorTableError(f"Factor preset '{path.stem}' has no usable material rows")
    logger.debug("Loaded factor preset %s from %s", path.stem, path)
    return table


@lru_cache(maxsize=None)
def get_preset(name: str | None = None) -> FactorTable:
    """Cached, read-only preset lookup; ``None`` picks the default preset."""
    return load_preset(name or default_preset_name())


def default_preset_name() -> str:
    return os.environ.get("EAFCALC_DEFAULT_PRESET", "").strip() or DEFAULT_PRESET


def list_presets() -> List[str]:
    return list(list_preset_files().keys())


__all__ = [
    "DEFAULT_PRESET",
    "FactorTable",
    "FactorTableError",
    "table_from_document",
    "load_preset",
    "get_preset",
    "default_preset_name",
    "list_presets",
]
