"""Input coercion and override helpers.

Every numeric value that reaches the aggregator goes through
``coerce_number`` first: blank, non-numeric or non-finite input becomes 0.0.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


def coerce_number(value: Any, default: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``default`` when it can't be."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return default
    try:
        out = float(value)
    except (TypeError, ValueError):
        logger.debug("Non-numeric input %r coerced to %s", value, default)
        return default
    if not math.isfinite(out):
        logger.debug("Non-finite input %r coerced to %s", value, default)
        return default
    return out


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_table(raw: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """Coerce every value of a name→number mapping; blank entries are dropped."""
    out: Dict[str, float] = {}
    for k, v in (raw or {}).items():
        if is_blank(v):
            continue
        out[str(k).strip()] = coerce_number(v)
    return out


def resolve_names(table: Mapping[str, Any], aliases: Mapping[str, str]) -> Dict[str, Any]:
    """Rename alias keys (e.g. ``electricity``) to canonical table keys.

    Canonical keys win over aliases when both are present.
    """
    out: Dict[str, Any] = {}
    for k, v in table.items():
        canon = aliases.get(str(k).strip().lower(), k)
        if canon != k and canon in table:
            continue
        out[canon] = v
    return out


def parse_assignment(text: str) -> Tuple[str, float]:
    """Parse ``NAME=VALUE`` as used by the CLI ``--intensity`` style flags."""
    if "=" not in text:
        raise ValueError(f"Expected NAME=VALUE, got {text!r}")
    name, raw = text.split("=", 1)
    name = name.strip()
    if not name:
        raise ValueError(f"Missing name in {text!r}")
    return name, coerce_number(raw)


def parse_assignments(items: Optional[Iterable[str]]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for it in items or []:
        k, v = parse_assignment(it)
        out[k] = v
    return out


def apply_dict_overrides(target_dict: Dict, overrides: Optional[Dict]) -> Dict:
    """Return a shallow-updated copy; the target is left untouched."""
    merged = dict(target_dict)
    merged.update(overrides or {})
    return merged


__all__ = [
    "coerce_number",
    "is_blank",
    "coerce_table",
    "resolve_names",
    "parse_assignment",
    "parse_assignments",
    "apply_dict_overrides",
]
