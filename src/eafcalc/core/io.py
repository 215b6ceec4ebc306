"""I/O utilities: YAML preset and input-file loaders."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml

logger = logging.getLogger(__name__)

PRESET_DIR = Path(__file__).resolve().parents[1] / "data" / "presets"


def _env_flag_truthy(var_name: str) -> bool:
    """
    Return True when the environment variable is set to a truthy value.
    Accepted truthy values: '1', 'true', 'yes', 'on' (case insensitive).
    """
    raw = os.environ.get(var_name, "")
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _is_debug_io_enabled() -> bool:
    return _env_flag_truthy("EAFCALC_DEBUG_IO")


def _debug_print(*args, **kwargs) -> None:
    if _is_debug_io_enabled():
        print(*args, **kwargs)


def load_yaml_mapping(filepath: str | Path) -> Dict[str, Any]:
    """Strict YAML loader for files the user points at.

    An empty file gives ``{}``. A missing file, a parse error or a
    top-level value that isn't a mapping raises ``ValueError``.
    """
    p = Path(filepath)
    if not p.is_file():
        raise ValueError(f"YAML file not found: {filepath}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("Error reading YAML %s: %s", filepath, e)
        raise ValueError(f"Could not parse YAML {filepath}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{filepath} must contain a mapping, got {type(data).__name__}")
    return data


def preset_dirs() -> List[Path]:
    """Search path for preset files; EAFCALC_PRESET_DIR is checked first."""
    dirs: List[Path] = []
    extra = os.environ.get("EAFCALC_PRESET_DIR", "").strip()
    if extra:
        dirs.append(Path(extra))
    dirs.append(PRESET_DIR)
    return dirs


def find_preset_file(name_or_path: str | Path) -> Path | None:
    """Resolve a preset name (``original``) or an explicit YAML path."""
    p = Path(name_or_path)
    if p.suffix in (".yml", ".yaml") and p.is_file():
        return p
    for d in preset_dirs():
        for ext in (".yml", ".yaml"):
            cand = d / f"{name_or_path}{ext}"
            if cand.is_file():
                return cand
    return None


def list_preset_files() -> Dict[str, Path]:
    """Return {preset_name: path}; earlier search dirs shadow later ones."""
    found: Dict[str, Path] = {}
    for d in preset_dirs():
        if not d.is_dir():
            continue
        for p in sorted(d.glob("*.y*ml")):
            found.setdefault(p.stem, p)
    return found


def load_preset_document(path: str | Path) -> Dict[str, Any]:
    """Load a preset YAML and unwrap the top-level ``preset`` key if present.

    Raises:
        ValueError: if the file is missing, unparsable or not a mapping
    """
    data = load_yaml_mapping(path)
    if len(data) == 1 and "preset" in data:
        data = data["preset"]
        if not isinstance(data, dict):
            raise ValueError(f"Preset {path}: 'preset' must be a mapping")
    _debug_print(f"[io] preset {path}: {len(data.get('materials') or {})} materials, "
                 f"{len(data.get('energy') or {})} energy carriers")
    return data


def load_inputs_file(path: str | Path) -> Dict[str, Any]:
    """Load a CLI inputs file (parameters / intensities / energy / factors).

    Raises:
        ValueError: if the file is missing, unparsable or not a mapping
    """
    return load_yaml_mapping(path)


__all__ = [
    "PRESET_DIR",
    "load_yaml_mapping",
    "preset_dirs",
    "find_preset_file",
    "list_preset_files",
    "load_preset_document",
    "load_inputs_file",
]
