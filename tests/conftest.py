from pathlib import Path
import sys
import pytest
import yaml

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if SRC_DIR.exists() and str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from eafcalc.core.factors import load_preset
from eafcalc.models import ProcessParameters


@pytest.fixture(scope="session")
def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture(scope="session")
def preset_dir(repo_root: Path) -> Path:
    return repo_root / "src" / "eafcalc" / "data" / "presets"


@pytest.fixture(scope="session")
def original():
    return load_preset("original")


@pytest.fixture(scope="session")
def reconciled():
    return load_preset("reconciled")


@pytest.fixture
def params() -> ProcessParameters:
    # capacity 100 t, 60 min heats, 320 days → 76.8 × 10,000 t/yr
    return ProcessParameters()


@pytest.fixture(scope="session")
def yload():
    def _load(p: Path):
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    return _load
