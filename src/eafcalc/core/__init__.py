"""
Core package.

Submodules:
  - io: YAML preset and input-file loaders
  - factors: versioned factor tables with layered overrides
  - transforms: numeric coercion and override helpers
  - engine: the emissions/energy aggregator
  - viz: plotly pie-chart builders

Downstream code imports from `eafcalc.core.*`.
"""

from . import io, transforms, factors, engine, viz

__all__ = [
    "io",
    "transforms",
    "factors",
    "engine",
    "viz",
]
