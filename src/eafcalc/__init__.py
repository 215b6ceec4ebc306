"""Carbon emission and energy calculator for electric-arc-furnace steelmaking."""

__version__ = "0.3.0"
