"""Constraint-programming engine built on OR-Tools CP-SAT."""

from .cp_sat_scheduler import CPSatGenerator

__all__ = ["CPSatGenerator"]
