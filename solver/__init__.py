"""Solver-Modul (Greedy-Basisgenerator, Belegt- und Serien-Abfragen)."""

from .availability import consecutive_streak, daily_load, is_teacher_busy
from .baseline import BaselineGenerator, PlacementCategory, Shortfall, generate_baseline
from .pinning import PinManager

__all__ = [
    "BaselineGenerator",
    "PlacementCategory",
    "Shortfall",
    "generate_baseline",
    "PinManager",
    "consecutive_streak",
    "daily_load",
    "is_teacher_busy",
]
