"""Gemeinsame Hilfsfunktionen für die Terminal-Ausgabe."""

from datetime import date
from typing import Optional, Union

from config.schema import PeriodTiming, TimeGridConfig

RECESS = "RECESS"


def today_str() -> str:
    """Gibt das heutige Datum als YYYY-MM-DD zurück (Datum der Vertretungszettel)."""
    return date.today().isoformat()


# ─── Zeitraster-Hilfsfunktionen ───────────────────────────────────────────────

def build_time_grid_rows(time_grid: TimeGridConfig) -> list[Union[int, str]]:
    """Geordnete Zeilen: Stunden-Nummern, nach `recess_after` der Marker RECESS."""
    rows: list[Union[int, str]] = []
    for period in time_grid.periods:
        rows.append(period)
        if period == time_grid.recess_after:
            rows.append(RECESS)
    return rows


def period_timing(time_grid: TimeGridConfig, period: int) -> Optional[PeriodTiming]:
    return next((t for t in time_grid.period_timings if t.number == period), None)


def time_label(time_grid: TimeGridConfig, period: int) -> str:
    """Uhrzeit wie 08:00–08:45, leer ohne hinterlegte Zeiten."""
    timing = period_timing(time_grid, period)
    return f"{timing.start_time}–{timing.end_time}" if timing else ""


def recess_label(time_grid: TimeGridConfig) -> str:
    """Pausenzeile, z.B. "Pause 11:45–12:15"."""
    before = period_timing(time_grid, time_grid.recess_after)
    after = period_timing(time_grid, time_grid.recess_after + 1)
    if before and after:
        return f"Pause {before.end_time}–{after.start_time}"
    return "Pause"
