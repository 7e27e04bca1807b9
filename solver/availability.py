"""Belegt-Prüfung und Serien-Berechnung (Master-Stundenplan + Vertretungen).

Reine Abfragen ohne Seiteneffekte; Generator und Vertretungssuche bauen
darauf auf.
"""

from typing import Iterable, Sequence

from config.defaults import PERIODS
from config.schema import Day
from models.substitution import Substitution
from models.timetable import MasterTimetable


def is_teacher_busy(
    teacher_id: str,
    day: Day,
    period: int,
    timetable: MasterTimetable,
    substitutions: Iterable[Substitution] = (),
    match_day: bool = True,
) -> bool:
    """True wenn die Lehrkraft im Slot verplant ist (Raster oder Vertretung).

    match_day=False reproduziert das Altverhalten: eine Vertretung blockiert
    die Stunde an jedem Wochentag.
    """
    if timetable.has_entry(teacher_id, day, period):
        return True
    return any(
        s.substitute_teacher_id == teacher_id
        and s.period == period
        and (not match_day or s.day == day)
        for s in substitutions
    )


def consecutive_streak(
    teacher_id: str,
    day: Day,
    period: int,
    timetable: MasterTimetable,
    substitutions: Sequence[Substitution] = (),
    periods: Sequence[int] = PERIODS,
    match_day: bool = True,
) -> int:
    """Länge der zusammenhängenden Serie belegter Stunden um `period` (inklusive).

    Die Stunde selbst zählt immer mit. Ist sie frei, ist das Ergebnis die
    Serie, die bei einer Zuweisung entstünde.
    """
    first, last = periods[0], periods[-1]
    streak = 1
    for p in range(period - 1, first - 1, -1):
        if not is_teacher_busy(teacher_id, day, p, timetable, substitutions, match_day):
            break
        streak += 1
    for p in range(period + 1, last + 1):
        if not is_teacher_busy(teacher_id, day, p, timetable, substitutions, match_day):
            break
        streak += 1
    return streak


def daily_load(
    teacher_id: str,
    day: Day,
    timetable: MasterTimetable,
    substitutions: Sequence[Substitution] = (),
    periods: Sequence[int] = PERIODS,
    match_day: bool = True,
) -> int:
    """Anzahl belegter Stunden einer Lehrkraft an einem Tag."""
    return sum(
        1 for p in periods
        if is_teacher_busy(teacher_id, day, p, timetable, substitutions, match_day)
    )
