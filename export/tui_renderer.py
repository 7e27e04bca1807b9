"""Gemeinsamer Renderer für Terminal-Stundenplan-Anzeige.

Liefert reine Tabellenzeilen (Listen von Strings); `build_table` macht
daraus eine Rich-Tabelle für `main.py show`.
"""

from typing import TYPE_CHECKING, Iterable

from export.helpers import RECESS, build_time_grid_rows, recess_label, time_label

if TYPE_CHECKING:
    from rich.table import Table
    from config.schema import TimeGridConfig
    from models.substitution import Substitution
    from models.timetable import MasterTimetable


def render_class_rows(
    class_id: str,
    timetable: "MasterTimetable",
    time_grid: "TimeGridConfig",
) -> list[list[str]]:
    """Gibt Tabellenzeilen für den Klassen-Stundenplan zurück.

    Jede Zeile: [Stunde, Uhrzeit, MON, ..., SAT]
    Doppelbelegte Slots zeigen alle Einträge mit vorangestelltem '⚠'.
    """
    rows: list[list[str]] = []
    for row in build_time_grid_rows(time_grid):
        if row == RECESS:
            rows.append(["—", recess_label(time_grid)] + ["─" * 8] * len(time_grid.days))
            continue
        cells = [str(row), time_label(time_grid, row)]
        for day in time_grid.days:
            entries = [
                e for e in timetable.entries_at(day, row).values() if e.class_id == class_id
            ]
            if not entries:
                cells.append("—")
            elif len(entries) == 1:
                cells.append(f"{entries[0].subject}\n{entries[0].teacher_id}")
            else:
                cells.append("⚠ " + " / ".join(f"{e.subject} {e.teacher_id}" for e in entries))
        rows.append(cells)
    return rows


def render_teacher_rows(
    teacher_id: str,
    timetable: "MasterTimetable",
    time_grid: "TimeGridConfig",
    substitutions: Iterable["Substitution"] = (),
) -> list[list[str]]:
    """Gibt Tabellenzeilen für den Lehrer-Stundenplan zurück.

    Vertretungen der Lehrkraft werden als 'Vertretung <Klasse>' eingeblendet.
    """
    overlay = {
        (s.day, s.period): s for s in substitutions if s.substitute_teacher_id == teacher_id
    }
    rows: list[list[str]] = []
    for row in build_time_grid_rows(time_grid):
        if row == RECESS:
            rows.append(["—", recess_label(time_grid)] + ["─" * 8] * len(time_grid.days))
            continue
        cells = [str(row), time_label(time_grid, row)]
        for day in time_grid.days:
            entry = timetable.get(day, row, teacher_id)
            sub = overlay.get((day, row))
            if entry is not None:
                cells.append(f"{entry.subject}\n{entry.class_id}")
            elif sub is not None:
                cells.append(f"Vertretung\n{sub.class_id}")
            else:
                cells.append("—")
        rows.append(cells)
    return rows


def build_table(title: str, rows: list[list[str]], time_grid: "TimeGridConfig") -> "Table":
    """Rich-Tabelle mit Spalten Stunde, Zeit und einem Tag je Spalte."""
    from rich.table import Table
    from rich import box

    table = Table(title=title, box=box.ROUNDED, show_lines=True)
    table.add_column("Std.", justify="right", style="bold")
    table.add_column("Zeit", style="dim")
    for day in time_grid.days:
        table.add_column(day.value, justify="center")
    for row in rows:
        table.add_row(*row)
    return table
