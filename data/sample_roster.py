"""Beispiel-Kollegium für Demo und Tests.

Erzeugt ein reproduzierbares Kollegium für die Klassen 6th–10th. Jede
Klasse hat einen Lehrplan von genau 48 Wochenstunden (6 Tage × 8 Stunden),
damit ein vollständiges Raster grundsätzlich möglich ist.

Verteilung:
  - Fächer werden pro Klasse der qualifizierten Lehrkraft mit der
    geringsten bisherigen Last zugeteilt (bei Gleichstand Roster-Reihenfolge),
    solange das Wochenlimit nicht überschritten wird.
  - Der Zufallsgenerator (seed) bestimmt nur die Namen.
"""

import random
from typing import Optional

from config.defaults import CLASS_IDS
from models.school_data import SchoolData
from models.teacher import Teacher, TeacherAssignment

# ─── Lehrplan ─────────────────────────────────────────────────────────────────

CURRICULUM: dict[str, int] = {
    "Math": 8,
    "Science": 8,
    "English": 7,
    "SST": 6,
    "Punjabi": 6,
    "Hindi": 5,
    "Computer": 2,
    "Phy Edu": 2,
    "Agri": 2,
    "Art": 2,
}

# ─── Kollegium (Bezeichnung, Fachkompetenz) ───────────────────────────────────

_STAFF: list[tuple[str, list[str]]] = [
    ("Master", ["Math"]),
    ("Master", ["Math", "Science"]),
    ("Mistress", ["Science"]),
    ("Lecturer", ["Science", "Physics"]),
    ("Master", ["English"]),
    ("Mistress", ["English", "SST"]),
    ("Master", ["SST"]),
    ("Master", ["Punjabi"]),
    ("Mistress", ["Hindi", "Punjabi"]),
    ("Computer Faculty", ["Computer"]),
    ("PTI", ["Phy Edu"]),
    ("Master", ["Agri", "Art"]),
    ("Drawing Master", ["Art", "W.L."]),
]

_FIRST_NAMES = [
    "Amandeep", "Baljit", "Charanjit", "Daljeet", "Gurpreet", "Harpreet",
    "Jaswinder", "Kulwant", "Manpreet", "Navdeep", "Paramjit", "Rajinder",
    "Sukhwinder", "Tejinder", "Inderjit", "Kamaljit", "Ravinder", "Sarabjit",
]

_LAST_NAMES = [
    "Sharma", "Singh", "Kaur", "Gill", "Sandhu", "Dhillon", "Bains",
    "Sidhu", "Brar", "Grewal", "Verma", "Arora", "Bedi", "Walia",
]


class SampleRosterGenerator:
    """Erzeugt ein vollständiges Beispiel-Kollegium."""

    def __init__(
        self,
        seed: Optional[int] = 42,
        class_ids: Optional[list[str]] = None,
        weekly_limit: int = 36,
    ) -> None:
        self.rng = random.Random(seed)
        self.class_ids = class_ids or list(CLASS_IDS)
        self.weekly_limit = weekly_limit

    def _make_teacher(self, index: int, designation: str, subjects: list[str]) -> Teacher:
        """Erstellt eine Lehrkraft mit zufälligem Namen."""
        first = self.rng.choice(_FIRST_NAMES)
        last = self.rng.choice(_LAST_NAMES)
        return Teacher(
            id=f"T{index}",
            name=f"{first} {last}",
            designation=designation,
            subjects=list(subjects),
            weekly_limit=self.weekly_limit,
        )

    def generate_teachers(self) -> list[Teacher]:
        """Kollegium inkl. Lehraufträgen und Klassenleitungen."""
        teachers = [
            self._make_teacher(i, designation, subjects)
            for i, (designation, subjects) in enumerate(_STAFF, start=1)
        ]

        load = {t.id: 0 for t in teachers}
        for class_id in self.class_ids:
            for subject, hours in CURRICULUM.items():
                qualified = [t for t in teachers if t.teaches(subject)]
                if not qualified:
                    raise ValueError(f"Keine Lehrkraft für Fach '{subject}' im Kollegium.")
                fitting = [t for t in qualified if load[t.id] + hours <= t.weekly_limit]
                # min() ist stabil: bei Gleichstand gewinnt die erste Lehrkraft
                chosen = min(fitting or qualified, key=lambda t: load[t.id])
                chosen.assignments.append(TeacherAssignment(
                    class_id=class_id, subject=subject, periods_per_week=hours,
                ))
                load[chosen.id] += hours

        # Klassenleitung: die ersten Lehrkräfte mit Auftrag in der Klasse
        taken: set[str] = set()
        for class_id in self.class_ids:
            for t in teachers:
                if t.id in taken:
                    continue
                if any(a.class_id == class_id for a in t.assignments):
                    t.class_incharge_of = class_id
                    taken.add(t.id)
                    break
        return teachers

    def generate(self, school_name: str = "Government High School") -> SchoolData:
        """Erzeugt den vollständigen Datensatz als SchoolData-Objekt."""
        return SchoolData(school_name=school_name, teachers=self.generate_teachers())

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: SchoolData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht des Kollegiums aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Beispiel-Kollegium", box=box.ROUNDED)
        table.add_column("ID", style="bold cyan")
        table.add_column("Name")
        table.add_column("Bezeichnung")
        table.add_column("Fächer")
        table.add_column("Std./Woche", justify="right")
        table.add_column("Klassenleitung")

        for t in data.teachers:
            table.add_row(
                t.id, t.name, t.designation, ", ".join(t.subjects),
                f"{t.total_periods}/{t.weekly_limit}", t.class_incharge_of or "–",
            )
        console.print(table)
