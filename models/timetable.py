"""Master-Stundenplan: Tag → Stunde → Lehrer-ID → Eintrag (Pydantic v2).

Die Schlüsselstruktur erzwingt höchstens einen Eintrag pro
(Tag, Stunde, Lehrer). Höchstens ein Eintrag pro (Tag, Stunde, Klasse) ist
dagegen NICHT strukturell gesichert – Doppelbelegungen einer Klasse sind
möglich und werden vom Validator gemeldet.
"""

from pathlib import Path
from typing import Iterator, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic.alias_generators import to_camel

from config.defaults import DAYS, PERIODS
from config.schema import Day

_DAY_ORDER = list(Day)


class TimetableEntry(BaseModel):
    """Eine Unterrichtsstunde: Lehrer unterrichtet Klasse im Fach."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    class_id: str
    subject: str
    teacher_id: str


Grid = dict[Day, dict[int, dict[str, TimetableEntry]]]


class MasterTimetable(RootModel[Grid]):
    """Gemeinsames, veränderliches Raster aller Einträge.

    Lesende Funktionen behandeln fehlende Tag- oder Stunden-Schlüssel als
    leer. Kopien entstehen nur explizit über snapshot().
    """

    root: Grid = Field(default_factory=dict)

    @classmethod
    def empty(
        cls,
        days: Optional[Sequence[Day]] = None,
        periods: Optional[Sequence[int]] = None,
    ) -> "MasterTimetable":
        """Leeres Raster mit allen Tag- und Stunden-Schlüsseln."""
        days = DAYS if days is None else days
        periods = PERIODS if periods is None else periods
        return cls({day: {p: {} for p in periods} for day in days})

    # ─── Lesen ────────────────────────────────────────────────────────────────

    def entries_at(self, day: Day, period: int) -> dict[str, TimetableEntry]:
        """Alle Einträge eines Slots (Lehrer-ID → Eintrag). Nicht verändern."""
        return self.root.get(day, {}).get(period, {})

    def get(self, day: Day, period: int, teacher_id: str) -> Optional[TimetableEntry]:
        return self.entries_at(day, period).get(teacher_id)

    def has_entry(self, teacher_id: str, day: Day, period: int) -> bool:
        return teacher_id in self.entries_at(day, period)

    def class_is_taken(self, class_id: str, day: Day, period: int) -> bool:
        """True wenn irgendein Lehrer die Klasse in diesem Slot unterrichtet."""
        return any(e.class_id == class_id for e in self.entries_at(day, period).values())

    def iter_entries(self) -> Iterator[tuple[Day, int, TimetableEntry]]:
        """Alle Einträge in Wochenreihenfolge (Tag, Stunde, Lehrer-Schlüssel)."""
        for day in sorted(self.root, key=_DAY_ORDER.index):
            for period in sorted(self.root[day]):
                for entry in self.root[day][period].values():
                    yield day, period, entry

    def teacher_entries(self, teacher_id: str) -> list[tuple[Day, int, TimetableEntry]]:
        """Alle Einträge einer Lehrkraft."""
        return [
            (day, period, entry)
            for day in sorted(self.root, key=_DAY_ORDER.index)
            for period in sorted(self.root[day])
            if (entry := self.root[day][period].get(teacher_id)) is not None
        ]

    def class_entries(self, class_id: str) -> list[tuple[Day, int, TimetableEntry]]:
        """Alle Einträge einer Klasse."""
        return [
            (day, period, entry)
            for day, period, entry in self.iter_entries()
            if entry.class_id == class_id
        ]

    def count_teacher_periods(self, teacher_id: str, day: Optional[Day] = None) -> int:
        """Anzahl belegter Stunden einer Lehrkraft (pro Woche oder pro Tag)."""
        return sum(
            1 for d, _, _ in self.teacher_entries(teacher_id)
            if day is None or d == day
        )

    # ─── Schreiben ────────────────────────────────────────────────────────────

    def place(self, day: Day, period: int, entry: TimetableEntry) -> None:
        """Setzt den Eintrag unter der Lehrer-ID (überschreibt einen vorhandenen)."""
        self.root.setdefault(day, {}).setdefault(period, {})[entry.teacher_id] = entry

    def set_cell(
        self, day: Day, period: int, teacher_id: str, class_id: str, subject: str
    ) -> TimetableEntry:
        """Manuelle Zellbearbeitung."""
        entry = TimetableEntry(class_id=class_id, subject=subject, teacher_id=teacher_id)
        self.place(day, period, entry)
        return entry

    def remove(self, day: Day, period: int, teacher_id: str) -> bool:
        """Entfernt einen Eintrag. Gibt True zurück wenn etwas entfernt wurde."""
        slot = self.root.get(day, {}).get(period)
        if slot is None or teacher_id not in slot:
            return False
        del slot[teacher_id]
        return True

    def clear_class(self, class_id: str) -> int:
        """Entfernt alle Einträge einer Klasse. Gibt die Anzahl zurück."""
        removed = 0
        for periods in self.root.values():
            for slot in periods.values():
                for teacher_id in [t for t, e in slot.items() if e.class_id == class_id]:
                    del slot[teacher_id]
                    removed += 1
        return removed

    def clear_teacher(self, teacher_id: str) -> int:
        """Entfernt alle Einträge einer Lehrkraft. Gibt die Anzahl zurück."""
        removed = 0
        for periods in self.root.values():
            for slot in periods.values():
                if slot.pop(teacher_id, None) is not None:
                    removed += 1
        return removed

    def clear(self) -> None:
        """Setzt das Raster komplett zurück (Schlüsselstruktur bleibt)."""
        days = list(self.root) or DAYS
        periods = sorted({p for d in self.root.values() for p in d}) or PERIODS
        self.root = {day: {p: {} for p in periods} for day in days}

    # ─── Kopie & Persistenz ───────────────────────────────────────────────────

    def snapshot(self) -> "MasterTimetable":
        """Tiefe Kopie (vor Generatorlauf, für Undo, für Batch-Isolation)."""
        return self.model_copy(deep=True)

    def entry_count(self) -> int:
        return sum(1 for _ in self.iter_entries())

    def to_dict(self) -> dict:
        """Serialisiert im Austauschformat (camelCase, String-Schlüssel)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: dict) -> "MasterTimetable":
        """Liest ein Raster im Austauschformat, z.B. von einem externen Generator."""
        return cls.model_validate(data)

    def save_json(self, path: Path) -> None:
        """Speichert das Raster als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2, by_alias=True))

    @classmethod
    def load_json(cls, path: Path) -> "MasterTimetable":
        """Lädt ein gespeichertes Raster aus JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Stundenplan nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
