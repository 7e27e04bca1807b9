"""Vertretungen: temporäre Umbesetzungen neben dem Master-Stundenplan.

Eine Vertretung wird NICHT in das Raster übernommen, sondern als Overlay
gelesen. Pro (Tag, Stunde, abwesende Lehrkraft) gibt es höchstens eine
aktive Vertretung; der SubstitutionLedger prüft das vor jedem Einfügen
und Ändern.
"""

import json
from pathlib import Path
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from config.schema import Day


class Substitution(BaseModel):
    """Ein Vertretungszettel. Die ID vergibt der Aufrufer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    date: str                    # Kalenderdatum (Anzeige), z.B. "2026-10-19"
    day: Day
    absent_teacher_id: str
    period: int
    class_id: str
    original_subject: str
    substitute_teacher_id: str
    reason: str = "Leave"
    is_override: bool = False    # Regelverstoß / manuelle Zuweisung

    @property
    def slot_key(self) -> tuple[Day, int, str]:
        return (self.day, self.period, self.absent_teacher_id)


class SubstitutionLedger:
    """Geordnete Liste aller aktiven Vertretungen."""

    def __init__(self, substitutions: Optional[list[Substitution]] = None) -> None:
        self._subs: list[Substitution] = []
        for sub in substitutions or []:
            self.add(sub)

    def find_slot(
        self, day: Day, period: int, absent_teacher_id: str
    ) -> Optional[Substitution]:
        """Vorhandene Vertretung für (Tag, Stunde, abwesende Lehrkraft)."""
        key = (day, period, absent_teacher_id)
        return next((s for s in self._subs if s.slot_key == key), None)

    def get(self, sub_id: str) -> Optional[Substitution]:
        return next((s for s in self._subs if s.id == sub_id), None)

    def add(self, sub: Substitution) -> None:
        """Fügt eine Vertretung hinzu.

        Raises:
            ValueError: ID bereits vergeben oder Slot bereits vertreten.
        """
        if self.get(sub.id) is not None:
            raise ValueError(f"Vertretung mit ID '{sub.id}' existiert bereits.")
        existing = self.find_slot(*sub.slot_key)
        if existing is not None:
            raise ValueError(
                f"{sub.day.value} Stunde {sub.period}: für {sub.absent_teacher_id} "
                f"existiert bereits Vertretung '{existing.id}'."
            )
        self._subs.append(sub)

    def update(self, sub_id: str, **changes) -> Substitution:
        """Ändert Felder einer Vertretung (z.B. substitute_teacher_id).

        Raises:
            ValueError: unbekanntes Feld, unbekannte ID oder Änderung
                kollidiert mit anderem Slot.
        """
        unknown = sorted(set(changes) - set(Substitution.model_fields))
        if unknown:
            raise ValueError(f"Unbekannte Felder für Vertretung: {', '.join(unknown)}")
        for i, sub in enumerate(self._subs):
            if sub.id != sub_id:
                continue
            updated = Substitution.model_validate({**sub.model_dump(), **changes})
            other = self.find_slot(*updated.slot_key)
            if other is not None and other.id != sub_id:
                raise ValueError(
                    f"{updated.day.value} Stunde {updated.period}: für "
                    f"{updated.absent_teacher_id} existiert bereits Vertretung '{other.id}'."
                )
            self._subs[i] = updated
            return updated
        raise ValueError(f"Vertretung '{sub_id}' nicht gefunden.")

    def remove(self, sub_id: str) -> bool:
        """Entfernt eine Vertretung. Gibt True zurück wenn etwas entfernt wurde."""
        before = len(self._subs)
        self._subs = [s for s in self._subs if s.id != sub_id]
        return len(self._subs) < before

    def clear(self) -> None:
        """Löscht alle Vertretungen (Raster-Reset)."""
        self._subs = []

    def for_day(self, day: Day) -> list[Substitution]:
        """Vertretungen eines Tages, nach Stunde sortiert."""
        return sorted((s for s in self._subs if s.day == day), key=lambda s: s.period)

    def for_substitute(self, teacher_id: str) -> list[Substitution]:
        return [s for s in self._subs if s.substitute_teacher_id == teacher_id]

    def to_list(self) -> list[Substitution]:
        return list(self._subs)

    def save_json(self, path: Path) -> None:
        """Speichert alle Vertretungen als JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = [s.model_dump(mode="json", by_alias=True) for s in self._subs]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @classmethod
    def load_json(cls, path: Path) -> "SubstitutionLedger":
        """Lädt Vertretungen aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Vertretungsdatei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls([Substitution.model_validate(item) for item in data])

    def __iter__(self) -> Iterator[Substitution]:
        return iter(list(self._subs))

    def __len__(self) -> int:
        return len(self._subs)

    def __repr__(self) -> str:
        return f"SubstitutionLedger({len(self._subs)} Vertretungen)"
