"""PinManager – feste Pflichtlagen (Klasse, Fach, Tag, Stunde).

Eine Pflichtlage ist eine deklarative Vorgabe, die zwei Seiten teilen:
Der Generator setzt sie vor dem heuristischen Lauf, der Validator prüft,
ob sie im fertigen Raster tatsächlich liegt.
"""

import logging
from typing import Optional

from config.schema import FixedSlot
from models.teacher import Teacher
from models.timetable import MasterTimetable, TimetableEntry

logger = logging.getLogger(__name__)


class PinManager:
    """Verwaltet Pflichtlagen und wendet sie auf ein Raster an."""

    def __init__(self, fixed_slots: Optional[list[FixedSlot]] = None) -> None:
        self._pins: list[FixedSlot] = []
        for fs in fixed_slots or []:
            self.add_pin(fs)

    def add_pin(self, pin: FixedSlot) -> None:
        """Fügt eine Pflichtlage hinzu. Ersetzt bestehende am selben Tag/Stunde/Klasse."""
        self._pins = [
            p for p in self._pins
            if not (p.class_id == pin.class_id and p.day == pin.day
                    and p.period == pin.period)
        ]
        self._pins.append(pin)

    def get_pins(self) -> list[FixedSlot]:
        """Gibt alle Pflichtlagen zurück."""
        return list(self._pins)

    # ─── Generator-Seite ──────────────────────────────────────────────────────

    @staticmethod
    def responsible_teacher(pin: FixedSlot, teachers: list[Teacher]) -> Optional[Teacher]:
        """Erste Lehrkraft (Roster-Reihenfolge) mit Lehrauftrag für Klasse+Fach."""
        for t in teachers:
            for a in t.assignments:
                if a.class_id == pin.class_id and a.subject == pin.subject and a.periods_per_week > 0:
                    return t
        return None

    def apply(
        self, timetable: MasterTimetable, teachers: list[Teacher]
    ) -> dict[tuple[str, str, str], int]:
        """Setzt alle Pflichtlagen ins Raster.

        Gibt die gesetzten Stunden je (teacher_id, class_id, subject) zurück,
        damit der Generator sie auf den Lehrauftrag anrechnet.
        """
        placed: dict[tuple[str, str, str], int] = {}
        for pin in self._pins:
            teacher = self.responsible_teacher(pin, teachers)
            if teacher is None:
                logger.debug(
                    f"Pflichtlage {pin.class_id}/{pin.subject}: kein Lehrauftrag – übersprungen"
                )
                continue
            if timetable.has_entry(teacher.id, pin.day, pin.period) or \
                    timetable.class_is_taken(pin.class_id, pin.day, pin.period):
                logger.warning(
                    f"Pflichtlage {pin.class_id}/{pin.subject} "
                    f"{pin.day.value} Std. {pin.period}: Slot bereits belegt"
                )
                continue
            timetable.place(pin.day, pin.period, TimetableEntry(
                class_id=pin.class_id, subject=pin.subject, teacher_id=teacher.id,
            ))
            key = (teacher.id, pin.class_id, pin.subject)
            placed[key] = placed.get(key, 0) + 1
        return placed

    # ─── Validator-Seite ──────────────────────────────────────────────────────

    def missing(self, timetable: MasterTimetable) -> list[FixedSlot]:
        """Pflichtlagen, deren Eintrag im Raster fehlt."""
        return [
            pin for pin in self._pins
            if not any(
                e.class_id == pin.class_id and e.subject == pin.subject
                for e in timetable.entries_at(pin.day, pin.period).values()
            )
        ]

    def __len__(self) -> int:
        return len(self._pins)

    def __repr__(self) -> str:
        return f"PinManager({len(self._pins)} Pflichtlagen)"
