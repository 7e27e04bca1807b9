"""Greedy-Basisgenerator für den Master-Stundenplan.

Architektur:
  - Pflichtlagen (PinManager) werden zuerst gesetzt und auf den
    jeweiligen Lehrauftrag angerechnet.
  - Danach pro Lehrkraft und Lehrauftrag:
      1. Kategorie bestimmen → geordnete Stunden-Präferenz
      2. Heuristischer Durchlauf: Tage in Wochenreihenfolge, pro Tag die
         erste bevorzugte Stunde ohne Konflikt und mit Serie < cap
      3. Fallback-Durchlauf ohne Serien-Grenze, reihum über alle Tage in
         natürlicher Stundenfolge, bis der Rest platziert ist oder nichts
         mehr passt
  - Keine Rücknahme, kein Backtracking. Unplatzierbares bleibt offen und
    wird über `shortfalls` sowie den Validator sichtbar.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from config.defaults import default_engine_config
from config.schema import Day, EngineConfig
from models.teacher import Teacher, TeacherAssignment
from models.timetable import MasterTimetable, TimetableEntry
from solver.availability import consecutive_streak
from solver.pinning import PinManager

logger = logging.getLogger(__name__)


class PlacementCategory(str, Enum):
    CORE_SENIOR = "core_senior"
    SCIENCE = "science"
    GRADING = "grading"
    OTHER = "other"


class Shortfall(BaseModel):
    """Lehrauftrag, der nicht vollständig platziert werden konnte."""

    teacher_id: str
    class_id: str
    subject: str
    required: int
    placed: int

    @property
    def missing(self) -> int:
        return self.required - self.placed


class BaselineGenerator:
    """Erzeugt ein vollständiges Raster aus den Lehraufträgen.

    Verwendung:
        generator = BaselineGenerator(teachers, config)
        timetable = generator.generate()
        generator.shortfalls  # offene Stunden
    """

    def __init__(self, teachers: list[Teacher], config: Optional[EngineConfig] = None) -> None:
        self.teachers = teachers
        self.config = config or default_engine_config()
        self.days: list[Day] = list(self.config.time_grid.days)
        self.periods: list[int] = self.config.time_grid.periods
        self._pins = PinManager(self.config.fixed_slots)
        self.shortfalls: list[Shortfall] = []

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def generate(self) -> MasterTimetable:
        """Baut ein neues Raster. Wirft bei Unlösbarkeit keinen Fehler."""
        timetable = MasterTimetable.empty(self.days, self.periods)
        seeded = self._pins.apply(timetable, self.teachers)
        self.shortfalls = []

        for teacher in self.teachers:
            for asn in teacher.assignments:
                already = seeded.pop((teacher.id, asn.class_id, asn.subject), 0)
                placed = self._place_requirement(timetable, teacher, asn, already)
                if placed < asn.periods_per_week:
                    self.shortfalls.append(Shortfall(
                        teacher_id=teacher.id,
                        class_id=asn.class_id,
                        subject=asn.subject,
                        required=asn.periods_per_week,
                        placed=placed,
                    ))
                    logger.warning(
                        f"{teacher.id}: {asn.class_id}/{asn.subject} nur "
                        f"{placed}/{asn.periods_per_week} Stunden platziert"
                    )

        logger.info(
            f"Basisplan: {timetable.entry_count()} Stunden platziert, "
            f"{len(self.shortfalls)} Lehraufträge unvollständig"
        )
        return timetable

    def classify(self, class_id: str, subject: str) -> PlacementCategory:
        """Kategorie eines Lehrauftrags (bestimmt die Stunden-Präferenz)."""
        gen = self.config.generator
        if subject in gen.core_subjects and class_id in gen.senior_classes:
            return PlacementCategory.CORE_SENIOR
        if subject in gen.science_subjects:
            return PlacementCategory.SCIENCE
        if subject in gen.grading_subjects:
            return PlacementCategory.GRADING
        return PlacementCategory.OTHER

    def preferred_periods(self, category: PlacementCategory) -> list[int]:
        """Geordnete Stunden-Präferenz einer Kategorie (nur gültige Stunden)."""
        gen = self.config.generator
        if category in (PlacementCategory.CORE_SENIOR, PlacementCategory.SCIENCE):
            order = gen.core_periods
        elif category == PlacementCategory.GRADING:
            order = gen.grading_periods
        else:
            order = gen.other_periods
        valid = set(self.periods)
        return [p for p in order if p in valid]

    # ─── Platzierung ──────────────────────────────────────────────────────────

    def _day_order(self, category: PlacementCategory, remaining: int) -> list[Day]:
        """Besuchsreihenfolge der Tage im heuristischen Durchlauf.

        Grading-Fächer springen mit fester Schrittweite durch die Woche
        (2 Stunden bei 6 Tagen → MON, THU); die übrigen Tage folgen danach.
        """
        if (
            category != PlacementCategory.GRADING
            or not self.config.generator.spread_grading_across_week
            or remaining <= 0
        ):
            return list(self.days)
        stride = max(1, len(self.days) // remaining)
        first = self.days[::stride]
        return first + [d for d in self.days if d not in first]

    def _is_free(
        self, timetable: MasterTimetable, teacher_id: str, class_id: str, day: Day, period: int
    ) -> bool:
        """Strukturelle Konflikte: Lehrer belegt oder Klasse schon versorgt."""
        return not timetable.has_entry(teacher_id, day, period) and \
            not timetable.class_is_taken(class_id, day, period)

    def _place_requirement(
        self,
        timetable: MasterTimetable,
        teacher: Teacher,
        asn: TeacherAssignment,
        assigned: int,
    ) -> int:
        """Platziert einen Lehrauftrag. Gibt die erreichte Stundenzahl zurück."""
        target = asn.periods_per_week
        category = self.classify(asn.class_id, asn.subject)
        preferred = self.preferred_periods(category)
        cap = self.config.generator.placement_streak_cap

        # Heuristischer Durchlauf: höchstens eine Stunde pro Tag
        for day in self._day_order(category, target - assigned):
            if assigned >= target:
                break
            for period in preferred:
                if not self._is_free(timetable, teacher.id, asn.class_id, day, period):
                    continue
                streak = consecutive_streak(
                    teacher.id, day, period, timetable, periods=self.periods
                )
                if streak >= cap:
                    continue
                self._place(timetable, teacher.id, asn, day, period)
                assigned += 1
                break

        # Fallback: ohne Serien-Grenze, reihum eine Stunde pro Tag
        progress = True
        while assigned < target and progress:
            progress = False
            for day in self.days:
                if assigned >= target:
                    break
                for period in self.periods:
                    if self._is_free(timetable, teacher.id, asn.class_id, day, period):
                        self._place(timetable, teacher.id, asn, day, period)
                        assigned += 1
                        progress = True
                        logger.debug(
                            f"Fallback: {teacher.id} {asn.class_id}/{asn.subject} "
                            f"{day.value} Std. {period}"
                        )
                        break

        return assigned

    @staticmethod
    def _place(
        timetable: MasterTimetable, teacher_id: str, asn: TeacherAssignment, day: Day, period: int
    ) -> None:
        timetable.place(day, period, TimetableEntry(
            class_id=asn.class_id, subject=asn.subject, teacher_id=teacher_id,
        ))


def generate_baseline(
    teachers: list[Teacher], config: Optional[EngineConfig] = None
) -> MasterTimetable:
    """Kurzform: BaselineGenerator(teachers, config).generate()."""
    return BaselineGenerator(teachers, config).generate()
