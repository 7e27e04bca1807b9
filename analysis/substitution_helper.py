"""Vertretungshelfer: findet geeignete Vertreter für abwesende Lehrer.

Bewertet freie Kandidaten nach Fachkompetenz, Klassenleitung, der Serie,
die bei einer Zuweisung entstünde, und der Tagesbelastung. Jede Abwesenheit
wird einzeln entschieden (greedy); Vertretungen desselben Stapels sind für
spätere Entscheidungen sichtbar.
"""

import logging
from typing import Callable, Iterable, Optional, Sequence

from pydantic import BaseModel

from config.defaults import FREE_PERIOD, default_engine_config
from config.schema import Day, EngineConfig
from models.substitution import Substitution, SubstitutionLedger
from models.teacher import Teacher
from models.timetable import MasterTimetable
from solver.availability import consecutive_streak, daily_load, is_teacher_busy

logger = logging.getLogger(__name__)


class SubstituteCandidate(BaseModel):
    """Ein bewerteter Kandidat für eine Vertretung."""

    teacher_id: str
    name: str
    qualified: bool          # Unterrichtet das ausgefallene Fach
    is_incharge: bool        # Klassenleitung der betroffenen Klasse
    streak: int              # Serie, wenn zugewiesen
    daily_load: int          # Bereits belegte Stunden an diesem Tag
    score: int               # höher = besser
    would_violate: bool      # streak > Limit


class SubstituteSuggestion(BaseModel):
    """Ergebnis der Vertretungssuche für einen Slot."""

    teacher: Optional[Teacher] = None
    would_violate: bool = False
    streak: int = 0

    @property
    def found(self) -> bool:
        return self.teacher is not None


class DutySummary(BaseModel):
    """Vertretungslast einer Lehrkraft."""

    teacher_id: str
    name: str
    count: int
    labels: list[str]        # "7th (P3)", ...


class SubstitutionFinder:
    """Findet passende Vertreter für abwesende Lehrkräfte."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or default_engine_config()
        self.weights = self.config.substitution
        self.periods = self.config.time_grid.periods

    # ── Einzelner Slot ────────────────────────────────────────────────────────

    def free_teachers(
        self,
        absent_teacher_id: str,
        day: Day,
        period: int,
        timetable: MasterTimetable,
        teachers: list[Teacher],
        substitutions: Iterable[Substitution] = (),
    ) -> list[Teacher]:
        """Alle Lehrkräfte außer der abwesenden, die im Slot frei sind (Roster-Reihenfolge)."""
        subs = list(substitutions)
        return [
            t for t in teachers
            if t.id != absent_teacher_id
            and not is_teacher_busy(
                t.id, day, period, timetable, subs, self.weights.match_substitution_day
            )
        ]

    def rank_candidates(
        self,
        absent_teacher_id: str,
        day: Day,
        period: int,
        class_id: str,
        subject: str,
        timetable: MasterTimetable,
        teachers: list[Teacher],
        substitutions: Iterable[Substitution] = (),
    ) -> list[SubstituteCandidate]:
        """Alle freien Kandidaten, nach Score absteigend.

        Gleichstand bleibt in Roster-Reihenfolge (stabile Sortierung).
        """
        subs = list(substitutions)
        match_day = self.weights.match_substitution_day
        candidates = []
        for teacher in self.free_teachers(absent_teacher_id, day, period, timetable, teachers, subs):
            streak = consecutive_streak(
                teacher.id, day, period, timetable, subs, self.periods, match_day
            )
            load = daily_load(teacher.id, day, timetable, subs, self.periods, match_day)
            qualified = teacher.teaches(subject)
            is_incharge = teacher.class_incharge_of == class_id
            candidates.append(SubstituteCandidate(
                teacher_id=teacher.id,
                name=teacher.name,
                qualified=qualified,
                is_incharge=is_incharge,
                streak=streak,
                daily_load=load,
                score=self._compute_score(qualified, is_incharge, streak, load),
                would_violate=streak > self.weights.streak_limit,
            ))
        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates

    def find_substitute(
        self,
        absent_teacher_id: str,
        day: Day,
        period: int,
        class_id: str,
        subject: str,
        timetable: MasterTimetable,
        teachers: list[Teacher],
        substitutions: Iterable[Substitution] = (),
    ) -> SubstituteSuggestion:
        """Bester Kandidat für einen Slot; leeres Ergebnis wenn niemand frei ist."""
        ranked = self.rank_candidates(
            absent_teacher_id, day, period, class_id, subject, timetable, teachers, substitutions
        )
        if not ranked:
            return SubstituteSuggestion()
        best = ranked[0]
        teacher = next(t for t in teachers if t.id == best.teacher_id)
        return SubstituteSuggestion(
            teacher=teacher, would_violate=best.would_violate, streak=best.streak,
        )

    # ── Stapel & manuelle Zuweisung ───────────────────────────────────────────

    def mark_absent(
        self,
        absent_teacher_id: str,
        day: Day,
        timetable: MasterTimetable,
        teachers: list[Teacher],
        ledger: SubstitutionLedger,
        make_id: Callable[[int], str],
        date: str,
        reason: str = "Leave",
    ) -> list[Substitution]:
        """Legt Vertretungen für alle Stunden einer Lehrkraft an einem Tag an.

        Bereits vertretene Slots werden übersprungen. Jede neue Vertretung
        landet sofort im Ledger und zählt für die nächste Stunde mit.
        `make_id(period)` liefert die ID des neuen Zettels.

        Raises:
            ValueError: unbekannte Lehrer-ID.
        """
        if not any(t.id == absent_teacher_id for t in teachers):
            raise ValueError(f"Lehrkraft '{absent_teacher_id}' nicht gefunden.")

        created: list[Substitution] = []
        scheduled = 0
        for period in self.periods:
            entry = timetable.get(day, period, absent_teacher_id)
            if entry is None:
                continue
            scheduled += 1
            if ledger.find_slot(day, period, absent_teacher_id) is not None:
                logger.debug(f"{day.value} Std. {period}: bereits vertreten")
                continue

            suggestion = self.find_substitute(
                absent_teacher_id, day, period, entry.class_id, entry.subject,
                timetable, teachers, list(ledger),
            )
            if not suggestion.found:
                logger.warning(
                    f"{day.value} Std. {period}: keine freie Lehrkraft für "
                    f"{entry.class_id}/{entry.subject}"
                )
                continue

            sub = Substitution(
                id=make_id(period),
                date=date,
                day=day,
                absent_teacher_id=absent_teacher_id,
                period=period,
                class_id=entry.class_id,
                original_subject=entry.subject,
                substitute_teacher_id=suggestion.teacher.id,
                reason=reason,
                is_override=suggestion.would_violate,
            )
            ledger.add(sub)
            created.append(sub)
            if suggestion.would_violate:
                logger.warning(
                    f"{day.value} Std. {period}: {suggestion.teacher.id} übernimmt "
                    f"{entry.class_id} mit {suggestion.streak} Stunden am Stück"
                )

        if scheduled == 0:
            logger.info(f"{absent_teacher_id} hat am {day.value} keinen Unterricht")
        logger.info(
            f"Abwesenheit {absent_teacher_id} {day.value}: "
            f"{len(created)} Vertretungen angelegt"
        )
        return created

    def assign_manually(
        self,
        absent_teacher_id: str,
        day: Day,
        period: int,
        substitute_teacher_id: str,
        timetable: MasterTimetable,
        teachers: list[Teacher],
        ledger: SubstitutionLedger,
        make_id: Callable[[int], str],
        date: str,
        class_id: Optional[str] = None,
    ) -> Substitution:
        """Manuelle Vertretung. Aktualisiert einen vorhandenen Zettel für den Slot.

        Ohne class_id wird die Klasse aus dem Raster der abwesenden Lehrkraft
        übernommen.

        Raises:
            ValueError: unbekannte Lehrkraft, Vertretung = abwesende Lehrkraft,
                Vertretung im Slot belegt oder Klasse nicht bestimmbar.
        """
        known = {t.id for t in teachers}
        for teacher_id in (absent_teacher_id, substitute_teacher_id):
            if teacher_id not in known:
                raise ValueError(f"Lehrkraft '{teacher_id}' nicht gefunden.")
        if substitute_teacher_id == absent_teacher_id:
            raise ValueError("Vertretung und abwesende Lehrkraft sind identisch.")

        entry = timetable.get(day, period, absent_teacher_id)
        class_id = class_id or (entry.class_id if entry else None)
        if class_id is None:
            raise ValueError(
                f"{absent_teacher_id} hat am {day.value} in Stunde {period} keinen "
                f"Unterricht – Klasse angeben."
            )

        existing = ledger.find_slot(day, period, absent_teacher_id)
        others = [s for s in ledger if existing is None or s.id != existing.id]
        if is_teacher_busy(
            substitute_teacher_id, day, period, timetable, others,
            self.weights.match_substitution_day,
        ):
            raise ValueError(
                f"{substitute_teacher_id} ist am {day.value} in Stunde {period} belegt."
            )

        if existing is not None:
            logger.info(f"Vertretung {existing.id} → {substitute_teacher_id} (manuell)")
            return ledger.update(
                existing.id,
                substitute_teacher_id=substitute_teacher_id,
                class_id=class_id,
                reason="Manual Override (Updated)",
                is_override=True,
            )

        sub = Substitution(
            id=make_id(period),
            date=date,
            day=day,
            absent_teacher_id=absent_teacher_id,
            period=period,
            class_id=class_id,
            original_subject=entry.subject if entry else FREE_PERIOD,
            substitute_teacher_id=substitute_teacher_id,
            reason="Manual Override",
            is_override=True,
        )
        ledger.add(sub)
        logger.info(f"Vertretung {sub.id}: {substitute_teacher_id} für {absent_teacher_id} (manuell)")
        return sub

    @staticmethod
    def duty_summary(
        substitutions: Iterable[Substitution], teachers: Sequence[Teacher]
    ) -> list[DutySummary]:
        """Vertretungslast je Lehrkraft in Reihenfolge des ersten Einsatzes."""
        names = {t.id: t.name for t in teachers}
        summary: dict[str, DutySummary] = {}
        for sub in substitutions:
            name = names.get(sub.substitute_teacher_id)
            if name is None:
                continue
            item = summary.setdefault(sub.substitute_teacher_id, DutySummary(
                teacher_id=sub.substitute_teacher_id, name=name, count=0, labels=[],
            ))
            item.count += 1
            item.labels.append(f"{sub.class_id} (P{sub.period})")
        return list(summary.values())

    # ── Score-Berechnung ──────────────────────────────────────────────────────

    def _compute_score(
        self, qualified: bool, is_incharge: bool, streak: int, load: int
    ) -> int:
        """Berechnet den Eignungs-Score eines Kandidaten.

        Zusammensetzung (Standardgewichte):
        - Fachkompetenz: +100
        - Klassenleitung: +50
        - Serie == Limit: -10, Serie > Limit: -200 (kein Ausschluss)
        - Tagesbelastung: -1 je belegter Stunde
        """
        w = self.weights
        score = 0
        if qualified:
            score += w.qualified_bonus
        if is_incharge:
            score += w.incharge_bonus
        if streak == w.streak_limit:
            score -= w.at_limit_penalty
        elif streak > w.streak_limit:
            score -= w.over_limit_penalty
        score -= w.daily_load_weight * load
        return score
