"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TeacherAssignment(BaseModel):
    """Lehrauftrag: Klasse + Fach + Wochenstunden."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    class_id: str                              # "6th".."10th"
    subject: str                               # "Math", "Science", ...
    periods_per_week: int = Field(ge=0)


class Teacher(BaseModel):
    """Repräsentiert eine einzelne Lehrkraft.

    Wird von der Stammdatenpflege angelegt; die Engine liest sie nur.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str                                    # stabiler Bezeichner ("T1")
    name: str
    designation: str = ""                      # "Master", "Lecturer", "HM", ...
    subjects: list[str] = []                   # Fachkompetenz
    assignments: list[TeacherAssignment] = []  # Direkte Lehraufträge
    weekly_limit: int = Field(36, ge=0)        # Obergrenze Stunden/Woche
    class_incharge_of: Optional[str] = None    # Klassenleitung

    @field_validator("id")
    @classmethod
    def strip_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Lehrer-ID darf nicht leer sein.")
        return v

    @property
    def total_periods(self) -> int:
        """Summe aller Wochenstunden laut Lehraufträgen."""
        return sum(a.periods_per_week for a in self.assignments)

    def teaches(self, subject: str) -> bool:
        """True wenn die Lehrkraft für das Fach qualifiziert ist."""
        return subject in self.subjects


def roster_class_ids(teachers: list[Teacher]) -> list[str]:
    """Klassen mit Lehrauftrag in Reihenfolge des ersten Auftretens im Roster."""
    seen: dict[str, None] = {}
    for t in teachers:
        for a in t.assignments:
            seen.setdefault(a.class_id, None)
    return list(seen)
