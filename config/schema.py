from pydantic import BaseModel, Field, model_validator
from typing import Literal, Optional
from enum import Enum


class Day(str, Enum):
    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"


Severity = Literal["ERROR", "WARNING"]


# ─── ZEITRASTER ───

class PeriodTiming(BaseModel):
    """Eine einzelne Unterrichtsstunde im Tagesraster."""
    # Laufende Nummer der Stunde, 1-basiert
    number: int
    # Beginn der Stunde im Format "HH:MM"
    start_time: str
    # Ende der Stunde im Format "HH:MM"
    end_time: str


class TimeGridConfig(BaseModel):
    """Festes Wochenraster: Tage × Stunden, Pause nach `recess_after`.

    Die Pause ist kein eigener Slot, sondern nur eine Grenze für die
    Verteilungsregeln (vor/nach der Pause).
    """
    # Unterrichtstage in fester Wochenreihenfolge
    days: list[Day] = Field(
        default_factory=lambda: list(Day),
        description="Unterrichtstage (Reihenfolge = Platzierungsreihenfolge)")
    # Anzahl Stunden pro Tag
    periods_per_day: int = Field(8, ge=1, le=12,
        description="Stunden pro Tag")
    # Pause folgt nach dieser Stunde
    recess_after: int = Field(5, ge=1,
        description="Letzte Stunde vor der großen Pause")
    # Uhrzeiten (nur Anzeige)
    period_timings: list[PeriodTiming] = Field(default_factory=list,
        description="Uhrzeiten der Stunden")

    @model_validator(mode='after')
    def validate_grid(self):
        if len(set(self.days)) != len(self.days):
            raise ValueError("Tage im Zeitraster sind nicht eindeutig")
        if self.recess_after >= self.periods_per_day:
            raise ValueError(
                f"Pause nach Stunde {self.recess_after} liegt nicht innerhalb "
                f"von {self.periods_per_day} Stunden")
        for timing in self.period_timings:
            if not 1 <= timing.number <= self.periods_per_day:
                raise ValueError(
                    f"Uhrzeit für Stunde {timing.number} außerhalb des Rasters")
        return self

    @property
    def periods(self) -> list[int]:
        """Alle Stunden-Nummern 1..periods_per_day."""
        return list(range(1, self.periods_per_day + 1))

    @property
    def before_recess(self) -> list[int]:
        return [p for p in self.periods if p <= self.recess_after]

    @property
    def after_recess(self) -> list[int]:
        return [p for p in self.periods if p > self.recess_after]


# ─── FIXE SLOTS ───

class FixedSlot(BaseModel):
    """Curriculare Pflichtlage: Klasse+Fach MUSS an genau diesem Tag/Stunde liegen.

    Wird vom Generator vorab gesetzt und vom Validator geprüft.
    """
    class_id: str
    subject: str
    day: Day
    period: int = Field(ge=1)


# ─── GENERATOR ───

class GeneratorConfig(BaseModel):
    """Heuristik-Parameter des Basis-Generators."""
    # Hauptfächer (in Oberstufenklassen morgens)
    core_subjects: list[str] = Field(
        default=["Science", "Math", "English", "SST"],
        description="Hauptfächer")
    # Klassen, für die die Hauptfach-Regel gilt
    senior_classes: list[str] = Field(
        default=["8th", "9th", "10th"],
        description="Oberstufenklassen")
    # Naturwissenschaften (in allen Klassen morgens bevorzugt)
    science_subjects: list[str] = Field(
        default=["Science", "Physics"],
        description="Naturwissenschaftliche Fächer")
    # Notenfreie Fächer (bevorzugt nach der Pause)
    grading_subjects: list[str] = Field(
        default=["Computer", "Phy Edu", "Art", "W.L."],
        description="Grading-Fächer")
    # Stunden-Präferenzen je Kategorie (Reihenfolge = Priorität)
    core_periods: list[int] = Field(default=[1, 2, 3, 4, 5, 6, 7, 8],
        description="Präferenz Hauptfach/NW: 1-5, danach 6-8")
    grading_periods: list[int] = Field(default=[7, 8, 6, 5],
        description="Präferenz Grading-Fächer")
    other_periods: list[int] = Field(default=[5, 6, 7, 8, 1, 2, 3, 4],
        description="Präferenz übrige Fächer")
    # Heuristische Platzierung nur, wenn die Serie danach < cap bleibt
    placement_streak_cap: int = Field(3, ge=2,
        description="Serie ab dieser Länge wird heuristisch nicht platziert")
    # Grading-Fächer mit Schrittweite über die Woche verteilen
    spread_grading_across_week: bool = Field(True,
        description="Grading-Fächer deterministisch über die Woche verteilen")


# ─── VALIDIERUNG ───

class RuleSpec(BaseModel):
    """Eine Regel im Regelwerk mit eigener Schwere."""
    name: str
    severity: Severity = "ERROR"


class ValidationConfig(BaseModel):
    """Regelwerk des Validators.

    Entweder ein Preset ("standard", "legacy", "strict") oder eine explizite,
    geordnete Regelliste. Die Liste hat Vorrang.
    """
    preset: Literal["standard", "legacy", "strict"] = Field("standard",
        description="Vordefiniertes Regelwerk")
    rules: Optional[list[RuleSpec]] = Field(None,
        description="Explizite Regelliste (überschreibt preset)")
    # Max. Stunden am Stück
    teaching_streak_limit: int = Field(3, ge=1,
        description="Max. Unterrichtsstunden am Stück")
    # Max. Freistunden am Stück
    free_streak_limit: int = Field(2, ge=1,
        description="Max. Freistunden am Stück")


# ─── VERTRETUNG ───

class SubstitutionConfig(BaseModel):
    """Bewertungsgewichte der Vertretungssuche."""
    # Bonus: Vertretung unterrichtet das Fach
    qualified_bonus: int = Field(100, description="Bonus Fachkompetenz")
    # Bonus: Vertretung ist Klassenleitung der Klasse
    incharge_bonus: int = Field(50, description="Bonus Klassenleitung")
    # Serie, ab der ein Regelverstoß vorliegt (streak > limit)
    streak_limit: int = Field(3, ge=1, description="Max. Stunden am Stück")
    # Abzug wenn die Serie genau das Limit erreicht
    at_limit_penalty: int = Field(10, description="Abzug Serie == Limit")
    # Abzug wenn die Serie das Limit überschreitet (kein Ausschluss!)
    over_limit_penalty: int = Field(200, description="Abzug Serie > Limit")
    # Abzug pro bereits belegter Stunde am Tag
    daily_load_weight: int = Field(1, ge=0, description="Abzug je Tagesstunde")
    # Vertretungen nur am eigenen Tag als belegt werten
    match_substitution_day: bool = Field(True,
        description="False = Altverhalten (nur Stunde wird verglichen)")


# ─── GESAMT-CONFIG ───

class EngineConfig(BaseModel):
    """Gesamtkonfiguration der Stundenplan-Engine."""
    # Name der Schule (nur Anzeige)
    school_name: str = Field("Government High School",
        description="Name der Schule")
    # Wochenraster
    time_grid: TimeGridConfig = Field(default_factory=TimeGridConfig)
    # Generator-Heuristik
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    # Regelwerk des Validators
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    # Vertretungs-Gewichte
    substitution: SubstitutionConfig = Field(default_factory=SubstitutionConfig)
    # Feste Pflichtlagen
    fixed_slots: list[FixedSlot] = Field(default_factory=list,
        description="Feste Pflichtlagen (Klasse, Fach, Tag, Stunde)")

    @model_validator(mode='after')
    def validate_fixed_slots(self):
        periods = set(self.time_grid.periods)
        for fs in self.fixed_slots:
            if fs.day not in self.time_grid.days:
                raise ValueError(
                    f"Fester Slot {fs.class_id}/{fs.subject}: Tag {fs.day.value} "
                    f"nicht im Zeitraster")
            if fs.period not in periods:
                raise ValueError(
                    f"Fester Slot {fs.class_id}/{fs.subject}: Stunde {fs.period} "
                    f"nicht im Zeitraster")
        return self
