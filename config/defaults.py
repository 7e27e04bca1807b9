from config.schema import (
    Day,
    EngineConfig,
    FixedSlot,
    GeneratorConfig,
    PeriodTiming,
    RuleSpec,
    SubstitutionConfig,
    TimeGridConfig,
    ValidationConfig,
)

# Festes Wochenraster (6 Tage × 8 Stunden)
DAYS: list[Day] = list(Day)
PERIODS: list[int] = [1, 2, 3, 4, 5, 6, 7, 8]
RECESS_AFTER = 5

# Stammklassen der Schule
CLASS_IDS: list[str] = ["6th", "7th", "8th", "9th", "10th"]

# Bekannte Fächer. "Free Period" kennzeichnet Vertretungen ohne Fachbezug.
SUBJECTS: list[str] = [
    "Math", "Science", "English", "SST", "Punjabi", "Hindi", "Computer",
    "Phy Edu", "Agri", "W.L.", "Art", "Physics", "Free Period",
]
FREE_PERIOD = "Free Period"


def default_time_grid() -> TimeGridConfig:
    """Standard-Zeitraster.

    Stundenraster:
    1. Stunde  08:00 - 08:45
    2. Stunde  08:45 - 09:30
    3. Stunde  09:30 - 10:15
    4. Stunde  10:15 - 11:00
    5. Stunde  11:00 - 11:45
       ── Pause 11:45 - 12:15 ──
    6. Stunde  12:15 - 13:00
    7. Stunde  13:00 - 13:45
    8. Stunde  13:45 - 14:30
    """
    return TimeGridConfig(
        days=list(DAYS),
        periods_per_day=len(PERIODS),
        recess_after=RECESS_AFTER,
        period_timings=[
            PeriodTiming(number=1, start_time="08:00", end_time="08:45"),
            PeriodTiming(number=2, start_time="08:45", end_time="09:30"),
            PeriodTiming(number=3, start_time="09:30", end_time="10:15"),
            PeriodTiming(number=4, start_time="10:15", end_time="11:00"),
            PeriodTiming(number=5, start_time="11:00", end_time="11:45"),
            PeriodTiming(number=6, start_time="12:15", end_time="13:00"),
            PeriodTiming(number=7, start_time="13:00", end_time="13:45"),
            PeriodTiming(number=8, start_time="13:45", end_time="14:30"),
        ],
    )


def default_fixed_slots() -> list[FixedSlot]:
    """Science-Pflichtlagen der Oberstufenklassen."""
    return [
        FixedSlot(class_id="10th", subject="Science", day=Day.FRI, period=3),
        FixedSlot(class_id="9th", subject="Science", day=Day.TUE, period=2),
        FixedSlot(class_id="8th", subject="Science", day=Day.WED, period=2),
    ]


# ─── REGELWERKE ───────────────────────────────────────────────────────────────
# Reihenfolge innerhalb eines Geltungsbereichs = Reihenfolge der Meldungen.

STANDARD_RULES: list[RuleSpec] = [
    RuleSpec(name="class_double_booking", severity="ERROR"),
    RuleSpec(name="vacant_period", severity="ERROR"),
    RuleSpec(name="teaching_streak", severity="WARNING"),
    RuleSpec(name="no_break_after_recess", severity="ERROR"),
    RuleSpec(name="free_streak", severity="ERROR"),
    RuleSpec(name="morning_only", severity="ERROR"),
    RuleSpec(name="vacant_after_recess", severity="ERROR"),
    RuleSpec(name="fixed_slot", severity="ERROR"),
]

LEGACY_RULES: list[RuleSpec] = [
    RuleSpec(name="class_double_booking", severity="ERROR"),
    RuleSpec(name="vacant_period", severity="ERROR"),
    RuleSpec(name="core_after_recess", severity="WARNING"),
    RuleSpec(name="teaching_streak", severity="WARNING"),
]

STRICT_RULES: list[RuleSpec] = [
    RuleSpec(name="class_double_booking", severity="ERROR"),
    RuleSpec(name="vacant_period", severity="ERROR"),
    RuleSpec(name="core_after_recess", severity="WARNING"),
    RuleSpec(name="teaching_streak", severity="ERROR"),
    RuleSpec(name="no_break_after_recess", severity="ERROR"),
    RuleSpec(name="free_streak", severity="ERROR"),
    RuleSpec(name="morning_only", severity="ERROR"),
    RuleSpec(name="vacant_after_recess", severity="ERROR"),
    RuleSpec(name="fixed_slot", severity="ERROR"),
    RuleSpec(name="weekly_limit", severity="WARNING"),
]

RULE_PRESETS: dict[str, list[RuleSpec]] = {
    "standard": STANDARD_RULES,
    "legacy": LEGACY_RULES,
    "strict": STRICT_RULES,
}


def default_engine_config() -> EngineConfig:
    """Vollständige Standard-Konfiguration inkl. Pflichtlagen."""
    return EngineConfig(
        time_grid=default_time_grid(),
        generator=GeneratorConfig(),
        validation=ValidationConfig(),
        substitution=SubstitutionConfig(),
        fixed_slots=default_fixed_slots(),
    )
