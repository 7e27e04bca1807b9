"""Validierung des Master-Stundenplans.

Prüft das Raster komplett neu gegen ein konfigurierbares Regelwerk und
liefert eine Liste typisierter Meldungen. Jede Regel ist eine eigene
Prüffunktion mit eigener Schwere; Presets (standard, legacy, strict) sind
nur unterschiedliche Zusammenstellungen derselben Regeln.

Meldungs-IDs ergeben sich ausschließlich aus Tag, Stunde und Klasse bzw.
Lehrkraft. Zwei Läufe auf unverändertem Raster liefern dieselbe Liste.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from config.defaults import RULE_PRESETS, default_engine_config
from config.schema import Day, EngineConfig, RuleSpec, Severity
from models.teacher import Teacher, roster_class_ids
from models.timetable import MasterTimetable
from solver.pinning import PinManager

logger = logging.getLogger(__name__)


class IssueLocation(BaseModel):
    """Ort einer Meldung im Raster."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    day: Day
    period: int
    class_id: Optional[str] = None
    teacher_id: Optional[str] = None


class ValidationIssue(BaseModel):
    """Eine einzelne Regelverletzung."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    type: Severity
    message: str
    location: Optional[IssueLocation] = None


class ValidationReport(BaseModel):
    """Ergebnis eines Validierungslaufs."""

    issues: list[ValidationIssue]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.type == "ERROR"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.type == "WARNING"]

    def print_rich(self, limit: Optional[int] = None) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Stundenplan-Validierung", border_style="cyan"))

        if not self.issues:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=False)
        table.add_column("Typ", width=8)
        table.add_column("Ort", width=16)
        table.add_column("ID", style="dim")
        table.add_column("Meldung")

        shown = self.issues if limit is None else self.issues[:limit]
        for issue in shown:
            color = "red" if issue.type == "ERROR" else "yellow"
            loc = issue.location
            where = f"{loc.day.value} Std. {loc.period}" if loc else "–"
            table.add_row(f"[{color}]{issue.type}[/{color}]", where, issue.id, issue.message)
        console.print(table)
        if limit is not None and len(self.issues) > limit:
            console.print(f"[dim]… {len(self.issues) - limit} weitere Meldungen[/dim]")


# ─── Regeln ───────────────────────────────────────────────────────────────────

class _Context:
    """Gemeinsame, pro Lauf einmal berechnete Daten für alle Regeln."""

    def __init__(
        self, timetable: MasterTimetable, teachers: list[Teacher], config: EngineConfig
    ) -> None:
        self.timetable = timetable
        self.teachers = teachers
        self.config = config
        self.periods = config.time_grid.periods
        self.recess_after = config.time_grid.recess_after
        self.before_recess = config.time_grid.before_recess
        self.after_recess = config.time_grid.after_recess
        self.class_ids = roster_class_ids(teachers)
        self.pins = PinManager(config.fixed_slots)

    def busy_flags(self, teacher_id: str, day: Day) -> list[tuple[int, bool]]:
        """(Stunde, belegt) für alle Stunden eines Tages, nur Master-Raster."""
        return [(p, self.timetable.has_entry(teacher_id, day, p)) for p in self.periods]


SlotCheck = Callable[[_Context, Day, int, Severity], list[ValidationIssue]]
TeacherDayCheck = Callable[[_Context, Day, Teacher, Severity], list[ValidationIssue]]
GridCheck = Callable[[_Context, Severity], list[ValidationIssue]]


@dataclass(frozen=True)
class Rule:
    """Eine Regel mit Geltungsbereich.

    scope:
        "slot"        – einmal pro (Tag, Stunde)
        "teacher_day" – einmal pro (Tag, Lehrkraft)
        "grid"        – einmal pro Raster
    """

    name: str
    scope: Literal["slot", "teacher_day", "grid"]
    check: Callable
    description: str = ""


def _check_class_double_booking(
    ctx: _Context, day: Day, period: int, severity: Severity
) -> list[ValidationIssue]:
    """Eine Klasse darf pro Slot nur einen Lehrer-Eintrag haben."""
    usage: dict[str, list[str]] = {}
    for teacher_id, entry in ctx.timetable.entries_at(day, period).items():
        usage.setdefault(entry.class_id, []).append(teacher_id)
    return [
        ValidationIssue(
            id=f"conf-{day.value}-{period}-{class_id}",
            type=severity,
            message=f"Class {class_id} has {len(teacher_ids)} teachers assigned at once!",
            location=IssueLocation(day=day, period=period, class_id=class_id),
        )
        for class_id, teacher_ids in usage.items()
        if len(teacher_ids) > 1
    ]


def _check_vacant_period(
    ctx: _Context, day: Day, period: int, severity: Severity
) -> list[ValidationIssue]:
    """Jede Klasse mit Lehrauftrag braucht in jedem Slot einen Eintrag."""
    taken = {e.class_id for e in ctx.timetable.entries_at(day, period).values()}
    return [
        ValidationIssue(
            id=f"vacant-{day.value}-{period}-{class_id}",
            type=severity,
            message=f"Vacant Period: Class {class_id} has no teacher assigned for Period {period}.",
            location=IssueLocation(day=day, period=period, class_id=class_id),
        )
        for class_id in ctx.class_ids
        if class_id not in taken
    ]


def _check_core_after_recess(
    ctx: _Context, day: Day, period: int, severity: Severity
) -> list[ValidationIssue]:
    """Hauptfächer der Oberstufe gehören vor die Pause."""
    if period <= ctx.recess_after:
        return []
    gen = ctx.config.generator
    return [
        ValidationIssue(
            id=f"rule-core-{day.value}-{period}-{teacher_id}",
            type=severity,
            message=(
                f"{entry.subject} scheduled for Class {entry.class_id} after recess "
                f"(Period {period}). Core subjects are preferred in morning."
            ),
            location=IssueLocation(
                day=day, period=period, class_id=entry.class_id, teacher_id=teacher_id,
            ),
        )
        for teacher_id, entry in ctx.timetable.entries_at(day, period).items()
        if entry.class_id in gen.senior_classes and entry.subject in gen.core_subjects
    ]


def _check_teaching_streak(
    ctx: _Context, day: Day, teacher: Teacher, severity: Severity
) -> list[ValidationIssue]:
    """Jede Stunde jenseits des Limits am Stück erzeugt eine Meldung."""
    limit = ctx.config.validation.teaching_streak_limit
    issues: list[ValidationIssue] = []
    streak = 0
    for period, busy in ctx.busy_flags(teacher.id, day):
        streak = streak + 1 if busy else 0
        if streak > limit:
            issues.append(ValidationIssue(
                id=f"streak-teach-{day.value}-{period}-{teacher.id}",
                type=severity,
                message=(
                    f"{teacher.name} has {streak} consecutive teaching periods. "
                    f"Max {limit} allowed."
                ),
                location=IssueLocation(day=day, period=period, teacher_id=teacher.id),
            ))
    return issues


def _check_no_break_after_recess(
    ctx: _Context, day: Day, teacher: Teacher, severity: Severity
) -> list[ValidationIssue]:
    """Alle Stunden nach der Pause am Stück sind verboten."""
    after = ctx.after_recess
    if not after or not all(ctx.timetable.has_entry(teacher.id, day, p) for p in after):
        return []
    last = after[-1]
    return [ValidationIssue(
        id=f"streak-afternoon-{day.value}-{last}-{teacher.id}",
        type=severity,
        message=(
            f"{teacher.name} teaching all {len(after)} periods after recess "
            f"continuously. Prohibited."
        ),
        location=IssueLocation(day=day, period=last, teacher_id=teacher.id),
    )]


def _check_free_streak(
    ctx: _Context, day: Day, teacher: Teacher, severity: Severity
) -> list[ValidationIssue]:
    """Zu viele Freistunden am Stück (ab Tagesbeginn gezählt, auch an freien Tagen)."""
    limit = ctx.config.validation.free_streak_limit
    issues: list[ValidationIssue] = []
    free = 0
    for period, busy in ctx.busy_flags(teacher.id, day):
        free = 0 if busy else free + 1
        if free > limit:
            issues.append(ValidationIssue(
                id=f"streak-free-{day.value}-{period}-{teacher.id}",
                type=severity,
                message=(
                    f"{teacher.name} has {free} consecutive free periods. "
                    f"Max {limit} allowed."
                ),
                location=IssueLocation(day=day, period=period, teacher_id=teacher.id),
            ))
    return issues


def _check_morning_only(
    ctx: _Context, day: Day, teacher: Teacher, severity: Severity
) -> list[ValidationIssue]:
    """Belegung nur vor der Pause ist unausgewogen."""
    busy = {p for p, flag in ctx.busy_flags(teacher.id, day) if flag}
    before = len(busy.intersection(ctx.before_recess))
    after = len(busy.intersection(ctx.after_recess))
    if before == 0 or after > 0:
        return []
    return [ValidationIssue(
        id=f"balance-morning-only-{day.value}-{teacher.id}",
        type=severity,
        message=f"{teacher.name} is only busy before recess. Must have balanced load.",
        location=IssueLocation(day=day, period=ctx.periods[0], teacher_id=teacher.id),
    )]


def _check_vacant_after_recess(
    ctx: _Context, day: Day, teacher: Teacher, severity: Severity
) -> list[ValidationIssue]:
    """An einem Arbeitstag muss nach der Pause mindestens eine Stunde liegen."""
    working = any(busy for _, busy in ctx.busy_flags(teacher.id, day))
    if not working or any(ctx.timetable.has_entry(teacher.id, day, p) for p in ctx.after_recess):
        return []
    first_after = ctx.after_recess[0] if ctx.after_recess else ctx.periods[-1]
    return [ValidationIssue(
        id=f"vacant-post-recess-{day.value}-{teacher.id}",
        type=severity,
        message=f"{teacher.name} is completely vacant after recess. Prohibited.",
        location=IssueLocation(day=day, period=first_after, teacher_id=teacher.id),
    )]


def _check_fixed_slot(ctx: _Context, severity: Severity) -> list[ValidationIssue]:
    """Pflichtlagen müssen exakt an ihrem Tag/Stunde liegen."""
    return [
        ValidationIssue(
            id=f"fixed-missing-{pin.day.value}-{pin.period}-{pin.class_id}",
            type=severity,
            message=(
                f"Strict Requirement: {pin.class_id} {pin.subject} must be at "
                f"Period {pin.period} on {pin.day.value}."
            ),
            location=IssueLocation(day=pin.day, period=pin.period, class_id=pin.class_id),
        )
        for pin in ctx.pins.missing(ctx.timetable)
    ]


def _check_weekly_limit(ctx: _Context, severity: Severity) -> list[ValidationIssue]:
    """Mehr Stunden im Raster als das Wochenlimit der Lehrkraft erlaubt."""
    issues: list[ValidationIssue] = []
    for teacher in ctx.teachers:
        if ctx.timetable.count_teacher_periods(teacher.id) <= teacher.weekly_limit:
            continue
        entries = ctx.timetable.teacher_entries(teacher.id)
        day, period, _ = entries[teacher.weekly_limit]
        issues.append(ValidationIssue(
            id=f"weekly-limit-{teacher.id}",
            type=severity,
            message=(
                f"{teacher.name} has {len(entries)} periods this week. "
                f"Limit is {teacher.weekly_limit}."
            ),
            location=IssueLocation(day=day, period=period, teacher_id=teacher.id),
        ))
    return issues


RULES: dict[str, Rule] = {
    r.name: r for r in [
        Rule("class_double_booking", "slot", _check_class_double_booking,
             "Klasse doppelt belegt"),
        Rule("vacant_period", "slot", _check_vacant_period,
             "Klasse ohne Lehrkraft"),
        Rule("core_after_recess", "slot", _check_core_after_recess,
             "Hauptfach der Oberstufe nach der Pause"),
        Rule("teaching_streak", "teacher_day", _check_teaching_streak,
             "Zu viele Stunden am Stück"),
        Rule("no_break_after_recess", "teacher_day", _check_no_break_after_recess,
             "Alle Stunden nach der Pause am Stück"),
        Rule("free_streak", "teacher_day", _check_free_streak,
             "Zu viele Freistunden am Stück"),
        Rule("morning_only", "teacher_day", _check_morning_only,
             "Nur vor der Pause belegt"),
        Rule("vacant_after_recess", "teacher_day", _check_vacant_after_recess,
             "Nach der Pause komplett frei"),
        Rule("fixed_slot", "grid", _check_fixed_slot,
             "Pflichtlage fehlt"),
        Rule("weekly_limit", "grid", _check_weekly_limit,
             "Wochenlimit überschritten"),
    ]
}


# ─── Validator ────────────────────────────────────────────────────────────────

class TimetableValidator:
    """Prüft ein Master-Raster gegen das konfigurierte Regelwerk.

    Verwendung:
        validator = TimetableValidator(config)
        report = validator.validate(timetable, teachers)
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or default_engine_config()
        self.rule_specs = self._resolve_rules()

    def _resolve_rules(self) -> list[RuleSpec]:
        """Explizite Regelliste vor Preset. Unbekannte Namen → ValueError."""
        vc = self.config.validation
        specs = vc.rules if vc.rules is not None else RULE_PRESETS[vc.preset]
        unknown = [s.name for s in specs if s.name not in RULES]
        if unknown:
            raise ValueError(
                f"Unbekannte Regel(n): {', '.join(unknown)}. "
                f"Verfügbar: {', '.join(RULES)}"
            )
        return list(specs)

    def _active(self, scope: str) -> list[tuple[Rule, Severity]]:
        return [
            (RULES[s.name], s.severity) for s in self.rule_specs
            if RULES[s.name].scope == scope
        ]

    def check(self, timetable: MasterTimetable, teachers: list[Teacher]) -> list[ValidationIssue]:
        """Alle Meldungen in fester Reihenfolge: Tag → Slots → Lehrkräfte, dann Raster."""
        ctx = _Context(timetable, teachers, self.config)
        slot_rules = self._active("slot")
        teacher_rules = self._active("teacher_day")
        grid_rules = self._active("grid")

        issues: list[ValidationIssue] = []
        for day in self.config.time_grid.days:
            for period in ctx.periods:
                for rule, severity in slot_rules:
                    issues.extend(rule.check(ctx, day, period, severity))
            for teacher in teachers:
                for rule, severity in teacher_rules:
                    issues.extend(rule.check(ctx, day, teacher, severity))
        for rule, severity in grid_rules:
            issues.extend(rule.check(ctx, severity))
        return issues

    def validate(self, timetable: MasterTimetable, teachers: list[Teacher]) -> ValidationReport:
        """Führt alle aktiven Regeln aus und gibt einen ValidationReport zurück."""
        issues = self.check(timetable, teachers)
        has_errors = any(i.type == "ERROR" for i in issues)
        logger.info(
            f"Validierung: {sum(1 for i in issues if i.type == 'ERROR')} Fehler, "
            f"{sum(1 for i in issues if i.type == 'WARNING')} Warnungen "
            f"({len(self.rule_specs)} Regeln)"
        )
        return ValidationReport(issues=issues, is_valid=not has_errors)


def validate_timetable(
    timetable: MasterTimetable,
    teachers: list[Teacher],
    config: Optional[EngineConfig] = None,
) -> list[ValidationIssue]:
    """Kurzform: Meldungsliste für ein Raster."""
    return TimetableValidator(config).check(timetable, teachers)
