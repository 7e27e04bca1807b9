"""Stundenplan-Engine — Haupt-CLI.

Verwendung:
  python main.py config init              Standard-Konfiguration anlegen
  python main.py config show              Konfiguration anzeigen
  python main.py demo                     Beispiel-Kollegium anlegen
  python main.py generate                 Basisplan erzeugen
  python main.py import-timetable <datei> Externes Raster übernehmen
  python main.py validate                 Raster prüfen (Exit 1 bei Fehlern)
  python main.py show class <id>          Klassenplan anzeigen
  python main.py show teacher <id>        Lehrerplan anzeigen
  python main.py edit set|clear|...       Raster manuell bearbeiten
  python main.py suggest <T> <Tag> <Std>  Vertretungskandidaten
  python main.py absent <T> <Tag>         Vertretungen für einen Tag anlegen
  python main.py assign <T> <Tag> <Std> <V>  Manuelle Vertretung
  python main.py slips                    Vertretungszettel + Einsatzübersicht
  python main.py remove-slip <id>         Vertretung löschen
  python main.py reset                    Raster + Vertretungen löschen
"""

import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

from config.schema import Day

console = Console()

# Standard-Pfad für den gespeicherten Arbeitsstand
DEFAULT_DATA_JSON = Path("output/school_data.json")

DAY_CHOICE = click.Choice([d.value for d in Day], case_sensitive=False)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config_or_abort(ctx: click.Context):
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab.

    Ohne --config gilt die Standarddatei bzw. die Standardwerte; ein
    explizit angegebener Pfad muss existieren.
    """
    from config.manager import ConfigManager
    mgr = ConfigManager()
    path = ctx.obj["config_path"]
    try:
        if path is not None:
            return mgr, mgr.load(path)
        return mgr, mgr.load_or_default()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _load_data_or_abort(ctx: click.Context):
    """Lädt den Arbeitsstand oder bricht mit Fehlermeldung ab."""
    from models.school_data import SchoolData

    path = ctx.obj["data_path"]
    try:
        return SchoolData.load_json(path)
    except FileNotFoundError as e:
        console.print(
            f"[red]{e}[/red]\n"
            "Verwenden Sie zunächst [bold]python main.py demo[/bold]."
        )
        sys.exit(1)


def _save_data(ctx: click.Context, data) -> None:
    path = ctx.obj["data_path"]
    data.save_json(path)
    console.print(f"[green]✓[/green] Gespeichert: {path}")


def _slip_id(prefix: str):
    """ID-Fabrik für neue Vertretungszettel."""
    def make_id(period: int) -> str:
        return f"{prefix}-{period}-{uuid.uuid4().hex[:6]}"
    return make_id


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder anlegen."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    from config.defaults import RULE_PRESETS

    mgr, config = _load_config_or_abort(ctx)
    tg = config.time_grid
    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  {len(tg.days)} Tage × "
        f"{tg.periods_per_day} Stunden  |  Pause nach Std. {tg.recess_after}",
        title="Engine-Konfiguration",
        border_style="cyan",
    ))

    table = Table(title="Zeitraster", box=box.ROUNDED)
    table.add_column("Std.")
    table.add_column("Beginn")
    table.add_column("Ende")
    for timing in tg.period_timings:
        table.add_row(str(timing.number), timing.start_time, timing.end_time)
    console.print(table)

    vc = config.validation
    rules = vc.rules if vc.rules is not None else RULE_PRESETS[vc.preset]
    table2 = Table(title=f"Regelwerk ({'explizit' if vc.rules is not None else vc.preset})",
                   box=box.ROUNDED)
    table2.add_column("Regel")
    table2.add_column("Schwere")
    for spec in rules:
        color = "red" if spec.severity == "ERROR" else "yellow"
        table2.add_row(spec.name, f"[{color}]{spec.severity}[/{color}]")
    console.print(table2)

    sc = config.substitution
    console.print(
        f"[bold]Vertretung:[/bold] Fach +{sc.qualified_bonus} | "
        f"Klassenleitung +{sc.incharge_bonus} | Serie={sc.streak_limit} "
        f"-{sc.at_limit_penalty} | Serie>{sc.streak_limit} -{sc.over_limit_penalty}"
    )
    pins = ", ".join(
        f"{fs.class_id} {fs.subject} {fs.day.value}/{fs.period}" for fs in config.fixed_slots
    )
    console.print(f"[bold]Pflichtlagen:[/bold] {pins or '–'}")


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False, help="Vorhandene Datei überschreiben.")
@click.pass_context
def config_init(ctx: click.Context, force: bool):
    """Schreibt die Standard-Konfiguration als kommentiertes YAML."""
    from config.defaults import default_engine_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    target = ctx.obj["config_path"] or mgr.DEFAULT_CONFIG
    if target.exists() and not force:
        console.print(
            f"[yellow]Konfiguration existiert bereits: {target}[/yellow]\n"
            "Mit [bold]--force[/bold] überschreiben."
        )
        sys.exit(1)
    mgr.save(default_engine_config(), target)


# ─── DEMO ─────────────────────────────────────────────────────────────────────

@click.command("demo")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Namen.")
@click.option("--generate/--no-generate", "run_generate", default=True,
              help="Direkt einen Basisplan erzeugen.")
@click.pass_context
def cmd_demo(ctx: click.Context, seed: int, run_generate: bool):
    """Legt ein Beispiel-Kollegium (Klassen 6th–10th) als Arbeitsstand an."""
    from data.sample_roster import SampleRosterGenerator
    from solver.baseline import BaselineGenerator

    mgr, config = _load_config_or_abort(ctx)
    gen = SampleRosterGenerator(seed=seed)
    data = gen.generate(school_name=config.school_name)
    gen.print_summary(data)
    data.validate_feasibility(config.time_grid).print_rich()

    if run_generate:
        data.timetable = BaselineGenerator(data.teachers, config).generate()
    console.print(f"\n[dim]{data.summary()}[/dim]")
    _save_data(ctx, data)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--keep-substitutions", is_flag=True, default=False,
              help="Vorhandene Vertretungen behalten.")
@click.pass_context
def cmd_generate(ctx: click.Context, keep_substitutions: bool):
    """Erzeugt einen neuen Basisplan aus den Lehraufträgen."""
    from analysis.solution_validator import TimetableValidator
    from solver.baseline import BaselineGenerator

    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(ctx)

    validator = TimetableValidator(config)
    previous = data.timetable.snapshot()
    before = validator.validate(previous, data.teachers)
    generator = BaselineGenerator(data.teachers, config)
    with console.status("[bold]Basisplan wird erzeugt...[/bold]"):
        data.timetable = generator.generate()
    if not keep_substitutions:
        data.substitutions = []

    if generator.shortfalls:
        table = Table(title="Unvollständige Lehraufträge", box=box.ROUNDED)
        table.add_column("Lehrkraft")
        table.add_column("Klasse")
        table.add_column("Fach")
        table.add_column("Platziert", justify="right")
        for s in generator.shortfalls:
            table.add_row(s.teacher_id, s.class_id, s.subject, f"{s.placed}/{s.required}")
        console.print(table)

    report = validator.validate(data.timetable, data.teachers)
    console.print(
        f"Eingeplant: {previous.entry_count()} → {data.timetable.entry_count()} Stunden | "
        f"Fehler: {len(before.errors)} → {len(report.errors)} | "
        f"Warnungen: {len(before.warnings)} → {len(report.warnings)}"
    )
    _save_data(ctx, data)


# ─── IMPORT ───────────────────────────────────────────────────────────────────

@click.command("import-timetable")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def cmd_import_timetable(ctx: click.Context, datei: Path):
    """Übernimmt ein extern erzeugtes Raster (gleiches JSON-Format)."""
    from pydantic import ValidationError
    from analysis.solution_validator import TimetableValidator
    from models.timetable import MasterTimetable

    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(ctx)
    try:
        data.timetable = MasterTimetable.load_json(datei)
    except ValidationError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)
    data.substitutions = []

    report = TimetableValidator(config).validate(data.timetable, data.teachers)
    console.print(
        f"[green]✓[/green] {data.timetable.entry_count()} Einträge übernommen | "
        f"Fehler: {len(report.errors)} | Warnungen: {len(report.warnings)}"
    )
    _save_data(ctx, data)


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.option("--limit", default=50, show_default=True,
              help="Maximal angezeigte Meldungen.")
@click.option("--feasibility", is_flag=True, default=False,
              help="Zusätzlich Machbarkeits-Check der Lehraufträge.")
@click.pass_context
def cmd_validate(ctx: click.Context, limit: int, feasibility: bool):
    """Prüft das Raster gegen das Regelwerk. Exit 1 bei Fehlern."""
    from analysis.solution_validator import TimetableValidator

    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(ctx)
    if feasibility:
        data.validate_feasibility(config.time_grid).print_rich()

    try:
        validator = TimetableValidator(config)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    report = validator.validate(data.timetable, data.teachers)
    report.print_rich(limit=limit)
    sys.exit(0 if report.is_valid else 1)


# ─── SHOW ─────────────────────────────────────────────────────────────────────

@click.command("show")
@click.argument("kind", type=click.Choice(["class", "teacher"]))
@click.argument("entity_id")
@click.pass_context
def cmd_show(ctx: click.Context, kind: str, entity_id: str):
    """Zeigt den Plan einer Klasse oder Lehrkraft als Tabelle."""
    from export.tui_renderer import build_table, render_class_rows, render_teacher_rows

    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(ctx)
    tg = config.time_grid

    if kind == "class":
        if entity_id not in data.class_ids:
            console.print(f"[red]Klasse '{entity_id}' nicht gefunden.[/red]")
            sys.exit(1)
        rows = render_class_rows(entity_id, data.timetable, tg)
        planned = len(data.timetable.class_entries(entity_id))
        title = f"Klasse {entity_id} ({planned} Stunden)"
    else:
        teacher = data.teacher_map.get(entity_id)
        if teacher is None:
            console.print(f"[red]Lehrkraft '{entity_id}' nicht gefunden.[/red]")
            sys.exit(1)
        duties = data.ledger().for_substitute(entity_id)
        rows = render_teacher_rows(entity_id, data.timetable, tg, duties)
        planned = data.timetable.count_teacher_periods(entity_id)
        title = f"{teacher.name} ({teacher.id}), {planned}/{teacher.weekly_limit} Stunden"
        if duties:
            title += f", {len(duties)} Vertretung(en)"
    console.print(build_table(title, rows, tg))


# ─── EDIT ─────────────────────────────────────────────────────────────────────

@click.group("edit")
def cmd_edit():
    """Raster manuell bearbeiten."""


@cmd_edit.command("set")
@click.argument("day", type=DAY_CHOICE)
@click.argument("period", type=int)
@click.argument("teacher_id")
@click.argument("class_id")
@click.argument("subject")
@click.pass_context
def edit_set(ctx: click.Context, day: str, period: int, teacher_id: str,
             class_id: str, subject: str):
    """Setzt eine Zelle (überschreibt den Eintrag der Lehrkraft)."""
    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(ctx)
    if teacher_id not in data.teacher_map:
        console.print(f"[red]Lehrkraft '{teacher_id}' nicht gefunden.[/red]")
        sys.exit(1)
    if period not in config.time_grid.periods:
        console.print(f"[red]Stunde {period} liegt nicht im Zeitraster.[/red]")
        sys.exit(1)
    data.timetable.set_cell(Day(day.upper()), period, teacher_id, class_id, subject)
    _save_data(ctx, data)


@cmd_edit.command("clear")
@click.argument("day", type=DAY_CHOICE)
@click.argument("period", type=int)
@click.argument("teacher_id")
@click.pass_context
def edit_clear(ctx: click.Context, day: str, period: int, teacher_id: str):
    """Leert eine Zelle."""
    data = _load_data_or_abort(ctx)
    if not data.timetable.remove(Day(day.upper()), period, teacher_id):
        console.print("[yellow]Kein Eintrag vorhanden.[/yellow]")
        return
    _save_data(ctx, data)


@cmd_edit.command("clear-class")
@click.argument("class_id")
@click.pass_context
def edit_clear_class(ctx: click.Context, class_id: str):
    """Entfernt alle Einträge einer Klasse."""
    data = _load_data_or_abort(ctx)
    removed = data.timetable.clear_class(class_id)
    console.print(f"{removed} Einträge von {class_id} entfernt.")
    _save_data(ctx, data)


@cmd_edit.command("clear-teacher")
@click.argument("teacher_id")
@click.pass_context
def edit_clear_teacher(ctx: click.Context, teacher_id: str):
    """Entfernt alle Einträge einer Lehrkraft."""
    data = _load_data_or_abort(ctx)
    removed = data.timetable.clear_teacher(teacher_id)
    console.print(f"{removed} Einträge von {teacher_id} entfernt.")
    _save_data(ctx, data)


# ─── VERTRETUNG ───────────────────────────────────────────────────────────────

@click.command("suggest")
@click.argument("absent_id")
@click.argument("day", type=DAY_CHOICE)
@click.argument("period", type=int)
@click.option("--class", "class_id", default=None, help="Klasse (sonst aus dem Raster).")
@click.option("--subject", default=None, help="Fach (sonst aus dem Raster).")
@click.pass_context
def cmd_suggest(ctx: click.Context, absent_id: str, day: str, period: int,
                class_id: Optional[str], subject: Optional[str]):
    """Listet freie Vertretungskandidaten für einen Slot, beste zuerst."""
    from analysis.substitution_helper import SubstitutionFinder
    from config.defaults import FREE_PERIOD

    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(ctx)
    d = Day(day.upper())
    entry = data.timetable.get(d, period, absent_id)
    class_id = class_id or (entry.class_id if entry else None)
    subject = subject or (entry.subject if entry else FREE_PERIOD)
    if class_id is None:
        console.print(
            f"[red]{absent_id} hat am {d.value} in Stunde {period} keinen Unterricht.[/red] "
            "Klasse mit [bold]--class[/bold] angeben."
        )
        sys.exit(1)

    ranked = SubstitutionFinder(config).rank_candidates(
        absent_id, d, period, class_id, subject,
        data.timetable, data.teachers, data.substitutions,
    )
    if not ranked:
        console.print("[yellow]Keine freie Lehrkraft in diesem Slot.[/yellow]")
        return

    table = Table(title=f"Vertretung {class_id} {subject} – {d.value} Std. {period}",
                  box=box.ROUNDED)
    table.add_column("Lehrkraft", style="bold")
    table.add_column("Name")
    table.add_column("Score", justify="right")
    table.add_column("Fach", justify="center")
    table.add_column("KL", justify="center")
    table.add_column("Serie", justify="right")
    table.add_column("Tageslast", justify="right")
    for c in ranked:
        streak = f"[red]{c.streak} LIMIT![/red]" if c.would_violate else str(c.streak)
        table.add_row(
            c.teacher_id, c.name, str(c.score),
            "✓" if c.qualified else "", "✓" if c.is_incharge else "",
            streak, str(c.daily_load),
        )
    console.print(table)


@click.command("absent")
@click.argument("absent_id")
@click.argument("day", type=DAY_CHOICE)
@click.option("--date", "date_str", default=None, help="Datum der Zettel (Standard: heute).")
@click.option("--reason", default="Leave", show_default=True)
@click.pass_context
def cmd_absent(ctx: click.Context, absent_id: str, day: str,
               date_str: Optional[str], reason: str):
    """Meldet eine Lehrkraft für einen Tag ab und legt alle Vertretungen an."""
    from analysis.substitution_helper import SubstitutionFinder
    from export.helpers import today_str

    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(ctx)
    ledger = data.ledger()
    try:
        created = SubstitutionFinder(config).mark_absent(
            absent_id, Day(day.upper()), data.timetable, data.teachers, ledger,
            make_id=_slip_id("auto"), date=date_str or today_str(), reason=reason,
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if not created:
        console.print("[yellow]Keine neuen Vertretungszettel.[/yellow]")
        return
    for sub in created:
        flag = " [red](Regelverstoß)[/red]" if sub.is_override else ""
        console.print(
            f"  Std. {sub.period}: {sub.class_id} {sub.original_subject} → "
            f"{sub.substitute_teacher_id}{flag}"
        )
    data.store_ledger(ledger)
    _save_data(ctx, data)


@click.command("assign")
@click.argument("absent_id")
@click.argument("day", type=DAY_CHOICE)
@click.argument("period", type=int)
@click.argument("substitute_id")
@click.option("--class", "class_id", default=None, help="Klasse (sonst aus dem Raster).")
@click.option("--date", "date_str", default=None, help="Datum des Zettels (Standard: heute).")
@click.pass_context
def cmd_assign(ctx: click.Context, absent_id: str, day: str, period: int,
               substitute_id: str, class_id: Optional[str], date_str: Optional[str]):
    """Weist eine Vertretung manuell zu (oder ändert einen vorhandenen Zettel)."""
    from analysis.substitution_helper import SubstitutionFinder
    from export.helpers import today_str

    mgr, config = _load_config_or_abort(ctx)
    data = _load_data_or_abort(ctx)
    ledger = data.ledger()
    try:
        sub = SubstitutionFinder(config).assign_manually(
            absent_id, Day(day.upper()), period, substitute_id,
            data.timetable, data.teachers, ledger,
            make_id=_slip_id("manual"), date=date_str or today_str(), class_id=class_id,
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print(f"[green]✓[/green] {sub.id}: {sub.reason} → {sub.substitute_teacher_id}")
    data.store_ledger(ledger)
    _save_data(ctx, data)


@click.command("slips")
@click.option("--day", type=DAY_CHOICE, default=None, help="Nur ein Tag.")
@click.pass_context
def cmd_slips(ctx: click.Context, day: Optional[str]):
    """Listet Vertretungszettel und die Einsatzübersicht."""
    from analysis.substitution_helper import SubstitutionFinder

    data = _load_data_or_abort(ctx)
    ledger = data.ledger()
    subs = ledger.for_day(Day(day.upper())) if day else ledger.to_list()
    if not subs:
        console.print("[dim]Keine Vertretungen vorhanden.[/dim]")
        return

    names = {t.id: t.name for t in data.teachers}
    table = Table(title="Vertretungszettel", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Datum")
    table.add_column("Tag")
    table.add_column("Std.", justify="right")
    table.add_column("Klasse")
    table.add_column("Fach")
    table.add_column("Abwesend")
    table.add_column("Vertretung")
    table.add_column("Grund")
    for s in subs:
        reason = f"[red]{s.reason}[/red]" if s.is_override else s.reason
        table.add_row(
            s.id, s.date, s.day.value, str(s.period), s.class_id, s.original_subject,
            names.get(s.absent_teacher_id, s.absent_teacher_id),
            names.get(s.substitute_teacher_id, s.substitute_teacher_id),
            reason,
        )
    console.print(table)

    summary = Table(title="Einsatzübersicht", box=box.ROUNDED)
    summary.add_column("Lehrkraft", style="bold")
    summary.add_column("Anzahl", justify="right")
    summary.add_column("Einsätze")
    for item in SubstitutionFinder.duty_summary(subs, data.teachers):
        summary.add_row(item.name, str(item.count), ", ".join(item.labels))
    console.print(summary)


@click.command("remove-slip")
@click.argument("slip_id")
@click.pass_context
def cmd_remove_slip(ctx: click.Context, slip_id: str):
    """Löscht einen Vertretungszettel."""
    data = _load_data_or_abort(ctx)
    ledger = data.ledger()
    if not ledger.remove(slip_id):
        console.print(f"[red]Vertretung '{slip_id}' nicht gefunden.[/red]")
        sys.exit(1)
    data.store_ledger(ledger)
    _save_data(ctx, data)


@click.command("reset")
@click.option("--yes", is_flag=True, default=False, help="Ohne Rückfrage.")
@click.pass_context
def cmd_reset(ctx: click.Context, yes: bool):
    """Leert das Raster und löscht alle Vertretungen."""
    data = _load_data_or_abort(ctx)
    if not yes and not click.confirm("Raster und alle Vertretungen löschen?", default=False):
        return
    data.reset_timetable()
    _save_data(ctx, data)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--data", "data_path", default=str(DEFAULT_DATA_JSON), show_default=True,
              type=click.Path(path_type=Path), help="Arbeitsstand (JSON).")
@click.option("--config", "config_path", default=None,
              type=click.Path(path_type=Path), help="Konfigurationsdatei (YAML).")
@click.option("--verbose", "-v", is_flag=True, default=False, help="DEBUG-Logging.")
@click.pass_context
def cli(ctx: click.Context, data_path: Path, config_path: Optional[Path], verbose: bool):
    """Stundenplan-Engine: Basisplan, Validierung und Vertretungen.

    Starten Sie mit: python main.py demo
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["data_path"] = data_path
    ctx.obj["config_path"] = config_path


def main():
    """Einstiegspunkt."""
    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_demo)
cli.add_command(cmd_generate)
cli.add_command(cmd_import_timetable)
cli.add_command(cmd_validate)
cli.add_command(cmd_show)
cli.add_command(cmd_edit)
cli.add_command(cmd_suggest)
cli.add_command(cmd_absent)
cli.add_command(cmd_assign)
cli.add_command(cmd_slips)
cli.add_command(cmd_remove_slip)
cli.add_command(cmd_reset)


if __name__ == "__main__":
    main()
