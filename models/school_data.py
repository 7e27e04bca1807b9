"""SchoolData: Lehrkräfte + Stundenplan + Vertretungen, Machbarkeits-Check (Pydantic v2)."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from config.defaults import default_time_grid
from config.schema import TimeGridConfig
from models.substitution import Substitution, SubstitutionLedger
from models.teacher import Teacher, roster_class_ids
from models.timetable import MasterTimetable


class FeasibilityReport(BaseModel):
    """Ergebnis des Machbarkeits-Checks."""

    is_feasible: bool
    errors: list[str]      # Kritische Probleme (Vollbelegung unmöglich)
    warnings: list[str]    # Hinweise

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_feasible:
            status = "[bold green]✓ MACHBAR[/bold green]"
        else:
            status = "[bold red]✗ NICHT MACHBAR[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Machbarkeits-Check", border_style="cyan"))


class SchoolData(BaseModel):
    """Arbeitsstand: Lehrkräfte, Master-Stundenplan, Vertretungen."""

    school_name: str = "Government High School"
    teachers: list[Teacher] = []
    timetable: MasterTimetable = Field(default_factory=MasterTimetable.empty)
    substitutions: list[Substitution] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Übersicht ───

    @property
    def class_ids(self) -> list[str]:
        """Alle Klassen mit mindestens einem Lehrauftrag (Reihenfolge des Auftretens)."""
        return roster_class_ids(self.teachers)

    @property
    def teacher_map(self) -> dict[str, Teacher]:
        return {t.id: t for t in self.teachers}

    def ledger(self) -> SubstitutionLedger:
        """Vertretungen als Ledger (Kopie; Änderungen via store_ledger zurückschreiben)."""
        return SubstitutionLedger(self.substitutions)

    def store_ledger(self, ledger: SubstitutionLedger) -> None:
        self.substitutions = ledger.to_list()

    def reset_timetable(self) -> None:
        """Raster leeren und alle Vertretungen löschen."""
        self.timetable.clear()
        self.substitutions = []

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        total_need = sum(t.total_periods for t in self.teachers)
        total_cap = sum(t.weekly_limit for t in self.teachers)
        lines = [
            f"Schule: {self.school_name}",
            f"Klassen: {len(self.class_ids)} ({', '.join(self.class_ids)})",
            f"Lehrkräfte: {len(self.teachers)}",
            f"Gesamtbedarf (Lehraufträge): {total_need} Stunden/Woche",
            f"Gesamtkapazität (Wochenlimits): {total_cap} Stunden/Woche",
            f"Eingeplant: {self.timetable.entry_count()} Stunden",
            f"Vertretungen: {len(self.substitutions)}",
        ]
        return "\n".join(lines)

    # ─── Machbarkeits-Check ───

    def validate_feasibility(
        self, time_grid: Optional[TimeGridConfig] = None
    ) -> FeasibilityReport:
        """Prüft ob die Lehraufträge grundsätzlich in das Wochenraster passen.

        Ohne time_grid gilt das Standardraster (6 Tage × 8 Stunden).

        Prüfungen:
        1. Pro Klasse: Summe der Wochenstunden ≤ verfügbare Slots
        2. Pro Lehrkraft: Summe der Lehraufträge ≤ Wochenlimit und ≤ Slots
        3. Lehrauftrag in einem Fach ohne Fachkompetenz (Warnung)
        4. Klassenleitung für eine Klasse ohne Lehrauftrag (Warnung)
        5. Doppelte Lehrer-IDs
        """
        errors: list[str] = []
        warnings: list[str] = []
        grid = time_grid or default_time_grid()
        slots_per_week = len(grid.days) * len(grid.periods)

        ids = [t.id for t in self.teachers]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        for dup in duplicates:
            errors.append(f"Lehrer-ID '{dup}' ist mehrfach vergeben.")

        # ── 1. Klassen ───────────────────────────────────────────────────
        class_need: dict[str, int] = {}
        for t in self.teachers:
            for a in t.assignments:
                class_need[a.class_id] = class_need.get(a.class_id, 0) + a.periods_per_week

        for class_id, need in class_need.items():
            if need > slots_per_week:
                errors.append(
                    f"Klasse {class_id}: {need} Stunden/Woche verlangt, "
                    f"aber nur {slots_per_week} Slots vorhanden."
                )
            elif need < slots_per_week:
                warnings.append(
                    f"Klasse {class_id}: nur {need}/{slots_per_week} Slots belegt – "
                    f"{slots_per_week - need} Stunden bleiben unbesetzt."
                )

        # ── 2.–4. Lehrkräfte ─────────────────────────────────────────────
        known_classes = set(class_need)
        for t in self.teachers:
            if t.total_periods > slots_per_week:
                errors.append(
                    f"Lehrkraft {t.id} ({t.name}): {t.total_periods} Stunden "
                    f"passen nicht in {slots_per_week} Slots."
                )
            elif t.total_periods > t.weekly_limit:
                warnings.append(
                    f"Lehrkraft {t.id} ({t.name}): {t.total_periods} Stunden "
                    f"über Wochenlimit {t.weekly_limit}."
                )
            for a in t.assignments:
                if not t.teaches(a.subject):
                    warnings.append(
                        f"Lehrkraft {t.id}: unterrichtet {a.subject} in {a.class_id} "
                        f"ohne Fachkompetenz."
                    )
            if t.class_incharge_of and t.class_incharge_of not in known_classes:
                warnings.append(
                    f"Lehrkraft {t.id}: Klassenleitung {t.class_incharge_of} "
                    f"hat keinen Lehrauftrag."
                )

        return FeasibilityReport(
            is_feasible=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2, by_alias=True))

    @classmethod
    def load_json(cls, path: Path) -> "SchoolData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
