"""Konfigurationsmanager: Laden, Speichern und Validieren der Engine-Config.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_engine_config
from config.schema import EngineConfig

logger = logging.getLogger(__name__)

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Stundenplan-Engine — Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "time_grid": (
        "Zeitraster",
        "Tage, Stunden pro Tag und Lage der großen Pause (recess_after).",
    ),
    "generator": (
        "Basis-Generator",
        "Stunden-Präferenzen je Fachkategorie. Reihenfolge = Priorität.",
    ),
    "validation": (
        "Regelwerk",
        "preset: standard | legacy | strict. 'rules' überschreibt das Preset.",
    ),
    "substitution": (
        "Vertretung",
        "Gewichte der Kandidatenbewertung. Höher = stärker gewichtet.",
    ),
    "fixed_slots": (
        "Feste Pflichtlagen",
        None,
    ),
}


def unknown_rules(config: EngineConfig) -> list[str]:
    """Regelnamen der expliziten Liste, die der Validator nicht kennt."""
    from analysis.solution_validator import RULES

    specs = config.validation.rules or []
    return [s.name for s in specs if s.name not in RULES]


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "engine_config.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> EngineConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py config init' aus."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            config = EngineConfig.model_validate(dict(raw or {}))
        except ValidationError as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e
        unknown = unknown_rules(config)
        if unknown:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Unbekannte Regel(n): {', '.join(unknown)}"
            )
        logger.debug(f"Konfiguration geladen: {target}")
        return config

    def load_or_default(self, path: Optional[Path] = None) -> EngineConfig:
        """Wie load(), aber ohne Datei gilt die Standard-Konfiguration."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            return default_engine_config()
        return self.load(target)

    # ─── Speichern ───

    def save(self, config: EngineConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit Abschnittskommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: EngineConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            if field not in cm:
                continue
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "validation" in cm:
            validation_map = CommentedMap(cm["validation"])
            validation_map.yaml_add_eol_comment(
                "WARNING in standard, ERROR in strict", "teaching_streak_limit"
            )
            cm["validation"] = validation_map

        return cm
