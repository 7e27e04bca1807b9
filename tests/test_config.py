"""Tests für das Konfigurationssystem und die Datenmodelle."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.schema import (
    Day,
    EngineConfig,
    FixedSlot,
    RuleSpec,
    TimeGridConfig,
    ValidationConfig,
)
from config.defaults import (
    DAYS,
    PERIODS,
    RULE_PRESETS,
    default_engine_config,
    default_fixed_slots,
    default_time_grid,
)
from config.manager import ConfigManager


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_time_grid_valid(self):
        """Default-Zeitraster: 6 Tage × 8 Stunden, Pause nach Std. 5."""
        tg = default_time_grid()
        assert tg.days == DAYS
        assert tg.periods == PERIODS
        assert tg.before_recess == [1, 2, 3, 4, 5]
        assert tg.after_recess == [6, 7, 8]
        assert len(tg.period_timings) == 8

    def test_default_fixed_slots(self):
        """Drei Science-Pflichtlagen für 8th–10th."""
        pins = {(fs.class_id, fs.day, fs.period) for fs in default_fixed_slots()}
        assert pins == {("10th", Day.FRI, 3), ("9th", Day.TUE, 2), ("8th", Day.WED, 2)}

    def test_default_engine_config_valid(self):
        config = default_engine_config()
        assert config.validation.preset == "standard"
        assert config.substitution.qualified_bonus == 100
        assert config.substitution.incharge_bonus == 50
        assert config.generator.placement_streak_cap == 3

    def test_presets_differ_in_teaching_streak_severity(self):
        """teaching_streak: WARNING in standard/legacy, ERROR in strict."""
        def severity(preset: str) -> str:
            return next(r.severity for r in RULE_PRESETS[preset] if r.name == "teaching_streak")

        assert severity("standard") == "WARNING"
        assert severity("legacy") == "WARNING"
        assert severity("strict") == "ERROR"

    def test_legacy_preset_has_no_afternoon_rule(self):
        names = [r.name for r in RULE_PRESETS["legacy"]]
        assert "no_break_after_recess" not in names
        assert "core_after_recess" in names


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_recess_outside_grid_raises(self):
        with pytest.raises(ValidationError):
            TimeGridConfig(periods_per_day=5, recess_after=5)

    def test_duplicate_days_raise(self):
        with pytest.raises(ValidationError):
            TimeGridConfig(days=[Day.MON, Day.MON])

    def test_fixed_slot_outside_grid_raises(self):
        """Pflichtlage in Stunde 9 bei 8 Stunden/Tag → Fehler."""
        with pytest.raises(ValidationError):
            EngineConfig(fixed_slots=[
                FixedSlot(class_id="10th", subject="Science", day=Day.FRI, period=9),
            ])

    def test_fixed_slot_on_missing_day_raises(self):
        with pytest.raises(ValidationError):
            EngineConfig(
                time_grid=TimeGridConfig(days=[Day.MON, Day.TUE]),
                fixed_slots=[FixedSlot(class_id="9th", subject="Science", day=Day.SAT, period=1)],
            )

    def test_invalid_severity_raises(self):
        with pytest.raises(ValidationError):
            RuleSpec(name="free_streak", severity="INFO")

    def test_invalid_preset_raises(self):
        with pytest.raises(ValidationError):
            ValidationConfig(preset="lenient")


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren: vollständiger Roundtrip."""
        config = default_engine_config()
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "engine_config.yaml"

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load(mgr.DEFAULT_CONFIG)
        assert loaded == config

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        mgr = ConfigManager()
        target = tmp_path / "engine_config.yaml"
        mgr.save(default_engine_config(), target)
        text = target.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Regelwerk" in text
        assert "teaching_streak_limit" in text

    def test_custom_rules_survive_roundtrip(self, tmp_path: Path):
        config = default_engine_config()
        config.validation.rules = [RuleSpec(name="vacant_period", severity="WARNING")]
        mgr = ConfigManager()
        target = tmp_path / "custom.yaml"
        mgr.save(config, target)
        loaded = mgr.load(target)
        assert loaded.validation.rules == [RuleSpec(name="vacant_period", severity="WARNING")]

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "nonexistent.yaml"
        assert mgr.first_run_check() is True

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_or_default_without_file(self, tmp_path: Path):
        mgr = ConfigManager()
        config = mgr.load_or_default(tmp_path / "not_there.yaml")
        assert config == default_engine_config()

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        target = tmp_path / "broken.yaml"
        target.write_text("validation:\n  preset: lenient\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            ConfigManager().load(target)

    def test_load_unknown_rule_raises(self, tmp_path: Path):
        target = tmp_path / "rules.yaml"
        target.write_text(
            "validation:\n  rules:\n  - name: lunch_duty\n    severity: ERROR\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="lunch_duty"):
            ConfigManager().load(target)
