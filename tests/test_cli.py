"""CLI-Smoke-Tests über click.testing.CliRunner."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from config.defaults import default_engine_config
from config.manager import ConfigManager
from config.schema import Day
from main import cli
from models.school_data import SchoolData


@pytest.fixture
def workspace(tmp_path: Path) -> list[str]:
    """Globale Optionen für einen isolierten Arbeitsstand mit Standard-Config."""
    ConfigManager().save(default_engine_config(), tmp_path / "engine_config.yaml")
    return ["--data", str(tmp_path / "school_data.json"),
            "--config", str(tmp_path / "engine_config.yaml")]


def _run(args: list[str]):
    return CliRunner().invoke(cli, args, obj={})


class TestCli:
    def test_help(self):
        result = _run(["--help"])
        assert result.exit_code == 0
        assert "validate" in result.output

    def test_config_init_and_show(self, tmp_path: Path):
        target = tmp_path / "fresh.yaml"
        workspace = ["--data", str(tmp_path / "school_data.json"), "--config", str(target)]
        assert _run(workspace + ["config", "init"]).exit_code == 0
        assert target.exists()
        assert _run(workspace + ["config", "init"]).exit_code == 1
        assert _run(workspace + ["config", "init", "--force"]).exit_code == 0
        result = _run(workspace + ["config", "show"])
        assert result.exit_code == 0
        assert "teaching_streak" in result.output

    def test_missing_config_file_exits_1(self, tmp_path: Path):
        """Ein ausdrücklich angegebener, fehlender Config-Pfad bricht ab."""
        args = ["--data", str(tmp_path / "school_data.json"),
                "--config", str(tmp_path / "nope.yaml")]
        result = _run(args + ["demo", "--no-generate"])
        assert result.exit_code == 1
        assert "nicht gefunden" in result.output
        assert not (tmp_path / "school_data.json").exists()

    def test_missing_workspace_exits_1(self, workspace):
        result = _run(workspace + ["validate"])
        assert result.exit_code == 1

    def test_demo_generate_validate(self, workspace, tmp_path: Path):
        result = _run(workspace + ["demo"])
        assert result.exit_code == 0, result.output
        data = SchoolData.load_json(tmp_path / "school_data.json")
        assert len(data.teachers) > 0
        assert data.timetable.entry_count() > 0

        result = _run(workspace + ["generate"])
        assert result.exit_code == 0
        assert "Eingeplant:" in result.output
        assert "→" in result.output
        result = _run(workspace + ["validate", "--limit", "5"])
        assert result.exit_code in (0, 1)
        assert "Stundenplan-Validierung" in result.output

    def test_validate_exit_code_on_errors(self, workspace, tmp_path: Path):
        """Leeres Raster mit Kollegium → Vakanzen → Exit 1."""
        assert _run(workspace + ["demo", "--no-generate"]).exit_code == 0
        assert _run(workspace + ["validate"]).exit_code == 1

    def test_absent_slips_and_reset(self, workspace, tmp_path: Path):
        assert _run(workspace + ["demo"]).exit_code == 0
        path = tmp_path / "school_data.json"
        data = SchoolData.load_json(path)
        teacher_id = data.teachers[0].id
        day = next(d for d, _, _ in data.timetable.teacher_entries(teacher_id))

        result = _run(workspace + ["absent", teacher_id, day.value, "--date", "2026-10-19"])
        assert result.exit_code == 0, result.output
        data = SchoolData.load_json(path)
        taught = data.timetable.count_teacher_periods(teacher_id, day)
        assert 0 < len(data.substitutions) <= taught
        assert all(s.absent_teacher_id == teacher_id for s in data.substitutions)

        result = _run(workspace + ["slips"])
        assert result.exit_code == 0
        assert "Einsatzübersicht" in result.output

        slip_id = data.substitutions[0].id
        assert _run(workspace + ["remove-slip", slip_id]).exit_code == 0
        assert _run(workspace + ["remove-slip", slip_id]).exit_code == 1

        assert _run(workspace + ["reset", "--yes"]).exit_code == 0
        data = SchoolData.load_json(path)
        assert data.timetable.entry_count() == 0
        assert data.substitutions == []

    def test_edit_and_show(self, workspace, tmp_path: Path):
        assert _run(workspace + ["demo", "--no-generate"]).exit_code == 0
        result = _run(workspace + ["edit", "set", "mon", "1", "T1", "6th", "Math"])
        assert result.exit_code == 0, result.output
        data = SchoolData.load_json(tmp_path / "school_data.json")
        assert data.timetable.get(Day.MON, 1, "T1").class_id == "6th"

        result = _run(workspace + ["show", "class", "6th"])
        assert result.exit_code == 0
        assert "Klasse 6th" in result.output

        assert _run(workspace + ["show", "teacher", "T99"]).exit_code == 1
        assert _run(workspace + ["edit", "clear", "MON", "1", "T1"]).exit_code == 0
        data = SchoolData.load_json(tmp_path / "school_data.json")
        assert data.timetable.entry_count() == 0

    def test_suggest_and_assign(self, workspace, tmp_path: Path):
        assert _run(workspace + ["demo", "--no-generate"]).exit_code == 0
        assert _run(workspace + ["edit", "set", "MON", "3", "T1", "7th", "Math"]).exit_code == 0

        result = _run(workspace + ["suggest", "T1", "MON", "3"])
        assert result.exit_code == 0, result.output
        assert "T2" in result.output

        result = _run(workspace + ["assign", "T1", "MON", "3", "T5", "--date", "2026-10-19"])
        assert result.exit_code == 0, result.output
        data = SchoolData.load_json(tmp_path / "school_data.json")
        assert [(s.substitute_teacher_id, s.reason) for s in data.substitutions] == [
            ("T5", "Manual Override"),
        ]

        result = _run(workspace + ["show", "teacher", "T5"])
        assert result.exit_code == 0
        assert "Vertretung(en)" in result.output

    def test_import_timetable(self, workspace, tmp_path: Path):
        assert _run(workspace + ["demo", "--no-generate"]).exit_code == 0
        grid = tmp_path / "external.json"
        grid.write_text(
            '{"MON": {"1": {"T1": {"classId": "6th", "subject": "Math", "teacherId": "T1"}}}}',
            encoding="utf-8",
        )
        result = _run(workspace + ["import-timetable", str(grid)])
        assert result.exit_code == 0, result.output
        data = SchoolData.load_json(tmp_path / "school_data.json")
        assert data.timetable.entry_count() == 1
