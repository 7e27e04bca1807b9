"""Tests für Raster, Vertretungs-Ledger und SchoolData."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from analysis.solution_validator import validate_timetable
from config.defaults import CLASS_IDS
from config.schema import Day, TimeGridConfig
from data.sample_roster import CURRICULUM, SampleRosterGenerator
from models.school_data import SchoolData
from models.substitution import Substitution, SubstitutionLedger
from models.teacher import Teacher, TeacherAssignment, roster_class_ids
from models.timetable import MasterTimetable, TimetableEntry


def _sub(sub_id: str, period: int = 3, absent: str = "T1", substitute: str = "T2",
         day: Day = Day.MON) -> Substitution:
    return Substitution(
        id=sub_id, date="2026-10-19", day=day, absent_teacher_id=absent,
        period=period, class_id="7th", original_subject="Math",
        substitute_teacher_id=substitute,
    )


# ─── LEHRKRAFT ────────────────────────────────────────────────────────────────

class TestTeacher:
    def test_teacher_pydantic(self):
        t = Teacher(
            id=" T1 ", name="Baljit Gill", subjects=["Math"],
            assignments=[TeacherAssignment(class_id="6th", subject="Math", periods_per_week=8)],
        )
        assert t.id == "T1"
        assert t.total_periods == 8
        assert t.teaches("Math") and not t.teaches("Art")

    def test_empty_id_raises(self):
        with pytest.raises(ValidationError):
            Teacher(id="  ", name="X")

    def test_negative_periods_raise(self):
        with pytest.raises(ValidationError):
            TeacherAssignment(class_id="6th", subject="Math", periods_per_week=-1)

    def test_camel_case_input(self):
        t = Teacher.model_validate({
            "id": "T1", "name": "X", "weeklyLimit": 30, "classInchargeOf": "7th",
            "assignments": [{"classId": "7th", "subject": "Hindi", "periodsPerWeek": 5}],
        })
        assert t.weekly_limit == 30
        assert t.class_incharge_of == "7th"
        assert t.assignments[0].periods_per_week == 5


# ─── RASTER ───────────────────────────────────────────────────────────────────

class TestMasterTimetable:
    def test_empty_has_all_keys(self):
        tt = MasterTimetable.empty()
        assert list(tt.root) == list(Day)
        assert all(list(periods) == list(range(1, 9)) for periods in tt.root.values())
        assert tt.entry_count() == 0

    def test_place_overwrites_same_teacher(self):
        """Pro (Tag, Stunde, Lehrer) gibt es höchstens einen Eintrag."""
        tt = MasterTimetable.empty()
        tt.set_cell(Day.MON, 1, "T1", "6th", "Math")
        tt.set_cell(Day.MON, 1, "T1", "7th", "Math")
        assert tt.entry_count() == 1
        assert tt.get(Day.MON, 1, "T1").class_id == "7th"

    def test_class_is_taken(self):
        tt = MasterTimetable.empty()
        tt.set_cell(Day.WED, 4, "T1", "9th", "SST")
        assert tt.class_is_taken("9th", Day.WED, 4)
        assert not tt.class_is_taken("9th", Day.WED, 5)

    def test_remove_and_clear_helpers(self):
        tt = MasterTimetable.empty()
        tt.set_cell(Day.MON, 1, "T1", "6th", "Math")
        tt.set_cell(Day.MON, 2, "T1", "7th", "Math")
        tt.set_cell(Day.MON, 2, "T2", "6th", "Hindi")
        assert tt.remove(Day.MON, 1, "T1") is True
        assert tt.remove(Day.MON, 1, "T1") is False
        assert tt.clear_class("6th") == 1
        assert tt.clear_teacher("T1") == 1
        assert tt.entry_count() == 0

    def test_clear_keeps_key_structure(self):
        tt = MasterTimetable.empty()
        tt.set_cell(Day.SAT, 8, "T1", "6th", "Math")
        tt.clear()
        assert tt.entry_count() == 0
        assert list(tt.root) == list(Day)
        assert tt.entries_at(Day.SAT, 8) == {}

    def test_snapshot_is_independent(self):
        tt = MasterTimetable.empty()
        tt.set_cell(Day.MON, 1, "T1", "6th", "Math")
        snap = tt.snapshot()
        tt.clear()
        assert snap.entry_count() == 1

    def test_serialisation_shape(self):
        """day → period → teacherId → {classId, subject, teacherId}"""
        tt = MasterTimetable.empty()
        tt.set_cell(Day.TUE, 3, "T4", "8th", "Science")
        data = tt.to_dict()
        assert data["TUE"]["3"]["T4"] == {"classId": "8th", "subject": "Science", "teacherId": "T4"}
        assert set(data) == {d.value for d in Day}
        assert set(data["MON"]) == {str(p) for p in range(1, 9)}

    def test_json_file_roundtrip(self, tmp_path: Path):
        tt = MasterTimetable.empty()
        tt.set_cell(Day.FRI, 3, "T2", "10th", "Science")
        path = tmp_path / "grid.json"
        tt.save_json(path)
        loaded = MasterTimetable.load_json(path)
        assert loaded == tt

    def test_load_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            MasterTimetable.load_json(tmp_path / "nope.json")

    def test_iteration_order(self):
        tt = MasterTimetable.empty()
        tt.set_cell(Day.TUE, 1, "T1", "6th", "Math")
        tt.set_cell(Day.MON, 8, "T1", "6th", "Math")
        tt.set_cell(Day.MON, 2, "T1", "6th", "Math")
        assert [(d, p) for d, p, _ in tt.teacher_entries("T1")] == [
            (Day.MON, 2), (Day.MON, 8), (Day.TUE, 1),
        ]


# ─── VERTRETUNGS-LEDGER ───────────────────────────────────────────────────────

class TestSubstitutionLedger:
    def test_add_and_find(self):
        ledger = SubstitutionLedger()
        ledger.add(_sub("s1"))
        assert ledger.find_slot(Day.MON, 3, "T1").id == "s1"
        assert ledger.find_slot(Day.TUE, 3, "T1") is None

    def test_second_slip_for_same_slot_rejected(self):
        ledger = SubstitutionLedger([_sub("s1")])
        with pytest.raises(ValueError):
            ledger.add(_sub("s2", substitute="T3"))

    def test_duplicate_id_rejected(self):
        ledger = SubstitutionLedger([_sub("s1")])
        with pytest.raises(ValueError):
            ledger.add(_sub("s1", period=4))

    def test_update_substitute(self):
        ledger = SubstitutionLedger([_sub("s1")])
        updated = ledger.update("s1", substitute_teacher_id="T5", is_override=True)
        assert updated.substitute_teacher_id == "T5"
        assert ledger.get("s1").is_override is True

    def test_update_into_taken_slot_rejected(self):
        ledger = SubstitutionLedger([_sub("s1", period=3), _sub("s2", period=4)])
        with pytest.raises(ValueError):
            ledger.update("s2", period=3)

    def test_update_misspelled_field_rejected(self):
        """Tippfehler im Feldnamen lassen den Zettel nicht stillschweigend unverändert."""
        ledger = SubstitutionLedger([_sub("s1")])
        with pytest.raises(ValueError, match="substitute_id"):
            ledger.update("s1", substitute_id="T5")
        assert ledger.get("s1").substitute_teacher_id == "T2"

    def test_update_unknown_raises(self):
        with pytest.raises(ValueError):
            SubstitutionLedger().update("nope", reason="x")

    def test_remove_and_clear(self):
        ledger = SubstitutionLedger([_sub("s1", period=3), _sub("s2", period=4)])
        assert ledger.remove("s1") is True
        assert ledger.remove("s1") is False
        ledger.clear()
        assert len(ledger) == 0

    def test_for_day_sorted(self):
        ledger = SubstitutionLedger([
            _sub("s1", period=6), _sub("s2", period=2), _sub("s3", period=1, day=Day.TUE),
        ])
        assert [s.id for s in ledger.for_day(Day.MON)] == ["s2", "s1"]
        assert [s.id for s in ledger.for_substitute("T2")] == ["s1", "s2", "s3"]

    def test_json_roundtrip_camel_case(self, tmp_path: Path):
        path = tmp_path / "subs.json"
        SubstitutionLedger([_sub("s1")]).save_json(path)
        assert '"absentTeacherId": "T1"' in path.read_text(encoding="utf-8")
        loaded = SubstitutionLedger.load_json(path)
        assert loaded.to_list() == [_sub("s1")]


# ─── SCHOOL DATA ──────────────────────────────────────────────────────────────

class TestSchoolData:
    def test_sample_roster_curriculum_fills_week(self):
        assert sum(CURRICULUM.values()) == 48

    def test_sample_roster_is_feasible(self):
        data = SampleRosterGenerator().generate()
        report = data.validate_feasibility()
        assert report.is_feasible
        assert report.warnings == []
        assert sorted(data.class_ids, key=CLASS_IDS.index) == CLASS_IDS

    def test_class_order_shared_with_validator(self):
        """Vakanz-Meldungen folgen derselben Klassenreihenfolge wie class_ids."""
        data = SampleRosterGenerator().generate()
        issues = validate_timetable(data.timetable, data.teachers)
        first_slot = [
            i.location.class_id for i in issues
            if i.id.startswith("vacant-MON-1-")
        ]
        assert first_slot == data.class_ids
        assert data.class_ids == roster_class_ids(data.teachers)

    def test_feasibility_uses_configured_grid(self):
        """5 Tage × 8 Stunden = 40 Slots: 45 Stunden passen nicht."""
        data = SchoolData(teachers=[
            Teacher(id="T1", name="A", subjects=["Math"], weekly_limit=48, assignments=[
                TeacherAssignment(class_id="6th", subject="Math", periods_per_week=45),
            ]),
        ])
        five_days = TimeGridConfig(days=[Day.MON, Day.TUE, Day.WED, Day.THU, Day.FRI])
        report = data.validate_feasibility(five_days)
        assert not report.is_feasible
        assert any("nur 40 Slots" in e for e in report.errors)
        assert data.validate_feasibility().is_feasible

    def test_sample_roster_reproducible(self):
        a = SampleRosterGenerator(seed=3).generate_teachers()
        b = SampleRosterGenerator(seed=3).generate_teachers()
        assert a == b

    def test_every_class_has_incharge(self):
        teachers = SampleRosterGenerator().generate_teachers()
        assert sorted(t.class_incharge_of for t in teachers if t.class_incharge_of) == sorted(
            ["6th", "7th", "8th", "9th", "10th"]
        )

    def test_feasibility_detects_overfull_class(self):
        data = SchoolData(teachers=[
            Teacher(id="T1", name="A", subjects=["Math"], assignments=[
                TeacherAssignment(class_id="6th", subject="Math", periods_per_week=30),
            ]),
            Teacher(id="T2", name="B", subjects=["Hindi"], assignments=[
                TeacherAssignment(class_id="6th", subject="Hindi", periods_per_week=20),
            ]),
        ])
        report = data.validate_feasibility()
        assert not report.is_feasible
        assert any("6th" in e for e in report.errors)

    def test_feasibility_warns_unqualified(self):
        data = SchoolData(teachers=[
            Teacher(id="T1", name="A", assignments=[
                TeacherAssignment(class_id="6th", subject="Art", periods_per_week=2),
            ]),
        ])
        report = data.validate_feasibility()
        assert any("Fachkompetenz" in w for w in report.warnings)

    def test_reset_clears_grid_and_substitutions(self):
        data = SampleRosterGenerator().generate()
        data.timetable.set_cell(Day.MON, 1, "T1", "6th", "Math")
        data.substitutions = [_sub("s1")]
        data.reset_timetable()
        assert data.timetable.entry_count() == 0
        assert data.substitutions == []

    def test_store_ledger(self):
        data = SchoolData()
        ledger = data.ledger()
        ledger.add(_sub("s1"))
        data.store_ledger(ledger)
        assert [s.id for s in data.substitutions] == ["s1"]

    def test_json_roundtrip(self, tmp_path: Path):
        data = SampleRosterGenerator().generate()
        data.timetable.set_cell(Day.MON, 1, "T1", "6th", "Math")
        data.substitutions = [_sub("s1")]
        path = tmp_path / "school_data.json"
        data.save_json(path)
        loaded = SchoolData.load_json(path)
        assert loaded.teachers == data.teachers
        assert loaded.timetable == data.timetable
        assert loaded.substitutions == data.substitutions
        assert loaded.created_at is not None
