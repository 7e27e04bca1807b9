from models.teacher import Teacher, TeacherAssignment
from models.timetable import MasterTimetable, TimetableEntry
from models.substitution import Substitution, SubstitutionLedger
from models.school_data import SchoolData, FeasibilityReport

__all__ = [
    "Teacher",
    "TeacherAssignment",
    "MasterTimetable",
    "TimetableEntry",
    "Substitution",
    "SubstitutionLedger",
    "SchoolData",
    "FeasibilityReport",
]
