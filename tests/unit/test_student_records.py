"""
Unit Tests for Student Records

Tests for:
- Name validation and capitalization
- Age bounds per template
- Creating and editing students
- Grade initialization
- Conduct updates
"""

import pytest

from academic_transcripts.data_models import PREDEFINED_SUBJECTS, ScoreEntry, Student, SubjectRecord
from academic_transcripts.errors import StudentValidationError
from academic_transcripts.grade_aggregator import update_score
from academic_transcripts.student_records import (
    build_student,
    initialize_grades,
    update_conduct,
    validate_age,
    validate_and_capitalize_name,
)


class TestNameValidation:
    """Tests for validate_and_capitalize_name"""

    def test_capitalizes_each_part(self):
        assert validate_and_capitalize_name("aBEBE kebede ALEMU") == "Abebe Kebede Alemu"

    def test_collapses_whitespace(self):
        assert validate_and_capitalize_name("  sara   tesfaye bekele ") == "Sara Tesfaye Bekele"

    def test_four_parts_allowed(self):
        assert validate_and_capitalize_name("a b c d") == "A B C D"

    @pytest.mark.parametrize("name", ["", "Abebe", "Abebe Kebede"])
    def test_requires_three_parts(self, name):
        with pytest.raises(StudentValidationError, match="Please enter full name"):
            validate_and_capitalize_name(name)

    @pytest.mark.parametrize("name", ["Abebe Kebede Alemu2", "Abebe Ke-bede Alemu", "Abebe Kebede O'Neil"])
    def test_letters_only(self, name):
        with pytest.raises(StudentValidationError, match="Name should contain only letters"):
            validate_and_capitalize_name(name)


class TestAgeValidation:
    """Tests for validate_age"""

    def test_within_bounds(self):
        assert validate_age("16", "G9-G12") == 16
        assert validate_age(14, "G9-G12") == 14
        assert validate_age(19, "G9-G12") == 19

    @pytest.mark.parametrize(
        "age,template,message",
        [
            (13, "G9-G12", "Age must be between 14 and 19 for High School (4 years)"),
            (19, "G10-G12", "Age must be between 15 and 18 for High School (3 years)"),
            (15, "G11-G12", "Age must be between 16 and 18 for High School (2 years)"),
            (20, "G12", "Age must be between 17 and 19 for Grade 12 Only"),
        ],
    )
    def test_out_of_bounds(self, age, template, message):
        with pytest.raises(StudentValidationError) as exc_info:
            validate_age(age, template)
        assert str(exc_info.value) == message

    def test_not_a_number(self):
        with pytest.raises(StudentValidationError):
            validate_age("sixteen", "G9-G12")


class TestBuildStudent:
    """Tests for build_student"""

    def test_new_student(self, new_student):
        assert new_student.name == "Abebe Kebede Alemu"
        assert new_student.gender == "Male"
        assert new_student.age == 16
        assert new_student.template == "G9-G12"
        assert new_student.academic_years == "2023-2026"
        assert len(new_student.id) == 32

    def test_new_students_get_distinct_ids(self):
        first = build_student("Abebe Kebede Alemu", "Male", 16)
        second = build_student("Abebe Kebede Alemu", "Male", 16)
        assert first.id != second.id

    @pytest.mark.parametrize(
        "name,gender,age",
        [("", "Male", 16), ("Abebe Kebede Alemu", "", 16), ("Abebe Kebede Alemu", "Male", None), ("Abebe Kebede Alemu", "Male", " ")],
    )
    def test_requires_all_fields(self, name, gender, age):
        with pytest.raises(StudentValidationError, match="Please fill in all fields"):
            build_student(name, gender, age)

    def test_invalid_gender(self):
        with pytest.raises(StudentValidationError):
            build_student("Abebe Kebede Alemu", "Other", 16)

    def test_edit_keeps_id_and_grades(self, new_student):
        update_score(new_student, 2, "G11", "semester1", 88)
        update_conduct(new_student, "G11", "semester1", "B")
        new_student.totals_overrides = {"G11-semester1-total": 500}

        edited = build_student("abebe kebede alemu", "Male", 17, "G9-G12", existing=new_student)

        assert edited.id == new_student.id
        assert edited.age == 17
        assert edited.grades[2].grades["G11"].semester1 == 88
        assert edited.conduct["G11"].semester1 == "B"
        assert edited.totals_overrides == {"G11-semester1-total": 500}

    def test_edit_does_not_share_state(self, new_student):
        edited = build_student("Abebe Kebede Alemu", "Male", 16, existing=new_student)
        update_score(edited, 0, "G9", "semester1", 70)
        assert new_student.grades[0].grades["G9"].semester1 == 0

    def test_template_change_keeps_scores(self, new_student):
        """Switching to G11-G12 keeps stored G9/G10 scores, they are just hidden"""
        update_score(new_student, 0, "G9", "semester1", 70)
        edited = build_student("Abebe Kebede Alemu", "Male", 17, "G11-G12", existing=new_student, current_year=2026)
        assert edited.template == "G11-G12"
        assert edited.grades[0].grades["G9"].semester1 == 70
        assert edited.academic_years == "2025-2026"


class TestInitializeGrades:
    """Tests for initialize_grades"""

    def test_fills_every_subject_and_level(self, new_student):
        assert [record.subject for record in new_student.grades] == PREDEFINED_SUBJECTS
        for record in new_student.grades:
            assert set(record.grades) == {"G9", "G10", "G11", "G12"}
            assert record.grades["G9"] == ScoreEntry()
        assert set(new_student.conduct) == {"G9", "G10", "G11", "G12"}
        assert new_student.conduct["G10"].year_avg == "A"

    def test_keeps_existing_and_extra_levels(self):
        student = Student(
            id="s1",
            name="Sara Tesfaye Bekele",
            gender="Female",
            age=17,
            template="G12",
            grades=[
                SubjectRecord(subject="Physics", grades={"G11": ScoreEntry(semester1=77, year_avg=77, total=77)}),
            ],
        )
        initialize_grades(student)

        physics = student.subject_record("Physics")
        assert physics.grades["G11"].semester1 == 77
        assert physics.grades["G12"] == ScoreEntry()
        assert len(student.grades) == 13
        assert student.grades.index(physics) == PREDEFINED_SUBJECTS.index("Physics")

    def test_keeps_existing_conduct(self, new_student):
        update_conduct(new_student, "G9", "yearAvg", "D")
        initialize_grades(new_student)
        assert new_student.conduct["G9"].year_avg == "D"


class TestUpdateConduct:
    """Tests for update_conduct"""

    def test_sets_grade(self, new_student):
        record = update_conduct(new_student, "G12", "semester2", "E")
        assert record.semester2 == "E"
        assert new_student.conduct["G12"].semester2 == "E"

    def test_creates_conduct_when_absent(self, g11_g12_student):
        update_conduct(g11_g12_student, "G11", "semester1", "C")
        assert g11_g12_student.conduct["G11"].semester1 == "C"
        assert g11_g12_student.conduct["G11"].semester2 == "A"

    def test_rejects_total_field(self, new_student):
        with pytest.raises(ValueError):
            update_conduct(new_student, "G9", "total", "A")

    def test_rejects_unknown_grade(self, new_student):
        with pytest.raises(ValueError):
            update_conduct(new_student, "G9", "semester1", "Z")
