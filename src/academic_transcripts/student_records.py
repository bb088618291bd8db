"""
STUDENT RECORDS - Student form rules and grade initialization

VALIDATION RULES:
- Name: at least 3 whitespace-separated parts (First Middle Last), letters only,
  each part capitalized on save ("aBEBE kebede ALEMU" -> "Abebe Kebede Alemu")
- Age: within the template's eligibility bounds
- Name, gender, and age are all required

New students get a uuid4 identifier; edits keep the existing identifier, grades
and conduct. Every saved student carries a subject record for each predefined
subject with an entry for every grade level of its template.
"""

import logging
import re
from typing import Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from .data_models import (
    CONDUCT_ATTRIBUTES,
    PREDEFINED_SUBJECTS,
    ConductGrade,
    ConductRecord,
    GradeLevel,
    ScoreEntry,
    ScoreField,
    Student,
    SubjectRecord,
    Template,
    grade_level_key,
)
from .errors import StudentValidationError
from .template_catalog import academic_years, age_bounds, grade_levels

logger = logging.getLogger(__name__)

MIN_NAME_PARTS = 3
_NAME_PART = re.compile(r"^[a-zA-Z]+$")


def validate_and_capitalize_name(name: str) -> str:
    """
    Validate a full name and capitalize each part

    Raises:
        StudentValidationError: fewer than 3 parts, or non-letter characters
    """
    parts = (name or "").split()
    if len(parts) < MIN_NAME_PARTS:
        raise StudentValidationError("Please enter full name (First Middle Last)")

    if any(not _NAME_PART.match(part) for part in parts):
        raise StudentValidationError("Name should contain only letters")

    return " ".join(part[0].upper() + part[1:].lower() for part in parts)


def validate_age(age: Union[int, str], template: Union[str, Template]) -> int:
    """
    Parse an age and check it against the template's bounds

    Raises:
        StudentValidationError: not a whole number, or out of range
    """
    try:
        value = int(str(age).strip())
    except (TypeError, ValueError):
        raise StudentValidationError(f"Age must be a whole number, got: {age!r}")

    min_age, max_age, school_type = age_bounds(template)
    if value < min_age or value > max_age:
        raise StudentValidationError(f"Age must be between {min_age} and {max_age} for {school_type}")
    return value


def initialize_grades(student: Student) -> Student:
    """
    Give the student a complete subject list for its template (in place)

    Existing scores are kept, including stored levels outside the template.
    Missing subjects and levels get zero entries; missing conduct levels get "A".
    """
    levels = grade_levels(student.template)

    subjects = []
    for subject in PREDEFINED_SUBJECTS:
        existing = student.subject_record(subject)
        record = existing or SubjectRecord(subject=subject)
        for level in levels:
            if level not in record.grades:
                record.grades[level] = ScoreEntry()
        subjects.append(record)
    student.grades = subjects

    conduct = dict(student.conduct or {})
    for level in levels:
        conduct.setdefault(level, ConductRecord())
    student.conduct = conduct

    return student


def update_conduct(
    student: Student,
    grade_level: Union[str, GradeLevel],
    field: Union[str, ScoreField],
    grade: Union[str, ConductGrade],
) -> ConductRecord:
    """Set one conduct letter grade (in place)"""
    field_key = ScoreField(field).value
    if field_key not in CONDUCT_ATTRIBUTES:
        raise ValueError(f"Conduct has no {field_key!r} field")

    level = grade_level_key(grade_level)
    value = ConductGrade(grade).value

    conduct = student.conduct if student.conduct is not None else {}
    record = conduct.get(level)
    if record is None:
        record = ConductRecord()
        conduct[level] = record
    setattr(record, CONDUCT_ATTRIBUTES[field_key], value)
    student.conduct = conduct
    return record


def build_student(
    name: str,
    gender: Optional[str],
    age: Union[int, str, None],
    template: Union[str, Template] = Template.G9_G12.value,
    existing: Optional[Student] = None,
    current_year: Optional[int] = None,
) -> Student:
    """
    Create or update a student from form input

    Args:
        name: Full name as typed
        gender: "Male" or "Female"
        age: Age as typed or as an int
        template: Program length
        existing: Student being edited (keeps id, grades, conduct, overrides)
        current_year: Year the academic-years label ends in (default: now)

    Returns:
        Validated Student with initialized grades

    Raises:
        StudentValidationError: Missing field, bad name, bad age, or bad enum value
    """
    if not (name or "").strip() or not gender or age is None or str(age).strip() == "":
        raise StudentValidationError("Please fill in all fields")

    capitalized_name = validate_and_capitalize_name(name)
    template_value = template.value if isinstance(template, Template) else template
    age_value = validate_age(age, template_value)

    try:
        student = Student(
            id=existing.id if existing else uuid4().hex,
            name=capitalized_name,
            gender=gender,
            age=age_value,
            academic_years=academic_years(template_value, current_year),
            template=template_value,
            grades=[record.model_copy(deep=True) for record in existing.grades] if existing else [],
            conduct=(
                {level: record.model_copy() for level, record in existing.conduct.items()}
                if existing and existing.conduct
                else None
            ),
            totals_overrides=dict(existing.totals_overrides) if existing else {},
        )
    except ValidationError as e:
        raise StudentValidationError(f"Invalid student data: {e}") from e

    initialize_grades(student)

    action = "Updated" if existing else "Created"
    logger.info(f"📝 {action} student {student.name} ({student.template}, id={student.id})")
    return student
