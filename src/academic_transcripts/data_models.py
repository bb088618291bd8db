#!/usr/bin/env python3
"""
DATA MODELS - Pydantic schemas for student academic records
Type-safe data structures for students, subject scores, and conduct

RECORD STRUCTURE:
✅ Student: Profile fields, template, subject list, conduct, saved overrides
✅ Subject Record: One of the 13 predefined subjects with per-level scores
✅ Score Entry: Semester 1, Semester 2, year average, total
✅ Conduct Record: Letter grades per semester and year

VALIDATION RULES:
- Gender must be Male or Female
- Age must be numeric (integral)
- Template must be one of G9-G12, G10-G12, G11-G12, G12
- Subject names must come from the predefined subject list
- Grade-level keys must be G9, G10, G11 or G12
- Conduct grades must be A-F

Serialized names match the stored collection format (academicYears, yearAvg,
totalsOverrides). Dump with ``by_alias=True``.

Dependencies: Pydantic for validation
"""

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GradeLevel(str, Enum):
    """Academic year labels"""
    G9 = "G9"
    G10 = "G10"
    G11 = "G11"
    G12 = "G12"


class Template(str, Enum):
    """Program length - selects which grade levels a transcript spans"""
    G9_G12 = "G9-G12"
    G10_G12 = "G10-G12"
    G11_G12 = "G11-G12"
    G12 = "G12"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class ConductGrade(str, Enum):
    """Behavioral assessment letter grades"""
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"


class ScoreField(str, Enum):
    """Editable fields of a score entry (serialized names)"""
    SEMESTER1 = "semester1"
    SEMESTER2 = "semester2"
    YEAR_AVG = "yearAvg"
    TOTAL = "total"


# Semester fields are clamped to [0, 100] and drive the derived fields
SEMESTER_FIELDS = (ScoreField.SEMESTER1.value, ScoreField.SEMESTER2.value)

# Serialized field name -> model attribute name
SCORE_ATTRIBUTES = {
    ScoreField.SEMESTER1.value: "semester1",
    ScoreField.SEMESTER2.value: "semester2",
    ScoreField.YEAR_AVG.value: "year_avg",
    ScoreField.TOTAL.value: "total",
}

CONDUCT_ATTRIBUTES = {
    ScoreField.SEMESTER1.value: "semester1",
    ScoreField.SEMESTER2.value: "semester2",
    ScoreField.YEAR_AVG.value: "year_avg",
}

PREDEFINED_SUBJECTS = [
    "Amharic",
    "English",
    "Mathematics",
    "Physics",
    "Chemistry",
    "Biology",
    "Geography",
    "History",
    "Civics",
    "Economics",
    "Agriculture",
    "HPE",
    "ICT",
]

GRADE_LEVEL_LABELS = [level.value for level in GradeLevel]


def grade_level_key(level: Union[str, GradeLevel]) -> str:
    """Normalize a grade level (enum member or label) to its storage key"""
    return GradeLevel(level).value


def _check_grade_level_keys(mapping: Dict[str, object], what: str) -> None:
    unknown = [key for key in mapping if key not in GRADE_LEVEL_LABELS]
    if unknown:
        raise ValueError(
            f"{what} keyed by unknown grade levels {unknown}; expected {GRADE_LEVEL_LABELS}"
        )


class ScoreEntry(BaseModel):
    """Scores for one subject in one grade level"""

    semester1: float = Field(0.0, description="Semester 1 score (0-100)")
    semester2: float = Field(0.0, description="Semester 2 score (0-100)")
    year_avg: float = Field(0.0, alias="yearAvg", description="Year average (derived, overridable)")
    total: float = Field(0.0, description="Semester 1 + Semester 2 (derived)")

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    @property
    def has_data(self) -> bool:
        """True when either semester carries a score"""
        return self.semester1 != 0 or self.semester2 != 0


class SubjectRecord(BaseModel):
    """One predefined subject with its score entries by grade level"""

    subject: str = Field(..., description="Subject name from the predefined list")
    grades: Dict[str, ScoreEntry] = Field(default_factory=dict, description="Grade level -> scores")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v):
        if v not in PREDEFINED_SUBJECTS:
            raise ValueError(f"Unknown subject {v!r}")
        return v

    @field_validator("grades")
    @classmethod
    def validate_grade_levels(cls, v):
        _check_grade_level_keys(v, "Scores")
        return v

    def score_for(self, level: Union[str, GradeLevel]) -> ScoreEntry:
        """Score entry for a grade level; zeros when nothing is stored"""
        return self.grades.get(grade_level_key(level)) or ScoreEntry()


class ConductRecord(BaseModel):
    """Conduct letter grades for one grade level"""

    semester1: ConductGrade = Field(ConductGrade.A.value, description="Semester 1 conduct")
    semester2: ConductGrade = Field(ConductGrade.A.value, description="Semester 2 conduct")
    year_avg: ConductGrade = Field(ConductGrade.A.value, alias="yearAvg", description="Year conduct")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class Student(BaseModel):
    """Complete student record as persisted in the collection"""

    id: str = Field(..., min_length=1, description="Opaque stable identifier")
    name: str = Field(..., min_length=1, description="Full name (First Middle Last)")
    gender: Gender = Field(..., description="Male or Female")
    age: int = Field(..., description="Age in years")
    academic_years: str = Field("", alias="academicYears", description="Display string, e.g. '2023-2026'")
    template: Template = Field(..., description="Program length")

    grades: List[SubjectRecord] = Field(default_factory=list, description="One record per subject")
    conduct: Optional[Dict[str, ConductRecord]] = Field(None, description="Grade level -> conduct")

    totals_overrides: Dict[str, float] = Field(
        default_factory=dict,
        alias="totalsOverrides",
        description="Saved column-total overrides keyed '<level>-<field>'",
    )

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, allow_inf_nan=False)

    @field_validator("age", mode="before")
    @classmethod
    def validate_age_numeric(cls, v):
        """Reject strings and booleans - age must be a JSON number"""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"Age must be numeric, got: {v!r}")
        return v

    @field_validator("conduct")
    @classmethod
    def validate_conduct_levels(cls, v):
        if v:
            _check_grade_level_keys(v, "Conduct")
        return v

    def subject_record(self, subject: str) -> Optional[SubjectRecord]:
        """First stored record for a subject, if any"""
        for record in self.grades:
            if record.subject == subject:
                return record
        return None

    def conduct_for(self, level: Union[str, GradeLevel]) -> ConductRecord:
        """Conduct for a grade level, all 'A' when absent"""
        if not self.conduct:
            return ConductRecord()
        return self.conduct.get(grade_level_key(level)) or ConductRecord()

    def to_storage(self) -> dict:
        """JSON-ready dict in the stored collection format"""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# Export all models
__all__ = [
    "GradeLevel",
    "Template",
    "Gender",
    "ConductGrade",
    "ScoreField",
    "SEMESTER_FIELDS",
    "SCORE_ATTRIBUTES",
    "CONDUCT_ATTRIBUTES",
    "PREDEFINED_SUBJECTS",
    "GRADE_LEVEL_LABELS",
    "grade_level_key",
    "ScoreEntry",
    "SubjectRecord",
    "ConductRecord",
    "Student",
]
