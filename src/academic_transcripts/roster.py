"""
ROSTER - Tabular views of the student collection

Student list with search/age/gender/template filters, and a per-student grade
sheet (raw scores for the template's grade levels) exportable to CSV.

Dependencies: pandas
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from .data_models import Student
from .errors import ExportError
from .template_catalog import grade_levels
from .transcript_assembler import assemble

logger = logging.getLogger(__name__)

ROSTER_COLUMNS = [
    "id",
    "name",
    "gender",
    "age",
    "template",
    "academic_years",
    "overall_average",
    "academic_status",
]

GRADE_SHEET_COLUMNS = ["grade_level", "subject", "semester1", "semester2", "yearAvg", "total"]


def students_frame(students: List[Student]) -> pd.DataFrame:
    """One row per student, with overall average and status from the assembled transcript"""
    rows = []
    for student in students:
        summary = assemble(student).summary
        rows.append(
            {
                "id": student.id,
                "name": student.name,
                "gender": student.gender,
                "age": student.age,
                "template": student.template,
                "academic_years": student.academic_years,
                "overall_average": summary.overall_average,
                "academic_status": summary.academic_status,
            }
        )
    return pd.DataFrame(rows, columns=ROSTER_COLUMNS)


def filter_students(
    students: List[Student],
    search: str = "",
    age: Optional[Union[int, str]] = None,
    gender: Optional[str] = None,
    template: Optional[str] = None,
) -> List[Student]:
    """
    Students matching every given filter, in stored order

    Args:
        search: Case-insensitive substring of the name ("" matches all)
        age: Exact age (None or "all" matches all)
        gender: Exact gender (None or "all" matches all)
        template: Exact template (None or "all" matches all)
    """
    if not students:
        return []

    frame = pd.DataFrame(
        {
            "name": [student.name for student in students],
            "age": [str(student.age) for student in students],
            "gender": [student.gender for student in students],
            "template": [student.template for student in students],
        }
    )

    mask = pd.Series(True, index=frame.index)
    if search:
        mask &= frame["name"].str.lower().str.contains(search.lower(), regex=False)
    if age not in (None, "", "all"):
        mask &= frame["age"] == str(age)
    if gender not in (None, "", "all"):
        mask &= frame["gender"] == gender
    if template not in (None, "", "all"):
        mask &= frame["template"] == template

    matches = [students[i] for i in frame[mask].index]
    logger.debug(f"Filtered roster: {len(matches)} of {len(students)} students")
    return matches


def grade_sheet_frame(student: Student) -> pd.DataFrame:
    """Raw scores for every subject in the student's visible grade levels"""
    rows = []
    for level in grade_levels(student.template):
        for record in student.grades:
            entry = record.score_for(level)
            rows.append(
                {
                    "grade_level": level,
                    "subject": record.subject,
                    "semester1": entry.semester1,
                    "semester2": entry.semester2,
                    "yearAvg": entry.year_avg,
                    "total": entry.total,
                }
            )
    return pd.DataFrame(rows, columns=GRADE_SHEET_COLUMNS)


def export_grade_sheet(student: Student, output_path: Path) -> Path:
    """Write the grade sheet as CSV"""
    output_path = Path(output_path)
    frame = grade_sheet_frame(student)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output_path, index=False)
    except OSError as e:
        logger.error(f"❌ Failed to write grade sheet {output_path}: {e}")
        raise ExportError(f"Failed to write grade sheet {output_path}: {e}") from e
    logger.info(f"📄 Grade sheet for {student.name} saved: {output_path} ({len(frame)} rows)")
    return output_path
