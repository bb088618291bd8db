#!/usr/bin/env python3
"""
TRANSCRIPT ASSEMBLER - Student record -> display/export structure
Build the one structure shared by the print preview and the exported document

ASSEMBLY PROCESS:
1. Look up the template's grade levels (catalog order)
2. Lay out the 13 predefined subjects for each visible grade level
3. Compute column totals and averages (saved + session overrides applied)
4. Fill conduct cells, defaulting to "A"
5. Summarize overall average and academic status

FORMATTING:
✅ Score cells: one decimal ("85.0"), "-" when the score is zero
✅ Totals/averages: one decimal, always shown
✅ Conduct: letter grade
✅ G11 section flagged "PROMOTED TO G12" when G12 follows

Grade levels outside the template are never shown, even if stored. Missing
subjects, levels or conduct read as zeros/defaults. The renderers take figures
from this view only.

Dependencies: template_catalog, grade_aggregator
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from .data_models import PREDEFINED_SUBJECTS, GradeLevel, Student, SubjectRecord
from .grade_aggregator import (
    ColumnTotals,
    TotalsOverrides,
    academic_status,
    column_totals,
    format_one_decimal,
    overall_average,
)
from .template_catalog import get_template_profile

logger = logging.getLogger(__name__)

EMPTY_CELL = "-"
PROMOTION_NOTE = "PROMOTED TO G12"


class TranscriptHeader(BaseModel):
    """Student information block"""
    student_id: str
    name: str
    gender: str
    age: int
    academic_years: str
    template: str
    program: str
    school_type: str


class ScoreRow(BaseModel):
    """One subject's formatted scores in one grade level"""
    subject: str
    semester1: str
    semester2: str
    year_avg: str
    total: str


class SummaryRow(BaseModel):
    """Totals, averages, or conduct row"""
    label: str
    semester1: str
    semester2: str
    year_avg: str


class GradeLevelSection(BaseModel):
    """Full table for one grade level"""
    grade_level: str
    title: str
    promotion_note: Optional[str] = None
    rows: List[ScoreRow]
    totals: SummaryRow
    averages: SummaryRow
    conduct: SummaryRow
    subject_count: int = Field(..., ge=0)
    column_totals: ColumnTotals


class TranscriptSummary(BaseModel):
    total_subjects: int
    overall_average: int
    academic_status: str


class TranscriptView(BaseModel):
    """Everything needed to render a transcript"""
    header: TranscriptHeader
    grade_levels: List[str]
    subjects: List[str]
    sections: List[GradeLevelSection]
    summary: TranscriptSummary

    def section(self, grade_level: str) -> Optional[GradeLevelSection]:
        for section in self.sections:
            if section.grade_level == grade_level:
                return section
        return None


def format_score(value: float) -> str:
    """'85.0' for a recorded score, '-' for no data"""
    return format_one_decimal(value) if value > 0 else EMPTY_CELL


def _ordered_subject_records(student: Student) -> List[SubjectRecord]:
    """One record per predefined subject, predefined order; zero record when missing"""
    by_subject = {}
    for record in student.grades:
        by_subject.setdefault(record.subject, record)
    return [by_subject.get(subject) or SubjectRecord(subject=subject) for subject in PREDEFINED_SUBJECTS]


def _build_section(
    student: Student,
    records: List[SubjectRecord],
    level: str,
    levels: List[str],
    overrides: TotalsOverrides,
) -> GradeLevelSection:
    rows = []
    for record in records:
        entry = record.score_for(level)
        rows.append(
            ScoreRow(
                subject=record.subject,
                semester1=format_score(entry.semester1),
                semester2=format_score(entry.semester2),
                year_avg=format_score(entry.year_avg),
                total=format_score(entry.total),
            )
        )

    totals = column_totals(records, level, overrides)
    conduct = student.conduct_for(level)

    promotion_note = None
    if level == GradeLevel.G11.value and GradeLevel.G12.value in levels:
        promotion_note = PROMOTION_NOTE

    return GradeLevelSection(
        grade_level=level,
        title=f"{level} Academic Record",
        promotion_note=promotion_note,
        rows=rows,
        totals=SummaryRow(
            label="TOTALS",
            semester1=format_one_decimal(totals.semester1_total),
            semester2=format_one_decimal(totals.semester2_total),
            year_avg=format_one_decimal(totals.year_avg_total),
        ),
        averages=SummaryRow(
            label="AVERAGES",
            semester1=format_one_decimal(totals.semester1_avg),
            semester2=format_one_decimal(totals.semester2_avg),
            year_avg=format_one_decimal(totals.year_avg_avg),
        ),
        conduct=SummaryRow(
            label="CONDUCT",
            semester1=conduct.semester1,
            semester2=conduct.semester2,
            year_avg=conduct.year_avg,
        ),
        subject_count=totals.subject_count,
        column_totals=totals,
    )


def assemble(student: Student, overrides: Optional[TotalsOverrides] = None) -> TranscriptView:
    """
    Project a student record into a TranscriptView

    Args:
        student: Student record (not modified)
        overrides: Session overrides, applied on top of the student's saved ones

    Returns:
        TranscriptView with one section per visible grade level
    """
    profile = get_template_profile(student.template)
    levels = list(profile.grade_levels)
    records = _ordered_subject_records(student)
    effective_overrides = TotalsOverrides.from_dict(student.totals_overrides).merged(overrides)

    sections = [_build_section(student, records, level, levels, effective_overrides) for level in levels]

    average = overall_average(records, levels)
    summary = TranscriptSummary(
        total_subjects=len(records),
        overall_average=average,
        academic_status=academic_status(average),
    )

    header = TranscriptHeader(
        student_id=student.id,
        name=student.name,
        gender=student.gender,
        age=student.age,
        academic_years=student.academic_years,
        template=student.template,
        program=profile.program,
        school_type=profile.school_type,
    )

    logger.debug(f"Assembled transcript for {student.name}: {levels}, average {average}")

    return TranscriptView(
        header=header,
        grade_levels=levels,
        subjects=[record.subject for record in records],
        sections=sections,
        summary=summary,
    )
