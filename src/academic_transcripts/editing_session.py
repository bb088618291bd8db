"""
EDITING SESSION - Transient grade-editing state for one student

Holds a working copy of the student, the override side table for column
totals, and a single in-progress flag that blocks edits while a save runs.
Overrides only reach the stored record when saved with persist_overrides=True.
"""

import logging
from typing import List, Union

from .data_models import ConductGrade, ConductRecord, GradeLevel, ScoreEntry, ScoreField, Student
from .errors import EditInProgressError
from .grade_aggregator import ColumnTotals, TotalsOverrides, column_totals, update_score
from .student_records import initialize_grades, update_conduct
from .template_catalog import grade_levels
from .transcript_assembler import TranscriptView, assemble

logger = logging.getLogger(__name__)


class GradeEditingSession:
    """Edit one student's grades, conduct and column-total overrides"""

    def __init__(self, student: Student, store=None):
        """
        Args:
            student: Stored student (copied; the original is not touched)
            store: StudentStore used by save()
        """
        self.student = initialize_grades(student.model_copy(deep=True))
        self.store = store
        self.overrides = TotalsOverrides.from_dict(self.student.totals_overrides)
        self.is_saving = False

    @property
    def grade_levels(self) -> List[str]:
        return grade_levels(self.student.template)

    def _ensure_editable(self) -> None:
        if self.is_saving:
            raise EditInProgressError(f"Save in progress for {self.student.name}")

    def update_score(
        self,
        subject_index: int,
        grade_level: Union[str, GradeLevel],
        field: Union[str, ScoreField],
        raw_value,
    ) -> ScoreEntry:
        self._ensure_editable()
        return update_score(self.student, subject_index, grade_level, field, raw_value)

    def update_conduct(
        self,
        grade_level: Union[str, GradeLevel],
        field: Union[str, ScoreField],
        grade: Union[str, ConductGrade],
    ) -> ConductRecord:
        self._ensure_editable()
        return update_conduct(self.student, grade_level, field, grade)

    def set_total_override(self, grade_level: Union[str, GradeLevel], field: str, raw_value) -> float:
        self._ensure_editable()
        return self.overrides.set(grade_level, field, raw_value)

    def clear_total_override(self, grade_level: Union[str, GradeLevel], field: str) -> bool:
        self._ensure_editable()
        return self.overrides.clear(grade_level, field)

    def level_totals(self, grade_level: Union[str, GradeLevel]) -> ColumnTotals:
        """Column totals with this session's overrides"""
        return column_totals(self.student.grades, grade_level, self.overrides)

    def assemble(self) -> TranscriptView:
        """Transcript view of the working copy, session overrides applied"""
        # Session overrides start from the saved ones and may have cleared some
        working = self.student.model_copy(update={"totals_overrides": {}})
        return assemble(working, self.overrides)

    def save(self, persist_overrides: bool = False) -> Student:
        """
        Write the working copy to the store

        Args:
            persist_overrides: Replace the student's saved overrides with this session's

        Returns:
            The student as saved

        Raises:
            EditInProgressError: Another save is running
            StorageError: The store could not be written
        """
        self._ensure_editable()
        if self.store is None:
            raise ValueError("No store attached to this editing session")

        self.is_saving = True
        try:
            if persist_overrides:
                self.student.totals_overrides = self.overrides.to_dict()
            self.store.save_student(self.student)
            logger.info(f"✅ Grades saved for {self.student.name}")
            return self.student
        finally:
            self.is_saving = False
