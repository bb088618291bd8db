"""
Academic Transcripts - student records, grade aggregation and transcript export
"""

__version__ = "1.0.0"

from .data_models import ConductRecord, GradeLevel, ScoreEntry, Student, SubjectRecord, Template
from .editing_session import GradeEditingSession
from .errors import (
    EditInProgressError,
    ExportError,
    ImportValidationError,
    StorageError,
    StudentValidationError,
    SubjectIndexError,
    TranscriptError,
)
from .grade_aggregator import TotalsOverrides, column_totals, update_score
from .student_records import build_student
from .student_store import StudentStore
from .transcript_assembler import TranscriptView, assemble

__all__ = [
    "__version__",
    "ConductRecord",
    "GradeLevel",
    "ScoreEntry",
    "Student",
    "SubjectRecord",
    "Template",
    "GradeEditingSession",
    "EditInProgressError",
    "ExportError",
    "ImportValidationError",
    "StorageError",
    "StudentValidationError",
    "SubjectIndexError",
    "TranscriptError",
    "TotalsOverrides",
    "column_totals",
    "update_score",
    "build_student",
    "StudentStore",
    "TranscriptView",
    "assemble",
]
