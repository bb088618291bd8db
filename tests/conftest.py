"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- Student records (fresh, scored, per template)
- Student store in a temporary directory
- Transcript exporter writing to a temporary directory
"""

import pytest

from academic_transcripts.data_models import ScoreEntry, Student, SubjectRecord
from academic_transcripts.exporter import TranscriptExporter
from academic_transcripts.grade_aggregator import update_score
from academic_transcripts.student_records import build_student
from academic_transcripts.student_store import StudentStore


@pytest.fixture
def new_student() -> Student:
    """Freshly created G9-G12 student with all-zero grades"""
    return build_student("abebe kebede alemu", "Male", 16, "G9-G12", current_year=2026)


@pytest.fixture
def scored_student(new_student) -> Student:
    """G9-G12 student with a few G11 scores entered"""
    student = new_student
    # Amharic, English, Mathematics
    update_score(student, 0, "G11", "semester1", 80)
    update_score(student, 0, "G11", "semester2", 90)
    update_score(student, 1, "G11", "semester1", 70)
    update_score(student, 1, "G11", "semester2", 76)
    update_score(student, 2, "G11", "semester1", 95)
    return student


@pytest.fixture
def g11_g12_student() -> Student:
    """G11-G12 student with stale G9/G10 scores stored from an earlier template"""
    return Student(
        id="stu-1112",
        name="Sara Tesfaye Bekele",
        gender="Female",
        age=17,
        academic_years="2025-2026",
        template="G11-G12",
        grades=[
            SubjectRecord(
                subject="Mathematics",
                grades={
                    "G9": ScoreEntry(semester1=60, semester2=60, year_avg=60, total=120),
                    "G10": ScoreEntry(semester1=65, semester2=65, year_avg=65, total=130),
                    "G11": ScoreEntry(semester1=85, semester2=0, year_avg=85, total=85),
                    "G12": ScoreEntry(semester1=90, semester2=80, year_avg=85, total=170),
                },
            ),
        ],
    )


@pytest.fixture
def student_store(tmp_path) -> StudentStore:
    """Open store backed by a temporary directory"""
    store = StudentStore(tmp_path / "data")
    store.open()
    yield store
    store.close()


@pytest.fixture
def exporter(tmp_path) -> TranscriptExporter:
    return TranscriptExporter(output_dir=tmp_path / "output")
