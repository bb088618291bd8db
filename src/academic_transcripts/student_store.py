#!/usr/bin/env python3
"""
STUDENT STORE - JSON collection of student records
Persist, import, and export the single student collection

STORAGE:
✅ One JSON file per collection (<data_dir>/transcript-students.json)
✅ Explicit lifecycle: open() at startup, flush on every write, close()
✅ Atomic writes (temp file + replace) - a failed write leaves the last save intact
✅ Whole-collection read/write, add-or-update by id, delete by id, clear

IMPORT FORMATS:
- Bulk: top-level list of students -> replaces the collection
- Single: {"student": {...}, "grades": [...], "conduct": {...}} -> add or update

IMPORT VALIDATION (all-or-nothing):
1. Required fields: id, name, gender, numeric age, academicYears, template, grades list
2. Subject records: subject and grades present
3. Model validation: enumerations, subject names, grade-level keys
4. No duplicate ids
Any failure raises ImportValidationError and nothing is written.

Dependencies: pydantic (via data_models)
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from .config import STORAGE_KEY, default_data_dir
from .data_models import Student
from .errors import ImportValidationError, StorageError

logger = logging.getLogger(__name__)

REQUIRED_STUDENT_FIELDS = ["id", "name", "gender", "age", "academicYears", "template", "grades"]
REQUIRED_SUBJECT_FIELDS = ["subject", "grades"]

BULK_IMPORT = "bulk"
SINGLE_IMPORT = "single"


@dataclass
class ImportResult:
    """Outcome of a successful import"""
    mode: str
    count: int
    message: str


def _describe(index: int, raw: Dict[str, Any]) -> str:
    identifier = raw.get("id") or raw.get("name") or "no id"
    return f"Student #{index + 1} ({identifier})"


def _format_validation_error(error: ValidationError) -> str:
    details = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        details.append(f"{location}: {err['msg']}")
    return "; ".join(details)


def _check_required_fields(index: int, raw: Any) -> None:
    """Presence checks on one raw student dict"""
    if not isinstance(raw, dict):
        raise ImportValidationError(f"Student #{index + 1} is not an object")

    missing = [field for field in REQUIRED_STUDENT_FIELDS if field not in raw or raw[field] in (None, "")]
    if missing:
        raise ImportValidationError(f"{_describe(index, raw)} missing required fields: {missing}")

    age = raw["age"]
    if isinstance(age, bool) or not isinstance(age, (int, float)):
        raise ImportValidationError(f"{_describe(index, raw)} has non-numeric age: {age!r}")

    if not isinstance(raw["grades"], list):
        raise ImportValidationError(f"{_describe(index, raw)} grades must be a list")

    for subject_index, subject in enumerate(raw["grades"]):
        if not isinstance(subject, dict):
            raise ImportValidationError(
                f"{_describe(index, raw)} subject record #{subject_index + 1} is not an object"
            )
        missing_subject = [
            field for field in REQUIRED_SUBJECT_FIELDS if field not in subject or subject[field] in (None, "")
        ]
        if missing_subject:
            raise ImportValidationError(
                f"{_describe(index, raw)} subject record #{subject_index + 1} "
                f"missing required fields: {missing_subject}"
            )


def validate_import_payload(payload: Any) -> Tuple[str, List[Student]]:
    """
    Validate a parsed import document

    Returns:
        (mode, students) where mode is "bulk" or "single"

    Raises:
        ImportValidationError: Describes the first problem found
    """
    if isinstance(payload, list):
        mode = BULK_IMPORT
        raw_students = payload
    elif isinstance(payload, dict) and "student" in payload:
        mode = SINGLE_IMPORT
        if not isinstance(payload["student"], dict):
            raise ImportValidationError("Invalid single-student document: 'student' must be an object")
        raw_student = dict(payload["student"])
        raw_student["grades"] = payload.get("grades", raw_student.get("grades"))
        raw_student["conduct"] = payload.get("conduct", raw_student.get("conduct"))
        raw_students = [raw_student]
    else:
        raise ImportValidationError(
            "Invalid file format: Expected an array of students or an object with "
            "'student', 'grades' and 'conduct'"
        )

    students = []
    for index, raw in enumerate(raw_students):
        _check_required_fields(index, raw)
        try:
            students.append(Student.model_validate(raw))
        except ValidationError as e:
            raise ImportValidationError(f"{_describe(index, raw)} is invalid: {_format_validation_error(e)}") from e

    seen = set()
    duplicates = []
    for student in students:
        if student.id in seen:
            duplicates.append(student.id)
        seen.add(student.id)
    if duplicates:
        raise ImportValidationError(f"Duplicate student ids in import: {duplicates}")

    return mode, students


class StudentStore:
    """Record store for the student collection"""

    def __init__(self, data_dir: Optional[Path] = None, collection: str = STORAGE_KEY):
        self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()
        self.collection = collection
        self.path = self.data_dir / f"{collection}.json"

        self._students: Optional[List[Student]] = None

        # Problems found while loading the stored collection
        self.validation_warnings: List[str] = []

    # Lifecycle

    def open(self) -> "StudentStore":
        """Load the collection from disk; unreadable data starts an empty collection"""
        self.validation_warnings = []
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.data_dir}: {e}") from e

        self._students = self._load()
        logger.info(f"📊 Opened {self.collection}: {len(self._students)} student(s) from {self.path}")
        return self

    def close(self) -> None:
        self._students = None

    @property
    def is_open(self) -> bool:
        return self._students is not None

    def __enter__(self) -> "StudentStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _load(self) -> List[Student]:
        if not self.path.exists():
            logger.info("  ℹ️  No saved data found - starting with an empty collection")
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self.validation_warnings.append(f"Failed to read {self.path}: {e}")
            logger.error(f"  ❌ Failed to read {self.path}: {e}")
            return []

        if not isinstance(raw, list):
            self.validation_warnings.append(f"{self.path} does not hold a list of students")
            logger.error(f"  ❌ {self.path} does not hold a list of students")
            return []

        students = []
        for index, entry in enumerate(raw):
            try:
                students.append(Student.model_validate(entry))
            except ValidationError as e:
                self.validation_warnings.append(f"Skipped stored record #{index + 1}: {_format_validation_error(e)}")
                logger.warning(f"  ⚠️ Skipping stored record #{index + 1}: {e.error_count()} error(s)")
        return students

    def _require_open(self) -> List[Student]:
        if not self.is_open:
            raise StorageError(f"Student store {self.collection!r} is not open")
        return self._students

    def _commit(self, students: List[Student]) -> None:
        """Flush a new collection to disk, then make it current"""
        content = json.dumps([student.to_storage() for student in students], indent=2)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"❌ Error writing students to {self.path}: {e}")
            raise StorageError(f"Failed to save student data: {e}") from e
        self._students = students
        logger.debug(f"Wrote {len(students)} student(s) to {self.path}")

    # Collection operations

    def read_students(self) -> List[Student]:
        """All students (copies)"""
        return [student.model_copy(deep=True) for student in self._require_open()]

    def write_students(self, students: List[Student]) -> None:
        """Replace the whole collection"""
        self._require_open()
        self._commit([student.model_copy(deep=True) for student in students])
        logger.info(f"💾 Wrote {len(students)} student(s)")

    def get_student(self, student_id: str) -> Optional[Student]:
        for student in self._require_open():
            if student.id == student_id:
                return student.model_copy(deep=True)
        return None

    def save_student(self, student: Student) -> None:
        """Add a student, or replace the stored one with the same id"""
        students = list(self._require_open())
        saved = student.model_copy(deep=True)

        for index, existing in enumerate(students):
            if existing.id == student.id:
                students[index] = saved
                self._commit(students)
                logger.info(f"💾 Updated existing student: {student.name}")
                return

        students.append(saved)
        self._commit(students)
        logger.info(f"💾 Added new student: {student.name}")

    def delete_student(self, student_id: str) -> bool:
        """Remove a student by id; False when no such student"""
        students = self._require_open()
        remaining = [student for student in students if student.id != student_id]

        if len(remaining) == len(students):
            logger.info(f"  ℹ️  Student not found for deletion: {student_id}")
            return False

        self._commit(remaining)
        logger.info(f"🗑️  Deleted student: {student_id}")
        return True

    def clear_all(self) -> None:
        """Delete every student and the collection file"""
        self._require_open()
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to clear student data: {e}") from e
        self._students = []
        logger.info("🗑️  Cleared all student data")

    # Import / export

    def export_json(self, student_id: Optional[str] = None) -> str:
        """
        Serialize the collection (bulk) or one student (single-student document)

        Raises:
            ValueError: student_id given but not found
        """
        if student_id is None:
            return json.dumps([student.to_storage() for student in self._require_open()], indent=2)

        student = self.get_student(student_id)
        if student is None:
            raise ValueError(f"Student {student_id} not found")

        data = student.to_storage()
        grades = data.pop("grades")
        conduct = data.pop("conduct", {})
        return json.dumps({"student": data, "grades": grades, "conduct": conduct}, indent=2)

    def import_json(self, content: str) -> ImportResult:
        """
        Import a bulk or single-student document

        Raises:
            ImportValidationError: Malformed document; stored data is unchanged
            StorageError: Valid document that could not be written
        """
        self._require_open()
        try:
            payload = json.loads(content)
        except ValueError as e:
            raise ImportValidationError(f"Import failed: invalid JSON ({e})") from e

        mode, students = validate_import_payload(payload)

        if mode == BULK_IMPORT:
            self._commit(students)
            message = f"Successfully imported {len(students)} student(s)"
        else:
            self.save_student(students[0])
            message = f"Successfully imported {students[0].name}"

        logger.info(f"✅ {message}")
        return ImportResult(mode=mode, count=len(students), message=message)

    def generate_validation_report(self) -> str:
        """Summary of the loaded collection and any problems found"""
        report = ["🔍 STUDENT STORE REPORT", "=" * 50, ""]

        if not self.validation_warnings:
            report.append("✅ All stored records loaded")
        else:
            report.append("⚠️ WARNINGS (Review recommended):")
            for warning in self.validation_warnings:
                report.append(f"  • {warning}")
        report.append("")

        if self.is_open:
            report.append("📊 DATA SUMMARY:")
            report.append(f"  Students: {len(self._students)}")
            report.append(f"  File: {self.path}")

        return "\n".join(report)
