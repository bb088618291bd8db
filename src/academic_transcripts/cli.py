#!/usr/bin/env python3
"""
Command line front end for the student collection

Usage:
    transcripts add --name "Abebe Kebede Alemu" --gender Male --age 16 --template G9-G12
    transcripts score <student_id> Mathematics G11 semester1 85
    transcripts export <student_id>
    transcripts export-all --output-dir ~/Desktop/Transcripts
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import default_output_dir
from .data_models import GRADE_LEVEL_LABELS, PREDEFINED_SUBJECTS, ConductGrade, Gender, ScoreField, Template
from .editing_session import GradeEditingSession
from .errors import StorageError, TranscriptError
from .exporter import LAYOUTS, TranscriptExporter
from .grade_aggregator import OVERRIDE_FIELDS
from .roster import export_grade_sheet, filter_students, students_frame
from .student_records import build_student
from .student_store import StudentStore

logger = logging.getLogger(__name__)

# Chatty third-party loggers silenced during export
NOISY_LOGGERS = ["weasyprint", "fontTools"]


def _require_student(store: StudentStore, student_id: str):
    student = store.get_student(student_id)
    if student is None:
        raise TranscriptError(f"Student {student_id} not found")
    return student


def _subject_index(session: GradeEditingSession, subject: str) -> int:
    """Subject given by name or by position in the subject list"""
    if subject.isdigit():
        return int(subject)
    for index, record in enumerate(session.student.grades):
        if record.subject.lower() == subject.lower():
            return index
    raise TranscriptError(f"Unknown subject {subject!r}; expected one of {PREDEFINED_SUBJECTS}")


def _exporter(store: StudentStore) -> TranscriptExporter:
    return TranscriptExporter(output_dir=default_output_dir(store.data_dir))


def cmd_add(args, store: StudentStore) -> int:
    student = build_student(args.name, args.gender, args.age, args.template)
    store.save_student(student)
    print(f"✅ Student added: {student.name}")
    print(f"   ID: {student.id}")
    return 0


def cmd_edit(args, store: StudentStore) -> int:
    existing = _require_student(store, args.student_id)
    student = build_student(
        args.name or existing.name,
        args.gender or existing.gender,
        args.age if args.age is not None else existing.age,
        args.template or existing.template,
        existing=existing,
    )
    store.save_student(student)
    print(f"✅ Student updated: {student.name}")
    return 0


def cmd_list(args, store: StudentStore) -> int:
    students = filter_students(store.read_students(), args.search, args.age, args.gender, args.template)
    if not students:
        print("No students found")
        return 0

    frame = students_frame(students)
    print(frame.to_string(index=False))
    print(f"\n{len(students)} student(s)")
    return 0


def cmd_show(args, store: StudentStore) -> int:
    student = _require_student(store, args.student_id)
    view = GradeEditingSession(student).assemble()
    header = view.header

    print("=" * 70)
    print(f"{header.name} ({header.gender}, {header.age})")
    print(f"Program: {header.program}   Academic Years: {header.academic_years}")
    print(f"ID: {header.student_id}")
    print("=" * 70)

    for section in view.sections:
        title = section.title
        if section.promotion_note:
            title = f"{title}  -> {section.promotion_note}"
        print(f"\n{title}")
        print("-" * 50)
        print(f"  {'SUBJECT':<14}{'SEM 1':>8}{'SEM 2':>8}{'YEAR AVG':>10}")
        for row in section.rows + [section.totals, section.averages, section.conduct]:
            label = getattr(row, "subject", None) or row.label
            print(f"  {label:<14}{row.semester1:>8}{row.semester2:>8}{row.year_avg:>10}")

    summary = view.summary
    print(f"\nTotal Subjects: {summary.total_subjects}")
    print(f"Overall Average: {summary.overall_average}%")
    print(f"Academic Status: {summary.academic_status}")
    return 0


def cmd_score(args, store: StudentStore) -> int:
    session = GradeEditingSession(_require_student(store, args.student_id), store)
    index = _subject_index(session, args.subject)
    entry = session.update_score(index, args.grade_level, args.field, args.value)
    session.save()
    print(
        f"✅ {session.student.grades[index].subject} {args.grade_level}: "
        f"SEM1 {entry.semester1} / SEM2 {entry.semester2} / YEAR AVG {entry.year_avg} / TOTAL {entry.total}"
    )
    return 0


def cmd_conduct(args, store: StudentStore) -> int:
    session = GradeEditingSession(_require_student(store, args.student_id), store)
    session.update_conduct(args.grade_level, args.field, args.grade)
    session.save()
    print(f"✅ Conduct {args.grade_level} {args.field}: {args.grade}")
    return 0


def cmd_override(args, store: StudentStore) -> int:
    session = GradeEditingSession(_require_student(store, args.student_id), store)
    if args.clear:
        if not session.clear_total_override(args.grade_level, args.field):
            print(f"ℹ️  No override set for {args.grade_level} {args.field}")
            return 0
        message = f"✅ Override cleared: {args.grade_level} {args.field}"
    else:
        if args.value is None:
            raise TranscriptError("A value is required unless --clear is given")
        value = session.set_total_override(args.grade_level, args.field, args.value)
        message = f"✅ Override set: {args.grade_level} {args.field} = {value}"

    session.save(persist_overrides=True)
    print(message)
    return 0


def cmd_delete(args, store: StudentStore) -> int:
    if not store.delete_student(args.student_id):
        print(f"❌ Student {args.student_id} not found")
        return 1
    print(f"🗑️  Student deleted: {args.student_id}")
    return 0


def cmd_clear(args, store: StudentStore) -> int:
    if not args.yes:
        print("❌ Refusing to delete all student data without --yes")
        return 1
    store.clear_all()
    print("🗑️  All student data cleared")
    return 0


def cmd_import(args, store: StudentStore) -> int:
    try:
        content = Path(args.file).read_text(encoding="utf-8")
    except OSError as e:
        raise TranscriptError(f"Cannot read {args.file}: {e}") from e

    result = store.import_json(content)
    print(f"✅ {result.message}")
    return 0


def cmd_dump(args, store: StudentStore) -> int:
    content = store.export_json(args.student)
    if args.output:
        output_path = Path(args.output)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write {output_path}: {e}") from e
        print(f"✅ Data exported: {output_path}")
    else:
        print(content)
    return 0


def cmd_preview(args, store: StudentStore) -> int:
    student = _require_student(store, args.student_id)
    path = _exporter(store).write_preview(student, args.output)
    print(f"✅ Preview saved: {path}")
    return 0


def cmd_export(args, store: StudentStore) -> int:
    student = _require_student(store, args.student_id)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)

    path = _exporter(store).export_pdf(student, args.output, layout=args.layout)
    print(f"✅ Transcript exported: {path}")
    return 0


def cmd_export_all(args, store: StudentStore) -> int:
    students = store.read_students()
    if not students:
        print("No students to export")
        return 0

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)

    exporter = _exporter(store)
    results = exporter.export_batch(students, args.output_dir, layout=args.layout, progress=not args.no_progress)

    success = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    print("\n" + "=" * 70)
    print("BATCH EXPORT SUMMARY")
    print("=" * 70)
    print(f"\n✅ Successful: {len(success)}")
    print(f"❌ Failed: {len(failed)}")
    for r in failed:
        print(f"  [{r.student_id}] {r.student_name}: {r.error}")
    print(f"\n📁 Output: {args.output_dir or exporter.output_dir}")

    return 1 if failed else 0


def cmd_grade_sheet(args, store: StudentStore) -> int:
    student = _require_student(store, args.student_id)
    output = args.output or default_output_dir(store.data_dir) / f"{student.id}_grades.csv"
    path = export_grade_sheet(student, output)
    print(f"✅ Grade sheet saved: {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="transcripts", description="Manage student records and academic transcripts")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory holding the student collection")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    templates = [template.value for template in Template]
    genders = [gender.value for gender in Gender]
    score_fields = [field.value for field in ScoreField]
    conduct_fields = [ScoreField.SEMESTER1.value, ScoreField.SEMESTER2.value, ScoreField.YEAR_AVG.value]

    add = subparsers.add_parser("add", help="Add a student")
    add.add_argument("--name", required=True, help="Full name (First Middle Last)")
    add.add_argument("--gender", required=True, choices=genders)
    add.add_argument("--age", required=True)
    add.add_argument("--template", default=Template.G9_G12.value, choices=templates)
    add.set_defaults(func=cmd_add)

    edit = subparsers.add_parser("edit", help="Edit a student's profile")
    edit.add_argument("student_id")
    edit.add_argument("--name")
    edit.add_argument("--gender", choices=genders)
    edit.add_argument("--age")
    edit.add_argument("--template", choices=templates)
    edit.set_defaults(func=cmd_edit)

    list_parser = subparsers.add_parser("list", help="List students")
    list_parser.add_argument("--search", default="", help="Name contains (case-insensitive)")
    list_parser.add_argument("--age", default="all")
    list_parser.add_argument("--gender", default="all", choices=["all"] + genders)
    list_parser.add_argument("--template", default="all", choices=["all"] + templates)
    list_parser.set_defaults(func=cmd_list)

    show = subparsers.add_parser("show", help="Show a student's transcript")
    show.add_argument("student_id")
    show.set_defaults(func=cmd_show)

    score = subparsers.add_parser("score", help="Set one score")
    score.add_argument("student_id")
    score.add_argument("subject", help="Subject name or index")
    score.add_argument("grade_level", choices=GRADE_LEVEL_LABELS)
    score.add_argument("field", choices=score_fields)
    score.add_argument("value")
    score.set_defaults(func=cmd_score)

    conduct = subparsers.add_parser("conduct", help="Set one conduct grade")
    conduct.add_argument("student_id")
    conduct.add_argument("grade_level", choices=GRADE_LEVEL_LABELS)
    conduct.add_argument("field", choices=conduct_fields)
    conduct.add_argument("grade", choices=[grade.value for grade in ConductGrade])
    conduct.set_defaults(func=cmd_conduct)

    override = subparsers.add_parser("override", help="Override a column total or average")
    override.add_argument("student_id")
    override.add_argument("grade_level", choices=GRADE_LEVEL_LABELS)
    override.add_argument("field", choices=list(OVERRIDE_FIELDS))
    override.add_argument("value", nargs="?")
    override.add_argument("--clear", action="store_true", help="Remove the override")
    override.set_defaults(func=cmd_override)

    delete = subparsers.add_parser("delete", help="Delete a student")
    delete.add_argument("student_id")
    delete.set_defaults(func=cmd_delete)

    clear = subparsers.add_parser("clear", help="Delete all student data")
    clear.add_argument("--yes", action="store_true", help="Confirm")
    clear.set_defaults(func=cmd_clear)

    import_parser = subparsers.add_parser("import", help="Import students from JSON")
    import_parser.add_argument("file")
    import_parser.set_defaults(func=cmd_import)

    dump = subparsers.add_parser("dump", help="Export students as JSON")
    dump.add_argument("--student", help="Export one student by id")
    dump.add_argument("--output", help="Write to a file instead of stdout")
    dump.set_defaults(func=cmd_dump)

    preview = subparsers.add_parser("preview", help="Save the print preview as HTML")
    preview.add_argument("student_id")
    preview.add_argument("--output", type=Path)
    preview.set_defaults(func=cmd_preview)

    export = subparsers.add_parser("export", help="Export one transcript as PDF")
    export.add_argument("student_id")
    export.add_argument("--output", type=Path)
    export.add_argument("--layout", default="document", choices=list(LAYOUTS))
    export.set_defaults(func=cmd_export)

    export_all = subparsers.add_parser("export-all", help="Export every transcript as PDF")
    export_all.add_argument("--output-dir", type=Path)
    export_all.add_argument("--layout", default="document", choices=list(LAYOUTS))
    export_all.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    export_all.set_defaults(func=cmd_export_all)

    grade_sheet = subparsers.add_parser("grade-sheet", help="Save a student's raw scores as CSV")
    grade_sheet.add_argument("student_id")
    grade_sheet.add_argument("--output", type=Path)
    grade_sheet.set_defaults(func=cmd_grade_sheet)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    store = StudentStore(args.data_dir)
    try:
        store.open()
        if store.validation_warnings:
            print(store.generate_validation_report(), file=sys.stderr)
        return args.func(args, store)
    except (TranscriptError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"❌ {e}")
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
