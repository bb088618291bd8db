"""
End-to-end workflow tests

Create a student, enter grades through an editing session, save, reopen the
store, and render both transcript layouts from the reloaded record.
"""

import json
from unittest.mock import patch

import pytest

from academic_transcripts import (
    GradeEditingSession,
    ImportValidationError,
    StudentStore,
    build_student,
)
from academic_transcripts.exporter import TranscriptExporter
from academic_transcripts.transcript_assembler import assemble


@pytest.fixture
def populated_store(tmp_path):
    """Store holding one G11-G12 student with grades entered and saved"""
    student = build_student("sara tesfaye bekele", "Female", 17, "G11-G12", current_year=2026)

    with StudentStore(tmp_path / "data") as store:
        store.save_student(student)

        session = GradeEditingSession(store.get_student(student.id), store)
        session.update_score(0, "G11", "semester1", "88")
        session.update_score(0, "G11", "semester2", "92")
        session.update_score(2, "G11", "semester1", "76.5")
        session.update_score(2, "G12", "semester1", "150")
        session.update_conduct("G12", "semester1", "B")
        session.set_total_override("G12", "semester1-avg", "99")
        session.save(persist_overrides=True)

    return tmp_path / "data", student.id


class TestWorkflow:
    """Full create -> edit -> save -> reload -> render workflow"""

    def test_reloaded_student(self, populated_store):
        data_dir, student_id = populated_store
        with StudentStore(data_dir) as store:
            student = store.get_student(student_id)

        assert student.name == "Sara Tesfaye Bekele"
        assert student.academic_years == "2025-2026"
        assert student.grades[0].grades["G11"].year_avg == 90
        assert student.grades[2].grades["G12"].semester1 == 100
        assert student.conduct["G12"].semester1 == "B"
        assert student.totals_overrides == {"G12-semester1-avg": 99.0}

    def test_transcript_figures(self, populated_store):
        data_dir, student_id = populated_store
        with StudentStore(data_dir) as store:
            view = assemble(store.get_student(student_id))

        assert view.grade_levels == ["G11", "G12"]

        g11 = view.section("G11")
        assert g11.subject_count == 2
        assert g11.totals.semester1 == "164.5"
        assert g11.averages.year_avg == "83.3"
        assert g11.promotion_note == "PROMOTED TO G12"

        g12 = view.section("G12")
        assert g12.averages.semester1 == "99.0"
        assert g12.conduct.semester1 == "B"

        # (90 + 76.5 + 100) / 3 = 88.83
        assert view.summary.overall_average == 89
        assert view.summary.academic_status == "Good"

    def test_both_layouts_render(self, populated_store, tmp_path):
        data_dir, student_id = populated_store
        with StudentStore(data_dir) as store:
            student = store.get_student(student_id)

        exporter = TranscriptExporter(output_dir=tmp_path / "out")
        preview_path = exporter.write_preview(student)
        with patch.object(TranscriptExporter, "_write_pdf") as write_pdf:
            pdf_path = exporter.export_pdf(student)

        preview_html = preview_path.read_text(encoding="utf-8")
        document_html = write_pdf.call_args.args[0]

        for figure in ["164.5", "83.3", "99.0", "76.5"]:
            assert figure in preview_html
            assert figure in document_html
        assert pdf_path.name == "Sara_Tesfaye_Bekele_G11-G12.pdf"

    def test_failed_import_keeps_saved_work(self, populated_store):
        data_dir, student_id = populated_store
        with StudentStore(data_dir) as store:
            before = store.path.read_text(encoding="utf-8")
            document = json.loads(store.export_json(student_id))
            document["student"]["age"] = "seventeen"

            with pytest.raises(ImportValidationError):
                store.import_json(json.dumps(document))

            assert store.path.read_text(encoding="utf-8") == before
