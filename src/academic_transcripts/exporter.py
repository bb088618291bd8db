#!/usr/bin/env python3
"""
TRANSCRIPT EXPORTER - HTML print preview and PDF document export
Render assembled transcripts with Jinja2 and convert them to PDF

GENERATION PROCESS:
1. Assemble the student's TranscriptView
2. Render HTML from a template (print preview or export document)
3. Convert HTML to PDF using WeasyPrint with the matching stylesheet
4. Save to the output directory

LAYOUTS:
✅ preview: Landscape print page, all grade levels side by side (SEM1/SEM2/YR AVG)
✅ document: Student information table, one table per grade level,
   totals/averages/conduct rows, academic summary, document id footer

Both layouts render the same TranscriptView, so figures always match.

Dependencies: Jinja2, WeasyPrint, tqdm, transcript_assembler
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from tqdm import tqdm

from .config import TEMPLATES_DIR, default_output_dir
from .data_models import Student
from .errors import ExportError
from .transcript_assembler import TranscriptView, assemble

logger = logging.getLogger(__name__)

LAYOUTS = {
    "preview": ("transcript_preview.html", "styles_preview.css"),
    "document": ("transcript_document.html", "styles_document.css"),
}


@dataclass
class ExportResult:
    student_id: str
    student_name: str
    success: bool
    pdf_path: Optional[Path]
    error: Optional[str]


def export_filename(student: Student, suffix: str = ".pdf") -> str:
    """'Abebe_Kebede_Alemu_G9-G12.pdf' - non-alphanumerics in the name become '_'"""
    safe_name = re.sub(r"[^a-zA-Z0-9]", "_", student.name)
    return f"{safe_name}_{student.template}{suffix}"


class TranscriptExporter:
    """Render transcripts to HTML and PDF"""

    def __init__(self, output_dir: Optional[Path] = None, templates_dir: Optional[Path] = None):
        """
        Initialize exporter

        Args:
            output_dir: Where exported files go (default from config)
            templates_dir: Jinja2 templates and stylesheets (default: package templates)
        """
        self.output_dir = Path(output_dir) if output_dir is not None else default_output_dir()
        self.templates_dir = Path(templates_dir) if templates_dir is not None else TEMPLATES_DIR

        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )

        logger.debug(f"Transcript exporter initialized (templates: {self.templates_dir}, output: {self.output_dir})")

    def render_html(self, view: TranscriptView, layout: str = "document", generated_on: Optional[datetime] = None) -> str:
        """Render a TranscriptView with the given layout"""
        if layout not in LAYOUTS:
            raise ValueError(f"Unknown layout {layout!r}; expected one of {list(LAYOUTS)}")

        template_name, _ = LAYOUTS[layout]
        generated_on = generated_on or datetime.now()

        template = self.env.get_template(template_name)
        return template.render(
            view=view,
            header=view.header,
            summary=view.summary,
            generated_on=generated_on.strftime("%B %d, %Y"),
        )

    def render_preview_html(self, view: TranscriptView, generated_on: Optional[datetime] = None) -> str:
        return self.render_html(view, "preview", generated_on)

    def render_document_html(self, view: TranscriptView, generated_on: Optional[datetime] = None) -> str:
        return self.render_html(view, "document", generated_on)

    def stylesheet_path(self, layout: str) -> Path:
        return self.templates_dir / LAYOUTS[layout][1]

    def write_preview(self, student: Student, output_path: Optional[Path] = None, view: Optional[TranscriptView] = None) -> Path:
        """
        Save the print preview as a standalone HTML file (stylesheet inlined)

        Raises:
            ExportError: File could not be written
        """
        view = view or assemble(student)
        html_content = self.render_preview_html(view)

        css_path = self.stylesheet_path("preview")
        if css_path.exists():
            css = css_path.read_text(encoding="utf-8")
            html_content = html_content.replace("</head>", f"<style>\n{css}\n</style>\n</head>", 1)

        if output_path is None:
            output_path = self.output_dir / export_filename(student, ".html")
        output_path = Path(output_path)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(html_content, encoding="utf-8")
        except OSError as e:
            logger.error(f"❌ Failed to write preview for {student.name}: {e}")
            raise ExportError(f"Failed to write preview: {e}") from e

        logger.info(f"✅ Preview saved: {output_path}")
        return output_path

    def export_pdf(
        self,
        student: Student,
        output_path: Optional[Path] = None,
        layout: str = "document",
        view: Optional[TranscriptView] = None,
    ) -> Path:
        """
        Generate a transcript PDF for one student

        Args:
            student: Student record
            output_path: Target file (default: output_dir / export_filename)
            layout: "document" or "preview"
            view: Already-assembled view (e.g. with session overrides)

        Returns:
            Path to generated PDF file

        Raises:
            ExportError: Rendering or writing failed
        """
        logger.info(f"📄 Exporting transcript for {student.name}")

        view = view or assemble(student)

        if output_path is None:
            output_path = self.output_dir / export_filename(student)
        output_path = Path(output_path)

        try:
            html_content = self.render_html(view, layout)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            self._write_pdf(html_content, output_path, self.stylesheet_path(layout))
        except ExportError:
            raise
        except Exception as e:
            logger.error(f"❌ Error exporting transcript for {student.name}: {e}")
            raise ExportError(f"Failed to export transcript: {e}") from e

        logger.info(f"✅ Transcript exported: {output_path}")
        return output_path

    def _write_pdf(self, html_content: str, output_path: Path, css_path: Path) -> None:
        """Generate PDF using WeasyPrint"""
        from weasyprint import CSS, HTML

        document = HTML(string=html_content, base_url=str(self.templates_dir))
        if css_path.exists():
            document.write_pdf(output_path, stylesheets=[CSS(filename=str(css_path))])
        else:
            logger.warning(f"CSS file not found: {css_path}, generating without stylesheet")
            document.write_pdf(output_path)

    def export_batch(
        self,
        students: List[Student],
        output_dir: Optional[Path] = None,
        layout: str = "document",
        progress: bool = True,
    ) -> List[ExportResult]:
        """
        Export every student; one failure does not stop the batch

        Returns:
            One ExportResult per student, in input order
        """
        target_dir = Path(output_dir) if output_dir is not None else self.output_dir
        logger.info(f"🎓 Starting batch export of {len(students)} transcript(s)")

        iterator = tqdm(students, desc="Exporting", unit="transcript") if progress else students

        results = []
        for student in iterator:
            try:
                path = self.export_pdf(student, target_dir / export_filename(student), layout)
                results.append(ExportResult(student.id, student.name, True, path, None))
            except ExportError as e:
                results.append(ExportResult(student.id, student.name, False, None, str(e)))

        failures = [result for result in results if not result.success]
        logger.info(f"✅ Batch export complete")
        logger.info(f"   Successfully exported: {len(results) - len(failures)}")
        logger.info(f"   Errors: {len(failures)}")
        for result in failures:
            logger.warning(f"   {result.student_name}: {result.error}")

        return results
