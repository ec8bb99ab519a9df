"""Render the report dashboard to PDF with PyMuPDF."""

import io
import logging
import re
from pathlib import Path
from typing import Any, Dict

import fitz  # PyMuPDF
from jinja2 import Environment, FileSystemLoader, select_autoescape

from inquiry_eval.tools.report_evaluation.aggregation import (
    aggregate, category_chart_series, item_chart_series
)
from inquiry_eval.tools.report_evaluation.models import EvaluationResult
from inquiry_eval.tools.report_evaluation.rubric import DEFAULT_RUBRIC, Rubric

LOG = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
PAGE_MARGIN = 36  # points

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def report_context(result: EvaluationResult, rubric: Rubric = DEFAULT_RUBRIC) -> Dict[str, Any]:
    """Template variables shared by the web dashboard and the PDF."""
    summary = aggregate(result, rubric, short_labels=True)
    return {
        'result': result,
        'summary': summary,
        'category_chart': category_chart_series(summary),
        'item_charts': [item_chart_series(c) for c in summary.categories],
    }


def pdf_filename(result: EvaluationResult) -> str:
    """Download name for the exported report."""
    name = re.sub(r'[\\/:*?"<>|]+', '_', result.student_name).strip() or "학생"
    return f"{name}_탐구역량_보고서.pdf"


def render_report_html(result: EvaluationResult, rubric: Rubric = DEFAULT_RUBRIC) -> str:
    return _env.get_template("report_pdf.html").render(**report_context(result, rubric))


def export_pdf(result: EvaluationResult, rubric: Rubric = DEFAULT_RUBRIC) -> bytes:
    """
    Lay the report out on as many A4 pages as it needs.

    Returns:
        The PDF document as bytes
    """
    html = render_report_html(result, rubric)
    buffer = io.BytesIO()
    writer = fitz.DocumentWriter(buffer)
    story = fitz.Story(html=html)
    mediabox = fitz.paper_rect("a4")
    where = mediabox + (PAGE_MARGIN, PAGE_MARGIN, -PAGE_MARGIN, -PAGE_MARGIN)

    pages = 0
    more = True
    while more:
        device = writer.begin_page(mediabox)
        more, _ = story.place(where)
        story.draw(device)
        writer.end_page()
        pages += 1
    writer.close()

    LOG.info("Exported report for %s (%d pages)", result.student_name, pages)
    return buffer.getvalue()
