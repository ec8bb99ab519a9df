"""Web dashboard, editor and PDF export for report evaluations."""

from .session import ReportSession, SessionStateError, View
from .pdf_export import export_pdf, pdf_filename, render_report_html

__all__ = [
    'ReportSession',
    'SessionStateError',
    'View',
    'export_pdf',
    'pdf_filename',
    'render_report_html',
]
