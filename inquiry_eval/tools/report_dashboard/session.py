"""In-memory state behind the report dashboard."""

import logging
from enum import Enum
from typing import Optional

from inquiry_eval.tools.report_evaluation.errors import EvaluationError, InputValidationError
from inquiry_eval.tools.report_evaluation.editor import ReportEditor
from inquiry_eval.tools.report_evaluation.evaluator import ReportEvaluator
from inquiry_eval.tools.report_evaluation.models import EvaluationResult

LOG = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "알 수 없는 오류가 발생했습니다."


class SessionStateError(RuntimeError):
    """An action needs an evaluation or an open editor that is not there."""


class View(str, Enum):
    INPUT = "input"
    LOADING = "loading"
    REPORT = "report"
    EVALUATOR = "evaluator"
    EDITOR = "editor"


class ReportSession:
    """Holds the report text, the current evaluation and the active view.

    A failed analysis returns to the input view and leaves any previously
    received evaluation in place.
    """

    def __init__(self, evaluator: ReportEvaluator):
        self.evaluator = evaluator
        self.rubric = evaluator.rubric
        self.report_text = ""
        self.result: Optional[EvaluationResult] = None
        self.error: Optional[str] = None
        self.view = View.INPUT
        self.editor: Optional[ReportEditor] = None

    @property
    def is_loading(self) -> bool:
        return self.view is View.LOADING

    def analyze(self, report_text: str) -> EvaluationResult:
        """
        Run one evaluation of the given report text.

        Raises:
            EvaluationError: The failure is also recorded in ``error``
        """
        self.report_text = report_text
        if not report_text.strip():
            self.error = "학생부 내용을 입력해주세요."
            self.view = View.INPUT
            raise InputValidationError(self.error)

        self.error = None
        self.view = View.LOADING
        try:
            result = self.evaluator.evaluate(report_text)
        except EvaluationError as e:
            LOG.warning("Analysis failed: %s", e)
            self.error = str(e) or UNKNOWN_ERROR_MESSAGE
            self.view = View.INPUT
            raise

        self.result = result
        self.editor = None
        self.view = View.REPORT
        return result

    def reset(self) -> None:
        """Discard the evaluation and return to an empty input view."""
        self.result = None
        self.report_text = ""
        self.error = None
        self.editor = None
        self.view = View.INPUT

    def require_result(self) -> EvaluationResult:
        if self.result is None:
            raise SessionStateError("No evaluation available")
        return self.result

    def show_evaluator(self) -> EvaluationResult:
        result = self.require_result()
        self.view = View.EVALUATOR
        return result

    def back_to_report(self) -> EvaluationResult:
        result = self.require_result()
        self.editor = None
        self.view = View.REPORT
        return result

    def start_editing(self) -> ReportEditor:
        result = self.require_result()
        if self.editor is None or self.view is not View.EDITOR:
            self.editor = ReportEditor(result, self.rubric)
        self.view = View.EDITOR
        return self.editor

    def require_editor(self) -> ReportEditor:
        if self.editor is None or self.view is not View.EDITOR:
            raise SessionStateError("Editor is not open")
        return self.editor

    def save_edits(self) -> EvaluationResult:
        """Replace the evaluation with the edited snapshot and show the report."""
        editor = self.require_editor()
        self.result = editor.commit()
        self.editor = None
        self.view = View.REPORT
        return self.result
