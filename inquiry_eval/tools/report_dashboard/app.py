"""Flask web application for the report dashboard."""

import io
import logging

from flask import Flask, jsonify, render_template, request, send_file
from flask_cors import CORS

from inquiry_eval.tools.report_evaluation.aggregation import aggregate, build_dashboard_data
from inquiry_eval.tools.report_evaluation.errors import EvaluationError, InputValidationError
from inquiry_eval.tools.report_evaluation.rubric import MIN_SCORE
from .pdf_export import export_pdf as render_pdf, pdf_filename, report_context
from .session import ReportSession, SessionStateError, View

LOG = logging.getLogger(__name__)

# (wire name, attribute, label, multiline) for the editor form
EDITABLE_TEXT_FIELDS = (
    ('studentName', 'student_name', '학생 이름', False),
    ('tagline', 'tagline', '한 줄 요약', False),
    ('coreCompetency', 'core_competency', '[핵심 역량]', True),
    ('keyStrengths', 'key_strengths', '[주요 강점]', True),
    ('suggestions', 'suggestions', '[보완점 및 제언]', True),
)

app = Flask(__name__)
CORS(app)

# Global session instance
report_session: ReportSession = None


def create_app(session: ReportSession):
    """
    Create and configure the Flask app.

    Args:
        session: ReportSession instance
    """
    global report_session
    report_session = session

    LOG.info("Flask app created and configured")
    return app


def run_server(host: str = '127.0.0.1', port: int = 5000, debug: bool = False):
    """Run the Flask development server."""
    app.run(host=host, port=port, debug=debug)


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


def _report_payload():
    result = report_session.require_result()
    return {
        'success': True,
        'view': report_session.view.value,
        'report': result.to_wire_dict(),
        'dashboard': build_dashboard_data(result, report_session.rubric),
    }


def _editor_payload(editor):
    return {
        'success': True,
        'view': report_session.view.value,
        'modified': editor.is_modified,
        'report': editor.current.to_wire_dict(),
        'summary': aggregate(editor.current, report_session.rubric).to_dict(),
    }


def _json_value(field: str):
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return None
    return body.get(field)


@app.errorhandler(SessionStateError)
def handle_missing_state(error):
    """State transitions without an evaluation or open editor."""
    return _error(str(error), 409)


@app.route('/')
def index():
    """Serve the dashboard page for the current view."""
    result = report_session.result
    # The editor form shows the snapshot being edited
    if report_session.view is View.EDITOR and report_session.editor is not None:
        result = report_session.editor.current
    context = {
        'view': report_session.view.value,
        'report_text': report_session.report_text,
        'error': report_session.error,
        'result': result,
        'detailed': report_session.view is View.EVALUATOR,
        'min_score': MIN_SCORE,
        'text_fields': EDITABLE_TEXT_FIELDS,
    }
    if result is not None:
        context.update(report_context(result, report_session.rubric))
    return render_template('index.html', **context)


@app.route('/api/analyze', methods=['POST'])
def analyze():
    """Evaluate the posted report text."""
    report_text = str(_json_value('report_text') or '')
    try:
        report_session.analyze(report_text)
    except InputValidationError as e:
        return _error(str(e), 400)
    except EvaluationError as e:
        return _error(str(e), 502)
    return jsonify(_report_payload())


@app.route('/api/report', methods=['GET'])
def get_report():
    """Get the current evaluation with chart data."""
    return jsonify(_report_payload())


@app.route('/api/report/evaluator', methods=['GET'])
def get_evaluator_report():
    """Get full labels and justifications grouped by category."""
    result = report_session.require_result()
    summary = aggregate(result, report_session.rubric)
    return jsonify({
        'success': True,
        'view': report_session.view.value,
        'categories': [c.to_dict() for c in summary.categories],
    })


@app.route('/api/editor/start', methods=['POST'])
def start_editor():
    editor = report_session.start_editing()
    return jsonify(_editor_payload(editor))


@app.route('/api/editor/scores/<key>', methods=['PUT'])
def update_score(key: str):
    """Set one score. Values outside the item's range are ignored."""
    editor = report_session.require_editor()
    editor.set_score(key, _json_value('value'))
    return jsonify(_editor_payload(editor))


@app.route('/api/editor/fields/<field>', methods=['PUT'])
def update_text_field(field: str):
    editor = report_session.require_editor()
    try:
        editor.set_text_field(field, str(_json_value('value') or ''))
    except ValueError as e:
        return _error(str(e), 400)
    return jsonify(_editor_payload(editor))


@app.route('/api/editor/activities/<int:index>', methods=['PUT'])
def update_activity(index: int):
    editor = report_session.require_editor()
    try:
        editor.set_activity_field(index, _json_value('field'), str(_json_value('value') or ''))
    except IndexError as e:
        return _error(str(e), 404)
    except ValueError as e:
        return _error(str(e), 400)
    return jsonify(_editor_payload(editor))


@app.route('/api/editor/excellent-examples/<int:index>', methods=['PUT'])
def update_excellent_example(index: int):
    editor = report_session.require_editor()
    try:
        editor.set_excellent_example_field(index, _json_value('field'), str(_json_value('value') or ''))
    except IndexError as e:
        return _error(str(e), 404)
    except ValueError as e:
        return _error(str(e), 400)
    return jsonify(_editor_payload(editor))


@app.route('/api/editor/improvement-example', methods=['PUT'])
def update_improvement_example():
    editor = report_session.require_editor()
    try:
        editor.set_improvement_example_field(_json_value('field'), str(_json_value('value') or ''))
    except ValueError as e:
        return _error(str(e), 400)
    return jsonify(_editor_payload(editor))


@app.route('/api/editor/commit', methods=['POST'])
def commit_editor():
    """Save edits and return to the report view."""
    report_session.save_edits()
    return jsonify(_report_payload())


@app.route('/api/reset', methods=['POST'])
def reset():
    """Start a new analysis."""
    report_session.reset()
    return jsonify({'success': True, 'view': report_session.view.value})


@app.route('/api/export/pdf', methods=['GET'])
def export_pdf():
    """Download the current report as PDF."""
    result = report_session.require_result()
    pdf_bytes = render_pdf(result, report_session.rubric)
    return send_file(
        io.BytesIO(pdf_bytes),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=pdf_filename(result),
    )


@app.route('/api/view/<name>', methods=['POST'])
def change_view(name: str):
    """Switch between the report and evaluator views."""
    if name == View.REPORT.value:
        report_session.back_to_report()
    elif name == View.EVALUATOR.value:
        report_session.show_evaluator()
    else:
        return _error(f"Unknown view: {name}", 404)
    return jsonify({'success': True, 'view': report_session.view.value})
