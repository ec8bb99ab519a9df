"""Tests for the Flask dashboard routes."""

import pytest
from unittest.mock import Mock

from inquiry_eval.tools.report_dashboard.app import create_app
from inquiry_eval.tools.report_dashboard.session import ReportSession, View
from inquiry_eval.tools.report_evaluation.errors import SchemaViolationError
from inquiry_eval.tools.report_evaluation.rubric import DEFAULT_RUBRIC

B_KEY = 'B4_선생님께_질문'


@pytest.fixture
def evaluator(sample_result):
    evaluator = Mock()
    evaluator.rubric = DEFAULT_RUBRIC
    evaluator.evaluate = Mock(return_value=sample_result)
    return evaluator


@pytest.fixture
def session(evaluator):
    return ReportSession(evaluator)


@pytest.fixture
def client(session):
    app = create_app(session)
    app.config['TESTING'] = True
    return app.test_client()


@pytest.fixture
def analyzed(client):
    response = client.post('/api/analyze', json={'report_text': '학생부 내용'})
    assert response.status_code == 200
    return response.get_json()


def test_index_input_view(client):
    response = client.get('/')
    assert response.status_code == 200
    assert '분석 시작' in response.get_data(as_text=True)


def test_index_report_view(client, analyzed):
    html = client.get('/').get_data(as_text=True)
    assert '김민준' in html
    assert 'PDF로 내보내기' in html


def test_analyze(analyzed):
    assert analyzed['success'] is True
    assert analyzed['view'] == 'report'
    assert analyzed['report']['studentName'] == '김민준'
    assert analyzed['dashboard']['summary']['max_score'] == 130
    assert len(analyzed['dashboard']['item_charts']) == 3


def test_analyze_blank(client, evaluator):
    response = client.post('/api/analyze', json={'report_text': '  '})
    assert response.status_code == 400
    assert response.get_json()['error'] == '학생부 내용을 입력해주세요.'
    evaluator.evaluate.assert_not_called()


def test_analyze_failure(client, evaluator):
    evaluator.evaluate.side_effect = SchemaViolationError("Invalid JSON structure received from API.")
    response = client.post('/api/analyze', json={'report_text': '보고서'})
    assert response.status_code == 502
    assert response.get_json()['success'] is False


def test_report_requires_result(client):
    response = client.get('/api/report')
    assert response.status_code == 409


def test_evaluator_view_has_justifications(client, analyzed):
    data = client.get('/api/report/evaluator').get_json()
    first = data['categories'][0]['items'][0]
    assert first['label'] == '탐구과정 증명의 구체성'
    assert first['justification']


def test_change_view(client, session, analyzed):
    assert client.post('/api/view/evaluator').get_json()['view'] == 'evaluator'
    assert session.view is View.EVALUATOR
    assert client.post('/api/view/report').get_json()['view'] == 'report'
    assert client.post('/api/view/editor').status_code == 404


def test_edit_flow(client, session, sample_result, analyzed):
    started = client.post('/api/editor/start').get_json()
    assert started['modified'] is False

    rejected = client.put(f'/api/editor/scores/{B_KEY}', json={'value': 6}).get_json()
    assert rejected['modified'] is False

    accepted = client.put(f'/api/editor/scores/{B_KEY}', json={'value': '3'}).get_json()
    assert accepted['modified'] is True
    assert accepted['report']['scores'][B_KEY]['score'] == 3

    client.put('/api/editor/fields/tagline', json={'value': '새 태그라인'})
    client.put('/api/editor/activities/0', json={'field': 'title', 'value': '새 활동'})
    client.put('/api/editor/excellent-examples/1', json={'field': 'tag', 'value': '자율활동'})
    client.put('/api/editor/improvement-example', json={'field': 'description', 'value': '보완'})

    committed = client.post('/api/editor/commit').get_json()
    assert committed['view'] == 'report'
    report = committed['report']
    assert report['tagline'] == '새 태그라인'
    assert report['representativeActivities'][0]['title'] == '새 활동'
    assert report['inquiryExcellentExamples'][1]['tag'] == '자율활동'
    assert report['inquiryImprovementExample']['description'] == '보완'
    assert session.result is not sample_result
    assert sample_result.tagline != '새 태그라인'


def test_editor_errors(client, analyzed):
    assert client.put(f'/api/editor/scores/{B_KEY}', json={'value': 4}).status_code == 409

    client.post('/api/editor/start')
    assert client.put('/api/editor/fields/scores', json={'value': 'x'}).status_code == 400
    assert client.put('/api/editor/activities/9', json={'field': 'title', 'value': 'x'}).status_code == 404
    assert client.put('/api/editor/activities/0', json={'field': 'tag', 'value': 'x'}).status_code == 400
    assert client.put('/api/editor/improvement-example', json={'field': 'x', 'value': 'y'}).status_code == 400


def test_reset(client, session, analyzed):
    data = client.post('/api/reset').get_json()
    assert data['view'] == 'input'
    assert session.result is None


def test_export_pdf(client, analyzed):
    response = client.get('/api/export/pdf')
    assert response.status_code == 200
    assert response.mimetype == 'application/pdf'
    assert response.data.startswith(b'%PDF')
    assert 'attachment' in response.headers['Content-Disposition']


def test_report_view_offers_editing(client, analyzed):
    html = client.get('/').get_data(as_text=True)
    assert '점수 및 내용 수정하기' in html
    assert '/api/editor/start' in html


def test_editor_view_renders_form(client, analyzed):
    client.post('/api/editor/start')
    html = client.get('/').get_data(as_text=True)

    assert '수정 완료 및 돌아가기' in html
    assert '/api/editor/commit' in html
    # 20 score selects: 3-7 for A and C items, 3-5 for B items
    assert html.count('<select') == 20
    assert html.count('<option') == 15 * 5 + 5 * 3
    # three summary paragraphs, two activities, four excellent cases, one improvement case
    assert html.count('<textarea') == 10
    assert html.count('<input type="text"') == 2 + 2 + 4 * 2 + 2


def test_editor_view_shows_pending_edits(client, session, sample_result, analyzed):
    client.post('/api/editor/start')
    client.put('/api/editor/fields/tagline', json={'value': '수정 중인 태그라인'})

    html = client.get('/').get_data(as_text=True)
    assert 'value="수정 중인 태그라인"' in html
    assert session.result is sample_result

    client.post('/api/editor/commit')
    html = client.get('/').get_data(as_text=True)
    assert '수정 중인 태그라인' in html
    assert '<select' not in html


def test_cancel_editing_returns_to_report(client, session, sample_result, analyzed):
    client.post('/api/editor/start')
    client.put('/api/editor/fields/tagline', json={'value': '버려질 수정'})
    client.post('/api/view/report')

    html = client.get('/').get_data(as_text=True)
    assert '버려질 수정' not in html
    assert session.result is sample_result


def test_non_object_json_body(client, analyzed):
    client.post('/api/editor/start')
    response = client.put(f'/api/editor/scores/{B_KEY}', json=['value'])
    assert response.status_code == 200
    assert response.get_json()['modified'] is False

    response = client.post('/api/analyze', json=['report_text'])
    assert response.status_code == 400
