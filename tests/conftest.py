"""Shared fixtures: evaluation payloads shaped like the LLM response."""

import copy
import json

import pytest

from inquiry_eval.tools.report_evaluation.models import EvaluationResult
from inquiry_eval.tools.report_evaluation.rubric import DEFAULT_RUBRIC


def build_payload(score_for=None):
    """Build a wire-format evaluation covering every rubric key.

    Args:
        score_for: Callable taking a RubricItem and returning its score
            (defaults to the item's maximum)
    """
    score_for = score_for or (lambda item: item.max_score)
    return {
        "scores": {
            item.key: {
                "score": score_for(item),
                "justification": f"{item.label} 항목에 대한 구체적 근거를 제시함.",
            }
            for item in DEFAULT_RUBRIC
        },
        "studentName": "김민준",
        "tagline": "융합적 사고와 실천적 탐구를 통해 스스로 지식을 창출하는 인재",
        "coreCompetency": "교과 지식을 실험으로 검증하는 탐구 역량이 돋보임.",
        "keyStrengths": "자료 분석과 오차 원인 규명에 강점이 있음.",
        "suggestions": "탐구 결과를 타 교과와 연계하는 노력이 필요함.",
        "representativeActivities": [
            {"title": "확률 모형을 활용한 교통 흐름 분석", "description": "신호 주기와 대기열 길이를 모델링함."},
            {"title": "식물 생장 조건 비교 실험", "description": "광량과 수분 조건을 통제하여 비교함."},
        ],
        "inquiryExcellentExamples": [
            {"tag": "2학년 확률과 통계", "title": f"[우수 사례 {i}] 사례 제목 {i}", "description": f"우수 사례 설명 {i}"}
            for i in range(1, 5)
        ],
        "inquiryImprovementExample": {
            "tag": "자율활동",
            "title": "[보완 필요 사례] 결론 도출 과정",
            "description": "결론의 근거 제시가 부족함.",
        },
    }


@pytest.fixture
def max_payload():
    """Every item at its category maximum."""
    return build_payload()


@pytest.fixture
def mixed_payload():
    """A realistic spread of scores."""
    spread = {7: [7, 6, 5, 4, 3], 5: [5, 4, 3]}

    def score_for(item):
        values = spread[item.max_score]
        index = int(item.key[1:].split('_')[0]) - 1
        return values[index % len(values)]

    return build_payload(score_for)


@pytest.fixture
def sample_result(mixed_payload):
    return EvaluationResult.model_validate(mixed_payload)


@pytest.fixture
def payload_text(mixed_payload):
    """The mixed payload as the raw text an LLM would return."""
    return json.dumps(mixed_payload, ensure_ascii=False)


@pytest.fixture
def sample_config():
    return {
        'llm': {
            'provider': 'openai',
            'api_key': 'test-key',
            'model': 'gpt-4.1-mini',
        },
        'evaluation': {
            'temperature': 0.1,
            'strict_scores': False,
        },
    }


@pytest.fixture
def payload_copy():
    """Factory returning deep copies of a payload for mutation in tests."""
    return copy.deepcopy
