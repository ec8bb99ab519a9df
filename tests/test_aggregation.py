"""Tests for score aggregation and chart data."""

import pytest

from conftest import build_payload
from inquiry_eval.tools.report_evaluation.aggregation import (
    CATEGORY_PALETTES, GAUGE_BACKGROUND, ScoreBucket, aggregate, bucket_for,
    build_dashboard_data, category_color, color_for, item_chart_series, percentage
)
from inquiry_eval.tools.report_evaluation.models import EvaluationResult, ScoreItem
from inquiry_eval.tools.report_evaluation.rubric import DEFAULT_RUBRIC, Category


def _result(score_for=None):
    return EvaluationResult.model_validate(build_payload(score_for))


class TestAggregate:
    """Test category and grand totals."""

    def test_all_max_scores(self):
        summary = aggregate(_result())
        assert summary.total_score == 130
        assert summary.max_score == 130
        assert summary.total_average == pytest.approx(100.0)
        a = summary.category(Category.A)
        assert (a.total_score, a.max_score) == (63, 63)
        b = summary.category(Category.B)
        assert (b.total_score, b.max_score) == (25, 25)
        c = summary.category(Category.C)
        assert (c.total_score, c.max_score) == (42, 42)

    def test_all_min_scores(self):
        summary = aggregate(_result(lambda item: 3))
        assert summary.total_score == 60
        assert summary.max_score == 130
        assert summary.total_average == pytest.approx(46.15, abs=0.01)
        assert summary.category(Category.B).average == pytest.approx(60.0)

    def test_categories_in_order(self, sample_result):
        summary = aggregate(sample_result)
        assert [c.category for c in summary.categories] == [Category.A, Category.B, Category.C]
        assert [c.label for c in summary.categories] == ["탐구력", "자기주도성", "창의적 문제해결"]

    def test_items_follow_scores_order(self, sample_result):
        a = aggregate(sample_result).category(Category.A)
        assert [item.id for item in a.items] == list(DEFAULT_RUBRIC.all_keys()[:9])

    def test_labels(self, sample_result):
        a = aggregate(sample_result).category(Category.A)
        assert a.items[0].label == '탐구과정 증명의 구체성'
        assert a.items[0].justification.startswith('탐구과정 증명의 구체성')

    def test_idempotent_and_pure(self, sample_result):
        before = sample_result.model_dump()
        first = aggregate(sample_result)
        second = aggregate(sample_result)
        assert first == second
        assert first is not second
        assert sample_result.model_dump() == before

    def test_unknown_prefix_skipped(self, mixed_payload):
        mixed_payload['scores']['Z1_bogus'] = {'score': 7, 'justification': 'x'}
        summary = aggregate(EvaluationResult.model_validate(mixed_payload))
        assert summary.max_score == 130
        assert all(item.id != 'Z1_bogus' for c in summary.categories for item in c.items)

    def test_unlisted_key_with_known_prefix(self, mixed_payload):
        mixed_payload['scores']['B6_extra'] = {'score': 4, 'justification': 'x'}
        b = aggregate(EvaluationResult.model_validate(mixed_payload)).category(Category.B)
        assert b.max_score == 30
        assert b.items[-1].label == "Unknown"

    def test_missing_keys_shrink_maximum(self, sample_result):
        scores = {k: v for k, v in sample_result.scores.items() if not k.startswith('B')}
        summary = aggregate(sample_result.model_copy(update={'scores': scores}))
        b = summary.category(Category.B)
        assert b.items == ()
        assert b.max_score == 0
        assert b.average == 0.0
        assert summary.max_score == 105

    def test_to_dict(self, sample_result):
        data = aggregate(sample_result).to_dict()
        assert data['categories'][1]['category'] == 'B'
        assert data['categories'][1]['items'][0]['id'] == 'B1_칭찬_남발_배제'
        assert data['max_score'] == 130


def test_percentage():
    assert percentage(0, 0) == 0.0
    assert percentage(60, 130) == pytest.approx(46.153846)
    assert percentage(25, 25) == 100.0


class TestBuckets:
    """Test bucket and color selection."""

    @pytest.mark.parametrize("score,bucket", [
        (7, ScoreBucket.OUTSTANDING),
        (6, ScoreBucket.EXCELLENT),
        (5, ScoreBucket.GOOD),
        (4, ScoreBucket.FAIR),
        (3, ScoreBucket.WEAK),
    ])
    def test_seven_point_items(self, score, bucket):
        assert bucket_for(score, 7) is bucket

    @pytest.mark.parametrize("score,bucket", [
        (5, ScoreBucket.OUTSTANDING),
        (4, ScoreBucket.EXCELLENT),
        (3, ScoreBucket.GOOD),
    ])
    def test_five_point_items(self, score, bucket):
        assert bucket_for(score, 5) is bucket

    def test_colors(self):
        assert color_for(Category.A, 7) == '#1e3a8a'
        assert color_for(Category.A, 3) == '#dbeafe'
        assert color_for(Category.B, 5) == '#9a3412'
        assert color_for(Category.B, 3) == '#ea580c'
        assert color_for(Category.C, 6) == '#5b21b6'

    def test_category_color_is_second_shade(self):
        for category, palette in CATEGORY_PALETTES.items():
            assert category_color(category) == palette[1]


class TestChartSeries:
    """Test chart data for the dashboard."""

    def test_item_chart_for_five_point_category(self, sample_result):
        chart = item_chart_series(aggregate(sample_result).category(Category.B))
        assert chart['domain'] == [1, 5]
        assert chart['ticks'] == [1, 2, 3, 4, 5]
        assert chart['scale_label'] == "5점 만점 항목"
        assert len(chart['items']) == 5
        assert chart['items'][0]['bucket'] == 'outstanding'

    def test_item_chart_for_seven_point_category(self, sample_result):
        chart = item_chart_series(aggregate(sample_result).category(Category.C))
        assert chart['domain'] == [1, 7]
        assert chart['scale_label'] == "7점 만점 항목"

    def test_dashboard_data(self):
        data = build_dashboard_data(_result(lambda item: 3))
        assert [row['category'] for row in data['category_chart']] == ['A', 'B', 'C']
        assert len(data['item_charts']) == 3
        gauge = data['gauge']
        assert gauge[0]['value'] == pytest.approx(46.15, abs=0.01)
        assert gauge[0]['value'] + gauge[1]['value'] == pytest.approx(100.0)
        assert gauge[1]['color'] == GAUGE_BACKGROUND

    def test_dashboard_data_reflects_new_scores(self, sample_result):
        scores = dict(sample_result.scores)
        scores['A1_구체적_증명'] = ScoreItem(score=3, justification='x')
        edited = sample_result.model_copy(update={'scores': scores})
        before = build_dashboard_data(sample_result)['summary']['total_score']
        after = build_dashboard_data(edited)['summary']['total_score']
        assert before - after == sample_result.scores['A1_구체적_증명'].score - 3
