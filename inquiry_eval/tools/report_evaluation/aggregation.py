"""Category aggregates, score buckets and chart series derived from an evaluation.

Everything here is a pure function of an ``EvaluationResult`` and the rubric:
inputs are never modified and every call returns fresh structures.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Tuple

from .models import EvaluationResult
from .rubric import DEFAULT_RUBRIC, Category, Rubric, category_for_key

UNKNOWN_LABEL = "Unknown"


@dataclass(frozen=True)
class AggregateItem:
    """One scored rubric item inside a category aggregate."""
    id: str
    label: str
    score: int
    justification: str


@dataclass(frozen=True)
class CategoryAggregate:
    """Scores of one category summed against the category maximum."""
    category: Category
    label: str
    items: Tuple[AggregateItem, ...]
    total_score: int
    max_score: int
    average: float

    @property
    def max_item_score(self) -> int:
        return self.category.max_item_score

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['category'] = self.category.value
        data['items'] = [asdict(item) for item in self.items]
        return data


@dataclass(frozen=True)
class EvaluationSummary:
    """All three category aggregates plus grand totals."""
    categories: Tuple[CategoryAggregate, ...]
    total_score: int
    max_score: int
    total_average: float

    def category(self, category: Category) -> CategoryAggregate:
        for aggregate in self.categories:
            if aggregate.category is category:
                return aggregate
        raise KeyError(category)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'categories': [c.to_dict() for c in self.categories],
            'total_score': self.total_score,
            'max_score': self.max_score,
            'total_average': self.total_average,
        }


def percentage(total: int, maximum: int) -> float:
    """Return ``total / maximum * 100``, or 0 when there is no maximum."""
    if maximum <= 0:
        return 0.0
    return total / maximum * 100


def aggregate(result: EvaluationResult,
              rubric: Rubric = DEFAULT_RUBRIC,
              *,
              short_labels: bool = False) -> EvaluationSummary:
    """
    Group scores by category and compute totals and averages.

    Keys are grouped by their first character in the iteration order of
    ``result.scores``; keys with an unknown category prefix are skipped.

    Args:
        result: Evaluation to summarize
        rubric: Rubric supplying labels
        short_labels: Use labels without parenthetical clarifiers (charts)

    Returns:
        EvaluationSummary with categories in A, B, C order
    """
    grouped: Dict[Category, List[AggregateItem]] = {category: [] for category in Category}

    for key, score_item in result.scores.items():
        category = category_for_key(key)
        if category is None:
            continue
        item = rubric.get(key)
        if item is None:
            label = UNKNOWN_LABEL
        else:
            label = item.short_label if short_labels else item.label
        grouped[category].append(AggregateItem(
            id=key,
            label=label,
            score=score_item.score,
            justification=score_item.justification,
        ))

    categories = []
    for category, items in grouped.items():
        total = sum(item.score for item in items)
        maximum = category.max_item_score * len(items)
        categories.append(CategoryAggregate(
            category=category,
            label=category.display_name,
            items=tuple(items),
            total_score=total,
            max_score=maximum,
            average=percentage(total, maximum),
        ))

    grand_total = sum(c.total_score for c in categories)
    grand_max = sum(c.max_score for c in categories)
    return EvaluationSummary(
        categories=tuple(categories),
        total_score=grand_total,
        max_score=grand_max,
        total_average=percentage(grand_total, grand_max),
    )


class ScoreBucket(str, Enum):
    """Performance tier used to pick a shade from a category palette."""
    OUTSTANDING = "outstanding"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    WEAK = "weak"


# Bucket order matches palette order: darkest shade first.
BUCKET_ORDER = (
    ScoreBucket.OUTSTANDING,
    ScoreBucket.EXCELLENT,
    ScoreBucket.GOOD,
    ScoreBucket.FAIR,
    ScoreBucket.WEAK,
)

CATEGORY_PALETTES = {
    Category.A: ('#1e3a8a', '#1d4ed8', '#3b82f6', '#93c5fd', '#dbeafe'),  # blues
    Category.B: ('#9a3412', '#c2410c', '#ea580c', '#f97316', '#fdba74'),  # oranges
    Category.C: ('#4c1d95', '#5b21b6', '#7c3aed', '#a78bfa', '#ddd6fe'),  # purples
}

GAUGE_BACKGROUND = '#e5e7eb'


def bucket_for(score: int, max_score: int) -> ScoreBucket:
    """
    Pick the bucket for a score.

    7-point items use all five buckets. 5-point items only reach
    OUTSTANDING, EXCELLENT and GOOD (a 3 is GOOD, not WEAK).
    """
    if max_score == 7:
        if score >= 7:
            return ScoreBucket.OUTSTANDING
        if score >= 6:
            return ScoreBucket.EXCELLENT
        if score >= 5:
            return ScoreBucket.GOOD
        if score >= 4:
            return ScoreBucket.FAIR
        return ScoreBucket.WEAK
    if score >= 5:
        return ScoreBucket.OUTSTANDING
    if score >= 4:
        return ScoreBucket.EXCELLENT
    return ScoreBucket.GOOD


def color_for(category: Category, score: int) -> str:
    """Palette color for an item score in the given category."""
    bucket = bucket_for(score, category.max_item_score)
    return CATEGORY_PALETTES[category][BUCKET_ORDER.index(bucket)]


def category_color(category: Category) -> str:
    """Representative color of a category (second shade of its palette)."""
    return CATEGORY_PALETTES[category][1]


def category_chart_series(summary: EvaluationSummary) -> List[Dict[str, Any]]:
    """Bar-chart rows comparing category averages on a 0-100 axis."""
    return [
        {
            'category': c.category.value,
            'name': c.label,
            'average': c.average,
            'color': category_color(c.category),
        }
        for c in summary.categories
    ]


def item_chart_series(aggregate_: CategoryAggregate) -> Dict[str, Any]:
    """Horizontal bar chart for the items of one category."""
    max_score = aggregate_.max_item_score
    return {
        'category': aggregate_.category.value,
        'name': aggregate_.label,
        'domain': [1, max_score],
        'ticks': list(range(1, max_score + 1)),
        'scale_label': f"{max_score}점 만점 항목",
        'items': [
            {
                'id': item.id,
                'label': item.label,
                'score': item.score,
                'justification': item.justification,
                'bucket': bucket_for(item.score, max_score).value,
                'color': color_for(aggregate_.category, item.score),
            }
            for item in aggregate_.items
        ],
    }


def gauge_series(summary: EvaluationSummary) -> List[Dict[str, Any]]:
    """Two-slice donut showing the grand average out of 100."""
    return [
        {'value': summary.total_average, 'color': category_color(Category.A)},
        {'value': 100 - summary.total_average, 'color': GAUGE_BACKGROUND},
    ]


def build_dashboard_data(result: EvaluationResult, rubric: Rubric = DEFAULT_RUBRIC) -> Dict[str, Any]:
    """Everything the dashboard charts need, as JSON-ready data."""
    summary = aggregate(result, rubric, short_labels=True)
    return {
        'summary': summary.to_dict(),
        'category_chart': category_chart_series(summary),
        'item_charts': [item_chart_series(c) for c in summary.categories],
        'gauge': gauge_series(summary),
    }
