"""Copy-on-write editing of an EvaluationResult.

Each edit returns a new result that shares every untouched field, score
item and list element with the previous one. Score edits outside the
rubric bounds are ignored and return the input unchanged.
"""

import logging
from typing import Any, Optional, Tuple

from .models import EvaluationResult
from .rubric import DEFAULT_RUBRIC, Rubric, category_for_key

LOG = logging.getLogger(__name__)

# wire name -> attribute name
TEXT_FIELDS = {
    'studentName': 'student_name',
    'tagline': 'tagline',
    'coreCompetency': 'core_competency',
    'keyStrengths': 'key_strengths',
    'suggestions': 'suggestions',
}
ACTIVITY_FIELDS = ('title', 'description')
EXAMPLE_FIELDS = ('tag', 'title', 'description')


def coerce_score(value: Any) -> Optional[int]:
    """Return value as an int, or None if it is not an integer.

    Integral strings (form input) are accepted; bools and floats are not.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def with_score(result: EvaluationResult, key: str, value: Any,
               rubric: Rubric = DEFAULT_RUBRIC) -> EvaluationResult:
    """Replace one item's score, keeping its justification.

    Returns ``result`` itself when the value is rejected.
    """
    score = coerce_score(value)
    if score is None or key not in result.scores or category_for_key(key) is None:
        LOG.debug("Ignoring score edit %r=%r", key, value)
        return result
    if score < rubric.min_score_of(key) or score > rubric.max_score_of(key):
        LOG.debug("Ignoring out-of-range score edit %r=%r", key, value)
        return result

    scores = dict(result.scores)
    scores[key] = scores[key].model_copy(update={'score': score})
    return result.model_copy(update={'scores': scores})


def _attribute_for(field: str) -> str:
    if field in TEXT_FIELDS:
        return TEXT_FIELDS[field]
    if field in TEXT_FIELDS.values():
        return field
    raise ValueError(f"Unknown text field: {field}")


def with_text_field(result: EvaluationResult, field: str, text: str) -> EvaluationResult:
    """Replace one scalar text field (wire or attribute name)."""
    return result.model_copy(update={_attribute_for(field): text})


def _replace_element(elements: Tuple[Any, ...], index: int, field: str, value: str,
                     allowed: Tuple[str, ...]) -> Tuple[Any, ...]:
    if field not in allowed:
        raise ValueError(f"Unknown field {field!r}; expected one of {allowed}")
    if not 0 <= index < len(elements):
        raise IndexError(f"Index {index} out of range for {len(elements)} elements")
    updated = list(elements)
    updated[index] = elements[index].model_copy(update={field: value})
    return tuple(updated)


def with_activity_field(result: EvaluationResult, index: int, field: str, value: str) -> EvaluationResult:
    activities = _replace_element(result.representative_activities, index, field, value, ACTIVITY_FIELDS)
    return result.model_copy(update={'representative_activities': activities})


def with_excellent_example_field(result: EvaluationResult, index: int, field: str, value: str) -> EvaluationResult:
    examples = _replace_element(result.inquiry_excellent_examples, index, field, value, EXAMPLE_FIELDS)
    return result.model_copy(update={'inquiry_excellent_examples': examples})


def with_improvement_example_field(result: EvaluationResult, field: str, value: str) -> EvaluationResult:
    if field not in EXAMPLE_FIELDS:
        raise ValueError(f"Unknown field {field!r}; expected one of {EXAMPLE_FIELDS}")
    example = result.inquiry_improvement_example.model_copy(update={field: value})
    return result.model_copy(update={'inquiry_improvement_example': example})


class ReportEditor:
    """Holds the evaluation being edited.

    The original result is never modified; ``commit`` hands back the edited
    snapshot.
    """

    def __init__(self, original: EvaluationResult, rubric: Rubric = DEFAULT_RUBRIC):
        self.original = original
        self.rubric = rubric
        self.current = original

    @property
    def is_modified(self) -> bool:
        return self.current is not self.original

    def set_score(self, key: str, value: Any) -> EvaluationResult:
        self.current = with_score(self.current, key, value, self.rubric)
        return self.current

    def set_text_field(self, field: str, text: str) -> EvaluationResult:
        self.current = with_text_field(self.current, field, text)
        return self.current

    def set_activity_field(self, index: int, field: str, value: str) -> EvaluationResult:
        self.current = with_activity_field(self.current, index, field, value)
        return self.current

    def set_excellent_example_field(self, index: int, field: str, value: str) -> EvaluationResult:
        self.current = with_excellent_example_field(self.current, index, field, value)
        return self.current

    def set_improvement_example_field(self, field: str, value: str) -> EvaluationResult:
        self.current = with_improvement_example_field(self.current, field, value)
        return self.current

    def commit(self) -> EvaluationResult:
        """Return the edited snapshot."""
        LOG.info("Committing edits for %s (modified=%s)", self.current.student_name, self.is_modified)
        return self.current
