"""Pydantic models for the evaluation returned by the LLM."""

from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _FrozenModel(BaseModel):
    """Immutable model serialized with camelCase keys on the wire."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class ScoreItem(_FrozenModel):
    """Score and justification for one rubric item."""
    score: int = Field(description="Score between 3 and the item's maximum (5 or 7)")
    justification: str = Field(description="Evidence-based justification for the score")


class RepresentativeActivity(_FrozenModel):
    """A representative inquiry activity extracted from the report."""
    title: str
    description: str


class InquiryExample(_FrozenModel):
    """An excellent or needs-improvement inquiry case."""
    tag: str = Field(description="Subject or activity context, e.g. '2학년 확률과 통계'")
    title: str
    description: str


class EvaluationResult(_FrozenModel):
    """Complete evaluation of one student report.

    Instances are never mutated; edits produce new instances that share
    every untouched field (see ``editor``).
    """
    scores: Dict[str, ScoreItem] = Field(description="Scores keyed by rubric item key")
    student_name: str = Field(default="학생", description="Student name found in the report")
    tagline: str = Field(description="Short tagline summarizing the learner")
    core_competency: str = Field(description="[핵심 역량] paragraph")
    key_strengths: str = Field(default="", description="[주요 강점] paragraph")
    suggestions: str = Field(default="", description="[보완점 및 제언] paragraph")
    representative_activities: Tuple[RepresentativeActivity, ...] = Field(
        default=(),
        description="Representative activities (two expected)"
    )
    inquiry_excellent_examples: Tuple[InquiryExample, ...] = Field(
        description="Excellent inquiry cases (four expected)"
    )
    inquiry_improvement_example: InquiryExample = Field(
        description="One case needing improvement"
    )

    def to_wire_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dict using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True)
