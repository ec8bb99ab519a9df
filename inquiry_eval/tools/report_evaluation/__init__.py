"""Inquiry-competency evaluation of student reports using LLMs."""

from .rubric import DEFAULT_RUBRIC, Category, Rubric, RubricItem
from .models import EvaluationResult, InquiryExample, RepresentativeActivity, ScoreItem
from .errors import (
    ConfigurationError, EvaluationError, InputValidationError, SchemaViolationError, TransportError
)
from .prompts import EvaluationRequest, build_output_type, build_request, build_schema
from .evaluator import ReportEvaluator, parse_evaluation, validate_evaluation
from .aggregation import (
    CategoryAggregate, EvaluationSummary, ScoreBucket, aggregate, bucket_for, color_for
)
from .editor import ReportEditor

__all__ = [
    'DEFAULT_RUBRIC',
    'Category',
    'Rubric',
    'RubricItem',
    'EvaluationResult',
    'InquiryExample',
    'RepresentativeActivity',
    'ScoreItem',
    'ConfigurationError',
    'EvaluationError',
    'InputValidationError',
    'SchemaViolationError',
    'TransportError',
    'EvaluationRequest',
    'build_output_type',
    'build_request',
    'build_schema',
    'ReportEvaluator',
    'parse_evaluation',
    'validate_evaluation',
    'CategoryAggregate',
    'EvaluationSummary',
    'ScoreBucket',
    'aggregate',
    'bucket_for',
    'color_for',
    'ReportEditor',
]
