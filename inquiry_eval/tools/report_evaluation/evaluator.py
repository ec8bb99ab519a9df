"""LLM-backed evaluation of student reports using pydantic-ai."""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError
from pydantic_ai.exceptions import UnexpectedModelBehavior

from inquiry_eval.libs.config_loader import ConfigType, get_config
from inquiry_eval.libs.llm import create_agent
from .errors import InputValidationError, SchemaViolationError, TransportError
from .models import EvaluationResult
from .prompts import DEFAULT_TEMPERATURE, build_output_type, build_request
from .rubric import DEFAULT_RUBRIC, Rubric

LOG = logging.getLogger(__name__)

# Fields whose absence makes the response unusable for the dashboard.
PRESENCE_CHECKED_FIELDS = (
    'scores',
    'tagline',
    'coreCompetency',
    'inquiryExcellentExamples',
    'inquiryImprovementExample',
)

INVALID_STRUCTURE_MESSAGE = "Invalid JSON structure received from API."


def parse_evaluation(response_text: str,
                     rubric: Rubric = DEFAULT_RUBRIC,
                     *,
                     strict_scores: bool = False) -> EvaluationResult:
    """
    Parse the raw LLM response into an EvaluationResult.

    The response must be exactly one JSON object; only surrounding whitespace
    is tolerated.

    Args:
        response_text: Text returned by the model
        rubric: Rubric the scores are expected to cover
        strict_scores: Reject responses whose score keys differ from the rubric

    Raises:
        SchemaViolationError: If the text is not a JSON object, lacks a
            required field, or has fields of the wrong type
    """
    try:
        data = json.loads(response_text.strip())
    except json.JSONDecodeError as e:
        raise SchemaViolationError(f"Response is not valid JSON: {e}") from e

    return validate_evaluation(data, rubric, strict_scores=strict_scores)


def validate_evaluation(data: Any,
                        rubric: Rubric = DEFAULT_RUBRIC,
                        *,
                        strict_scores: bool = False) -> EvaluationResult:
    """
    Check an already-decoded response and build the EvaluationResult.

    Raises:
        SchemaViolationError: If required fields are missing or mistyped
    """
    if not isinstance(data, dict):
        raise SchemaViolationError(INVALID_STRUCTURE_MESSAGE)

    missing = [name for name in PRESENCE_CHECKED_FIELDS if data.get(name) in (None, "")]
    if missing:
        LOG.error("Response missing required fields: %s", ", ".join(missing))
        raise SchemaViolationError(INVALID_STRUCTURE_MESSAGE)

    if not isinstance(data['scores'], dict):
        raise SchemaViolationError(INVALID_STRUCTURE_MESSAGE)
    _check_score_keys(data['scores'], rubric, strict_scores)

    try:
        result = EvaluationResult.model_validate(data)
    except ValidationError as e:
        LOG.error("Response failed validation: %s", e)
        raise SchemaViolationError(INVALID_STRUCTURE_MESSAGE) from e

    _warn_out_of_range(result, rubric)
    return result


def _check_score_keys(scores: Dict[str, Any], rubric: Rubric, strict: bool) -> None:
    missing = [key for key in rubric.all_keys() if key not in scores]
    unknown = [key for key in scores if key not in rubric]
    if not missing and not unknown:
        return
    if strict:
        raise SchemaViolationError(
            f"{INVALID_STRUCTURE_MESSAGE} Missing score keys: {missing}; unexpected score keys: {unknown}"
        )
    if missing:
        LOG.warning("Response is missing %d rubric keys: %s", len(missing), missing)
    if unknown:
        LOG.warning("Response contains keys outside the rubric: %s", unknown)


def _warn_out_of_range(result: EvaluationResult, rubric: Rubric) -> None:
    for key, item in result.scores.items():
        if key not in rubric:
            continue
        if not rubric.min_score_of(key) <= item.score <= rubric.max_score_of(key):
            LOG.warning("Score %d for %s is outside %d-%d",
                        item.score, key, rubric.min_score_of(key), rubric.max_score_of(key))


class ReportEvaluator:
    """Evaluate student reports against the rubric with one LLM call each."""

    def __init__(self, configs: ConfigType,
                 model: Optional[str] = None,
                 settings: Optional[Dict[str, Any]] = None,
                 *,
                 agent: Any = None,
                 rubric: Rubric = DEFAULT_RUBRIC):
        """
        Initialize the evaluator.

        Args:
            configs: Configuration dictionary (required)
            model: Model to use (overrides config value)
            settings: Pydantic AI settings dict (overrides config values)
            agent: Pre-built agent; when omitted one is created from configs
            rubric: Rubric to evaluate against

        Raises:
            ConfigurationError: If no API key is configured
        """
        self.configs = configs
        self.model_name = model
        self.settings = settings
        self.rubric = rubric
        self.temperature = float(get_config("evaluation.temperature", configs, default=DEFAULT_TEMPERATURE))
        self.strict_scores = bool(get_config("evaluation.strict_scores", configs, default=False))

        # Credentials are checked here so a bad setup fails at startup
        self.agent = agent if agent is not None else create_agent(
            configs=configs,
            model=model,
            settings_dict=settings,
            output_type=build_output_type(rubric),
        )

    async def evaluate_async(self, report_text: str) -> EvaluationResult:
        """
        Evaluate a report asynchronously.

        Args:
            report_text: The student's record as free text

        Returns:
            Validated EvaluationResult

        Raises:
            InputValidationError: If the text is blank (no request is made)
            TransportError: If the LLM call fails
            SchemaViolationError: If the response has the wrong structure
        """
        if not report_text or not report_text.strip():
            raise InputValidationError("학생부 내용을 입력해주세요.")

        request = build_request(report_text, self.rubric, temperature=self.temperature)
        LOG.info("Requesting evaluation (%d characters of report text)", len(report_text))

        try:
            run_result = await self.agent.run(
                request.prompt,
                output_type=request.output_type,
                model_settings=request.model_settings,
            )
        except UnexpectedModelBehavior as e:
            # Structured output that could not be decoded
            LOG.error("LLM returned malformed structured output: %s", e)
            raise SchemaViolationError(INVALID_STRUCTURE_MESSAGE) from e
        except Exception as e:
            LOG.error("Error analyzing report with LLM: %s", e)
            raise TransportError(f"Failed to analyze report: {e}") from e

        output = run_result.output
        if isinstance(output, dict):
            result = validate_evaluation(output, self.rubric, strict_scores=self.strict_scores)
        else:
            result = parse_evaluation(str(output), self.rubric, strict_scores=self.strict_scores)
        LOG.info("Received evaluation for %s with %d scored items", result.student_name, len(result.scores))
        return result

    def evaluate(self, report_text: str) -> EvaluationResult:
        """Evaluate a report synchronously."""
        return asyncio.run(self.evaluate_async(report_text))
