"""Evaluation prompt and response schema sent to the LLM."""

import copy
import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

from pydantic_ai import NativeOutput, StructuredDict

from .rubric import DEFAULT_RUBRIC, Rubric

DEFAULT_TEMPERATURE = 0.1

REQUIRED_FIELDS = (
    'scores',
    'studentName',
    'tagline',
    'coreCompetency',
    'keyStrengths',
    'suggestions',
    'representativeActivities',
    'inquiryExcellentExamples',
    'inquiryImprovementExample',
)

EVALUATION_PROMPT = """
You are an expert university admissions officer specializing in evaluating student records for inquiry competency. Your evaluation must be thorough, insightful, and meticulously detailed, aiming for a fair and comprehensive assessment. Your primary goal is to identify and properly credit the student's strengths, while also providing constructive feedback. For a well-prepared student, the overall evaluation should result in an average score of approximately 85-90 out of 100.

**GUIDING SCORING PHILOSOPHY: Differentiated Maximum Scores.**
- **Criteria are divided into two types based on their maximum possible score: 7-point items and 5-point items.**
- Your scoring must adhere to the maximum score for each item.

**7-POINT ITEMS SCORING (Range: 3-7):**
- These items assess deep inquiry skills (Categories A and C).
- **3:** Weak or insufficient evidence.
- **4:** Meets basic expectations.
- **5:** Good performance.
- **6:** Excellent and High-Achieving.
- **7:** Truly Outstanding and Differentiated. Reserved for exceptional, rare instances.

**5-POINT ITEMS SCORING (Range: 3-5):**
- These items assess self-direction and foundational attitudes (Category B).
- **3:** Meets basic expectations.
- **4:** Good performance, showing solid effort.
- **5:** Excellent performance that clearly demonstrates the desired trait.
- **Do not award a score higher than 5 for these items.**

**VERY IMPORTANT SCORING GUIDELINE:** You must be meticulous. Scrutinize each criterion individually. A strong applicant's report will naturally contain a spectrum of performance levels. A credible evaluation will show a mix of scores reflecting the different maximums.

**MANDATORY JUSTIFICATION DETAIL:** For EACH score, you MUST provide a meticulous justification of AT LEAST 200 KOREAN CHARACTERS (approximately 4-5 full sentences). This justification must be analytical, drawing specific examples and direct evidence from the provided student record to support your scoring decision. Your reasoning must be transparent and compelling.

Do not be overly critical, but be precise. Justify every score with specific evidence. Your output must be a valid JSON object following the specified schema and nothing else. Do not add any text before or after the JSON object.
""".strip()


def _string(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


def _inquiry_example_schema(description: str) -> Dict[str, Any]:
    return {
        "type": "object",
        "description": description,
        "properties": {
            "tag": _string(
                "The relevant school subject or activity context (e.g., '2학년 확률과 통계', '자율활동'). (Korean)"
            ),
            "title": _string(
                "A concise, impactful title for the example. For excellent cases, start with '[우수 사례 N]'. "
                "For improvement cases, start with '[보완 필요 사례]'. (Korean)"
            ),
            "description": _string(
                "활동에 대한 상세한 설명. 해당 활동이 왜 우수한 혹은 보완이 필요한 탐구 사례인지 설명함. "
                "우수 사례의 경우, 높은 점수를 받은 근거를 서술하되, 'A3(과정의 우수성)'과 같은 평가 항목 코드를 "
                "직접적으로 언급하지 말 것. '학생은 ~' 과 같은 서술을 피하고, 간결하고 객관적인 문체(음슴체)로 "
                "작성할 것. (Korean)"
            ),
        },
        "required": ["tag", "title", "description"],
    }


@lru_cache(maxsize=None)
def build_schema(rubric: Rubric = DEFAULT_RUBRIC) -> Dict[str, Any]:
    """
    Build the JSON schema the LLM response must follow.

    The ``scores`` object lists every rubric key as a required property, so
    the request always tracks the rubric. The result is cached per rubric and
    shared between callers: do not mutate it.
    """
    score_item = {
        "type": "object",
        "properties": {
            "score": {
                "type": "integer",
                "description": (
                    "The evaluation score for the item, following the specified scoring rubric "
                    "(3-7 for 7-point items, 3-5 for 5-point items)."
                ),
            },
            "justification": _string(
                "Meticulous, evidence-based justification for the score, citing specific examples from "
                "the report. MUST BE AT LEAST 200 KOREAN CHARACTERS. This is for a professional "
                "evaluator's review. (Korean)"
            ),
        },
        "required": ["score", "justification"],
    }
    score_properties = {}
    for item in rubric:
        score_properties[item.key] = dict(
            score_item,
            description=f"{item.label} ({item.min_score}-{item.max_score})",
        )

    return {
        "type": "object",
        "properties": {
            "scores": {
                "type": "object",
                "properties": score_properties,
                "required": list(rubric.all_keys()),
            },
            "studentName": _string("The name of the student found in the report. If not found, use '학생'."),
            "tagline": _string(
                "A short, catchy tagline summarizing the student's core identity as a learner. "
                "e.g., '융합적 사고와 실천적 탐구를 통해 스스로 지식을 창출하는 인재'. (Korean)"
            ),
            "coreCompetency": _string(
                "A detailed paragraph for the '[핵심 역량]' section. Summarize the student's core inquiry "
                "competency. Write in a concise, declarative style (음슴체). Do not start with the "
                "student's name. (Korean)"
            ),
            "keyStrengths": _string(
                "A detailed paragraph for the '[주요 강점]' section. Describe the student's key strengths "
                "with specific examples. This corresponds to high-scoring items. Write in a concise, "
                "declarative style (음슴체). (Korean)"
            ),
            "suggestions": _string(
                "A detailed paragraph for the '[보완점 및 제언]' section. Provide constructive feedback. "
                "This corresponds to low-scoring items. Write in a concise, declarative style (음슴체). (Korean)"
            ),
            "representativeActivities": {
                "type": "array",
                "description": "Extract two most impressive and representative inquiry activities from the report. (Korean)",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": _string("Provide the activity title in a concise, declarative style (음슴체). (Korean)"),
                        "description": _string(
                            "Provide the activity description in a concise, declarative style (음슴체). (Korean)"
                        ),
                    },
                    "required": ["title", "description"],
                },
            },
            "inquiryExcellentExamples": {
                "type": "array",
                "description": (
                    "Extract exactly 4 of the most impressive 'Excellent Cases' of inquiry from the report, "
                    "based on the highest-scoring items. These examples must showcase the student's inquiry "
                    "competency. (Korean)"
                ),
                "items": _inquiry_example_schema("An excellent inquiry case."),
            },
            "inquiryImprovementExample": _inquiry_example_schema(
                "Identify one key area for improvement in inquiry skills, based on lower-scoring items. "
                "Frame it constructively as a 'Case Needing Improvement'. (Korean)"
            ),
        },
        "required": list(REQUIRED_FIELDS),
    }


@lru_cache(maxsize=None)
def build_output_type(rubric: Rubric = DEFAULT_RUBRIC) -> NativeOutput:
    """
    Structured output spec that hands the response schema to the provider.

    The provider then returns JSON matching the schema (no prose, no code
    fences), and the agent run yields it as a dict.
    """
    # StructuredDict sets a title on the schema it is given
    schema = copy.deepcopy(build_schema(rubric))
    return NativeOutput(
        StructuredDict(
            schema,
            name="inquiry_evaluation",
            description="Inquiry-competency evaluation of one student report",
        )
    )


@dataclass(frozen=True)
class EvaluationRequest:
    """Everything needed for one call to the LLM."""
    prompt: str
    schema: Dict[str, Any]
    temperature: float = DEFAULT_TEMPERATURE
    output_type: Any = None

    @property
    def model_settings(self) -> Dict[str, Any]:
        return {"temperature": self.temperature}


def build_prompt(report_text: str, schema: Dict[str, Any]) -> str:
    """Combine the instructions, the response schema and the report into one prompt."""
    schema_text = json.dumps(schema, ensure_ascii=False, indent=2)
    return (
        f"{EVALUATION_PROMPT}\n\n"
        f"--- Response JSON Schema ---\n{schema_text}\n\n"
        f"--- Student Report ---\n{report_text}"
    )


def build_request(report_text: str,
                  rubric: Rubric = DEFAULT_RUBRIC,
                  temperature: float = DEFAULT_TEMPERATURE) -> EvaluationRequest:
    """
    Build the request for one report.

    Args:
        report_text: Raw student record; the caller rejects blank text first
        rubric: Rubric the response must cover
        temperature: Sampling temperature (kept low for near-deterministic output)

    Returns:
        EvaluationRequest with the combined prompt, the schema and the
        structured output type built from it
    """
    schema = build_schema(rubric)
    return EvaluationRequest(
        prompt=build_prompt(report_text, schema),
        schema=schema,
        temperature=temperature,
        output_type=build_output_type(rubric),
    )
