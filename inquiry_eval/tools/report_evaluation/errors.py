"""Failures raised while evaluating a report."""

from inquiry_eval.libs.config_loader import ConfigurationError


class EvaluationError(Exception):
    """Base class for a failed evaluation attempt."""


class InputValidationError(EvaluationError):
    """Report text is empty or whitespace-only; no request was made."""


class TransportError(EvaluationError):
    """The call to the LLM service failed (network, auth, quota, ...)."""


class SchemaViolationError(EvaluationError):
    """The LLM response is not a JSON object with the required structure."""


__all__ = [
    'ConfigurationError',
    'EvaluationError',
    'InputValidationError',
    'TransportError',
    'SchemaViolationError',
]
