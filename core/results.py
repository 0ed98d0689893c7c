# core/results.py
"""
Outcome and error types for form submissions

A pipeline run always ends in exactly one PipelineResult. Field errors are
returned as data; collaborator failures are raised as SubmissionError
subclasses and converted to InternalFailure at the pipeline boundary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Any


class Outcome(Enum):
    """Pipeline outcome tags"""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    RATE_LIMITED = "rate_limited"
    INTERNAL_FAILURE = "internal_failure"


RATE_LIMITED_MESSAGE = 'Too many requests. Please try again later.'
VALIDATION_FAILED_MESSAGE = 'Validation failed'
INTERNAL_ERROR_MESSAGE = 'Internal server error'


class SubmissionError(Exception):
    """Base exception for submission processing"""
    pass


class StorageError(SubmissionError):
    """Persistence backend failed to create a record"""
    pass


class NotificationError(SubmissionError):
    """Confirmation email could not be delivered"""
    pass


class RateLimitExceeded(SubmissionError):
    """Caller has used up the quota for the current window"""

    def __init__(self, caller_id: str, limit: int, remaining: int, reset_at: int):
        super().__init__(f"Rate limit exceeded for {caller_id}")
        self.caller_id = caller_id
        self.limit = limit
        self.remaining = remaining
        self.reset_at = reset_at


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure"""
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {'field': self.field, 'message': self.message}


@dataclass(frozen=True)
class StoredRecord:
    """Identity assigned by the store when a record is created"""
    id: str
    created_at: Any


class PipelineResult:
    """Base class for the four pipeline outcomes"""
    outcome: Outcome

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.ACCEPTED


@dataclass(frozen=True)
class Accepted(PipelineResult):
    id: str
    message: str
    outcome: Outcome = field(default=Outcome.ACCEPTED, init=False)


@dataclass(frozen=True)
class Rejected(PipelineResult):
    errors: List[FieldError]
    message: str = VALIDATION_FAILED_MESSAGE
    outcome: Outcome = field(default=Outcome.REJECTED, init=False)

    def errors_as_dicts(self) -> List[Dict[str, str]]:
        return [error.to_dict() for error in self.errors]


@dataclass(frozen=True)
class RateLimited(PipelineResult):
    limit: int
    remaining: int
    reset_at: int
    message: str = RATE_LIMITED_MESSAGE
    outcome: Outcome = field(default=Outcome.RATE_LIMITED, init=False)


@dataclass(frozen=True)
class InternalFailure(PipelineResult):
    message: str = INTERNAL_ERROR_MESSAGE
    outcome: Outcome = field(default=Outcome.INTERNAL_FAILURE, init=False)


def to_action_result(result: PipelineResult) -> Dict[str, Any]:
    """
    Convert a pipeline outcome to the tagged value returned by form actions

    Args:
        result: Outcome of a pipeline run

    Returns:
        Dictionary with a success flag and the outcome payload
    """
    if isinstance(result, Accepted):
        return {'success': True, 'message': result.message, 'id': result.id}

    if isinstance(result, Rejected):
        return {
            'success': False,
            'message': result.message,
            'errors': result.errors_as_dicts()
        }

    if isinstance(result, RateLimited):
        return {
            'success': False,
            'message': result.message,
            'limit': result.limit,
            'remaining': result.remaining,
            'reset': result.reset_at
        }

    return {'success': False, 'message': INTERNAL_ERROR_MESSAGE}
