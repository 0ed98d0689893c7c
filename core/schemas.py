# core/schemas.py
"""
Declarative field rules for each submission kind

Values are checked exactly as submitted: nothing is trimmed, normalized or
case-folded, and every violation is reported in a single pass.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from email_validator import validate_email, EmailNotValidError

from core.results import FieldError

logger = logging.getLogger(__name__)

INVALID_EMAIL_MESSAGE = 'Invalid email address'


@dataclass(frozen=True)
class FieldRule:
    """
    Constraint set for one string field

    Attributes:
        name: Key in the raw input and in the validated record
        label: Human-readable field name used in messages
        required: Absent values are errors when True, omitted when False
        min_length: Minimum length in characters, if any
        min_length_message: Message used when min_length is not met
        email: Whether the value must be a deliverable-looking address
    """
    name: str
    label: str
    required: bool = True
    min_length: Optional[int] = None
    min_length_message: Optional[str] = None
    email: bool = False

    def check(self, raw: Mapping[str, Any]) -> Tuple[bool, Any, Optional[str]]:
        """
        Check this field against the raw input

        Returns:
            Tuple of (present, value, error message or None)
        """
        if self.name not in raw:
            if self.required:
                return False, None, f"{self.label} is required"
            return False, None, None

        value = raw[self.name]
        if value is None:
            # Optional fields accept omission but not an explicit null
            if self.required:
                return True, None, f"{self.label} is required"
            return True, None, f"{self.label} must be a string"

        if not isinstance(value, str):
            return True, value, f"{self.label} must be a string"

        if self.min_length is not None and len(value) < self.min_length:
            message = self.min_length_message or (
                f"{self.label} must be at least {self.min_length} characters"
            )
            return True, value, message

        if self.email and not is_valid_email(value):
            return True, value, INVALID_EMAIL_MESSAGE

        return True, value, None


@dataclass(frozen=True)
class SubmissionSchema:
    """Ordered field rules for one submission kind"""
    name: str
    fields: Tuple[FieldRule, ...]

    @property
    def field_names(self) -> List[str]:
        return [rule.name for rule in self.fields]

    def validate(self, raw: Mapping[str, Any]) -> Tuple[Optional[Dict[str, Any]], List[FieldError]]:
        """
        Validate raw client input

        Args:
            raw: Untyped key-value input as submitted

        Returns:
            Tuple of (record, errors). Exactly one of them is populated:
            record is None whenever errors is non-empty.
        """
        if not isinstance(raw, Mapping):
            raw = {}

        record: Dict[str, Any] = {}
        errors: List[FieldError] = []

        for rule in self.fields:
            present, value, message = rule.check(raw)
            if message:
                errors.append(FieldError(field=rule.name, message=message))
            elif present:
                record[rule.name] = value

        if errors:
            logger.debug(f"{self.name} input rejected on fields: {[e.field for e in errors]}")
            return None, errors

        return record, []


def is_valid_email(value: str) -> bool:
    """
    Check an address against the local-part@domain.tld grammar

    Internationalized addresses are rejected: the value must be ASCII and
    must not require SMTPUTF8. Domains must be publicly routable, so
    special-use names such as .local, .localhost, .test and .invalid and
    dotless hosts fail as well. No DNS lookup is made.
    """
    if not value.isascii():
        return False

    try:
        validate_email(value, check_deliverability=False, allow_smtputf8=False)
    except EmailNotValidError:
        return False

    return True


NAME_RULE = FieldRule(
    name='name',
    label='Name',
    min_length=2,
    min_length_message='Name must be at least 2 characters'
)

EMAIL_RULE = FieldRule(name='email', label='Email', email=True)

CONTACT_SCHEMA = SubmissionSchema(
    name='contact',
    fields=(
        NAME_RULE,
        EMAIL_RULE,
        FieldRule(
            name='message',
            label='Message',
            min_length=10,
            min_length_message='Message must be at least 10 characters'
        ),
    )
)

CAREERS_SCHEMA = SubmissionSchema(
    name='careers',
    fields=(
        NAME_RULE,
        EMAIL_RULE,
        FieldRule(
            name='position',
            label='Position',
            min_length=2,
            min_length_message='Position is required'
        ),
        FieldRule(name='message', label='Message', required=False),
    )
)

REPORT_SCHEMA = SubmissionSchema(
    name='report',
    fields=(EMAIL_RULE,)
)
