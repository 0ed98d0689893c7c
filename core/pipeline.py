# core/pipeline.py
"""
Form submission pipeline

Every submission kind runs the same linear sequence:

1. Rate check (skipped when no limiter is configured)
2. Validate raw input
3. Persist the validated record
4. Send the confirmation email
5. Return the record id

Each step gates the next; nothing is retried. Collaborator failures are
logged with full detail here and collapse to InternalFailure, so no driver or
provider error text ever reaches the caller. A notification failure after a
successful write leaves the record in place.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol

from core.rate_limiter import RateLimitDecision
from core.results import (
    Accepted, InternalFailure, NotificationError, PipelineResult, RateLimited,
    RateLimitExceeded, Rejected, StoredRecord
)
from core.schemas import (
    SubmissionSchema, CONTACT_SCHEMA, CAREERS_SCHEMA, REPORT_SCHEMA
)
from core.template_engine import EmailTemplateEngine

logger = logging.getLogger(__name__)


class SubmissionStore(Protocol):
    def create(self, kind: str, fields: Dict[str, Any]) -> StoredRecord: ...


class Notifier(Protocol):
    """Delivers one email; failure is raised or reported as {'success': False}"""
    def send(self, to: str, subject: str, html: str) -> Any: ...


class RateLimiter(Protocol):
    def check(self, caller_id: str) -> RateLimitDecision: ...


@dataclass(frozen=True)
class SubmissionKind:
    """
    Everything that distinguishes one form flow from another

    Attributes:
        name: Kind identifier, also the persistence kind and rate limit namespace
        schema: Field rules for validation
        subject: Confirmation email subject
        template: Confirmation email template name
        success_message: Message returned with Accepted
        log_label: Human-readable flow name for log lines
    """
    name: str
    schema: SubmissionSchema
    subject: str
    template: str
    success_message: str
    log_label: str


CONTACT = SubmissionKind(
    name='contact',
    schema=CONTACT_SCHEMA,
    subject='Thank you for contacting us',
    template='contact_confirmation.html',
    success_message='Contact form submitted successfully',
    log_label='contact form'
)

CAREERS = SubmissionKind(
    name='careers',
    schema=CAREERS_SCHEMA,
    subject='Career Application Received',
    template='career_application.html',
    success_message='Application submitted successfully',
    log_label='career application'
)

REPORT = SubmissionKind(
    name='report',
    schema=REPORT_SCHEMA,
    subject='Your Report is Ready',
    template='report_download.html',
    success_message='Report download link sent to your email',
    log_label='report download'
)

SUBMISSION_KINDS = {kind.name: kind for kind in (CONTACT, CAREERS, REPORT)}


class RateGate:
    """
    Optional rate check step

    Wraps an optional limiter so the pipeline has a single step that either
    admits the caller or raises RateLimitExceeded. With no limiter it admits
    everyone.
    """

    def __init__(self, limiter: Optional[RateLimiter] = None):
        self.limiter = limiter

    @property
    def enabled(self) -> bool:
        return self.limiter is not None

    def admit(self, caller_id: str) -> Optional[RateLimitDecision]:
        """
        Check the caller against the quota

        Returns:
            The decision, or None when rate limiting is disabled

        Raises:
            RateLimitExceeded: If the caller is over quota
        """
        if self.limiter is None:
            return None

        try:
            decision = self.limiter.check(caller_id)
        except Exception as e:
            # Counter store outage fails open
            logger.error(f"Rate limit check failed for {caller_id}: {e}", exc_info=True)
            return None

        if not decision.allowed:
            raise RateLimitExceeded(
                caller_id, decision.limit, decision.remaining, decision.reset_at
            )

        return decision


class SubmissionPipeline:
    """
    Runs one submission kind through rate check, validation, persistence and
    notification
    """

    def __init__(self,
                 kind: SubmissionKind,
                 store: SubmissionStore,
                 notifier: Notifier,
                 templates: EmailTemplateEngine,
                 limiter: Optional[RateLimiter] = None):
        """
        Args:
            kind: Submission kind definition
            store: Persistence collaborator
            notifier: Email delivery collaborator
            templates: Confirmation email renderer
            limiter: Rate limiter for this kind, or None to skip the rate check
        """
        self.kind = kind
        self.store = store
        self.notifier = notifier
        self.templates = templates
        self.rate_gate = RateGate(limiter)

    def submit(self, raw: Mapping[str, Any], caller_id: str) -> PipelineResult:
        """
        Process a single submission

        Args:
            raw: Untyped field values as submitted by the client
            caller_id: Caller identity used as the rate limit key

        Returns:
            Accepted, Rejected, RateLimited or InternalFailure
        """
        kind = self.kind

        try:
            self.rate_gate.admit(caller_id)
        except RateLimitExceeded as e:
            logger.warning(
                f"Rate limit exceeded for {kind.log_label}: ip={e.caller_id} "
                f"limit={e.limit} remaining={e.remaining} reset={e.reset_at}"
            )
            return RateLimited(limit=e.limit, remaining=e.remaining, reset_at=e.reset_at)

        fields, errors = kind.schema.validate(raw)
        if errors:
            logger.info(
                f"Rejected {kind.log_label}: invalid fields "
                f"{sorted({error.field for error in errors})}"
            )
            return Rejected(errors=errors)

        try:
            record = self.store.create(kind.name, fields)
        except Exception as e:
            logger.error(f"Failed to store {kind.log_label}: {e}", exc_info=True)
            return InternalFailure()

        try:
            self._notify(fields, record)
        except Exception as e:
            # The record stays persisted; the caller is expected to resubmit
            logger.error(
                f"Failed to send confirmation for {kind.log_label} {record.id}: {e}",
                exc_info=True
            )
            return InternalFailure()

        logger.info(f"{kind.log_label.capitalize()} submitted: id={record.id}")
        return Accepted(id=record.id, message=kind.success_message)

    def _notify(self, fields: Dict[str, Any], record: StoredRecord) -> None:
        """Render and send the confirmation email to the submitter"""
        context = dict(fields)
        context['record_id'] = record.id

        html = self.templates.render(self.kind.template, context)
        result = self.notifier.send(to=fields['email'], subject=self.kind.subject, html=html)

        if result is False or (isinstance(result, Mapping) and not result.get('success', True)):
            raise NotificationError(f"Notifier reported failure: {result}")


def build_pipelines(store: SubmissionStore,
                    notifier: Notifier,
                    templates: EmailTemplateEngine,
                    limiters: Optional[Mapping[str, RateLimiter]] = None) -> Dict[str, SubmissionPipeline]:
    """
    Create one pipeline per submission kind sharing the same collaborators

    Args:
        store: Persistence collaborator
        notifier: Email delivery collaborator
        templates: Confirmation email renderer
        limiters: Rate limiters keyed by kind; missing kinds are not limited

    Returns:
        Pipelines keyed by submission kind name
    """
    limiters = limiters or {}
    return {
        name: SubmissionPipeline(kind, store, notifier, templates, limiters.get(name))
        for name, kind in SUBMISSION_KINDS.items()
    }
