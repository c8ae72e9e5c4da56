import logging
import re
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

from customer_intake.client import CustomerStore
from customer_intake.errors import IntakeError, TransportError, ValidationFailed
from customer_intake.logging_config import operation_scope
from customer_intake.models import (
    CustomerDraft,
    CustomerRecord,
    FieldState,
    Notification,
    NotificationKind,
    NotificationSink,
    ValidationResult,
)
from customer_intake.records import RecordListSynchronizer
from customer_intake.rules import DEFAULT_COUNTRY, FIELD_PATHS, POSTAL_CODE_PATTERNS, normalize_country
from customer_intake.validator import read_field, validate_record

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    APPENDING_LOCAL = "appending_local"


class SubmissionStatus(str, Enum):
    INVALID = "invalid"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


class SubmissionOutcome(BaseModel):
    """Result of one submit attempt."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: SubmissionStatus
    validation: ValidationResult
    record: CustomerRecord | None = None
    notification: Notification | None = None
    error: TransportError | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is SubmissionStatus.SUCCEEDED

    def raise_for_status(self) -> CustomerRecord:
        """Return the confirmed record or raise the error that stopped the attempt."""
        if self.status is SubmissionStatus.INVALID:
            raise ValidationFailed(self.validation)
        if self.error is not None:
            raise self.error
        if self.record is None:
            raise IntakeError("Submission finished without a confirmed record")
        return self.record


class SubmissionCoordinator:
    """Drives a customer draft through validate, create and local append.

    The coordinator owns the editable draft. Field edits re-run validation of
    the whole record, so rules that depend on sibling fields (postal code vs.
    country) are always evaluated against current values.
    """

    def __init__(
        self,
        store: CustomerStore,
        records: RecordListSynchronizer,
        notify: NotificationSink | None = None,
        patterns: Mapping[str, re.Pattern[str]] = POSTAL_CODE_PATTERNS,
        default_country: str = DEFAULT_COUNTRY,
    ):
        self._store = store
        self._records = records
        self._notify = notify
        self._patterns = patterns
        self.default_country = normalize_country(default_country)
        self.draft = CustomerDraft.blank(self.default_country)
        self.state = SubmissionState.IDLE
        self._validation: ValidationResult | None = None

    @property
    def validation(self) -> ValidationResult | None:
        """Latest validation of the draft, or None before anything was validated."""
        return self._validation

    @property
    def is_valid(self) -> bool:
        return validate_record(self.draft, self._patterns, self.default_country).is_valid

    def validate(self) -> ValidationResult:
        self._validation = validate_record(self.draft, self._patterns, self.default_country)
        return self._validation

    def update_field(self, path: str, value: Any) -> FieldState:
        """Set one field of the draft and re-validate the whole record.

        Numbers are stored as strings; values that cannot be a string raise
        a pydantic ``ValidationError`` (a ``ValueError``) and leave the draft
        unchanged.
        """
        *parents, name = path.split(".")
        target: BaseModel = self.draft
        for part in parents:
            target = getattr(target, part, None)
            if not isinstance(target, BaseModel):
                raise ValueError(f"Unknown field path: {path}")
        if name not in type(target).model_fields:
            raise ValueError(f"Unknown field path: {path}")
        setattr(target, name, value)
        self.validate()
        return self.field(path)

    def field(self, path: str) -> FieldState:
        error = self._validation.error_for(path) if self._validation else None
        return FieldState(value=read_field(self.draft, path), error=error)

    def fields(self) -> dict[str, FieldState]:
        return {path: self.field(path) for path in FIELD_PATHS}

    def reset(self) -> None:
        """Clear the draft back to its empty initial state."""
        self.draft = CustomerDraft.blank(self.default_country)
        self._validation = None

    async def submit(self, draft: CustomerDraft | None = None) -> SubmissionOutcome:
        """Validate the draft and, if valid, create it in the store.

        Args:
            draft: Replaces the coordinator's draft before submitting. The
                current draft is used when omitted.

        Returns:
            A SubmissionOutcome. Invalid drafts never reach the store, and a
            failed create leaves both the draft and the record list untouched.
        """
        if draft is not None:
            self.draft = draft
        candidate = self.draft.model_copy(deep=True)

        with operation_scope("submit"):
            try:
                return await self._submit(candidate)
            finally:
                self.state = SubmissionState.IDLE

    async def _submit(self, candidate: CustomerDraft) -> SubmissionOutcome:
        self.state = SubmissionState.VALIDATING
        validation = self.validate()
        if not validation.is_valid:
            logger.info(
                "Submission blocked by validation",
                extra={"invalid_fields": sorted(validation.messages)},
            )
            return SubmissionOutcome(status=SubmissionStatus.INVALID, validation=validation)

        self.state = SubmissionState.SUBMITTING
        try:
            record = await self._store.create_record(candidate)
        except TransportError as exc:
            logger.error(
                "Error submitting form",
                extra={"error": exc.message, "status_code": exc.status_code},
            )
            notification = self._emit(NotificationKind.FAILURE, "Failed to add customer", exc.message)
            return SubmissionOutcome(
                status=SubmissionStatus.FAILED,
                validation=validation,
                notification=notification,
                error=exc,
            )

        self.state = SubmissionState.APPENDING_LOCAL
        self.reset()
        await self._records.append(record)
        logger.info("Customer added", extra={"customer_id": record.id})
        notification = self._emit(NotificationKind.SUCCESS, "Customer added successfully")
        return SubmissionOutcome(
            status=SubmissionStatus.SUCCEEDED,
            validation=validation,
            record=record,
            notification=notification,
        )

    def _emit(self, kind: NotificationKind, message: str, detail: str | None = None) -> Notification:
        notification = Notification(kind=kind, message=message, source="submission", detail=detail)
        if self._notify is not None:
            self._notify(notification)
        return notification
