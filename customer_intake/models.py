from enum import Enum
from typing import Any, Callable, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from customer_intake.rules import DEFAULT_COUNTRY


class _WireModel(BaseModel):
    """Base for models exchanged with the customer store (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class _DraftModel(_WireModel):
    # form input arrives field by field; keep every assignment a string
    model_config = ConfigDict(validate_assignment=True, coerce_numbers_to_str=True)


class AddressDraft(_DraftModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = DEFAULT_COUNTRY


class CustomerDraft(_DraftModel):
    """Editable form state for a customer that has not been accepted yet."""

    phone_number: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    address: AddressDraft = Field(default_factory=AddressDraft)
    organization: str | None = None

    @classmethod
    def blank(cls, country: str = DEFAULT_COUNTRY) -> "CustomerDraft":
        """Return an empty draft whose address defaults to ``country``."""
        return cls(address=AddressDraft(country=country))


class Address(_WireModel):
    model_config = ConfigDict(frozen=True)

    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = DEFAULT_COUNTRY


class CustomerRecord(_WireModel):
    """A customer accepted by the remote store, carrying its server identifier."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    phone_number: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    address: Address = Field(default_factory=Address)
    organization: str | None = None


class ValidationResult(BaseModel):
    """Per-field validation outcome; a ``None`` entry means the rule passed."""

    errors: dict[str, str | None] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not any(self.errors.values())

    @property
    def messages(self) -> dict[str, str]:
        return {path: message for path, message in self.errors.items() if message}

    def error_for(self, path: str) -> str | None:
        return self.errors.get(path)


class FieldState(BaseModel):
    value: Any = None
    error: str | None = None


class NotificationKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class Notification(BaseModel):
    """Discrete event for the presentation layer to display (e.g. as a toast)."""

    kind: NotificationKind
    message: str
    source: Literal["submission", "records", "integration"]
    detail: str | None = None


class FormView(BaseModel):
    """Everything the presentation layer needs to render the form and the list."""

    fields: dict[str, FieldState]
    is_valid: bool
    errors: dict[str, str]
    records: tuple[CustomerRecord, ...]


class ErrorResponse(BaseModel):
    """Error envelope returned by the customer store."""

    status: str = Field(default="error")
    message: str
    details: Any | None = None


NotificationSink = Callable[[Notification], None]
