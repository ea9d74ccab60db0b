"""
Structured validation of untyped payloads.

Pydantic already reports every failing field; this module folds its error
types into the four reasons callers care about so that the HTTP layer and any
other consumer can report problems without knowing pydantic internals.
"""

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

MISSING = "missing"
WRONG_TYPE = "wrong_type"
OUT_OF_RANGE = "out_of_range"
INVALID = "invalid"

_OUT_OF_RANGE_TYPES = {
    "greater_than",
    "greater_than_equal",
    "less_than",
    "less_than_equal",
    "too_short",
    "too_long",
    "string_too_short",
    "string_too_long",
    "literal_error",
    "enum",
    "multiple_of",
}

# Location prefixes FastAPI adds in front of the field path
_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


@dataclass(frozen=True)
class FieldError:
    field: str
    reason: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class SchemaValidationError(ValueError):
    """Raised when a payload does not satisfy an insert or update shape."""

    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        fields = ", ".join(f"{e.field} ({e.reason})" for e in errors)
        super().__init__(f"Validation failed: {fields}")


def classify_error_type(error_type: str) -> str:
    """Map a pydantic error type to one of the field error reasons."""
    if error_type == "missing":
        return MISSING
    if error_type in _OUT_OF_RANGE_TYPES:
        return OUT_OF_RANGE
    if error_type.endswith("_type") or error_type.endswith("_parsing"):
        return WRONG_TYPE
    return INVALID


def field_errors_from(errors: Iterable[Mapping[str, Any]]) -> list[FieldError]:
    """Convert pydantic / FastAPI error dicts to FieldErrors."""
    result = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] in _REQUEST_LOCATIONS:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "__root__"
        result.append(
            FieldError(
                field=field,
                reason=classify_error_type(error.get("type", "")),
                message=error.get("msg", ""),
            )
        )
    return result


def validate_payload(model: type[ModelT], payload: Any) -> ModelT:
    """
    Validate an untyped payload against a schema model.

    Args:
        model: Insert or update shape to validate against
        payload: Anything, usually a decoded JSON object

    Returns:
        The normalized model instance

    Raises:
        SchemaValidationError: listing every violated field
    """
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise SchemaValidationError(field_errors_from(exc.errors())) from exc
