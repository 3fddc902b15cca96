"""Failure taxonomy and the tagged result passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(Enum):
    """Every way a request can fail, with its HTTP status and wire code."""

    INVALID_JSON = (400, "Invalid JSON in request body")
    MISSING_SPECS = (400, "Product specifications are required and must be a non-empty string")
    SPECS_TOO_LONG = (400, "Product specifications are too long")
    METHOD_NOT_ALLOWED = (405, "Method Not Allowed")
    CONFIGURATION_ERROR = (500, "Server configuration error")
    EMPTY_UPSTREAM_RESPONSE = (500, "No AI response generated")
    MALFORMED_AI_JSON = (500, "Invalid AI response format")
    INCOMPLETE_AI_RESULT = (500, "Incomplete AI response")
    INVALID_PRICE_VALUE = (500, "Invalid price values in AI response")
    UPSTREAM_ERROR = (502, "AI service is temporarily unavailable. Please try again later.")
    INTERNAL_ERROR = (500, "Internal server error")

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.default_message = message

    @property
    def code(self) -> str:
        return self.name


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: Optional[str] = None
    details: Optional[str] = None
    status: Optional[int] = None
    raw_response: Optional[str] = None
    allowed_methods: Optional[List[str]] = None

    @property
    def status_code(self) -> int:
        return self.status or self.kind.status

    def envelope(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "error": self.message or self.kind.default_message,
            "code": self.kind.code,
        }
        if self.details is not None:
            body["details"] = self.details
        if self.raw_response is not None:
            body["raw_response"] = self.raw_response
        if self.allowed_methods is not None:
            body["allowed_methods"] = list(self.allowed_methods)
        return body


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    failure: Failure

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def fail(kind: ErrorKind, **kwargs: Any) -> Err:
    return Err(Failure(kind=kind, **kwargs))
