"""
Explicit operation results.

Services never raise for expected outcomes. They return either ``Ok`` with
the payload or one of the failure kinds below, and the HTTP layer maps the
kind to a status code in one place (``app.api.responses``).
"""

from dataclasses import dataclass, field
from typing import Generic, List, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T = None


@dataclass(frozen=True)
class ValidationFailure:
    errors: List[str] = field(default_factory=list)

    @classmethod
    def single(cls, message: str) -> "ValidationFailure":
        return cls(errors=[message])

    @property
    def message(self) -> str:
        return "One or more validation errors occurred."


@dataclass(frozen=True)
class NotFound:
    message: str = "The requested resource was not found."


@dataclass(frozen=True)
class InvalidToken:
    message: str = "Invalid token"


@dataclass(frozen=True)
class Unauthorized:
    message: str = "You do not have permission to perform this action."


Failure = Union[ValidationFailure, NotFound, InvalidToken, Unauthorized]
Result = Union[Ok[T], Failure]


def is_ok(result: "Result") -> bool:
    return isinstance(result, Ok)
