"""Outcome types for remote calls and whole actions.

Remote-call wrappers return a CallResult instead of raising, and each
action returns an ActionResult which the runner turns into console
output and an exit code.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureReason(str, Enum):
    """Why an action or remote call failed."""

    ARGUMENTS = "arguments"
    PLATFORM = "platform"
    PRECONDITION = "precondition"
    CONNECTION = "connection"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Failure:
    """A typed failure with an optional nested error text."""

    reason: FailureReason
    message: str
    detail: str | None = None

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Success value or failure of a single remote call."""

    value: T | None = None
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        """Whether the call succeeded."""
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "CallResult[T]":
        """Wrap a successful return value."""
        return cls(value=value)

    @classmethod
    def failed(
        cls,
        reason: FailureReason,
        message: str,
        detail: str | None = None,
    ) -> "CallResult[T]":
        """Build a failed result."""
        return cls(failure=Failure(reason=reason, message=message, detail=detail))

    def unwrap(self) -> T:
        """Return the value of a successful result.

        Raises:
            ValueError: If called on a failed result
        """
        if self.failure is not None:
            raise ValueError(f"unwrap() on failed result: {self.failure}")
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class ActionResult:
    """Final outcome of one action invocation."""

    success: bool
    message: str
    failure: Failure | None = None

    @property
    def exit_code(self) -> int:
        """Process exit code for the console (0 success, 1 failure)."""
        return 0 if self.success else 1

    @classmethod
    def succeeded(cls, message: str) -> "ActionResult":
        """Successful action with a confirmation message."""
        return cls(success=True, message=message)

    @classmethod
    def from_failure(cls, failure: Failure) -> "ActionResult":
        """Failed action carrying the failure that stopped it."""
        return cls(success=False, message=str(failure), failure=failure)

    @classmethod
    def failed(
        cls,
        reason: FailureReason,
        message: str,
        detail: str | None = None,
    ) -> "ActionResult":
        """Failed action built from its parts."""
        return cls.from_failure(Failure(reason=reason, message=message, detail=detail))
