"""Typed result of one submission attempt."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from CrptKit.DocumentSubmit.errors import SubmissionFailure

__all__ = ["SubmissionOutcome"]


@dataclass(frozen=True)
class SubmissionOutcome:
    """Either the registry's raw response body or the failure that prevented it.

    Attributes:
        payload: Response body exactly as received, set only on success.
        error: Failure describing why the submission did not succeed.
    """

    payload: Optional[str] = None
    error: Optional[SubmissionFailure] = None

    def __post_init__(self) -> None:
        if (self.payload is None) == (self.error is None):
            raise ValueError("SubmissionOutcome requires exactly one of payload or error")

    @classmethod
    def succeeded(cls, payload: str) -> "SubmissionOutcome":
        return cls(payload=payload)

    @classmethod
    def failed(cls, error: SubmissionFailure) -> "SubmissionOutcome":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> Optional[int]:
        """HTTP status of a rejected submission; ``None`` otherwise."""
        return self.error.status_code if self.error is not None else None

    @property
    def message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def unwrap(self) -> str:
        """Return the payload, or raise the carried failure."""
        if self.error is not None:
            raise self.error
        assert self.payload is not None
        return self.payload
