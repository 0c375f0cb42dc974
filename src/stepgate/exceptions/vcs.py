"""Version-control exceptions."""

from __future__ import annotations

from stepgate.exceptions.base import StepgateError


class NoRepositoryError(StepgateError):
    """Raised when no git metadata is discoverable or git cannot be queried."""


class NoChangesError(StepgateError):
    """Raised when the diff against the base reference is empty.

    Carries the latest commit subject so callers can still route the change.
    """

    def __init__(self, message: str, *, subject: str = "", base_ref: str | None = None) -> None:
        super().__init__(message)
        self.subject = subject
        self.base_ref = base_ref
