from __future__ import annotations

from typing import List, Optional


class PlayingXIError(Exception):
    """Base for every rejection raised by the Playing XI engine.

    Raised before any mutation is committed. ``code`` is a stable machine
    readable identifier, ``message`` is meant for the end user. The budget
    fields are filled in for the team the request was about, when known.
    """

    status_code = 400

    def __init__(
        self,
        code: str,
        message: Optional[str] = None,
        *,
        transfers_remaining: Optional[int] = None,
        transfers_used: Optional[int] = None,
    ):
        super().__init__(message or code)
        self.code = code
        self.message = message or code
        self.transfers_remaining = transfers_remaining
        self.transfers_used = transfers_used

    @property
    def errors(self) -> List[str]:
        return [self.code]


class LineupValidationError(PlayingXIError):
    def __init__(self, errors: List[str], message: Optional[str] = None):
        super().__init__(errors[0] if errors else "validation_failed", message)
        self._errors = list(errors)

    @property
    def errors(self) -> List[str]:
        return self._errors


class BudgetExceededError(PlayingXIError):
    def __init__(
        self,
        code: str,
        message: str,
        *,
        transfers_used: int,
        transfers_remaining: int,
        transfers_this_match: int,
    ):
        super().__init__(
            code,
            message,
            transfers_remaining=transfers_remaining,
            transfers_used=transfers_used,
        )
        self.transfers_this_match = transfers_this_match


class SequenceError(PlayingXIError):
    status_code = 409


class ConcurrentSaveError(PlayingXIError):
    status_code = 409


class LockedMatchError(PlayingXIError):
    status_code = 423


class NotFoundError(PlayingXIError):
    status_code = 404
