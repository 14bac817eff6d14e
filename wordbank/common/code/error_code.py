"""Ledger error codes.

Every failure the ledger surfaces to a caller is an ``ErrCodeError`` built
from one of these codes, e.g.::

    raise ErrCode.INVALID_PARAMETER.with_messages("Amount must be positive")
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ErrCode(IntEnum):
    """Machine-readable error codes, grouped by thousand."""

    # Generic
    UNKNOWN_ERROR = 1000
    INVALID_PARAMETER = 1001

    # Lookups
    BALANCE_NOT_FOUND = 4000
    MODEL_NOT_FOUND = 4001

    # Billing
    INSUFFICIENT_BALANCE = 5000
    BALANCE_REQUIRED = 5001

    # Storage
    CONCURRENCY_CONFLICT = 6000

    @property
    def title(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def retryable(self) -> bool:
        """Whether repeating the whole operation from scratch may succeed."""
        return self is ErrCode.CONCURRENCY_CONFLICT

    def with_messages(self, *messages: str) -> ErrCodeError:
        return ErrCodeError(self, messages)

    def with_errors(self, *errors: BaseException) -> ErrCodeError:
        return ErrCodeError(self, tuple(str(err) for err in errors if err))

    def with_details(self, message: str, **details: Any) -> ErrCodeError:
        return ErrCodeError(self, (message,), details)


class ErrCodeError(Exception):
    """Exception carrying an ``ErrCode`` plus human messages and structured details."""

    def __init__(
        self,
        code: ErrCode,
        messages: tuple[str, ...] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.messages = tuple(m for m in messages if m)
        self.details = dict(details or {})
        super().__init__(self._format())

    def _format(self) -> str:
        head = f"[{self.code.name}({self.code.value})]"
        if self.messages:
            return f"{head} {'; '.join(self.messages)}"
        return head

    @property
    def retryable(self) -> bool:
        return self.code.retryable

    def as_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": int(self.code)}
        if self.messages:
            body["msg"] = self.messages[0]
            rest = list(self.messages[1:])
            if rest:
                body["info"] = rest
        else:
            body["msg"] = self.code.title
            body["info"] = []
        if self.details:
            body["details"] = self.details
        return body
