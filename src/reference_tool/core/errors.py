"""
Error taxonomy for lookups and network builds.

Failures are tagged with a kind so that retry and abort decisions
are a function of the tag alone, never of the message text.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class LookupErrorKind(str, Enum):
    """
    Classification of a failed paper lookup.

    - NOT_FOUND: The identifier does not resolve to a record
    - TRANSIENT: Timeout, rate limit, 5xx or transport failure (retryable)
    - MALFORMED: The identifier or request is syntactically invalid
    - FATAL: The service cannot be used at all (auth rejected, bad payload)
    """

    NOT_FOUND = "not_found"
    TRANSIENT = "transient"
    MALFORMED = "malformed"
    FATAL = "fatal"


class BuildErrorKind(str, Enum):
    """Why a network build failed as a whole."""

    ROOT_UNREACHABLE = "root_unreachable"
    FATAL = "fatal"
    CANCELLED = "cancelled"


class PaperLookupError(Exception):
    """A lookup against the remote citation database failed."""

    def __init__(
        self,
        kind: LookupErrorKind,
        message: str,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.cause = cause

    @property
    def retryable(self) -> bool:
        return self.kind is LookupErrorKind.TRANSIENT

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.args[0]}"


class NetworkBuildError(Exception):
    """Building a citation network failed; no network is returned."""

    def __init__(
        self,
        kind: BuildErrorKind,
        message: str,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.cause = cause

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.args[0]}"


class OperationCancelled(Exception):
    """Raised when a wait is interrupted by a fired CancelToken."""
