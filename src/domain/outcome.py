from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class OutcomeKind(StrEnum):
    APPLIED = "APPLIED"
    IGNORED = "IGNORED"
    FATAL = "FATAL"


@dataclass(frozen=True)
class Outcome:
    """Result of applying one transaction record.

    IGNORED outcomes leave every balance untouched; only the router decides
    that a FATAL outcome ends the run.
    """

    kind: OutcomeKind
    reason: str | None = None

    @classmethod
    def applied(cls) -> Outcome:
        return cls(OutcomeKind.APPLIED)

    @classmethod
    def ignored(cls, reason: str) -> Outcome:
        return cls(OutcomeKind.IGNORED, reason)

    @classmethod
    def fatal(cls, reason: str) -> Outcome:
        return cls(OutcomeKind.FATAL, reason)

    @property
    def is_applied(self) -> bool:
        return self.kind == OutcomeKind.APPLIED

    @property
    def is_ignored(self) -> bool:
        return self.kind == OutcomeKind.IGNORED

    @property
    def is_fatal(self) -> bool:
        return self.kind == OutcomeKind.FATAL
