"""Error taxonomy and verification results.

Configuration and structural problems raise. Invalid proofs do not: every
verifier returns a `VerificationResult` that is truthy on success and names
the failing check otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class E2ECoreError(Exception):
    """Base class for errors raised by e2e_core."""


class ConfigurationError(E2ECoreError, ValueError):
    """Election parameters violate a setup-time constraint."""


class StructuralError(E2ECoreError, ValueError):
    """A record or sequence is malformed (wrong length, out of range)."""


class Failure(Enum):
    SUBGROUP_MEMBERSHIP = "subgroup_membership"
    CHALLENGE_MISMATCH = "challenge_mismatch"
    EQUATION_MISMATCH = "equation_mismatch"
    STRUCTURAL = "structural"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a proof check

    Attributes
    - ok: True when every check passed
    - failure: the first check that failed, None on success
    - detail: short human readable context for diagnostics
    """

    ok: bool
    failure: Failure | None = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> "VerificationResult":
        return cls(ok=True)

    @classmethod
    def fail(cls, failure: Failure, detail: str = "") -> "VerificationResult":
        return cls(ok=False, failure=failure, detail=detail)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "failure": self.failure.value if self.failure else None,
            "detail": self.detail,
        }
