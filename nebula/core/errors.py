"""Error value hierarchy. No trade function raises exceptions.

Every error is a frozen dataclass value that can be pattern-matched,
serialized and shown to the caller. The split between "fix your input"
errors (ownership, constraints, funds) and ledger-side failures
(SubmissionError) is carried by the concrete type and its ``code``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import final

from nebula.core.types import UtcDatetime


@dataclass(frozen=True, slots=True)
class NebulaError:
    """Base error value. Not @final, it has subclasses."""

    message: str
    code: str
    timestamp: UtcDatetime
    source: str  # "module.function" that produced this error

    def with_context(self, context: str) -> NebulaError:
        """Return a copy with context prepended to message."""
        return replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "code": self.code,
            "timestamp": self.timestamp.value.isoformat(),
            "source": self.source,
        }


@final
@dataclass(frozen=True, slots=True)
class FieldViolation:
    """Describes a single field validation failure."""

    path: str  # e.g. "bid.lovelace"
    constraint: str  # e.g. "must be positive"
    actual_value: str


@final
@dataclass(frozen=True, slots=True)
class ValidationError(NebulaError):
    """Caller input failed validation."""

    fields: tuple[FieldViolation, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            **NebulaError.to_dict(self),
            "fields": [
                {"path": f.path, "constraint": f.constraint, "actual_value": f.actual_value}
                for f in self.fields
            ],
        }


@final
@dataclass(frozen=True, slots=True)
class DecodeError(NebulaError):
    """Datum bytes do not match the expected record shape."""

    expected: str

    def to_dict(self) -> dict[str, object]:
        return {**NebulaError.to_dict(self), "expected": self.expected}


@final
@dataclass(frozen=True, slots=True)
class WrongVariantError(NebulaError):
    """A trade datum decoded to the wrong tagged-union case."""

    expected: str
    actual: str

    def to_dict(self) -> dict[str, object]:
        return {**NebulaError.to_dict(self), "expected": self.expected, "actual": self.actual}


@final
@dataclass(frozen=True, slots=True)
class IllegalTransitionError(NebulaError):
    """Transition is not allowed from the position's current state."""

    from_state: str
    to_state: str

    def to_dict(self) -> dict[str, object]:
        return {
            **NebulaError.to_dict(self),
            "from_state": self.from_state,
            "to_state": self.to_state,
        }


@final
@dataclass(frozen=True, slots=True)
class NotOwnerError(NebulaError):
    """Caller's address is not the owner recorded in the datum."""

    owner: str
    caller: str

    def to_dict(self) -> dict[str, object]:
        return {**NebulaError.to_dict(self), "owner": self.owner, "caller": self.caller}


@final
@dataclass(frozen=True, slots=True)
class ConstraintUnsatisfiedError(NebulaError):
    """Candidate asset does not meet an open bid's type/trait constraints."""

    unit: str
    constraint: str

    def to_dict(self) -> dict[str, object]:
        return {**NebulaError.to_dict(self), "unit": self.unit, "constraint": self.constraint}


@final
@dataclass(frozen=True, slots=True)
class ReferenceNotFoundError(NebulaError):
    """The CIP-68 reference token needed to prove constraints is missing."""

    reference_unit: str

    def to_dict(self) -> dict[str, object]:
        return {**NebulaError.to_dict(self), "reference_unit": self.reference_unit}


@final
@dataclass(frozen=True, slots=True)
class InsufficientFundsError(NebulaError):
    """Royalty split drove the remaining lovelace to zero or below."""

    gross: int
    remainder: int
    recipient_index: int

    def to_dict(self) -> dict[str, object]:
        return {
            **NebulaError.to_dict(self),
            "gross": self.gross,
            "remainder": self.remainder,
            "recipient_index": self.recipient_index,
        }


@final
@dataclass(frozen=True, slots=True)
class ScriptsNotDeployedError(NebulaError):
    """No reference UTxO holds the trade validator."""

    deploy_tx_hash: str | None

    def to_dict(self) -> dict[str, object]:
        return {**NebulaError.to_dict(self), "deploy_tx_hash": self.deploy_tx_hash}


@final
@dataclass(frozen=True, slots=True)
class NoMatchingUtxoError(NebulaError):
    """A lookup by unit (royalty token, bid token, owned asset) found nothing."""

    unit: str

    def to_dict(self) -> dict[str, object]:
        return {**NebulaError.to_dict(self), "unit": self.unit}


@final
@dataclass(frozen=True, slots=True)
class LedgerQueryError(NebulaError):
    """The ledger query collaborator failed."""

    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**NebulaError.to_dict(self), "operation": self.operation}


@final
@dataclass(frozen=True, slots=True)
class SubmissionError(NebulaError):
    """Downstream rejection of a finished plan. Terminal, never retried here."""

    reason: str

    def to_dict(self) -> dict[str, object]:
        return {**NebulaError.to_dict(self), "reason": self.reason}
