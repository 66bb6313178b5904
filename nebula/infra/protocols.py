"""Collaborator contracts for the trade core.

Trade code depends on these abstractions; node clients, wallets and
script compilers implement them. Ledger and submission failures are
values in the type system, never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, final, runtime_checkable

from nebula.core.errors import LedgerQueryError, SubmissionError
from nebula.core.identifiers import OutRef
from nebula.core.result import Err, Ok
from nebula.ledger.plan import TxPlan
from nebula.ledger.utxo import Utxo


@final
@dataclass(frozen=True, slots=True)
class CompiledScript:
    """A Plutus script ready to attach or deploy, with its hash."""

    hash: str
    cbor: bytes


@runtime_checkable
class LedgerQuery(Protocol):
    """Read access to the UTxO set. Results carry assets and inline datums."""

    def utxo_by_reference(
        self, out_ref: OutRef,
    ) -> Ok[Utxo | None] | Err[LedgerQueryError]: ...

    def utxos_at_address_with_unit(
        self, address: str, unit: str,
    ) -> Ok[tuple[Utxo, ...]] | Err[LedgerQueryError]: ...

    def utxo_by_unit(
        self, unit: str,
    ) -> Ok[Utxo | None] | Err[LedgerQueryError]: ...

    def utxos_at_address(
        self, address: str,
    ) -> Ok[tuple[Utxo, ...]] | Err[LedgerQueryError]: ...


@runtime_checkable
class Wallet(Protocol):
    """The caller: its address and spendable positions."""

    def address(self) -> str: ...

    def utxos(self) -> Ok[tuple[Utxo, ...]] | Err[LedgerQueryError]: ...


@runtime_checkable
class TxSubmitter(Protocol):
    """Balances, signs and submits a plan; change goes to ``change_address``.

    Returns the transaction id. A rejection is terminal for this call.
    """

    def submit(
        self, plan: TxPlan, change_address: str,
    ) -> Ok[str] | Err[SubmissionError]: ...


@runtime_checkable
class ScriptCompiler(Protocol):
    """Applies parameters to the pre-audited validator blueprints."""

    def trade_validator(self, params: bytes) -> CompiledScript: ...

    def one_shot_policy(self, out_ref: OutRef) -> CompiledScript: ...
