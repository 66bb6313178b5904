"""In-memory implementations of the collaborator protocols.

A UTxO arena keyed by OutRef, a wallet view over it, a submitter that
applies plans to the arena, and a deterministic script compiler. They
let the whole trade flow run without a node. None of them are
production code.
"""

from __future__ import annotations

import hashlib
from itertools import count
from typing import final

from nebula.core.errors import LedgerQueryError, SubmissionError
from nebula.core.identifiers import OutRef
from nebula.core.result import Err, Ok
from nebula.core.types import UtcDatetime
from nebula.core.value import (
    Assets,
    add_assets,
    lovelace_of,
    make_assets,
    negate_assets,
    with_lovelace,
)
from nebula.datum.address import address_to_plutus, payment_key_hash
from nebula.infra.config import DEFAULT_MIN_ADA
from nebula.infra.protocols import CompiledScript
from nebula.ledger.plan import TxPlan
from nebula.ledger.utxo import Utxo


def _query_error(operation: str, detail: str) -> LedgerQueryError:
    return LedgerQueryError(
        message=detail,
        code="LEDGER_QUERY_ERROR",
        timestamp=UtcDatetime.now(),
        source=f"memory_adapter.{operation}",
        operation=operation,
    )


def _rejected(reason: str) -> Err[SubmissionError]:
    return Err(SubmissionError(
        message=f"Transaction rejected: {reason}",
        code="SUBMISSION_REJECTED",
        timestamp=UtcDatetime.now(),
        source="memory_adapter.InMemorySubmitter.submit",
        reason=reason,
    ))


def _blake2b(data: bytes, digest_size: int) -> str:
    return hashlib.blake2b(data, digest_size=digest_size).hexdigest()


@final
class InMemoryLedger:
    """UTxO arena. Positions are added by transactions and removed when spent."""

    def __init__(self) -> None:
        self._utxos: dict[OutRef, Utxo] = {}
        self._genesis = count()

    def add(self, utxo: Utxo) -> None:
        self._utxos[utxo.out_ref] = utxo

    def fund(
        self,
        address: str,
        assets: Assets,
        datum: bytes | None = None,
        script_ref: bytes | None = None,
    ) -> Utxo:
        """Test-only helper: create a position out of thin air."""
        tx_hash = _blake2b(f"genesis/{next(self._genesis)}".encode(), 32)
        utxo = Utxo(
            out_ref=OutRef(tx_hash, 0),
            address=address,
            assets=assets,
            datum=datum,
            script_ref=script_ref,
        )
        self.add(utxo)
        return utxo

    def spend(self, out_ref: OutRef) -> Ok[Utxo] | Err[LedgerQueryError]:
        utxo = self._utxos.pop(out_ref, None)
        if utxo is None:
            return Err(_query_error("spend", f"UTxO not found: {out_ref}"))
        return Ok(utxo)

    def utxo_by_reference(
        self, out_ref: OutRef,
    ) -> Ok[Utxo | None] | Err[LedgerQueryError]:
        return Ok(self._utxos.get(out_ref))

    def utxos_at_address_with_unit(
        self, address: str, unit: str,
    ) -> Ok[tuple[Utxo, ...]] | Err[LedgerQueryError]:
        return Ok(tuple(
            u for u in self._sorted() if u.address == address and u.holds(unit)
        ))

    def utxo_by_unit(
        self, unit: str,
    ) -> Ok[Utxo | None] | Err[LedgerQueryError]:
        return Ok(next((u for u in self._sorted() if u.holds(unit)), None))

    def utxos_at_address(
        self, address: str,
    ) -> Ok[tuple[Utxo, ...]] | Err[LedgerQueryError]:
        return Ok(tuple(u for u in self._sorted() if u.address == address))

    def _sorted(self) -> list[Utxo]:
        return [self._utxos[ref] for ref in sorted(self._utxos)]

    def count(self) -> int:
        """Test-only helper."""
        return len(self._utxos)

    def all_utxos(self) -> tuple[Utxo, ...]:
        """Test-only helper."""
        return tuple(self._sorted())


@final
class InMemoryWallet:
    """A key wallet whose spendable positions live in an InMemoryLedger."""

    def __init__(self, ledger: InMemoryLedger, address: str) -> None:
        self._ledger = ledger
        self._address = address

    def address(self) -> str:
        return self._address

    def utxos(self) -> Ok[tuple[Utxo, ...]] | Err[LedgerQueryError]:
        return self._ledger.utxos_at_address(self._address)


@final
class InMemorySubmitter:
    """Balances a plan against the change address's positions and applies it.

    Builder duties modelled here: topping token-only outputs up to the
    minimum ada, selecting wallet positions to cover what the plan pays
    out, returning change, and checking that every required signer is
    the change address's key. Network fees are not modelled.
    """

    def __init__(self, ledger: InMemoryLedger, min_ada: int = DEFAULT_MIN_ADA) -> None:
        self._ledger = ledger
        self._min_ada = min_ada
        self._sequence = count()
        self._submitted: list[tuple[str, TxPlan]] = []

    def submit(
        self, plan: TxPlan, change_address: str,
    ) -> Ok[str] | Err[SubmissionError]:
        if plan.double_spends():
            refs = ", ".join(str(r) for r in plan.double_spends())
            return _rejected(f"inputs consumed twice: {refs}")
        for ref in plan.consumed:
            if self._ledger.utxo_by_reference(ref).unwrap_or(None) is None:
                return _rejected(f"input {ref} is spent or unknown")
        for utxo in plan.reference_inputs:
            if self._ledger.utxo_by_reference(utxo.out_ref).unwrap_or(None) is None:
                return _rejected(f"reference input {utxo.out_ref} is spent or unknown")

        match address_to_plutus(change_address):
            case Err(e):
                return _rejected(e)
            case Ok(owner):
                signer = payment_key_hash(owner)
        missing = plan.required_signers - {signer}
        if missing:
            return _rejected(f"missing signatures: {', '.join(sorted(missing))}")

        outputs = [
            (o.address, self._with_min_ada(o.assets), o.datum, o.script_ref)
            for o in plan.outputs
        ]
        spent = add_assets(*(i.utxo.assets for i in plan.inputs), plan.mint)
        paid = add_assets(*(assets for _, assets, _, _ in outputs))

        selected: list[Utxo] = []
        deficit = _deficit(paid, spent)
        wallet = self._ledger.utxos_at_address(change_address).unwrap_or(())
        for utxo in wallet:
            if not deficit:
                break
            if utxo.out_ref in plan.consumed:
                continue
            if any(u in deficit for u in utxo.assets):
                selected.append(utxo)
                spent = add_assets(spent, utxo.assets)
                deficit = _deficit(paid, spent)
        if deficit:
            units = ", ".join(sorted(deficit))
            return _rejected(f"insufficient funds at {change_address} for {units}")

        change = add_assets(spent, negate_assets(paid))
        if change:
            outputs.append((change_address, change, None, None))

        tx_hash = _blake2b(
            "|".join([str(next(self._sequence)), *(str(r) for r in plan.consumed)]).encode(),
            32,
        )
        for ref in (*plan.consumed, *(u.out_ref for u in selected)):
            self._ledger.spend(ref)
        for index, (address, assets, datum, script_ref) in enumerate(outputs):
            self._ledger.add(Utxo(
                out_ref=OutRef(tx_hash, index),
                address=address,
                assets=assets,
                datum=datum,
                script_ref=script_ref,
            ))
        self._submitted.append((tx_hash, plan))
        return Ok(tx_hash)

    def _with_min_ada(self, assets: Assets) -> Assets:
        return with_lovelace(assets, self._min_ada) if lovelace_of(assets) == 0 else assets

    def submitted(self) -> tuple[tuple[str, TxPlan], ...]:
        """Test-only helper."""
        return tuple(self._submitted)


def _deficit(paid: Assets, spent: Assets) -> Assets:
    """Units paid out beyond what the transaction has available."""
    net = add_assets(paid, negate_assets(spent))
    return make_assets((u, q) for u, q in net.items() if q > 0)


@final
class InMemoryScriptCompiler:
    """Deterministic stand-in for the validator blueprint compiler.

    Hashes are derived from the applied parameters, so distinct
    parameters give distinct scripts exactly as real compilation does.
    """

    def trade_validator(self, params: bytes) -> CompiledScript:
        cbor = b"nebula.trade/" + params
        return CompiledScript(hash=_blake2b(cbor, 28), cbor=cbor)

    def one_shot_policy(self, out_ref: OutRef) -> CompiledScript:
        cbor = f"nebula.oneshot/{out_ref}".encode()
        return CompiledScript(hash=_blake2b(cbor, 28), cbor=cbor)
