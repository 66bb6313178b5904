"""Declarative transaction plan.

A TxPlan lists what a transition needs from the ledger: inputs spent
with a redeemer, outputs created with datum and assets, tokens minted
or burned, required signers, a validity start, read-only reference
inputs and the scripts to attach. An external builder balances fees,
adds change to the caller's wallet, signs and submits.

Plans compose: ``a.compose(b)`` is the single atomic plan doing both.
Building a plan has no side effects.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import final

from nebula.core.identifiers import OutRef
from nebula.core.types import FrozenMap
from nebula.core.value import EMPTY_ASSETS, Assets, add_assets
from nebula.ledger.utxo import Utxo


class ScriptKind(Enum):
    NATIVE = "NATIVE"
    PLUTUS_V2 = "PLUTUS_V2"


@final
@dataclass(frozen=True, slots=True)
class AttachedScript:
    kind: ScriptKind
    hash: str
    cbor: bytes


@final
@dataclass(frozen=True, slots=True)
class SpendInput:
    """A consumed position. ``redeemer`` is None for key or native-script spends."""

    utxo: Utxo
    redeemer: bytes | None = None


@final
@dataclass(frozen=True, slots=True)
class TxOutput:
    address: str
    assets: Assets
    datum: bytes | None = None
    script_ref: bytes | None = None


@final
@dataclass(frozen=True, slots=True)
class TxPlan:
    inputs: tuple[SpendInput, ...] = ()
    outputs: tuple[TxOutput, ...] = ()
    mint: Assets = EMPTY_ASSETS
    mint_redeemers: FrozenMap[str, bytes] = field(default=FrozenMap.EMPTY)
    required_signers: frozenset[str] = frozenset()
    valid_from: int | None = None  # POSIX milliseconds
    reference_inputs: tuple[Utxo, ...] = ()
    scripts: tuple[AttachedScript, ...] = ()

    def compose(self, other: TxPlan) -> TxPlan:
        """Merge two plans into one atomic plan.

        Inputs and outputs keep their order (self first). Mints are summed
        per unit, so a mint and a burn of the same token cancel out.
        Reference inputs and scripts are de-duplicated, the validity start
        is the later of the two.
        """
        refs = {u.out_ref: u for u in self.reference_inputs}
        for u in other.reference_inputs:
            refs.setdefault(u.out_ref, u)
        scripts = {s.hash: s for s in self.scripts}
        for s in other.scripts:
            scripts.setdefault(s.hash, s)
        redeemers = {**self.mint_redeemers.to_dict(), **other.mint_redeemers.to_dict()}
        starts = [v for v in (self.valid_from, other.valid_from) if v is not None]
        return TxPlan(
            inputs=self.inputs + other.inputs,
            outputs=self.outputs + other.outputs,
            mint=add_assets(self.mint, other.mint),
            mint_redeemers=FrozenMap(_entries=tuple(sorted(redeemers.items()))),
            required_signers=self.required_signers | other.required_signers,
            valid_from=max(starts) if starts else None,
            reference_inputs=tuple(refs.values()),
            scripts=tuple(scripts.values()),
        )

    @property
    def consumed(self) -> tuple[OutRef, ...]:
        return tuple(i.utxo.out_ref for i in self.inputs)

    def double_spends(self) -> tuple[OutRef, ...]:
        """Positions this plan would consume more than once."""
        counts = Counter(self.consumed)
        return tuple(sorted(ref for ref, n in counts.items() if n > 1))


EMPTY_PLAN = TxPlan()


def compose_all(plans: list[TxPlan]) -> TxPlan:
    plan = EMPTY_PLAN
    for p in plans:
        plan = plan.compose(p)
    return plan
