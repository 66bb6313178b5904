"""Ledger positions (UTxOs) as immutable records keyed by OutRef."""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from nebula.core.identifiers import OutRef
from nebula.core.value import Assets, lovelace_of


@final
@dataclass(frozen=True, slots=True)
class Utxo:
    """An unspent output: where it lives, what it holds, its inline datum."""

    out_ref: OutRef
    address: str
    assets: Assets
    datum: bytes | None = None
    script_ref: bytes | None = None

    @property
    def lovelace(self) -> int:
        return lovelace_of(self.assets)

    def holds(self, unit: str) -> bool:
        return (self.assets.get(unit, 0) or 0) > 0
