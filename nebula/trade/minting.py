"""Locking-token minting policy.

Every Bid carries exactly one locking token minted under a native
script ``any[after slot 0, sig(trade script hash)]``. The token name
is "Bid" + asset name for a specific bid and "OpenBid" for an open
bid. The signature clause can only be met by the trade validator,
so off-chain the rule is enforced by ``authorize_mint``: the net mint
of each locking unit must equal the tokens entering the trade script
minus the tokens leaving it, and minting transactions start at the
reference validity slot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from pycardano import InvalidBefore, NativeScript, ScriptAny, ScriptPubkey, VerificationKeyHash

from nebula.core.errors import FieldViolation, ValidationError
from nebula.core.identifiers import from_text, to_unit
from nebula.core.result import Err, Ok
from nebula.core.types import UtcDatetime
from nebula.core.value import make_assets, units_under_policy
from nebula.datum.address import address_to_plutus
from nebula.datum.types import ScriptCredential
from nebula.ledger.plan import AttachedScript, ScriptKind, TxPlan

BID_PREFIX: str = from_text("Bid")
OPEN_BID_NAME: str = from_text("OpenBid")


def _invalid(path: str, constraint: str, actual: str, source: str) -> ValidationError:
    return ValidationError(
        message=f"Invalid {path}: {constraint}",
        code="MINT_VALIDATION",
        timestamp=UtcDatetime.now(),
        source=f"trade.minting.{source}",
        fields=(FieldViolation(path=path, constraint=constraint, actual_value=actual),),
    )


@final
@dataclass(frozen=True, slots=True)
class LockingPolicy:
    """The native script behind locking tokens and its policy id."""

    trade_hash: str
    policy_id: str
    cbor: bytes

    @staticmethod
    def for_trade_script(trade_hash: str) -> LockingPolicy:
        script = locking_script(trade_hash)
        return LockingPolicy(
            trade_hash=trade_hash,
            policy_id=script.hash().payload.hex(),
            cbor=bytes.fromhex(script.to_cbor_hex()),
        )

    @property
    def attached(self) -> AttachedScript:
        return AttachedScript(kind=ScriptKind.NATIVE, hash=self.policy_id, cbor=self.cbor)

    def bid_token(self, asset_name: str) -> Ok[str] | Err[ValidationError]:
        """Locking token of a specific bid on ``asset_name``."""
        match to_unit(self.policy_id, BID_PREFIX + asset_name):
            case Err(reason):
                return Err(_invalid("asset_name", reason, asset_name, "bid_token"))
            case Ok(unit):
                return Ok(unit)

    @property
    def open_bid_token(self) -> str:
        return self.policy_id + OPEN_BID_NAME

    def mint(self, unit: str, valid_from: int) -> TxPlan:
        return TxPlan(
            mint=make_assets({unit: 1}), valid_from=valid_from, scripts=(self.attached,),
        )

    def burn(self, unit: str, valid_from: int) -> TxPlan:
        return TxPlan(
            mint=make_assets({unit: -1}), valid_from=valid_from, scripts=(self.attached,),
        )


def locking_script(trade_hash: str) -> NativeScript:
    return ScriptAny([
        InvalidBefore(0),
        ScriptPubkey(VerificationKeyHash(bytes.fromhex(trade_hash))),
    ])


def _at_trade_script(address: str, trade_hash: str) -> bool:
    match address_to_plutus(address):
        case Ok(plutus):
            return plutus.payment == ScriptCredential(trade_hash)
        case Err(_):
            return False


def authorize_mint(
    plan: TxPlan, policy: LockingPolicy, validity_start: int,
) -> Ok[TxPlan] | Err[ValidationError]:
    """Check every locking-token mint or burn in ``plan`` against the trade flow."""
    units = set(units_under_policy(plan.mint, policy.policy_id))
    units.update(
        u for i in plan.inputs for u in units_under_policy(i.utxo.assets, policy.policy_id)
    )
    units.update(
        u for o in plan.outputs for u in units_under_policy(o.assets, policy.policy_id)
    )
    for unit in sorted(units):
        entering = sum(
            o.assets.get(unit, 0) or 0
            for o in plan.outputs
            if _at_trade_script(o.address, policy.trade_hash)
        )
        leaving = sum(
            i.utxo.assets.get(unit, 0) or 0
            for i in plan.inputs
            if _at_trade_script(i.utxo.address, policy.trade_hash)
        )
        minted = plan.mint.get(unit, 0) or 0
        if minted != entering - leaving:
            return Err(_invalid(
                "mint",
                f"net mint {minted} must equal {entering - leaving} "
                "(entering minus leaving the trade script)",
                unit,
                "authorize_mint",
            ))
    if units_under_policy(plan.mint, policy.policy_id) and (
        plan.valid_from is None or plan.valid_from < validity_start
    ):
        return Err(_invalid(
            "valid_from",
            f"must be at least {validity_start}",
            str(plan.valid_from),
            "authorize_mint",
        ))
    return Ok(plan)
