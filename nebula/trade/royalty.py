"""Royalty record: creation, in-place update and lookup.

The record is a single UTxO holding the royalty token (label 500,
name "Royalty") under a one-shot policy, locked at the owner's
signature-script address with a RoyaltyInfo datum. Every settlement
reads it as a reference input; only the owner can replace its datum.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import final

from pycardano import NativeScript, ScriptPubkey, VerificationKeyHash

from nebula.core.errors import (
    DecodeError,
    FieldViolation,
    LedgerQueryError,
    NoMatchingUtxoError,
    NotOwnerError,
    ValidationError,
)
from nebula.core.identifiers import LABEL_ROYALTY, from_text, to_unit
from nebula.core.result import Err, Ok
from nebula.core.types import FrozenMap, UtcDatetime
from nebula.core.value import make_assets
from nebula.datum.address import address_to_plutus, payment_key_hash, script_address
from nebula.datum.codec import decode_royalty_info, encode_royalty_info
from nebula.datum.plutus import Constr, to_cbor
from nebula.datum.types import PubKeyCredential, RoyaltyInfo, RoyaltyRecipient
from nebula.infra.config import (
    DEFAULT_MIN_ADA,
    SLOT_CONFIGS,
    VALIDITY_SLOT,
    ContractConfig,
    Network,
    SlotConfig,
)
from nebula.infra.protocols import LedgerQuery, ScriptCompiler, Wallet
from nebula.ledger.fees import encode_fee_rate
from nebula.ledger.plan import AttachedScript, ScriptKind, SpendInput, TxOutput, TxPlan
from nebula.ledger.utxo import Utxo

ROYALTY_NAME: str = from_text("Royalty")

# Data.void(): the unit redeemer of the one-shot policy.
VOID_REDEEMER: bytes = to_cbor(Constr(0))


@final
@dataclass(frozen=True, slots=True)
class RoyaltyShare:
    """One recipient as a creator states it: bech32 address and a fraction of the price."""

    address: str
    rate: Decimal
    fixed_fee: int = 0


@final
@dataclass(frozen=True, slots=True)
class RoyaltyRecord:
    utxo: Utxo
    info: RoyaltyInfo


@final
@dataclass(frozen=True, slots=True)
class RoyaltyCreation:
    plan: TxPlan
    royalty_token: str


def _invalid(path: str, constraint: str, actual: str, source: str) -> ValidationError:
    return ValidationError(
        message=f"Invalid {path}: {constraint}",
        code="ROYALTY_VALIDATION",
        timestamp=UtcDatetime.now(),
        source=f"trade.royalty.{source}",
        fields=(FieldViolation(path=path, constraint=constraint, actual_value=actual),),
    )


def build_royalty_info(
    shares: Sequence[RoyaltyShare], min_ada: int = DEFAULT_MIN_ADA,
) -> Ok[RoyaltyInfo] | Err[ValidationError]:
    """Encode each rate and keep the recipients in the order given."""
    if min_ada < 0:
        return Err(_invalid("min_ada", "must be non-negative", str(min_ada), "build_royalty_info"))
    recipients: list[RoyaltyRecipient] = []
    for index, share in enumerate(shares):
        match address_to_plutus(share.address):
            case Err(reason):
                return Err(_invalid(
                    f"recipients[{index}].address", reason, share.address, "build_royalty_info",
                ))
            case Ok(address):
                pass
        if share.fixed_fee < 0:
            return Err(_invalid(
                f"recipients[{index}].fixed_fee", "must be non-negative",
                str(share.fixed_fee), "build_royalty_info",
            ))
        match encode_fee_rate(share.rate):
            case Err() as e:
                return e
            case Ok(fee):
                recipients.append(RoyaltyRecipient(
                    address=address, fee=fee, fixed_fee=share.fixed_fee,
                ))
    return Ok(RoyaltyInfo(recipients=tuple(recipients), min_ada=min_ada))


def owner_script(owner: str) -> Ok[ScriptPubkey] | Err[ValidationError]:
    """Signature script of ``owner``'s payment key."""
    match address_to_plutus(owner):
        case Err(reason):
            return Err(_invalid("owner", reason, owner, "owner_script"))
        case Ok(address):
            pass
    if not isinstance(address.payment, PubKeyCredential):
        return Err(_invalid("owner", "must have a key payment credential", owner, "owner_script"))
    return Ok(ScriptPubkey(VerificationKeyHash(bytes.fromhex(payment_key_hash(address)))))


def owner_script_address(script: NativeScript, network: Network) -> str:
    return script_address(script.hash().payload.hex(), None, network.cardano_network)


def create_royalty(
    wallet: Wallet,
    compiler: ScriptCompiler,
    network: Network,
    shares: Sequence[RoyaltyShare],
    owner: str,
    min_ada: int = DEFAULT_MIN_ADA,
    slot_config: SlotConfig | None = None,
) -> Ok[RoyaltyCreation] | Err[ValidationError | NoMatchingUtxoError | LedgerQueryError]:
    """Plan the one-shot mint of a royalty token and its record.

    The minting policy is parameterized by one of the wallet's own
    positions, which this plan spends, so the token can never be
    minted again.
    """
    match wallet.utxos():
        case Err() as e:
            return e
        case Ok(utxos):
            pass
    if not utxos:
        return Err(NoMatchingUtxoError(
            message=f"Wallet {wallet.address()} has no position to parameterize the policy",
            code="NO_MATCHING_UTXO",
            timestamp=UtcDatetime.now(),
            source="trade.royalty.create_royalty",
            unit="lovelace",
        ))
    seed = min(utxos, key=lambda u: u.out_ref)
    policy = compiler.one_shot_policy(seed.out_ref)

    match to_unit(policy.hash, ROYALTY_NAME, LABEL_ROYALTY):
        case Err(reason):
            return Err(_invalid("royalty_token", reason, policy.hash, "create_royalty"))
        case Ok(royalty_token):
            pass
    match build_royalty_info(shares, min_ada):
        case Err() as e:
            return e
        case Ok(info):
            pass
    match owner_script(owner):
        case Err() as e:
            return e
        case Ok(script):
            pass

    slots = slot_config or SLOT_CONFIGS[network]
    plan = TxPlan(
        inputs=(SpendInput(seed),),
        outputs=(TxOutput(
            address=owner_script_address(script, network),
            assets=make_assets({royalty_token: 1}),
            datum=encode_royalty_info(info),
        ),),
        mint=make_assets({royalty_token: 1}),
        mint_redeemers=FrozenMap(_entries=((policy.hash, VOID_REDEEMER),)),
        valid_from=slots.slot_to_unix_time(VALIDITY_SLOT),
        scripts=(AttachedScript(kind=ScriptKind.PLUTUS_V2, hash=policy.hash, cbor=policy.cbor),),
    )
    return Ok(RoyaltyCreation(plan=plan, royalty_token=royalty_token))


def find_royalty(
    ledger: LedgerQuery, royalty_token: str,
) -> Ok[RoyaltyRecord] | Err[NoMatchingUtxoError | DecodeError | LedgerQueryError]:
    match ledger.utxo_by_unit(royalty_token):
        case Err() as e:
            return e
        case Ok(utxo):
            pass
    if utxo is None or utxo.datum is None:
        return Err(NoMatchingUtxoError(
            message=f"No royalty record holds {royalty_token}",
            code="NO_MATCHING_UTXO",
            timestamp=UtcDatetime.now(),
            source="trade.royalty.find_royalty",
            unit=royalty_token,
        ))
    return decode_royalty_info(utxo.datum).map(lambda info: RoyaltyRecord(utxo=utxo, info=info))


def update_royalty(
    config: ContractConfig,
    ledger: LedgerQuery,
    wallet: Wallet,
    shares: Sequence[RoyaltyShare],
    min_ada: int = DEFAULT_MIN_ADA,
) -> Ok[TxPlan] | Err[
    ValidationError | NotOwnerError | NoMatchingUtxoError | LedgerQueryError
]:
    """Replace the royalty schedule, keeping the token where it is."""
    match address_to_plutus(wallet.address()), address_to_plutus(config.owner):
        case Ok(caller), Ok(owner) if caller.payment == owner.payment:
            pass
        case _:
            return Err(NotOwnerError(
                message="Only the contract owner can update the royalty schedule",
                code="NOT_OWNER",
                timestamp=UtcDatetime.now(),
                source="trade.royalty.update_royalty",
                owner=config.owner,
                caller=wallet.address(),
            ))
    match owner_script(config.owner):
        case Err() as e:
            return e
        case Ok(script):
            pass
    address = owner_script_address(script, config.network)
    match ledger.utxos_at_address_with_unit(address, config.royalty_token):
        case Err() as e:
            return e
        case Ok(found):
            pass
    if not found:
        return Err(NoMatchingUtxoError(
            message=f"No royalty record at {address} holds {config.royalty_token}",
            code="NO_MATCHING_UTXO",
            timestamp=UtcDatetime.now(),
            source="trade.royalty.update_royalty",
            unit=config.royalty_token,
        ))
    match build_royalty_info(shares, min_ada):
        case Err() as e:
            return e
        case Ok(info):
            pass
    record = found[0]
    script_hash = script.hash().payload.hex()
    return Ok(TxPlan(
        inputs=(SpendInput(record),),
        outputs=(TxOutput(address=address, assets=record.assets, datum=encode_royalty_info(info)),),
        required_signers=frozenset({script.key_hash.payload.hex()}),
        scripts=(AttachedScript(
            kind=ScriptKind.NATIVE, hash=script_hash, cbor=bytes.fromhex(script.to_cbor_hex()),
        ),),
    ))
