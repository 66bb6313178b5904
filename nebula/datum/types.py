"""Record types carried in trade, payment and royalty datums.

All byte-valued fields are lowercase hex strings; the codec converts
them to raw bytes. Sum types are unions of @final dataclasses and are
consumed with exhaustive ``match`` statements.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from nebula.core.identifiers import OutRef
from nebula.core.value import Assets

# ---------------------------------------------------------------------------
# On-chain address form
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class PubKeyCredential:
    hash: str


@final
@dataclass(frozen=True, slots=True)
class ScriptCredential:
    hash: str


type Credential = PubKeyCredential | ScriptCredential


@final
@dataclass(frozen=True, slots=True)
class StakeInline:
    credential: Credential


@final
@dataclass(frozen=True, slots=True)
class StakePointer:
    slot: int
    tx_index: int
    cert_index: int


type StakeCredential = StakeInline | StakePointer


@final
@dataclass(frozen=True, slots=True)
class PlutusAddress:
    """Address as the validator sees it: payment credential + optional stake part."""

    payment: Credential
    stake: StakeCredential | None = None


# ---------------------------------------------------------------------------
# TradeDatum: Listing | Bid
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class Listing:
    owner: PlutusAddress
    requested_lovelace: int
    private_listing: PlutusAddress | None = None


@final
@dataclass(frozen=True, slots=True)
class SpecificValue:
    """Bid for an exact asset bundle."""

    assets: Assets


@final
@dataclass(frozen=True, slots=True)
class TraitFilter:
    """negated=False: trait must be present; negated=True: trait must be absent."""

    negated: bool
    trait: str


@final
@dataclass(frozen=True, slots=True)
class SpecificSymbolWithConstraints:
    """Open bid: any asset of ``policy_id`` whose metadata passes the filters."""

    policy_id: str
    types: tuple[str, ...] = ()
    traits: tuple[TraitFilter, ...] = ()

    @property
    def is_constrained(self) -> bool:
        return bool(self.types or self.traits)


type RequestedOption = SpecificValue | SpecificSymbolWithConstraints


@final
@dataclass(frozen=True, slots=True)
class Bid:
    owner: PlutusAddress
    requested_option: RequestedOption


type TradeDatum = Listing | Bid


class TradeAction(Enum):
    """Redeemer selecting the validator branch. Values are constructor indices."""

    SELL = 0
    BUY = 1
    CANCEL = 2


# ---------------------------------------------------------------------------
# Payment back-reference and royalty schedule
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class PaymentDatum:
    out_ref: OutRef


@final
@dataclass(frozen=True, slots=True)
class RoyaltyRecipient:
    """``fee`` is the encoded rate: a recipient gets floor(gross * 10 / fee)."""

    address: PlutusAddress
    fee: int
    fixed_fee: int

    def __post_init__(self) -> None:
        if self.fee < 1:
            raise TypeError(f"RoyaltyRecipient.fee must be >= 1, got {self.fee}")


@final
@dataclass(frozen=True, slots=True)
class RoyaltyInfo:
    """Ordered schedule. Payout order is recipient order."""

    recipients: tuple[RoyaltyRecipient, ...]
    min_ada: int


# ---------------------------------------------------------------------------
# Trade validator parameters
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TradeParams:
    """Parameters the trade validator is compiled with."""

    protocol_key: str | None
    type_key: str
    traits_key: str
    reference_label: str
    royalty_policy_id: str
    royalty_asset_name: str
