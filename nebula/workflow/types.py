"""Workflow data types for durable settlement.

Positions travel as "tx_hash#index" strings and asset names as hex,
so every payload is plain JSON for Temporal's default converter.

All types: @final @dataclass(frozen=True, slots=True).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import final


class TransitionKind(StrEnum):
    LIST = "list"
    CHANGE_LISTING = "change_listing"
    CANCEL_LISTING = "cancel_listing"
    BUY = "buy"
    BID = "bid"
    BID_OPEN = "bid_open"
    CHANGE_BID = "change_bid"
    CANCEL_BID = "cancel_bid"
    SELL = "sell"
    CANCEL_LISTING_AND_SELL = "cancel_listing_and_sell"
    CANCEL_BID_AND_BUY = "cancel_bid_and_buy"


class SettlementOutcome(StrEnum):
    """Terminal states of the settlement workflow."""

    SUBMITTED = "Submitted"
    REJECTED = "Rejected"


@final
@dataclass(frozen=True, slots=True)
class TraitSpec:
    trait: str
    negation: bool = False


@final
@dataclass(frozen=True, slots=True)
class TransitionRequest:
    """One marketplace transition to plan and submit.

    ``out_refs`` lists the positions consumed, in the order the
    transition takes them: listings for buy, bids for sell, listing
    then bid for cancel_listing_and_sell, bid then listing for
    cancel_bid_and_buy. For sell, ``asset_names`` pairs with
    ``out_refs``; an empty string means the bid needs no name.

    The request_id serves as Temporal Workflow ID for natural idempotency.
    """

    request_id: str
    kind: TransitionKind
    out_refs: tuple[str, ...] = ()
    asset_names: tuple[str, ...] = ()
    lovelace: int | None = None
    private_listing: str | None = None
    types: tuple[str, ...] = ()
    traits: tuple[TraitSpec, ...] = ()


@final
@dataclass(frozen=True, slots=True)
class SettlementResult:
    request_id: str
    outcome: SettlementOutcome
    tx_hash: str | None = None
    error_code: str | None = None
    error_message: str | None = None
