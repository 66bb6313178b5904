"""Position lifecycle: states, transition table and datum preconditions.

A listing side moves NO_LISTING -> LISTED -> NO_LISTING, a bid side
NO_BID -> BID -> NO_BID; change transitions are self-loops. Positions
that consume an existing UTxO must find a datum of the right variant
there.
"""

from __future__ import annotations

from enum import Enum

from nebula.core.errors import DecodeError, IllegalTransitionError, WrongVariantError
from nebula.core.result import Err, Ok
from nebula.core.types import UtcDatetime
from nebula.datum.codec import decode_trade_datum
from nebula.datum.types import Bid, Listing, TradeAction, TradeDatum
from nebula.ledger.utxo import Utxo


class PositionState(Enum):
    NO_LISTING = "NoListing"
    LISTED = "Listed"
    NO_BID = "NoBid"
    BID = "Bid"


class Transition(Enum):
    LIST = "list"
    CHANGE_LISTING = "changeListing"
    CANCEL_LISTING = "cancelListing"
    BUY = "buy"
    BID = "bid"
    BID_OPEN = "bidOpen"
    CHANGE_BID = "changeBid"
    CANCEL_BID = "cancelBid"
    SELL = "sell"


type TransitionTable = frozenset[tuple[PositionState, PositionState]]

TRADE_TRANSITIONS: TransitionTable = frozenset({
    (PositionState.NO_LISTING, PositionState.LISTED),
    (PositionState.LISTED, PositionState.LISTED),
    (PositionState.LISTED, PositionState.NO_LISTING),
    (PositionState.NO_BID, PositionState.BID),
    (PositionState.BID, PositionState.BID),
    (PositionState.BID, PositionState.NO_BID),
})

EDGES: dict[Transition, tuple[PositionState, PositionState]] = {
    Transition.LIST: (PositionState.NO_LISTING, PositionState.LISTED),
    Transition.CHANGE_LISTING: (PositionState.LISTED, PositionState.LISTED),
    Transition.CANCEL_LISTING: (PositionState.LISTED, PositionState.NO_LISTING),
    Transition.BUY: (PositionState.LISTED, PositionState.NO_LISTING),
    Transition.BID: (PositionState.NO_BID, PositionState.BID),
    Transition.BID_OPEN: (PositionState.NO_BID, PositionState.BID),
    Transition.CHANGE_BID: (PositionState.BID, PositionState.BID),
    Transition.CANCEL_BID: (PositionState.BID, PositionState.NO_BID),
    Transition.SELL: (PositionState.BID, PositionState.NO_BID),
}

# Redeemer used when a transition spends an existing position.
ACTIONS: dict[Transition, TradeAction] = {
    Transition.CHANGE_LISTING: TradeAction.CANCEL,
    Transition.CANCEL_LISTING: TradeAction.CANCEL,
    Transition.BUY: TradeAction.BUY,
    Transition.CHANGE_BID: TradeAction.CANCEL,
    Transition.CANCEL_BID: TradeAction.CANCEL,
    Transition.SELL: TradeAction.SELL,
}


def check_transition(
    from_state: PositionState,
    to_state: PositionState,
    transitions: TransitionTable = TRADE_TRANSITIONS,
) -> Ok[None] | Err[IllegalTransitionError]:
    """Validate a state transition against a transition table."""
    if (from_state, to_state) in transitions:
        return Ok(None)
    return Err(_illegal(from_state, to_state))


def _illegal(from_state: PositionState, to_state: PositionState) -> IllegalTransitionError:
    return IllegalTransitionError(
        message=f"Invalid transition: {from_state.value} -> {to_state.value}",
        code="ILLEGAL_TRANSITION",
        timestamp=UtcDatetime.now(),
        source="trade.lifecycle.check_transition",
        from_state=from_state.value,
        to_state=to_state.value,
    )


def state_of(datum: TradeDatum) -> PositionState:
    match datum:
        case Listing():
            return PositionState.LISTED
        case Bid():
            return PositionState.BID


def _empty_state(state: PositionState) -> PositionState:
    if state in (PositionState.LISTED, PositionState.NO_LISTING):
        return PositionState.NO_LISTING
    return PositionState.NO_BID


def _position[T](
    transition: Transition, utxo: Utxo, variant: type[T],
) -> Ok[T] | Err[DecodeError | WrongVariantError | IllegalTransitionError]:
    from_state, to_state = EDGES[transition]
    if utxo.datum is None:
        error = _illegal(_empty_state(from_state), to_state)
        return Err(error.with_context(f"{transition.value} at {utxo.out_ref} finds no position"))
    match decode_trade_datum(utxo.datum):
        case Err() as e:
            return e
        case Ok(datum):
            pass
    if not isinstance(datum, variant):
        return Err(WrongVariantError(
            message=f"{transition.value} needs a {variant.__name__} at {utxo.out_ref}, "
                    f"found {type(datum).__name__}",
            code="WRONG_VARIANT",
            timestamp=UtcDatetime.now(),
            source="trade.lifecycle.expect",
            expected=variant.__name__,
            actual=type(datum).__name__,
        ))
    match check_transition(state_of(datum), to_state):
        case Err() as e:
            return e
        case Ok(_):
            return Ok(datum)


def expect_listing(
    transition: Transition, utxo: Utxo,
) -> Ok[Listing] | Err[DecodeError | WrongVariantError | IllegalTransitionError]:
    """Decode the Listing that ``transition`` consumes."""
    return _position(transition, utxo, Listing)


def expect_bid(
    transition: Transition, utxo: Utxo,
) -> Ok[Bid] | Err[DecodeError | WrongVariantError | IllegalTransitionError]:
    """Decode the Bid that ``transition`` consumes."""
    return _position(transition, utxo, Bid)
