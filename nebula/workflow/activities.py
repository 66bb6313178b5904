"""Activity implementation for durable settlement.

The activity is a thin IO wrapper: it resolves the requested
positions, lets the Marketplace plan and submit, and reports the
outcome as a value. Domain errors are results, not activity failures,
so Temporal never retries a rejected transition.
"""

from __future__ import annotations

from collections.abc import Sequence

from temporalio import activity

from nebula.core.errors import FieldViolation, NebulaError, NoMatchingUtxoError, ValidationError
from nebula.core.identifiers import OutRef
from nebula.core.result import Err, Ok, sequence
from nebula.core.types import UtcDatetime
from nebula.ledger.utxo import Utxo
from nebula.trade.contract import SellOrder, TraitConstraint
from nebula.trade.marketplace import Marketplace, TxResult
from nebula.workflow.types import (
    SettlementOutcome,
    SettlementResult,
    TransitionKind,
    TransitionRequest,
)


def _invalid(path: str, constraint: str, actual: str) -> ValidationError:
    return ValidationError(
        message=f"Invalid {path}: {constraint}",
        code="REQUEST_VALIDATION",
        timestamp=UtcDatetime.now(),
        source="workflow.activities.execute",
        fields=(FieldViolation(path=path, constraint=constraint, actual_value=actual),),
    )


def _position(market: Marketplace, raw: str) -> Ok[Utxo] | Err[NebulaError]:
    match OutRef.parse(raw):
        case Err(reason):
            return Err(_invalid("out_refs", reason, raw))
        case Ok(out_ref):
            pass
    match market.get_listing_or_bid(out_ref):
        case Err() as e:
            return e
        case Ok(None):
            return Err(NoMatchingUtxoError(
                message=f"Position {raw} is spent or unknown",
                code="NO_MATCHING_UTXO",
                timestamp=UtcDatetime.now(),
                source="workflow.activities.execute",
                unit=raw,
            ))
        case Ok(utxo):
            return Ok(utxo)


def _positions(
    market: Marketplace, request: TransitionRequest, count: int | None = None,
) -> Ok[list[Utxo]] | Err[NebulaError]:
    if count is not None and len(request.out_refs) != count:
        return Err(_invalid(
            "out_refs", f"{request.kind} takes exactly {count}", str(len(request.out_refs)),
        ))
    return sequence(_position(market, raw) for raw in request.out_refs)


def _lovelace(request: TransitionRequest) -> Ok[int] | Err[ValidationError]:
    if request.lovelace is None:
        return Err(_invalid("lovelace", f"required for {request.kind}", "None"))
    return Ok(request.lovelace)


def _asset_name(request: TransitionRequest, index: int = 0) -> str | None:
    if index >= len(request.asset_names) or not request.asset_names[index]:
        return None
    return request.asset_names[index]


def _name_required(request: TransitionRequest) -> Ok[str] | Err[ValidationError]:
    name = _asset_name(request)
    if name is None:
        return Err(_invalid("asset_names", f"{request.kind} needs an asset name", "()"))
    return Ok(name)


def _sell_orders(utxos: Sequence[Utxo], request: TransitionRequest) -> list[SellOrder]:
    return [SellOrder(bid_utxo=u, asset_name=_asset_name(request, i)) for i, u in enumerate(utxos)]


def execute(market: Marketplace, request: TransitionRequest) -> TxResult:  # noqa: PLR0911
    """Dispatch a request to the matching Marketplace transition."""
    match request.kind:
        case TransitionKind.LIST:
            return _name_required(request).bind(
                lambda name: _lovelace(request).bind(
                    lambda lovelace: market.list(name, lovelace, request.private_listing)))
        case TransitionKind.BID:
            return _name_required(request).bind(
                lambda name: _lovelace(request).bind(
                    lambda lovelace: market.bid(name, lovelace)))
        case TransitionKind.BID_OPEN:
            traits = [TraitConstraint(trait=t.trait, negation=t.negation) for t in request.traits]
            return _lovelace(request).bind(
                lambda lovelace: market.bid_open(lovelace, request.types, traits))
        case TransitionKind.CHANGE_LISTING:
            return _positions(market, request, 1).bind(
                lambda utxos: _lovelace(request).bind(
                    lambda lovelace: market.change_listing(
                        utxos[0], lovelace, request.private_listing)))
        case TransitionKind.CHANGE_BID:
            return _positions(market, request, 1).bind(
                lambda utxos: _lovelace(request).bind(
                    lambda lovelace: market.change_bid(utxos[0], lovelace)))
        case TransitionKind.CANCEL_LISTING:
            return _positions(market, request, 1).bind(
                lambda utxos: market.cancel_listing(utxos[0]))
        case TransitionKind.CANCEL_BID:
            return _positions(market, request, 1).bind(
                lambda utxos: market.cancel_bid(utxos[0]))
        case TransitionKind.BUY:
            return _positions(market, request).bind(market.buy)
        case TransitionKind.SELL:
            return _positions(market, request).bind(
                lambda utxos: market.sell(_sell_orders(utxos, request)))
        case TransitionKind.CANCEL_LISTING_AND_SELL:
            return _positions(market, request, 2).bind(
                lambda utxos: market.cancel_listing_and_sell(
                    utxos[0], utxos[1], _asset_name(request)))
        case TransitionKind.CANCEL_BID_AND_BUY:
            return _positions(market, request, 2).bind(
                lambda utxos: market.cancel_bid_and_buy(utxos[0], utxos[1]))


class SettlementActivities:
    """Activities bound to one Marketplace (ledger, wallet, submitter)."""

    def __init__(self, marketplace: Marketplace) -> None:
        self._marketplace = marketplace

    @activity.defn(name="execute_transition")
    def execute_transition(self, request: TransitionRequest) -> SettlementResult:
        """Plan and submit one transition.

        Synchronous: submission blocks on the ledger, so the worker runs
        this on its activity executor, off the event loop.

        Timeout: 60s | Retries: none (a rejected transaction is terminal)
        Idempotent: no, callers must not re-run a submitted request
        """
        activity.logger.info("Executing %s for request %s", request.kind, request.request_id)
        match execute(self._marketplace, request):
            case Ok(tx_hash):
                activity.logger.info("Request %s submitted as %s", request.request_id, tx_hash)
                return SettlementResult(
                    request_id=request.request_id,
                    outcome=SettlementOutcome.SUBMITTED,
                    tx_hash=tx_hash,
                )
            case Err(error):
                activity.logger.warning(
                    "Request %s rejected: %s", request.request_id, error.code,
                )
                return SettlementResult(
                    request_id=request.request_id,
                    outcome=SettlementOutcome.REJECTED,
                    error_code=error.code,
                    error_message=error.message,
                )
