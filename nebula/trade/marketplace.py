"""Marketplace: the result surface over the trade state machine.

Every transition is planned by TradeContract and, if the plan is
valid, handed to the submitter once. A rejected submission is returned
as a terminal SubmissionError; refreshing positions and resubmitting
is the caller's decision.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import final

from nebula.core.errors import NebulaError
from nebula.core.identifiers import OutRef
from nebula.core.result import Err, Ok
from nebula.infra.config import DEFAULT_MIN_ADA, Network
from nebula.infra.protocols import LedgerQuery, ScriptCompiler, TxSubmitter, Wallet
from nebula.ledger.utxo import Utxo
from nebula.trade import royalty
from nebula.trade.contract import (
    BidEntry,
    ContractHashes,
    ListingEntry,
    PlanResult,
    SellOrder,
    TradeContract,
    TraitConstraint,
)
from nebula.trade.royalty import RoyaltyRecord, RoyaltyShare

logger = logging.getLogger(__name__)

type TxResult = Ok[str] | Err[NebulaError]


@final
class Marketplace:
    """Plan, submit, return the transaction id."""

    def __init__(
        self,
        contract: TradeContract,
        ledger: LedgerQuery,
        submitter: TxSubmitter,
    ) -> None:
        self._contract = contract
        self._ledger = ledger
        self._submitter = submitter

    @property
    def contract(self) -> TradeContract:
        return self._contract

    def _submit(self, operation: str, planned: PlanResult) -> TxResult:
        match planned:
            case Err(error):
                logger.warning("%s rejected before submission: %s %s",
                               operation, error.code, error.message)
                return Err(error)
            case Ok(plan):
                pass
        match self._submitter.submit(plan, self._contract.wallet.address()):
            case Err(error):
                logger.warning("%s submission failed: %s", operation, error.reason)
                return Err(error)
            case Ok(tx_hash):
                logger.info("%s submitted: %d inputs, %d outputs, tx %s",
                            operation, len(plan.inputs), len(plan.outputs), tx_hash)
                return Ok(tx_hash)

    # -- listings ----------------------------------------------------------

    def list(self, asset_name: str, lovelace: int, private_listing: str | None = None) -> TxResult:
        return self._submit("list", self._contract.list(asset_name, lovelace, private_listing))

    def change_listing(
        self, listing_utxo: Utxo, lovelace: int, private_listing: str | None = None,
    ) -> TxResult:
        return self._submit(
            "change_listing",
            self._contract.change_listing(listing_utxo, lovelace, private_listing),
        )

    def cancel_listing(self, listing_utxo: Utxo) -> TxResult:
        return self._submit("cancel_listing", self._contract.cancel_listing(listing_utxo))

    def buy(self, listing_utxos: Sequence[Utxo]) -> TxResult:
        return self._submit("buy", self._contract.buy(listing_utxos))

    # -- bids --------------------------------------------------------------

    def bid(self, asset_name: str, lovelace: int) -> TxResult:
        return self._submit("bid", self._contract.bid(asset_name, lovelace))

    def bid_open(
        self,
        lovelace: int,
        types: Sequence[str] = (),
        traits: Sequence[TraitConstraint] = (),
    ) -> TxResult:
        return self._submit("bid_open", self._contract.bid_open(lovelace, types, traits))

    def change_bid(self, bid_utxo: Utxo, lovelace: int) -> TxResult:
        return self._submit("change_bid", self._contract.change_bid(bid_utxo, lovelace))

    def cancel_bid(self, bid_utxo: Utxo) -> TxResult:
        return self._submit("cancel_bid", self._contract.cancel_bid(bid_utxo))

    def sell(self, orders: Sequence[SellOrder]) -> TxResult:
        return self._submit("sell", self._contract.sell(orders))

    def cancel_listing_and_sell(
        self, listing_utxo: Utxo, bid_utxo: Utxo, asset_name: str | None = None,
    ) -> TxResult:
        return self._submit(
            "cancel_listing_and_sell",
            self._contract.cancel_listing_and_sell(listing_utxo, bid_utxo, asset_name),
        )

    def cancel_bid_and_buy(self, bid_utxo: Utxo, listing_utxo: Utxo) -> TxResult:
        return self._submit(
            "cancel_bid_and_buy", self._contract.cancel_bid_and_buy(bid_utxo, listing_utxo),
        )

    # -- administration ----------------------------------------------------

    def deploy_scripts(self) -> TxResult:
        return self._submit("deploy_scripts", self._contract.deploy_scripts())

    def update_royalty(
        self, shares: Sequence[RoyaltyShare], min_ada: int = DEFAULT_MIN_ADA,
    ) -> TxResult:
        planned: PlanResult = royalty.update_royalty(
            self._contract.config, self._ledger, self._contract.wallet, shares, min_ada,
        )
        return self._submit("update_royalty", planned)

    # -- queries -----------------------------------------------------------

    def get_listings(self, asset_name: str) -> Ok[tuple[ListingEntry, ...]] | Err[NebulaError]:
        return self._contract.get_listings(asset_name)

    def get_bids(self, asset_name: str) -> Ok[tuple[BidEntry, ...]] | Err[NebulaError]:
        return self._contract.get_bids(asset_name)

    def get_listing_or_bid(self, out_ref: OutRef) -> Ok[Utxo | None] | Err[NebulaError]:
        return self._contract.get_listing_or_bid(out_ref)

    def get_royalty(self) -> Ok[RoyaltyRecord] | Err[NebulaError]:
        return self._contract.get_royalty()

    def get_deployed_scripts(self) -> Ok[Utxo] | Err[NebulaError]:
        return self._contract.get_deployed_scripts()

    def get_contract_hashes(self) -> ContractHashes:
        return self._contract.get_contract_hashes()


def create_royalty(  # noqa: PLR0913
    wallet: Wallet,
    compiler: ScriptCompiler,
    submitter: TxSubmitter,
    network: Network,
    shares: Sequence[RoyaltyShare],
    owner: str,
    min_ada: int = DEFAULT_MIN_ADA,
) -> Ok[tuple[str, str]] | Err[NebulaError]:
    """Mint a collection's royalty token; returns (tx id, royalty token unit).

    Runs before any TradeContract exists: the royalty token is part of
    the contract configuration.
    """
    match royalty.create_royalty(wallet, compiler, network, shares, owner, min_ada):
        case Err(error):
            logger.warning("create_royalty rejected before submission: %s %s",
                           error.code, error.message)
            return Err(error)
        case Ok(creation):
            pass
    match submitter.submit(creation.plan, wallet.address()):
        case Err(error):
            logger.warning("create_royalty submission failed: %s", error.reason)
            return Err(error)
        case Ok(tx_hash):
            logger.info("create_royalty submitted: token %s, tx %s",
                        creation.royalty_token, tx_hash)
            return Ok((tx_hash, creation.royalty_token))
