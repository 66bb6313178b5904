"""Trade state machine: every marketplace transition as a pure plan.

Each public transition decodes the positions it touches, checks
ownership and variant, runs the Matcher and the Fee Engine, and
returns one TxPlan, or the first error found. Nothing is submitted
here. Batches compose per-order plans and fail as a whole.

Output order inside a settlement follows the validator: royalty
payouts first, then the counter-party payment, then the protocol fund.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import final

from nebula.core.errors import (
    FieldViolation,
    LedgerQueryError,
    NebulaError,
    NoMatchingUtxoError,
    NotOwnerError,
    ScriptsNotDeployedError,
    ValidationError,
)
from nebula.core.identifiers import LOVELACE, AssetName, OutRef, from_text
from nebula.core.result import Err, Ok, sequence
from nebula.core.types import UtcDatetime
from nebula.core.value import (
    EMPTY_ASSETS,
    Assets,
    add_assets,
    contains_assets,
    make_assets,
    units_under_policy,
    with_lovelace,
)
from nebula.datum.address import (
    address_to_plutus,
    payment_key_hash,
    plutus_to_address,
    script_address,
)
from nebula.datum.cip68 import decode_reference_datum
from nebula.datum.codec import (
    decode_trade_datum,
    encode_payment_datum,
    encode_trade_action,
    encode_trade_datum,
    encode_trade_params,
)
from nebula.datum.types import (
    Bid,
    Listing,
    PaymentDatum,
    PlutusAddress,
    RequestedOption,
    SpecificSymbolWithConstraints,
    SpecificValue,
    StakeInline,
    TraitFilter,
)
from nebula.infra.config import PROTOCOL_FUND_ADDRESS, ContractConfig
from nebula.infra.protocols import LedgerQuery, ScriptCompiler, Wallet
from nebula.ledger.fees import split
from nebula.ledger.plan import EMPTY_PLAN, SpendInput, TxOutput, TxPlan, compose_all
from nebula.ledger.utxo import Utxo
from nebula.trade import lifecycle, matcher
from nebula.trade.lifecycle import Transition
from nebula.trade.minting import BID_PREFIX, LockingPolicy, authorize_mint
from nebula.trade.royalty import RoyaltyRecord, find_royalty, owner_script, owner_script_address

# get_bids() key for open bids.
OPEN_BIDS: str = "Open"

type PlanResult = Ok[TxPlan] | Err[NebulaError]


@final
@dataclass(frozen=True, slots=True)
class TraitConstraint:
    """An open-bid trait filter as text. ``negation`` asks for the trait to be absent."""

    trait: str
    negation: bool = False


@final
@dataclass(frozen=True, slots=True)
class SellOrder:
    bid_utxo: Utxo
    asset_name: str | None = None


@final
@dataclass(frozen=True, slots=True)
class ListingEntry:
    utxo: Utxo
    listing: Listing


@final
@dataclass(frozen=True, slots=True)
class BidEntry:
    utxo: Utxo
    bid: Bid


@final
@dataclass(frozen=True, slots=True)
class ContractHashes:
    script_hash: str
    nft_policy_id: str
    bid_policy_id: str


def _invalid(path: str, constraint: str, actual: str, source: str) -> ValidationError:
    return ValidationError(
        message=f"Invalid {path}: {constraint}",
        code="TRADE_VALIDATION",
        timestamp=UtcDatetime.now(),
        source=f"trade.contract.{source}",
        fields=(FieldViolation(path=path, constraint=constraint, actual_value=actual),),
    )


def _positive(path: str, value: int, source: str) -> Ok[int] | Err[ValidationError]:
    if value <= 0:
        return Err(_invalid(path, "must be positive", str(value), source))
    return Ok(value)


def _no_match(unit: str, message: str, source: str) -> NoMatchingUtxoError:
    return NoMatchingUtxoError(
        message=message,
        code="NO_MATCHING_UTXO",
        timestamp=UtcDatetime.now(),
        source=f"trade.contract.{source}",
        unit=unit,
    )


@final
class TradeContract:
    """Plans marketplace transitions for one collection.

    The trade validator is compiled once from the configuration; its
    hash fixes the trade address and the locking-token policy.
    """

    def __init__(
        self,
        config: ContractConfig,
        ledger: LedgerQuery,
        wallet: Wallet,
        compiler: ScriptCompiler,
    ) -> None:
        self._config = config
        self._ledger = ledger
        self._wallet = wallet
        self.trade_validator = compiler.trade_validator(encode_trade_params(config.trade_params()))
        self.trade_hash = self.trade_validator.hash
        self.trade_address = script_address(self.trade_hash, None, config.cardano_network)
        self.locking = LockingPolicy.for_trade_script(self.trade_hash)
        self.mint_policy_id = self.locking.policy_id

    @property
    def config(self) -> ContractConfig:
        return self._config

    @property
    def wallet(self) -> Wallet:
        return self._wallet

    # -----------------------------------------------------------------------
    # Listings
    # -----------------------------------------------------------------------

    def list(
        self, asset_name: str, lovelace: int, private_listing: str | None = None,
    ) -> PlanResult:
        """Offer ``asset_name`` of the collection for ``lovelace``."""
        match self._asset_unit(asset_name, "list"), _positive("lovelace", lovelace, "list"):
            case Ok(unit), Ok(_):
                pass
            case (Err() as e, _) | (_, Err() as e):
                return e
        match self._optional_address(private_listing, "list"):
            case Err() as e:
                return e
            case Ok(private):
                pass
        match self._caller():
            case Err() as e:
                return e
            case Ok(caller):
                pass
        wanted = make_assets({unit: 1})
        match self._holds(wanted, "list"):
            case Err() as e:
                return e
            case Ok(_):
                pass
        datum = Listing(owner=caller, requested_lovelace=lovelace, private_listing=private)
        return self._seal(TxPlan(outputs=(TxOutput(
            address=self._trade_address_for(caller),
            assets=wanted,
            datum=encode_trade_datum(datum),
        ),)))

    def change_listing(
        self, listing_utxo: Utxo, lovelace: int, private_listing: str | None = None,
    ) -> PlanResult:
        """Reprice a listing in place: same asset, new price or buyer restriction."""
        match lifecycle.expect_listing(Transition.CHANGE_LISTING, listing_utxo):
            case Err() as e:
                return e
            case Ok(listing):
                pass
        match self._require_owner(listing.owner, "change_listing"):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match _positive("lovelace", lovelace, "change_listing"):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match self._optional_address(private_listing, "change_listing"):
            case Err() as e:
                return e
            case Ok(private):
                pass
        relisted = Listing(
            owner=listing.owner, requested_lovelace=lovelace, private_listing=private,
        )
        match self._spend(listing_utxo, Transition.CHANGE_LISTING, payment_key_hash(listing.owner)):
            case Err() as e:
                return e
            case Ok(spend):
                pass
        return self._seal(spend.compose(TxPlan(outputs=(TxOutput(
            address=listing_utxo.address,
            assets=listing_utxo.assets,
            datum=encode_trade_datum(relisted),
        ),))))

    def cancel_listing(self, listing_utxo: Utxo) -> PlanResult:
        return self._cancel_listing(listing_utxo).bind(self._seal)

    def buy(self, listing_utxos: Sequence[Utxo]) -> PlanResult:
        """Settle one or more listings in a single transaction."""
        if not listing_utxos:
            return Err(_invalid("listing_utxos", "must not be empty", "()", "buy"))
        return (
            sequence(self._buy(u) for u in listing_utxos)
            .map(compose_all)
            .bind(self._seal)
        )

    def _cancel_listing(self, listing_utxo: Utxo) -> PlanResult:
        match lifecycle.expect_listing(Transition.CANCEL_LISTING, listing_utxo):
            case Err() as e:
                return e
            case Ok(listing):
                pass
        match self._require_owner(listing.owner, "cancel_listing"):
            case Err() as e:
                return e
            case Ok(_):
                pass
        return self._spend(listing_utxo, Transition.CANCEL_LISTING, payment_key_hash(listing.owner))

    def _buy(self, listing_utxo: Utxo) -> PlanResult:
        match lifecycle.expect_listing(Transition.BUY, listing_utxo):
            case Err() as e:
                return e
            case Ok(listing):
                pass
        payment = encode_payment_datum(PaymentDatum(out_ref=listing_utxo.out_ref))
        signer = (
            None if listing.private_listing is None
            else payment_key_hash(listing.private_listing)
        )
        match self._spend(listing_utxo, Transition.BUY, signer):
            case Err() as e:
                return e
            case Ok(spend):
                pass
        match self._pay_fees(listing.requested_lovelace, payment):
            case Err() as e:
                return e
            case Ok((fees, remainder)):
                pass
        seller = TxPlan(outputs=(TxOutput(
            address=plutus_to_address(listing.owner, self._config.cardano_network),
            assets=make_assets({LOVELACE: remainder}),
            datum=payment,
        ),))
        return Ok(compose_all([spend, fees, seller, self._protocol_fund()]))

    # -----------------------------------------------------------------------
    # Bids
    # -----------------------------------------------------------------------

    def bid(self, asset_name: str, lovelace: int) -> PlanResult:
        """Lock ``lovelace`` for one specific asset of the collection."""
        match self._asset_unit(asset_name, "bid"), _positive("lovelace", lovelace, "bid"):
            case Ok(unit), Ok(_):
                pass
            case (Err() as e, _) | (_, Err() as e):
                return e
        match self.locking.bid_token(asset_name):
            case Err() as e:
                return e
            case Ok(token):
                pass
        option = SpecificValue(assets=make_assets({unit: 1}))
        return self._place_bid(option, token, lovelace, "bid")

    def bid_open(
        self,
        lovelace: int,
        types: Sequence[str] = (),
        traits: Sequence[TraitConstraint] = (),
    ) -> PlanResult:
        """Lock ``lovelace`` for any asset of the collection passing the filters."""
        match _positive("lovelace", lovelace, "bid_open"):
            case Err() as e:
                return e
            case Ok(_):
                pass
        option = SpecificSymbolWithConstraints(
            policy_id=self._config.policy_id,
            types=tuple(from_text(t) for t in types),
            traits=tuple(TraitFilter(negated=t.negation, trait=from_text(t.trait)) for t in traits),
        )
        return self._place_bid(option, self.locking.open_bid_token, lovelace, "bid_open")

    def change_bid(self, bid_utxo: Utxo, lovelace: int) -> PlanResult:
        """Change the locked amount; datum and locking token stay."""
        match lifecycle.expect_bid(Transition.CHANGE_BID, bid_utxo):
            case Err() as e:
                return e
            case Ok(bid):
                pass
        match self._require_owner(bid.owner, "change_bid"):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match _positive("lovelace", lovelace, "change_bid"):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match self._spend(bid_utxo, Transition.CHANGE_BID, payment_key_hash(bid.owner)):
            case Err() as e:
                return e
            case Ok(spend):
                pass
        return self._seal(spend.compose(TxPlan(outputs=(TxOutput(
            address=bid_utxo.address,
            assets=with_lovelace(bid_utxo.assets, lovelace),
            datum=bid_utxo.datum,
        ),))))

    def cancel_bid(self, bid_utxo: Utxo) -> PlanResult:
        return self._cancel_bid(bid_utxo).bind(self._seal)

    def sell(self, orders: Sequence[SellOrder]) -> PlanResult:
        """Accept one or more bids in a single transaction.

        Open bids need the ``asset_name`` being sold into them. The
        requested assets are delivered from the wallet by the builder.
        """
        if not orders:
            return Err(_invalid("orders", "must not be empty", "()", "sell"))
        return (
            sequence(self._sell(o.bid_utxo, o.asset_name) for o in orders)
            .map(compose_all)
            .bind(self._seal)
        )

    def _place_bid(
        self, option: RequestedOption, token: str, lovelace: int, source: str,
    ) -> PlanResult:
        match self._caller():
            case Err() as e:
                return e
            case Ok(caller):
                pass
        match self._holds(make_assets({LOVELACE: lovelace}), source):
            case Err() as e:
                return e
            case Ok(_):
                pass
        datum = Bid(owner=caller, requested_option=option)
        placed = TxPlan(outputs=(TxOutput(
            address=self._trade_address_for(caller),
            assets=make_assets({LOVELACE: lovelace, token: 1}),
            datum=encode_trade_datum(datum),
        ),))
        return self._seal(self.locking.mint(token, self._config.validity_start).compose(placed))

    def _cancel_bid(self, bid_utxo: Utxo) -> PlanResult:
        match lifecycle.expect_bid(Transition.CANCEL_BID, bid_utxo):
            case Err() as e:
                return e
            case Ok(bid):
                pass
        match self._require_owner(bid.owner, "cancel_bid"):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match self._locking_token(bid_utxo, "cancel_bid"):
            case Err() as e:
                return e
            case Ok(token):
                pass
        return self._spend(
            bid_utxo, Transition.CANCEL_BID, payment_key_hash(bid.owner),
        ).map(lambda spend: spend.compose(self.locking.burn(token, self._config.validity_start)))

    def _sell(self, bid_utxo: Utxo, asset_name: str | None) -> PlanResult:
        match lifecycle.expect_bid(Transition.SELL, bid_utxo):
            case Err() as e:
                return e
            case Ok(bid):
                pass
        match self._locking_token(bid_utxo, "sell"):
            case Err() as e:
                return e
            case Ok(token):
                pass
        match self._resolve(bid, asset_name):
            case Err() as e:
                return e
            case Ok((resolution, proof)):
                pass
        payment = encode_payment_datum(PaymentDatum(out_ref=bid_utxo.out_ref))
        match self._spend(bid_utxo, Transition.SELL, None):
            case Err() as e:
                return e
            case Ok(spend):
                pass
        match self._pay_fees(bid_utxo.lovelace, payment):
            case Err() as e:
                return e
            case Ok((fees, _)):
                pass
        buyer = TxPlan(outputs=(TxOutput(
            address=plutus_to_address(bid.owner, self._config.cardano_network),
            assets=resolution.requested_assets,
            datum=payment,
        ),))
        burn = self.locking.burn(token, self._config.validity_start)
        return Ok(compose_all([spend, proof, fees, buyer, burn, self._protocol_fund()]))

    def _resolve(
        self, bid: Bid, asset_name: str | None,
    ) -> Ok[tuple[matcher.Resolution, TxPlan]] | Err[NebulaError]:
        """Resolve the bid; a reference proof becomes a read-only input."""
        match matcher.requirement(bid.requested_option, asset_name):
            case Err() as e:
                return e
            case Ok(resolution):
                pass
        if resolution.reference_unit is None:
            return Ok((resolution, EMPTY_PLAN))
        match self._ledger.utxo_by_unit(resolution.reference_unit):
            case Err() as e:
                return e
            case Ok(reference):
                pass
        metadata = None
        if reference is not None and reference.datum is not None:
            match decode_reference_datum(
                reference.datum,
                from_text(self._config.type_key),
                from_text(self._config.traits_key),
            ):
                case Err() as e:
                    return e
                case Ok(metadata):
                    pass
        match matcher.resolve(bid.requested_option, asset_name, metadata):
            case Err() as e:
                return e
            case Ok(_):
                pass
        proof = EMPTY_PLAN if reference is None else TxPlan(reference_inputs=(reference,))
        return Ok((resolution, proof))

    # -----------------------------------------------------------------------
    # Composite transitions
    # -----------------------------------------------------------------------

    def cancel_listing_and_sell(
        self, listing_utxo: Utxo, bid_utxo: Utxo, asset_name: str | None = None,
    ) -> PlanResult:
        """Withdraw a listing and sell the asset into a bid, atomically."""
        return sequence([
            self._cancel_listing(listing_utxo),
            self._sell(bid_utxo, asset_name),
        ]).map(compose_all).bind(self._seal)

    def cancel_bid_and_buy(self, bid_utxo: Utxo, listing_utxo: Utxo) -> PlanResult:
        """Withdraw a bid and buy a listing instead, atomically."""
        return sequence([
            self._cancel_bid(bid_utxo),
            self._buy(listing_utxo),
        ]).map(compose_all).bind(self._seal)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def get_listings(
        self, asset_name: str,
    ) -> Ok[tuple[ListingEntry, ...]] | Err[LedgerQueryError]:
        """Listings of ``asset_name``, highest asking price first.

        Positions at the trade address that carry anything besides ada
        and the asset, or whose datum is not a Listing, are not listings.
        """
        unit = self._config.policy_id + asset_name
        match self._ledger.utxos_at_address_with_unit(self.trade_address, unit):
            case Err() as e:
                return e
            case Ok(utxos):
                pass
        entries = []
        for utxo in utxos:
            if len(utxo.assets) != 2 or utxo.datum is None:
                continue
            match decode_trade_datum(utxo.datum):
                case Ok(Listing() as listing):
                    entries.append(ListingEntry(utxo=utxo, listing=listing))
                case _:
                    continue
        entries.sort(key=lambda e: (-e.listing.requested_lovelace, e.utxo.out_ref))
        return Ok(tuple(entries))

    def get_bids(self, asset_name: str) -> Ok[tuple[BidEntry, ...]] | Err[LedgerQueryError]:
        """Bids on ``asset_name``, or open bids for OPEN_BIDS; largest first."""
        token = (
            self.locking.open_bid_token if asset_name == OPEN_BIDS
            else self.mint_policy_id + BID_PREFIX + asset_name
        )
        match self._ledger.utxos_at_address_with_unit(self.trade_address, token):
            case Err() as e:
                return e
            case Ok(utxos):
                pass
        entries = []
        for utxo in utxos:
            if len(utxo.assets) != 2 or utxo.datum is None:
                continue
            match decode_trade_datum(utxo.datum):
                case Ok(Bid() as bid):
                    entries.append(BidEntry(utxo=utxo, bid=bid))
                case _:
                    continue
        entries.sort(key=lambda e: (-e.utxo.lovelace, e.utxo.out_ref))
        return Ok(tuple(entries))

    def get_listing_or_bid(self, out_ref: OutRef) -> Ok[Utxo | None] | Err[LedgerQueryError]:
        return self._ledger.utxo_by_reference(out_ref)

    def get_royalty(self) -> Ok[RoyaltyRecord] | Err[NebulaError]:
        return find_royalty(self._ledger, self._config.royalty_token)

    def get_deployed_scripts(
        self,
    ) -> Ok[Utxo] | Err[ScriptsNotDeployedError | LedgerQueryError]:
        """The reference position holding the trade validator: output 0 of the deploy tx."""
        deploy_tx_hash = self._config.deploy_tx_hash
        if deploy_tx_hash is not None:
            match self._ledger.utxo_by_reference(OutRef(deploy_tx_hash, 0)):
                case Err() as e:
                    return e
                case Ok(utxo) if utxo is not None:
                    return Ok(utxo)
                case Ok(_):
                    pass
        return Err(ScriptsNotDeployedError(
            message="Trade validator is not deployed as a reference script",
            code="SCRIPTS_NOT_DEPLOYED",
            timestamp=UtcDatetime.now(),
            source="trade.contract.get_deployed_scripts",
            deploy_tx_hash=deploy_tx_hash,
        ))

    def get_contract_hashes(self) -> ContractHashes:
        return ContractHashes(
            script_hash=self.trade_hash,
            nft_policy_id=self._config.policy_id,
            bid_policy_id=self.mint_policy_id,
        )

    def deploy_scripts(self) -> PlanResult:
        """Park the trade validator as a reference script under the owner's key."""
        match owner_script(self._config.owner):
            case Err() as e:
                return e
            case Ok(script):
                pass
        return Ok(TxPlan(outputs=(TxOutput(
            address=owner_script_address(script, self._config.network),
            assets=EMPTY_ASSETS,
            script_ref=self.trade_validator.cbor,
        ),)))

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _seal(self, plan: TxPlan) -> PlanResult:
        """Final checks on a complete plan: no position spent twice, mints authorized."""
        if plan.double_spends():
            refs = ", ".join(str(r) for r in plan.double_spends())
            return Err(_invalid("inputs", "a position can be consumed only once", refs, "seal"))
        return authorize_mint(plan, self.locking, self._config.validity_start)

    def _caller(self) -> Ok[PlutusAddress] | Err[ValidationError]:
        address = self._wallet.address()
        match address_to_plutus(address):
            case Err(reason):
                return Err(_invalid("wallet.address", reason, address, "caller"))
            case Ok(caller):
                return Ok(caller)

    def _require_owner(
        self, owner: PlutusAddress, source: str,
    ) -> Ok[PlutusAddress] | Err[ValidationError | NotOwnerError]:
        match self._caller():
            case Err() as e:
                return e
            case Ok(caller) if caller == owner:
                return Ok(caller)
            case Ok(_):
                shown = plutus_to_address(owner, self._config.cardano_network)
                return Err(NotOwnerError(
                    message=f"Caller {self._wallet.address()} does not own this position",
                    code="NOT_OWNER",
                    timestamp=UtcDatetime.now(),
                    source=f"trade.contract.{source}",
                    owner=shown,
                    caller=self._wallet.address(),
                ))

    def _trade_address_for(self, caller: PlutusAddress) -> str:
        """Trade address, delegated to the caller's stake key when they have one."""
        if isinstance(caller.stake, StakeInline):
            return script_address(self.trade_hash, caller.stake, self._config.cardano_network)
        return self.trade_address

    def _asset_unit(self, asset_name: str, source: str) -> Ok[str] | Err[ValidationError]:
        match AssetName.parse(asset_name):
            case Err(reason):
                return Err(_invalid("asset_name", reason, asset_name, source))
            case Ok(_):
                return Ok(self._config.policy_id + asset_name)

    def _optional_address(
        self, bech32: str | None, source: str,
    ) -> Ok[PlutusAddress | None] | Err[ValidationError]:
        if bech32 is None:
            return Ok(None)
        match address_to_plutus(bech32):
            case Err(reason):
                return Err(_invalid("private_listing", reason, bech32, source))
            case Ok(address):
                return Ok(address)

    def _holds(
        self, wanted: Assets, source: str,
    ) -> Ok[None] | Err[NoMatchingUtxoError | LedgerQueryError]:
        """The wallet must hold at least ``wanted``."""
        match self._wallet.utxos():
            case Err() as e:
                return e
            case Ok(utxos):
                pass
        held = add_assets(*(u.assets for u in utxos))
        if contains_assets(held, wanted):
            return Ok(None)
        missing = next(u for u, q in wanted.items() if (held.get(u, 0) or 0) < q)
        return Err(_no_match(missing, f"Wallet does not hold enough {missing}", source))

    def _locking_token(self, bid_utxo: Utxo, source: str) -> Ok[str] | Err[NoMatchingUtxoError]:
        tokens = units_under_policy(bid_utxo.assets, self.mint_policy_id)
        if not tokens:
            return Err(_no_match(
                self.mint_policy_id, f"No locking token in bid {bid_utxo.out_ref}", source,
            ))
        return Ok(tokens[0])

    def _spend(
        self, utxo: Utxo, transition: Transition, signer: str | None,
    ) -> Ok[TxPlan] | Err[ScriptsNotDeployedError | LedgerQueryError]:
        """Consume a trade position with the transition's redeemer."""
        redeemer = encode_trade_action(lifecycle.ACTIONS[transition])
        return self.get_deployed_scripts().map(lambda deployed: TxPlan(
            inputs=(SpendInput(utxo, redeemer),),
            reference_inputs=(deployed,),
            required_signers=frozenset() if signer is None else frozenset({signer}),
        ))

    def _pay_fees(
        self, gross: int, payment: bytes,
    ) -> Ok[tuple[TxPlan, int]] | Err[NebulaError]:
        """Royalty payouts for ``gross``, each tagged with the payment datum."""
        match self.get_royalty():
            case Err() as e:
                return e
            case Ok(royalty):
                pass
        match split(gross, royalty.info):
            case Err() as e:
                return e
            case Ok(fee_split):
                pass
        outputs = tuple(
            TxOutput(
                address=plutus_to_address(p.address, self._config.cardano_network),
                assets=make_assets({LOVELACE: p.lovelace}),
                datum=payment,
            )
            for p in fee_split.payouts
        )
        return Ok((TxPlan(outputs=outputs, reference_inputs=(royalty.utxo,)), fee_split.remainder))

    def _protocol_fund(self) -> TxPlan:
        if not self._config.fund_protocol_active:
            return EMPTY_PLAN
        return TxPlan(outputs=(TxOutput(address=PROTOCOL_FUND_ADDRESS, assets=EMPTY_ASSETS),))
