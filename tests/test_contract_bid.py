"""Tests for the bid side of nebula.trade.contract, composites and queries."""

from __future__ import annotations

from nebula.core.errors import (
    ConstraintUnsatisfiedError,
    InsufficientFundsError,
    NoMatchingUtxoError,
    NotOwnerError,
    ReferenceNotFoundError,
    ValidationError,
    WrongVariantError,
)
from nebula.core.identifiers import LOVELACE, from_text
from nebula.core.result import Err, Ok, unwrap
from nebula.core.value import EMPTY_ASSETS, make_assets
from nebula.datum.address import address_to_plutus
from nebula.datum.codec import (
    decode_trade_datum,
    encode_payment_datum,
    encode_trade_action,
    encode_trade_datum,
)
from nebula.datum.plutus import Constr, to_cbor
from nebula.datum.types import (
    Bid,
    Listing,
    PaymentDatum,
    SpecificSymbolWithConstraints,
    SpecificValue,
    TradeAction,
    TraitFilter,
)
from nebula.ledger.utxo import Utxo
from nebula.trade.contract import OPEN_BIDS, SellOrder, TraitConstraint

from conftest import ADA, World, fund_bid, fund_listing

SELLER_KEY = "01" * 28
BUYER_KEY = "02" * 28


def _open(
    world: World, types: tuple[str, ...] = (), traits: tuple[TraitFilter, ...] = (),
) -> SpecificSymbolWithConstraints:
    return SpecificSymbolWithConstraints(
        policy_id=world.config.policy_id,
        types=tuple(from_text(t) for t in types),
        traits=traits,
    )


def _fund_reference(world: World, asset_type: bytes, traits: list[bytes]) -> Utxo:
    """CIP-68 reference token of ``world.nft`` with its metadata datum."""
    datum = to_cbor(Constr(0, ({b"type": asset_type, b"traits": traits}, 1)))
    reference = world.config.policy_id + "000643b0" + world.nft_name
    return world.ledger.fund(
        world.creator, make_assets({LOVELACE: 2 * ADA, reference: 1}), datum=datum,
    )


class TestBid:
    def test_plan(self, world: World) -> None:
        contract = world.contract(world.buyer)
        plan = unwrap(contract.bid(world.nft_name, 50 * ADA))
        token = unwrap(contract.locking.bid_token(world.nft_name))
        assert plan.mint == make_assets({token: 1})
        assert plan.valid_from == world.config.validity_start
        assert plan.scripts == (contract.locking.attached,)
        (output,) = plan.outputs
        assert output.address == contract.trade_address
        assert output.assets == make_assets({LOVELACE: 50 * ADA, token: 1})
        assert unwrap(decode_trade_datum(output.datum or b"")) == Bid(
            owner=unwrap(address_to_plutus(world.buyer)),
            requested_option=SpecificValue(make_assets({world.nft: 1})),
        )

    def test_more_than_wallet_holds(self, world: World) -> None:
        result = world.contract(world.buyer).bid(world.nft_name, 1_000 * ADA)
        assert isinstance(result, Err)
        assert isinstance(result.error, NoMatchingUtxoError)
        assert result.error.unit == LOVELACE

    def test_rejects_non_positive(self, world: World) -> None:
        result = world.contract(world.buyer).bid(world.nft_name, -5)
        assert isinstance(result, Err)
        assert result.error.fields[0].path == "lovelace"

    def test_rejects_name_too_long_for_token(self, world: World) -> None:
        result = world.contract(world.buyer).bid("00" * 31, ADA)
        assert isinstance(result, Err)
        assert result.error.code == "MINT_VALIDATION"


class TestBidOpen:
    def test_plan(self, world: World) -> None:
        contract = world.contract(world.buyer)
        plan = unwrap(contract.bid_open(
            40 * ADA, types=["Cat"], traits=[TraitConstraint("rare", negation=True)],
        ))
        token = contract.locking.open_bid_token
        assert plan.mint == make_assets({token: 1})
        (output,) = plan.outputs
        assert output.assets == make_assets({LOVELACE: 40 * ADA, token: 1})
        bid = unwrap(decode_trade_datum(output.datum or b""))
        assert isinstance(bid, Bid)
        assert bid.requested_option == _open(
            world, types=("Cat",), traits=(TraitFilter(negated=True, trait=from_text("rare")),),
        )

    def test_unconstrained(self, world: World) -> None:
        plan = unwrap(world.contract(world.buyer).bid_open(40 * ADA))
        bid = unwrap(decode_trade_datum(plan.outputs[0].datum or b""))
        assert isinstance(bid, Bid)
        assert bid.requested_option == _open(world)

    def test_rejects_zero(self, world: World) -> None:
        assert isinstance(world.contract(world.buyer).bid_open(0), Err)


class TestChangeBid:
    def test_changes_amount_only(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA)
        contract = world.contract(world.buyer)
        plan = unwrap(contract.change_bid(bid, 70 * ADA))
        token = unwrap(contract.locking.bid_token(world.nft_name))
        assert plan.mint == EMPTY_ASSETS
        assert plan.inputs[0].redeemer == encode_trade_action(TradeAction.CANCEL)
        assert plan.required_signers == frozenset({BUYER_KEY})
        (output,) = plan.outputs
        assert output.assets == make_assets({LOVELACE: 70 * ADA, token: 1})
        assert output.datum == bid.datum
        assert output.address == bid.address

    def test_non_owner(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA)
        result = world.contract(world.seller).change_bid(bid, 70 * ADA)
        assert isinstance(result, Err)
        assert isinstance(result.error, NotOwnerError)

    def test_on_a_listing(self, world: World) -> None:
        listing = fund_listing(world, world.buyer, 50 * ADA)
        result = world.contract(world.buyer).change_bid(listing, 70 * ADA)
        assert isinstance(result, Err)
        assert isinstance(result.error, WrongVariantError)


class TestCancelBid:
    def test_burns_locking_token(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA)
        contract = world.contract(world.buyer)
        plan = unwrap(contract.cancel_bid(bid))
        token = unwrap(contract.locking.bid_token(world.nft_name))
        assert plan.mint == make_assets({token: -1})
        assert plan.consumed == (bid.out_ref,)
        assert plan.outputs == ()
        assert plan.required_signers == frozenset({BUYER_KEY})

    def test_non_owner(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA)
        result = world.contract(world.seller).cancel_bid(bid)
        assert isinstance(result, Err)
        assert isinstance(result.error, NotOwnerError)
        assert result.error.owner == world.buyer

    def test_bid_without_locking_token(self, world: World) -> None:
        contract = world.contract(world.buyer)
        datum = Bid(
            owner=unwrap(address_to_plutus(world.buyer)),
            requested_option=SpecificValue(make_assets({world.nft: 1})),
        )
        bare = world.ledger.fund(
            contract.trade_address, make_assets({LOVELACE: 5 * ADA}),
            datum=encode_trade_datum(datum),
        )
        result = contract.cancel_bid(bare)
        assert isinstance(result, Err)
        assert isinstance(result.error, NoMatchingUtxoError)
        assert result.error.unit == contract.mint_policy_id


class TestSell:
    def test_specific_bid(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA)
        contract = world.contract(world.seller)
        plan = unwrap(contract.sell([SellOrder(bid)]))
        payment = encode_payment_datum(PaymentDatum(out_ref=bid.out_ref))
        token = unwrap(contract.locking.bid_token(world.nft_name))

        assert plan.inputs[0].redeemer == encode_trade_action(TradeAction.SELL)
        assert plan.required_signers == frozenset()
        assert plan.mint == make_assets({token: -1})
        royalty, buyer = plan.outputs
        assert (royalty.address, royalty.assets) == (world.creator, make_assets({LOVELACE: ADA}))
        assert (buyer.address, buyer.assets) == (world.buyer, make_assets({world.nft: 1}))
        assert royalty.datum == buyer.datum == payment

    def test_open_bid_needs_asset_name(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA, _open(world))
        result = world.contract(world.seller).sell([SellOrder(bid)])
        assert isinstance(result, Err)
        assert isinstance(result.error, ValidationError)
        assert result.error.code == "MATCH_VALIDATION"

    def test_unconstrained_open_bid(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA, _open(world))
        contract = world.contract(world.seller)
        plan = unwrap(contract.sell([SellOrder(bid, world.nft_name)]))
        assert plan.outputs[-1].assets == make_assets({world.nft: 1})
        assert plan.mint == make_assets({contract.locking.open_bid_token: -1})

    def test_constrained_open_bid_reads_reference(self, world: World) -> None:
        reference = _fund_reference(world, b"Cat", [b"hat"])
        option = _open(
            world, types=("Cat",), traits=(TraitFilter(negated=True, trait=from_text("rare")),),
        )
        bid = fund_bid(world, world.buyer, 50 * ADA, option)
        plan = unwrap(world.contract(world.seller).sell([SellOrder(bid, world.nft_name)]))
        assert reference in plan.reference_inputs
        assert reference.out_ref not in plan.consumed

    def test_negated_trait_present(self, world: World) -> None:
        _fund_reference(world, b"Cat", [b"rare"])
        option = _open(world, traits=(TraitFilter(negated=True, trait=from_text("rare")),))
        bid = fund_bid(world, world.buyer, 50 * ADA, option)
        result = world.contract(world.seller).sell([SellOrder(bid, world.nft_name)])
        assert isinstance(result, Err)
        assert isinstance(result.error, ConstraintUnsatisfiedError)

    def test_type_not_accepted(self, world: World) -> None:
        _fund_reference(world, b"Dog", [])
        bid = fund_bid(world, world.buyer, 50 * ADA, _open(world, types=("Cat",)))
        result = world.contract(world.seller).sell([SellOrder(bid, world.nft_name)])
        assert isinstance(result, Err)
        assert isinstance(result.error, ConstraintUnsatisfiedError)

    def test_reference_missing(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA, _open(world, types=("Cat",)))
        result = world.contract(world.seller).sell([SellOrder(bid, world.nft_name)])
        assert isinstance(result, Err)
        assert isinstance(result.error, ReferenceNotFoundError)

    def test_bid_exhausted_by_royalty(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, ADA)
        result = world.contract(world.seller).sell([SellOrder(bid)])
        assert isinstance(result, Err)
        assert isinstance(result.error, InsufficientFundsError)

    def test_batch(self, world: World) -> None:
        first = fund_bid(world, world.buyer, 50 * ADA)
        second = fund_bid(world, world.owner, 60 * ADA)
        contract = world.contract(world.seller)
        plan = unwrap(contract.sell([SellOrder(first), SellOrder(second)]))
        token = unwrap(contract.locking.bid_token(world.nft_name))
        assert plan.consumed == (first.out_ref, second.out_ref)
        assert plan.mint == make_assets({token: -2})

    def test_empty_batch(self, world: World) -> None:
        result = world.contract(world.seller).sell([])
        assert isinstance(result, Err)
        assert result.error.fields[0].path == "orders"


class TestComposites:
    def test_cancel_listing_and_sell(self, world: World) -> None:
        listing = fund_listing(world, world.seller, 100 * ADA)
        bid = fund_bid(world, world.buyer, 50 * ADA)
        contract = world.contract(world.seller)
        plan = unwrap(contract.cancel_listing_and_sell(listing, bid))
        assert plan.consumed == (listing.out_ref, bid.out_ref)
        assert [i.redeemer for i in plan.inputs] == [
            encode_trade_action(TradeAction.CANCEL),
            encode_trade_action(TradeAction.SELL),
        ]
        assert plan.required_signers == frozenset({SELLER_KEY})
        assert plan.outputs[-1].assets == make_assets({world.nft: 1})

    def test_cancel_bid_and_buy(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA)
        listing = fund_listing(world, world.seller, 100 * ADA)
        contract = world.contract(world.buyer)
        plan = unwrap(contract.cancel_bid_and_buy(bid, listing))
        token = unwrap(contract.locking.bid_token(world.nft_name))
        assert plan.consumed == (bid.out_ref, listing.out_ref)
        assert plan.mint == make_assets({token: -1})
        assert plan.required_signers == frozenset({BUYER_KEY})
        assert [o.address for o in plan.outputs] == [world.creator, world.seller]

    def test_cancel_listing_and_sell_by_non_owner(self, world: World) -> None:
        listing = fund_listing(world, world.owner, 100 * ADA)
        bid = fund_bid(world, world.buyer, 50 * ADA)
        result = world.contract(world.seller).cancel_listing_and_sell(listing, bid)
        assert isinstance(result, Err)
        assert isinstance(result.error, NotOwnerError)
        assert result.error.owner == world.owner

    def test_cancel_bid_and_buy_by_non_owner(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 50 * ADA)
        listing = fund_listing(world, world.seller, 100 * ADA)
        result = world.contract(world.owner).cancel_bid_and_buy(bid, listing)
        assert isinstance(result, Err)
        assert isinstance(result.error, NotOwnerError)
        assert result.error.owner == world.buyer

    def test_either_half_failing_fails_both(self, world: World) -> None:
        listing = fund_listing(world, world.seller, 100 * ADA)
        other = fund_listing(world, world.seller, 10 * ADA)
        result = world.contract(world.seller).cancel_listing_and_sell(listing, other)
        assert isinstance(result, Err)
        assert isinstance(result.error, WrongVariantError)


class TestQueries:
    def test_listings_highest_first(self, world: World) -> None:
        cheap = fund_listing(world, world.seller, 10 * ADA)
        dear = fund_listing(world, world.seller, 90 * ADA)
        entries = unwrap(world.contract(world.buyer).get_listings(world.nft_name))
        assert [e.utxo for e in entries] == [dear, cheap]
        assert isinstance(entries[0].listing, Listing)

    def test_listings_skip_malformed(self, world: World) -> None:
        contract = world.contract(world.buyer)
        world.ledger.fund(contract.trade_address, make_assets({LOVELACE: ADA, world.nft: 1}))
        world.ledger.fund(
            contract.trade_address, make_assets({LOVELACE: ADA, world.nft: 1}), datum=b"\x01",
        )
        world.ledger.fund(
            contract.trade_address,
            make_assets({LOVELACE: ADA, world.nft: 1, world.config.policy_id + "02": 1}),
            datum=encode_trade_datum(Listing(
                owner=unwrap(address_to_plutus(world.seller)), requested_lovelace=ADA,
            )),
        )
        assert unwrap(contract.get_listings(world.nft_name)) == ()

    def test_bids_largest_first(self, world: World) -> None:
        small = fund_bid(world, world.buyer, 20 * ADA)
        large = fund_bid(world, world.owner, 70 * ADA)
        entries = unwrap(world.contract(world.seller).get_bids(world.nft_name))
        assert [e.utxo for e in entries] == [large, small]

    def test_open_bids(self, world: World) -> None:
        fund_bid(world, world.buyer, 20 * ADA)
        open_bid = fund_bid(world, world.buyer, 30 * ADA, _open(world))
        entries = unwrap(world.contract(world.seller).get_bids(OPEN_BIDS))
        assert [e.utxo for e in entries] == [open_bid]

    def test_position_lookup(self, world: World) -> None:
        bid = fund_bid(world, world.buyer, 20 * ADA)
        assert world.contract(world.seller).get_listing_or_bid(bid.out_ref) == Ok(bid)

    def test_contract_hashes(self, world: World) -> None:
        contract = world.contract(world.seller)
        hashes = contract.get_contract_hashes()
        assert hashes.script_hash == contract.trade_hash
        assert hashes.nft_policy_id == world.config.policy_id
        assert hashes.bid_policy_id == contract.locking.policy_id

    def test_deploy_plan(self, world: World) -> None:
        contract = world.contract(world.owner)
        (output,) = unwrap(contract.deploy_scripts()).outputs
        assert output.script_ref == contract.trade_validator.cbor
        assert output.assets == EMPTY_ASSETS
        assert output.address == unwrap(contract.get_deployed_scripts()).address
