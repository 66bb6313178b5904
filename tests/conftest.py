"""Hypothesis profiles and pytest fixtures for Nebula.

``world`` is one in-memory chain holding a deployed trade validator, a
royalty record and funded seller, buyer and owner wallets.
``world.market(address)`` opens a Marketplace for any wallet on it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, settings
from pycardano import Address, VerificationKeyHash

from nebula.core.identifiers import LABEL_ROYALTY, LOVELACE, from_text, to_unit
from nebula.core.result import unwrap
from nebula.core.value import Assets, add_assets, make_assets
from nebula.datum.address import address_to_plutus
from nebula.datum.codec import encode_royalty_info, encode_trade_datum, encode_trade_params
from nebula.datum.types import Bid, Listing, RequestedOption, SpecificValue
from nebula.infra.config import ContractConfig, Network
from nebula.infra.memory_adapter import (
    InMemoryLedger,
    InMemoryScriptCompiler,
    InMemorySubmitter,
    InMemoryWallet,
)
from nebula.ledger.utxo import Utxo
from nebula.trade.contract import TradeContract
from nebula.trade.marketplace import Marketplace
from nebula.trade.royalty import (
    ROYALTY_NAME,
    RoyaltyShare,
    build_royalty_info,
    owner_script,
    owner_script_address,
)

# ---------------------------------------------------------------------------
# Hypothesis global settings
# ---------------------------------------------------------------------------

settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.register_profile(
    "dev",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)
settings.load_profile("dev")


# ===================================================================
# CHAIN FIXTURES
# ===================================================================

COLLECTION_POLICY = "ab" * 28
ROYALTY_POLICY = "cd" * 28
ADA = 1_000_000


def key_address(seed: int, network: Network = Network.PREPROD, stake: int | None = None) -> str:
    """Key address whose payment hash is ``seed`` repeated 28 times."""
    staking = None if stake is None else VerificationKeyHash(bytes([stake]) * 28)
    return Address(
        payment_part=VerificationKeyHash(bytes([seed]) * 28),
        staking_part=staking,
        network=network.cardano_network,
    ).encode()


@dataclass
class World:
    ledger: InMemoryLedger
    compiler: InMemoryScriptCompiler
    submitter: InMemorySubmitter
    config: ContractConfig
    seller: str
    buyer: str
    owner: str
    creator: str
    nft_name: str

    @property
    def nft(self) -> str:
        return self.config.policy_id + self.nft_name

    def wallet(self, address: str) -> InMemoryWallet:
        return InMemoryWallet(self.ledger, address)

    def contract(self, address: str) -> TradeContract:
        return TradeContract(self.config, self.ledger, self.wallet(address), self.compiler)

    def market(self, address: str) -> Marketplace:
        return Marketplace(self.contract(address), self.ledger, self.submitter)

    def holdings(self, address: str) -> Assets:
        return add_assets(*(u.assets for u in unwrap(self.ledger.utxos_at_address(address))))


def build_world(
    network: Network = Network.PREPROD,
    fund_protocol: bool | None = None,
    rate: Decimal = Decimal("0.02"),
    fixed_fee: int = 2 * ADA,
    min_ada: int = ADA,
) -> World:
    ledger = InMemoryLedger()
    compiler = InMemoryScriptCompiler()
    seller, buyer = key_address(1, network), key_address(2, network)
    owner, creator = key_address(3, network), key_address(4, network)
    royalty_token = unwrap(to_unit(ROYALTY_POLICY, ROYALTY_NAME, LABEL_ROYALTY))
    config = unwrap(ContractConfig.create(
        network, COLLECTION_POLICY, royalty_token, owner, fund_protocol=fund_protocol,
    ))

    info = unwrap(build_royalty_info([RoyaltyShare(creator, rate, fixed_fee)], min_ada))
    record_address = owner_script_address(unwrap(owner_script(owner)), network)
    ledger.fund(
        record_address,
        make_assets({LOVELACE: 2 * ADA, royalty_token: 1}),
        datum=encode_royalty_info(info),
    )
    validator = compiler.trade_validator(encode_trade_params(config.trade_params()))
    deployed = ledger.fund(
        record_address, make_assets({LOVELACE: 20 * ADA}), script_ref=validator.cbor,
    )
    config = replace(config, deploy_tx_hash=deployed.out_ref.tx_hash)

    nft_name = from_text("Nebula001")
    ledger.fund(seller, make_assets({LOVELACE: 10 * ADA, COLLECTION_POLICY + nft_name: 1}))
    ledger.fund(buyer, make_assets({LOVELACE: 500 * ADA}))
    ledger.fund(owner, make_assets({LOVELACE: 50 * ADA}))
    return World(
        ledger=ledger,
        compiler=compiler,
        submitter=InMemorySubmitter(ledger),
        config=config,
        seller=seller,
        buyer=buyer,
        owner=owner,
        creator=creator,
        nft_name=nft_name,
    )


@pytest.fixture
def world() -> World:
    return build_world()


@pytest.fixture
def make_world() -> Callable[..., World]:
    return build_world


# ===================================================================
# POSITIONS PLACED DIRECTLY ON THE LEDGER
# ===================================================================


def fund_listing(
    world: World, owner: str, lovelace: int, private_listing: str | None = None,
) -> Utxo:
    """A Listing of ``world.nft`` at the trade address, as ``list`` would leave it."""
    contract = world.contract(owner)
    datum = Listing(
        owner=unwrap(address_to_plutus(owner)),
        requested_lovelace=lovelace,
        private_listing=None if private_listing is None else unwrap(
            address_to_plutus(private_listing)
        ),
    )
    return world.ledger.fund(
        contract.trade_address,
        make_assets({LOVELACE: ADA, world.nft: 1}),
        datum=encode_trade_datum(datum),
    )


def fund_bid(
    world: World, owner: str, lovelace: int, option: RequestedOption | None = None,
) -> Utxo:
    """A Bid locked with its locking token; a specific bid on ``world.nft`` by default."""
    contract = world.contract(owner)
    if option is None:
        option = SpecificValue(make_assets({world.nft: 1}))
        token = unwrap(contract.locking.bid_token(world.nft_name))
    else:
        token = contract.locking.open_bid_token
    datum = Bid(owner=unwrap(address_to_plutus(owner)), requested_option=option)
    return world.ledger.fund(
        contract.trade_address,
        make_assets({LOVELACE: lovelace, token: 1}),
        datum=encode_trade_datum(datum),
    )
