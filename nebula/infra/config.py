"""Contract configuration, networks and slot timing.

Pure configuration data. The trade validator is compiled with values
derived from this record (protocol key, metadata key names, royalty
token), so changing any of them changes the trade script hash.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from pycardano import Network as CardanoNetwork

from nebula.core.errors import FieldViolation, ValidationError
from nebula.core.identifiers import (
    LABEL_REFERENCE,
    POLICY_ID_HEX_LEN,
    AssetName,
    PolicyId,
    TxHash,
    from_text,
    to_label,
)
from nebula.core.result import Err, Ok, unwrap
from nebula.core.types import UtcDatetime
from nebula.datum.address import address_to_plutus, payment_key_hash
from nebula.datum.types import PubKeyCredential, TradeParams

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PROTOCOL_FUND_ADDRESS: str = "addr1vxuj4yyqlz0k9er5geeepx0awh2t6kkes0nyp429hsttt3qrnucsx"

# Validity start slot for every transaction that mints or burns a
# locking token.
VALIDITY_SLOT: int = 1000

DEFAULT_MIN_ADA: int = 1_000_000

DEFAULT_TYPE_KEY: str = "type"
DEFAULT_TRAITS_KEY: str = "traits"


class Network(Enum):
    MAINNET = "Mainnet"
    PREPROD = "Preprod"
    PREVIEW = "Preview"
    CUSTOM = "Custom"

    @property
    def cardano_network(self) -> CardanoNetwork:
        return CardanoNetwork.MAINNET if self is Network.MAINNET else CardanoNetwork.TESTNET


@final
@dataclass(frozen=True, slots=True)
class SlotConfig:
    """Shelley genesis timing: POSIX ms of ``zero_slot`` and slot length in ms."""

    zero_time: int
    zero_slot: int
    slot_length: int

    def slot_to_unix_time(self, slot: int) -> int:
        return self.zero_time + (slot - self.zero_slot) * self.slot_length

    def unix_time_to_slot(self, unix_time: int) -> int:
        return (unix_time - self.zero_time) // self.slot_length + self.zero_slot


SLOT_CONFIGS: dict[Network, SlotConfig] = {
    Network.MAINNET: SlotConfig(zero_time=1596059091000, zero_slot=4492800, slot_length=1000),
    Network.PREPROD: SlotConfig(zero_time=1655769600000, zero_slot=86400, slot_length=1000),
    Network.PREVIEW: SlotConfig(zero_time=1666656000000, zero_slot=0, slot_length=1000),
    Network.CUSTOM: SlotConfig(zero_time=0, zero_slot=0, slot_length=1000),
}


def fund_protocol_active(network: Network, override: bool | None) -> bool:
    """Protocol fund payouts: on mainnet unless explicitly disabled, never elsewhere.

    ``None`` and ``True`` behave the same on mainnet; only an explicit
    ``False`` turns the fund off there.
    """
    if network is not Network.MAINNET:
        return False
    return override is None or override is True


def protocol_key() -> str | None:
    """Payment key hash of PROTOCOL_FUND_ADDRESS, None if it has none."""
    match address_to_plutus(PROTOCOL_FUND_ADDRESS):
        case Ok(address) if isinstance(address.payment, PubKeyCredential):
            return payment_key_hash(address)
        case _:
            return None


# ---------------------------------------------------------------------------
# Contract configuration
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class ContractConfig:
    """Marketplace deployment for one NFT collection."""

    network: Network
    policy_id: str
    royalty_token: str
    owner: str
    deploy_tx_hash: str | None = None
    fund_protocol: bool | None = None
    type_key: str = DEFAULT_TYPE_KEY
    traits_key: str = DEFAULT_TRAITS_KEY
    slot_config: SlotConfig | None = None

    @staticmethod
    def create(  # noqa: PLR0913
        network: Network,
        policy_id: str,
        royalty_token: str,
        owner: str,
        deploy_tx_hash: str | None = None,
        fund_protocol: bool | None = None,
        type_key: str = DEFAULT_TYPE_KEY,
        traits_key: str = DEFAULT_TRAITS_KEY,
        slot_config: SlotConfig | None = None,
    ) -> Ok[ContractConfig] | Err[ValidationError]:
        violations: list[FieldViolation] = []
        if isinstance(PolicyId.parse(policy_id), Err):
            violations.append(FieldViolation(
                path="policy_id", constraint="must be 28-byte hex", actual_value=policy_id,
            ))
        if (
            isinstance(PolicyId.parse(royalty_token[:POLICY_ID_HEX_LEN]), Err)
            or isinstance(AssetName.parse(royalty_token[POLICY_ID_HEX_LEN:]), Err)
        ):
            violations.append(FieldViolation(
                path="royalty_token", constraint="must be a unit (policy id + asset name)",
                actual_value=royalty_token,
            ))
        if isinstance(address_to_plutus(owner), Err):
            violations.append(FieldViolation(
                path="owner", constraint="must be a bech32 address", actual_value=owner,
            ))
        if deploy_tx_hash is not None and isinstance(TxHash.parse(deploy_tx_hash), Err):
            violations.append(FieldViolation(
                path="deploy_tx_hash", constraint="must be a 32-byte hex tx hash",
                actual_value=deploy_tx_hash,
            ))
        for path, key in (("type_key", type_key), ("traits_key", traits_key)):
            if not key:
                violations.append(FieldViolation(
                    path=path, constraint="must be non-empty", actual_value="",
                ))
        if network is Network.CUSTOM and slot_config is None:
            slot_config = SLOT_CONFIGS[Network.CUSTOM]
        if fund_protocol_active(network, fund_protocol) and protocol_key() is None:
            violations.append(FieldViolation(
                path="fund_protocol", constraint="protocol fund address has no key hash",
                actual_value=PROTOCOL_FUND_ADDRESS,
            ))
        if violations:
            return Err(ValidationError(
                message="Contract configuration invalid",
                code="CONFIG_VALIDATION",
                timestamp=UtcDatetime.now(),
                source="infra.config.ContractConfig.create",
                fields=tuple(violations),
            ))
        return Ok(ContractConfig(
            network=network,
            policy_id=policy_id,
            royalty_token=royalty_token,
            owner=owner,
            deploy_tx_hash=deploy_tx_hash,
            fund_protocol=fund_protocol,
            type_key=type_key,
            traits_key=traits_key,
            slot_config=slot_config,
        ))

    @property
    def fund_protocol_active(self) -> bool:
        return fund_protocol_active(self.network, self.fund_protocol)

    @property
    def cardano_network(self) -> CardanoNetwork:
        return self.network.cardano_network

    @property
    def slots(self) -> SlotConfig:
        return self.slot_config or SLOT_CONFIGS[self.network]

    @property
    def validity_start(self) -> int:
        """POSIX ms of VALIDITY_SLOT on this network."""
        return self.slots.slot_to_unix_time(VALIDITY_SLOT)

    def trade_params(self) -> TradeParams:
        return TradeParams(
            protocol_key=protocol_key() if self.fund_protocol_active else None,
            type_key=from_text(self.type_key),
            traits_key=from_text(self.traits_key),
            reference_label=unwrap(to_label(LABEL_REFERENCE)),
            royalty_policy_id=self.royalty_token[:POLICY_ID_HEX_LEN],
            royalty_asset_name=self.royalty_token[POLICY_ID_HEX_LEN:],
        )
