"""Bech32 addresses <-> the on-chain PlutusAddress record.

Ownership checks compare PlutusAddress values, so a wallet address and
a datum owner are equal exactly when their credentials are.
"""

from __future__ import annotations

from pycardano import Address, PointerAddress, ScriptHash, VerificationKeyHash
from pycardano import Network as CardanoNetwork
from pycardano.exception import PyCardanoException

from nebula.core.result import Err, Ok
from nebula.datum.types import (
    Credential,
    PlutusAddress,
    PubKeyCredential,
    ScriptCredential,
    StakeCredential,
    StakeInline,
    StakePointer,
)


def _credential_of(part: object) -> Credential | None:
    if isinstance(part, VerificationKeyHash):
        return PubKeyCredential(part.payload.hex())
    if isinstance(part, ScriptHash):
        return ScriptCredential(part.payload.hex())
    return None


def _part_of(credential: Credential) -> VerificationKeyHash | ScriptHash:
    match credential:
        case PubKeyCredential(h):
            return VerificationKeyHash(bytes.fromhex(h))
        case ScriptCredential(h):
            return ScriptHash(bytes.fromhex(h))


def parse_address(bech32: str) -> Ok[Address] | Err[str]:
    try:
        return Ok(Address.from_primitive(bech32))
    except (PyCardanoException, ValueError, TypeError) as e:
        return Err(f"Invalid address '{bech32}': {e}")


def address_to_plutus(bech32: str) -> Ok[PlutusAddress] | Err[str]:
    match parse_address(bech32):
        case Err() as e:
            return e
        case Ok(addr):
            pass
    payment = _credential_of(addr.payment_part)
    if payment is None:
        return Err(f"Address '{bech32}' has no payment credential")
    stake: StakeCredential | None = None
    staking = addr.staking_part
    if isinstance(staking, PointerAddress):
        stake = StakePointer(staking.slot, staking.tx_index, staking.cert_index)
    elif staking is not None:
        cred = _credential_of(staking)
        stake = None if cred is None else StakeInline(cred)
    return Ok(PlutusAddress(payment=payment, stake=stake))


def plutus_to_address(address: PlutusAddress, network: CardanoNetwork) -> str:
    """Render a PlutusAddress as bech32 on ``network``."""
    match address.stake:
        case None:
            staking: VerificationKeyHash | ScriptHash | PointerAddress | None = None
        case StakeInline(cred):
            staking = _part_of(cred)
        case StakePointer(slot, tx_index, cert_index):
            staking = PointerAddress(slot, tx_index, cert_index)
    return Address(
        payment_part=_part_of(address.payment), staking_part=staking, network=network,
    ).encode()


def payment_key_hash(address: PlutusAddress) -> str:
    """Hash a signer must present to authorize spends owned by ``address``."""
    return address.payment.hash


def script_address(
    script_hash: str, stake: StakeCredential | None, network: CardanoNetwork,
) -> str:
    """Address of a script, delegated to ``stake`` when given."""
    return plutus_to_address(
        PlutusAddress(payment=ScriptCredential(script_hash), stake=stake), network,
    )
