"""Validated ledger identifiers: PolicyId, AssetName, TxHash, OutRef.

Each wraps a lowercase hex string validated at construction time via
parse(). Also hosts the unit helpers (policy id + asset name) and the
CIP-67 asset name labels used for reference, user and royalty tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from nebula.core.result import Err, Ok

LOVELACE = "lovelace"

POLICY_ID_HEX_LEN = 56
TX_HASH_HEX_LEN = 64
MAX_ASSET_NAME_BYTES = 32

LABEL_REFERENCE = 100
LABEL_USER_NFT = 222
LABEL_ROYALTY = 500

_HEX_DIGITS = frozenset("0123456789abcdef")


def is_hex(raw: str) -> bool:
    return len(raw) % 2 == 0 and all(c in _HEX_DIGITS for c in raw)


@final
@dataclass(frozen=True, slots=True)
class PolicyId:
    """Minting policy hash: 28 bytes as 56 lowercase hex characters."""

    value: str

    @staticmethod
    def parse(raw: str) -> Ok[PolicyId] | Err[str]:
        if len(raw) != POLICY_ID_HEX_LEN:
            return Err(f"PolicyId must be {POLICY_ID_HEX_LEN} hex characters, got {len(raw)}")
        if not is_hex(raw):
            return Err(f"PolicyId must be lowercase hex, got '{raw}'")
        return Ok(PolicyId(value=raw))


@final
@dataclass(frozen=True, slots=True)
class AssetName:
    """Asset name: at most 32 bytes, hex encoded (may be empty)."""

    value: str

    @staticmethod
    def parse(raw: str) -> Ok[AssetName] | Err[str]:
        if not is_hex(raw):
            return Err(f"AssetName must be lowercase hex, got '{raw}'")
        if len(raw) // 2 > MAX_ASSET_NAME_BYTES:
            return Err(f"AssetName exceeds {MAX_ASSET_NAME_BYTES} bytes: {len(raw) // 2}")
        return Ok(AssetName(value=raw))


@final
@dataclass(frozen=True, slots=True)
class TxHash:
    """Transaction id: 32 bytes as 64 lowercase hex characters."""

    value: str

    @staticmethod
    def parse(raw: str) -> Ok[TxHash] | Err[str]:
        if len(raw) != TX_HASH_HEX_LEN:
            return Err(f"TxHash must be {TX_HASH_HEX_LEN} hex characters, got {len(raw)}")
        if not is_hex(raw):
            return Err(f"TxHash must be lowercase hex, got '{raw}'")
        return Ok(TxHash(value=raw))


@final
@dataclass(frozen=True, slots=True, order=True)
class OutRef:
    """Ledger position: (transaction id, output index)."""

    tx_hash: str
    output_index: int

    def __post_init__(self) -> None:
        if self.output_index < 0:
            raise TypeError(f"OutRef.output_index must be >= 0, got {self.output_index}")

    @staticmethod
    def parse(raw: str) -> Ok[OutRef] | Err[str]:
        """Parse the conventional ``<tx hash>#<index>`` form."""
        tx_part, sep, index_part = raw.partition("#")
        if not sep or not index_part.isdigit():
            return Err(f"OutRef must look like '<tx hash>#<index>', got '{raw}'")
        match TxHash.parse(tx_part):
            case Err(e):
                return Err(e)
            case Ok(tx):
                return Ok(OutRef(tx_hash=tx.value, output_index=int(index_part)))

    def __str__(self) -> str:
        return f"{self.tx_hash}#{self.output_index}"


# ---------------------------------------------------------------------------
# Text <-> hex
# ---------------------------------------------------------------------------


def from_text(text: str) -> str:
    """UTF-8 text to the hex form used for asset names and datum bytes."""
    return text.encode("utf-8").hex()


def to_text(hex_str: str) -> str:
    return bytes.fromhex(hex_str).decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# CIP-67 labels
# ---------------------------------------------------------------------------


def _crc8(data: bytes) -> int:
    # polynomial 0x07, initial value 0
    crc = 0
    for byte in data:
        crc ^= byte
        for _ in range(8):
            crc = ((crc << 1) ^ 0x07) & 0xFF if crc & 0x80 else (crc << 1) & 0xFF
    return crc


def to_label(num: int) -> Ok[str] | Err[str]:
    """Encode a CIP-67 label: 0 | 16-bit number | crc8 | 0, as 8 hex chars."""
    if not 0 <= num <= 0xFFFF:
        return Err(f"Label must be in 0..65535, got {num}")
    num_hex = f"{num:04x}"
    return Ok(f"0{num_hex}{_crc8(bytes.fromhex(num_hex)):02x}0")


def from_label(label: str) -> int | None:
    """Decode an 8-hex-char CIP-67 label, or None if it is not one."""
    if len(label) != 8 or label[0] != "0" or label[7] != "0" or not is_hex(label):
        return None
    num_hex = label[1:5]
    if label[5:7] != f"{_crc8(bytes.fromhex(num_hex)):02x}":
        return None
    return int(num_hex, 16)


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class UnitParts:
    """A unit split into policy id, full asset name, label and bare name."""

    policy_id: str
    asset_name: str
    label: int | None
    name: str


def to_unit(policy_id: str, name: str = "", label: int | None = None) -> Ok[str] | Err[str]:
    """policy id + optional CIP-67 label + name, validated for size."""
    match PolicyId.parse(policy_id):
        case Err(e):
            return Err(e)
        case Ok(_):
            pass
    prefix = ""
    if label is not None:
        match to_label(label):
            case Err(e):
                return Err(e)
            case Ok(encoded):
                prefix = encoded
    match AssetName.parse(prefix + name):
        case Err(e):
            return Err(e)
        case Ok(asset):
            return Ok(policy_id + asset.value)


def from_unit(unit: str) -> UnitParts:
    policy_id = unit[:POLICY_ID_HEX_LEN]
    asset_name = unit[POLICY_ID_HEX_LEN:]
    label = from_label(asset_name[:8])
    name = asset_name[8:] if label is not None else asset_name
    return UnitParts(policy_id=policy_id, asset_name=asset_name, label=label, name=name)
