"""CIP-68 reference datum reader.

A reference token (label 100) sits next to a datum
``Constr 0 [metadata map, version, extra]``. Open bids constrain the
``type`` entry (bytes) and the ``traits`` entry (list of bytes); the
key names are configurable per collection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from nebula.core.errors import DecodeError
from nebula.core.result import Err, Ok
from nebula.core.types import UtcDatetime
from nebula.datum.plutus import Constr, from_cbor


@final
@dataclass(frozen=True, slots=True)
class AssetMetadata:
    """Type label and trait set of one asset, hex encoded."""

    asset_type: str | None = None
    traits: frozenset[str] = frozenset()


def _error(reason: str) -> DecodeError:
    return DecodeError(
        message=f"Cannot decode CIP-68 reference datum: {reason}",
        code="DECODE_ERROR",
        timestamp=UtcDatetime.now(),
        source="datum.cip68.decode_reference_datum",
        expected="CIP68Datum",
    )


def decode_reference_datum(
    raw: bytes, type_key: str, traits_key: str,
) -> Ok[AssetMetadata] | Err[DecodeError]:
    match from_cbor(raw):
        case Err(reason):
            return Err(_error(reason))
        case Ok(node):
            pass
    if not isinstance(node, Constr) or node.index != 0 or len(node.fields) < 2:
        return Err(_error("expected Constr 0 [metadata, version, ...]"))
    metadata = node.fields[0]
    if not isinstance(metadata, dict):
        return Err(_error("metadata must be a map"))

    asset_type = metadata.get(bytes.fromhex(type_key))
    if asset_type is not None and not isinstance(asset_type, bytes):
        return Err(_error("type entry must be bytes"))
    traits = metadata.get(bytes.fromhex(traits_key), [])
    if not isinstance(traits, list) or not all(isinstance(t, bytes) for t in traits):
        return Err(_error("traits entry must be a list of bytes"))

    return Ok(AssetMetadata(
        asset_type=None if asset_type is None else asset_type.hex(),
        traits=frozenset(t.hex() for t in traits),
    ))
