"""Plutus data primitives and their canonical CBOR form.

A Plutus data tree is built from int, bytes, list, dict and Constr.
Encoding follows the ledger's canonical layout:

  constructor i  -> tag 121+i (i < 7), 1280+(i-7) (i < 128), else tag 102 [i, fields]
  lists / fields -> indefinite-length array when non-empty, definite when empty
  maps           -> definite-length, keys in the order given
  bytes          -> indefinite-length chunks of 64 when longer than 64 bytes

The validator re-derives hashes from these bytes, so the layout is
fixed here once and every record codec goes through it.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any, final

from cbor2 import CBORDecodeError, CBORDecoder, CBORTag, dumps
from pycardano.serialization import ByteString, IndefiniteList, default_encoder

from nebula.core.result import Err, Ok


@final
@dataclass(frozen=True, slots=True)
class Constr:
    """Constructor application: alternative index plus ordered fields."""

    index: int
    fields: tuple[Any, ...] = ()


type PlutusData = int | bytes | list[Any] | dict[Any, Any] | Constr

# Longest byte string the ledger accepts in one piece.
MAX_BYTES_CHUNK = 64


class MalformedData(ValueError):
    """Raised inside the tree walkers; converted to Err at the module boundary."""


def _constr_tag(index: int, fields: list[Any]) -> CBORTag:
    body: Any = IndefiniteList(fields) if fields else []
    if 0 <= index < 7:
        return CBORTag(121 + index, body)
    if 7 <= index < 128:
        return CBORTag(1280 + index - 7, body)
    return CBORTag(102, [index, body])


def _to_primitive(data: Any) -> Any:
    if isinstance(data, bool):
        raise MalformedData("bool is not Plutus data")
    if isinstance(data, int):
        return data
    if isinstance(data, bytes):
        return ByteString(data) if len(data) > MAX_BYTES_CHUNK else data
    if isinstance(data, Constr):
        return _constr_tag(data.index, [_to_primitive(f) for f in data.fields])
    if isinstance(data, (list, tuple)):
        items = [_to_primitive(x) for x in data]
        return IndefiniteList(items) if items else []
    if isinstance(data, dict):
        return {_to_primitive(k): _to_primitive(v) for k, v in data.items()}
    raise MalformedData(f"{type(data).__name__} is not Plutus data")


def _from_primitive(obj: Any) -> PlutusData:  # noqa: PLR0911
    if isinstance(obj, bool):
        raise MalformedData("bool is not Plutus data")
    if isinstance(obj, (int, bytes)):
        return obj
    if isinstance(obj, CBORTag):
        tag = obj.tag
        if 121 <= tag <= 127:
            return Constr(tag - 121, tuple(_fields(obj.value)))
        if 1280 <= tag <= 1400:
            return Constr(tag - 1280 + 7, tuple(_fields(obj.value)))
        if tag == 102:
            pair = _fields(obj.value)
            if len(pair) != 2 or not isinstance(pair[0], int):
                raise MalformedData("tag 102 must wrap [index, fields]")
            return Constr(pair[0], tuple(_fields(pair[1])))
        raise MalformedData(f"unexpected CBOR tag {tag}")
    if isinstance(obj, list):
        return [_from_primitive(x) for x in obj]
    if isinstance(obj, dict):
        return {_from_primitive(k): _from_primitive(v) for k, v in obj.items()}
    raise MalformedData(f"{type(obj).__name__} is not Plutus data")


def _fields(value: Any) -> list[Any]:
    if not isinstance(value, list):
        raise MalformedData("constructor fields must be an array")
    return [_from_primitive(v) for v in value]


def to_cbor(data: PlutusData) -> bytes:
    """Canonical CBOR bytes of a Plutus data tree."""
    return dumps(_to_primitive(data), default=default_encoder)


def from_cbor(raw: bytes) -> Ok[PlutusData] | Err[str]:
    """Parse one complete Plutus data item. Trailing bytes are rejected."""
    if not raw:
        return Err("empty input")
    stream = io.BytesIO(raw)
    try:
        obj = CBORDecoder(stream).decode()
        if stream.tell() != len(raw):
            return Err(f"{len(raw) - stream.tell()} trailing bytes after datum")
        return Ok(_from_primitive(obj))
    except (CBORDecodeError, MalformedData, TypeError) as e:
        return Err(f"malformed Plutus data: {e}")


def nullable(value: Any | None) -> Constr:
    """Optional field: Some x = Constr 0 [x], None = Constr 1 []."""
    return Constr(1) if value is None else Constr(0, (value,))
