"""Datum codec: records <-> canonical Plutus data bytes.

encode_* functions are total over valid records. decode_* functions
return Ok(record) or Err(DecodeError); a datum that is well formed but
holds the other TradeDatum case yields Err(WrongVariantError) from
decode_listing / decode_bid. Nothing is ever partially decoded.
"""

from __future__ import annotations

from typing import Any

from nebula.core.errors import DecodeError, WrongVariantError
from nebula.core.identifiers import OutRef
from nebula.core.result import Err, Ok
from nebula.core.types import UtcDatetime
from nebula.core.value import from_nested_value, to_nested_value
from nebula.datum.plutus import Constr, MalformedData, PlutusData, from_cbor, nullable, to_cbor
from nebula.datum.types import (
    Bid,
    Credential,
    Listing,
    PaymentDatum,
    PlutusAddress,
    PubKeyCredential,
    RequestedOption,
    RoyaltyInfo,
    RoyaltyRecipient,
    ScriptCredential,
    SpecificSymbolWithConstraints,
    SpecificValue,
    StakeCredential,
    StakeInline,
    StakePointer,
    TradeAction,
    TradeDatum,
    TradeParams,
    TraitFilter,
)

HASH28_LEN = 28
HASH32_LEN = 32
NEGATED = -1
NOT_NEGATED = 0

# ---------------------------------------------------------------------------
# Record -> Plutus data
# ---------------------------------------------------------------------------


def _credential(c: Credential) -> Constr:
    match c:
        case PubKeyCredential(h):
            return Constr(0, (bytes.fromhex(h),))
        case ScriptCredential(h):
            return Constr(1, (bytes.fromhex(h),))


def _stake(s: StakeCredential) -> Constr:
    match s:
        case StakeInline(cred):
            return Constr(0, (_credential(cred),))
        case StakePointer(slot, tx_index, cert_index):
            return Constr(1, (slot, tx_index, cert_index))


def address_data(a: PlutusAddress) -> Constr:
    return Constr(0, (
        _credential(a.payment),
        nullable(None if a.stake is None else _stake(a.stake)),
    ))


def _value(option: SpecificValue) -> dict[bytes, dict[bytes, int]]:
    nested = to_nested_value(option.assets)
    return {
        bytes.fromhex(policy): {bytes.fromhex(name): qty for name, qty in sorted(names.items())}
        for policy, names in sorted(nested.items())
    }


def _requested_option(o: RequestedOption) -> Constr:
    match o:
        case SpecificValue():
            return Constr(0, (_value(o),))
        case SpecificSymbolWithConstraints(policy_id, types, traits):
            return Constr(1, (
                bytes.fromhex(policy_id),
                [bytes.fromhex(t) for t in types],
                [[NEGATED if f.negated else NOT_NEGATED, bytes.fromhex(f.trait)] for f in traits],
            ))


def trade_datum_data(d: TradeDatum) -> Constr:
    match d:
        case Listing(owner, requested_lovelace, private_listing):
            return Constr(0, (Constr(0, (
                address_data(owner),
                requested_lovelace,
                nullable(None if private_listing is None else address_data(private_listing)),
            )),))
        case Bid(owner, requested_option):
            return Constr(1, (Constr(0, (
                address_data(owner),
                _requested_option(requested_option),
            )),))


def out_ref_data(ref: OutRef) -> Constr:
    return Constr(0, (Constr(0, (bytes.fromhex(ref.tx_hash),)), ref.output_index))


def royalty_info_data(info: RoyaltyInfo) -> Constr:
    return Constr(0, (
        [Constr(0, (address_data(r.address), r.fee, r.fixed_fee)) for r in info.recipients],
        info.min_ada,
    ))


def encode_trade_datum(d: TradeDatum) -> bytes:
    return to_cbor(trade_datum_data(d))


def encode_payment_datum(d: PaymentDatum) -> bytes:
    return to_cbor(Constr(0, (out_ref_data(d.out_ref),)))


def encode_royalty_info(info: RoyaltyInfo) -> bytes:
    return to_cbor(royalty_info_data(info))


def encode_trade_action(action: TradeAction) -> bytes:
    return to_cbor(Constr(action.value))


def encode_trade_params(p: TradeParams) -> bytes:
    """Parameter list applied to the trade validator by the script compiler."""
    return to_cbor([
        nullable(None if p.protocol_key is None else bytes.fromhex(p.protocol_key)),
        [bytes.fromhex(p.type_key), bytes.fromhex(p.traits_key)],
        bytes.fromhex(p.reference_label),
        [bytes.fromhex(p.royalty_policy_id), bytes.fromhex(p.royalty_asset_name)],
    ])


def encode(record: TradeDatum | PaymentDatum | RoyaltyInfo | TradeAction) -> bytes:
    """Encode any datum or redeemer record."""
    match record:
        case Listing() | Bid():
            return encode_trade_datum(record)
        case PaymentDatum():
            return encode_payment_datum(record)
        case RoyaltyInfo():
            return encode_royalty_info(record)
        case TradeAction():
            return encode_trade_action(record)


# ---------------------------------------------------------------------------
# Plutus data -> record
# ---------------------------------------------------------------------------


def _constr(node: PlutusData, what: str, arity: int, indices: range = range(1)) -> Constr:
    if not isinstance(node, Constr):
        raise MalformedData(f"{what}: expected constructor, got {type(node).__name__}")
    if node.index not in indices:
        raise MalformedData(f"{what}: unknown constructor {node.index}")
    if len(node.fields) != arity:
        raise MalformedData(f"{what}: expected {arity} fields, got {len(node.fields)}")
    return node


def _bytes(node: PlutusData, what: str, length: int | None = None) -> str:
    if not isinstance(node, bytes):
        raise MalformedData(f"{what}: expected bytes, got {type(node).__name__}")
    if length is not None and len(node) != length:
        raise MalformedData(f"{what}: expected {length} bytes, got {len(node)}")
    return node.hex()


def _int(node: PlutusData, what: str, minimum: int | None = None) -> int:
    if not isinstance(node, int) or isinstance(node, bool):
        raise MalformedData(f"{what}: expected integer, got {type(node).__name__}")
    if minimum is not None and node < minimum:
        raise MalformedData(f"{what}: must be >= {minimum}, got {node}")
    return node


def _list(node: PlutusData, what: str) -> list[Any]:
    if not isinstance(node, list):
        raise MalformedData(f"{what}: expected list, got {type(node).__name__}")
    return node


def _map(node: PlutusData, what: str) -> dict[Any, Any]:
    if not isinstance(node, dict):
        raise MalformedData(f"{what}: expected map, got {type(node).__name__}")
    return node


def _read_nullable(node: PlutusData, what: str) -> PlutusData | None:
    if not isinstance(node, Constr) or node.index not in (0, 1):
        raise MalformedData(f"{what}: expected Some or None constructor")
    if node.index == 1:
        if node.fields:
            raise MalformedData(f"{what}: None carries no fields")
        return None
    if len(node.fields) != 1:
        raise MalformedData(f"{what}: Some carries exactly one field")
    return node.fields[0]


def _read_credential(node: PlutusData, what: str) -> Credential:
    c = _constr(node, what, arity=1, indices=range(2))
    h = _bytes(c.fields[0], f"{what}.hash", HASH28_LEN)
    return PubKeyCredential(h) if c.index == 0 else ScriptCredential(h)


def _read_stake(node: PlutusData, what: str) -> StakeCredential:
    if isinstance(node, Constr) and node.index == 1:
        c = _constr(node, what, arity=3, indices=range(1, 2))
        return StakePointer(
            slot=_int(c.fields[0], f"{what}.slot", 0),
            tx_index=_int(c.fields[1], f"{what}.tx_index", 0),
            cert_index=_int(c.fields[2], f"{what}.cert_index", 0),
        )
    c = _constr(node, what, arity=1)
    return StakeInline(_read_credential(c.fields[0], f"{what}.credential"))


def read_address(node: PlutusData, what: str = "address") -> PlutusAddress:
    c = _constr(node, what, arity=2)
    stake = _read_nullable(c.fields[1], f"{what}.stake")
    return PlutusAddress(
        payment=_read_credential(c.fields[0], f"{what}.payment"),
        stake=None if stake is None else _read_stake(stake, f"{what}.stake"),
    )


def _read_value(node: PlutusData, what: str) -> SpecificValue:
    nested: dict[str, dict[str, int]] = {}
    for policy, names in _map(node, what).items():
        policy_hex = _bytes(policy, f"{what}.policy")
        if len(policy_hex) not in (0, HASH28_LEN * 2):
            raise MalformedData(f"{what}: policy id must be empty or 28 bytes")
        nested[policy_hex] = {
            _bytes(name, f"{what}.asset_name"): _int(qty, f"{what}.quantity")
            for name, qty in _map(names, f"{what}.assets").items()
        }
        if policy_hex == "" and any(nested[policy_hex]):
            raise MalformedData(f"{what}: lovelace entry must have an empty asset name")
    return SpecificValue(from_nested_value(nested))


def _read_trait(node: PlutusData, what: str) -> TraitFilter:
    pair = _list(node, what)
    if len(pair) != 2:
        raise MalformedData(f"{what}: expected [negation, trait]")
    negation = _int(pair[0], f"{what}.negation")
    if negation not in (NEGATED, NOT_NEGATED):
        raise MalformedData(f"{what}: negation must be -1 or 0, got {negation}")
    return TraitFilter(negated=negation == NEGATED, trait=_bytes(pair[1], f"{what}.trait"))


def _read_requested_option(node: PlutusData, what: str) -> RequestedOption:
    if isinstance(node, Constr) and node.index == 0:
        c = _constr(node, what, arity=1)
        return _read_value(c.fields[0], f"{what}.SpecificValue")
    c = _constr(node, what, arity=3, indices=range(1, 2))
    return SpecificSymbolWithConstraints(
        policy_id=_bytes(c.fields[0], f"{what}.policy_id", HASH28_LEN),
        types=tuple(_bytes(t, f"{what}.types") for t in _list(c.fields[1], f"{what}.types")),
        traits=tuple(
            _read_trait(t, f"{what}.traits") for t in _list(c.fields[2], f"{what}.traits")
        ),
    )


def read_trade_datum(node: PlutusData) -> TradeDatum:
    outer = _constr(node, "TradeDatum", arity=1, indices=range(2))
    if outer.index == 0:
        inner = _constr(outer.fields[0], "Listing", arity=3)
        private = _read_nullable(inner.fields[2], "Listing.private_listing")
        return Listing(
            owner=read_address(inner.fields[0], "Listing.owner"),
            requested_lovelace=_int(inner.fields[1], "Listing.requested_lovelace", 0),
            private_listing=None if private is None else read_address(
                private, "Listing.private_listing",
            ),
        )
    inner = _constr(outer.fields[0], "Bid", arity=2)
    return Bid(
        owner=read_address(inner.fields[0], "Bid.owner"),
        requested_option=_read_requested_option(inner.fields[1], "Bid.requested_option"),
    )


def read_out_ref(node: PlutusData, what: str = "out_ref") -> OutRef:
    c = _constr(node, what, arity=2)
    tx = _constr(c.fields[0], f"{what}.tx_id", arity=1)
    return OutRef(
        tx_hash=_bytes(tx.fields[0], f"{what}.tx_id.hash", HASH32_LEN),
        output_index=_int(c.fields[1], f"{what}.output_index", 0),
    )


def read_royalty_info(node: PlutusData) -> RoyaltyInfo:
    c = _constr(node, "RoyaltyInfo", arity=2)
    recipients = []
    for i, r in enumerate(_list(c.fields[0], "RoyaltyInfo.recipients")):
        what = f"RoyaltyInfo.recipients[{i}]"
        rc = _constr(r, what, arity=3)
        recipients.append(RoyaltyRecipient(
            address=read_address(rc.fields[0], f"{what}.address"),
            fee=_int(rc.fields[1], f"{what}.fee", 1),
            fixed_fee=_int(rc.fields[2], f"{what}.fixed_fee", 0),
        ))
    return RoyaltyInfo(
        recipients=tuple(recipients),
        min_ada=_int(c.fields[1], "RoyaltyInfo.min_ada", 0),
    )


def _decode[T](raw: bytes, expected: str, reader: Any) -> Ok[T] | Err[DecodeError]:
    match from_cbor(raw):
        case Err(reason):
            return Err(_decode_error(expected, reason))
        case Ok(node):
            try:
                return Ok(reader(node))
            except (MalformedData, ValueError, TypeError) as e:
                return Err(_decode_error(expected, str(e)))


def _decode_error(expected: str, reason: str) -> DecodeError:
    return DecodeError(
        message=f"Cannot decode {expected}: {reason}",
        code="DECODE_ERROR",
        timestamp=UtcDatetime.now(),
        source="datum.codec.decode",
        expected=expected,
    )


def decode_trade_datum(raw: bytes) -> Ok[TradeDatum] | Err[DecodeError]:
    return _decode(raw, "TradeDatum", read_trade_datum)


def decode_payment_datum(raw: bytes) -> Ok[PaymentDatum] | Err[DecodeError]:
    def reader(node: PlutusData) -> PaymentDatum:
        c = _constr(node, "PaymentDatum", arity=1)
        return PaymentDatum(out_ref=read_out_ref(c.fields[0]))

    return _decode(raw, "PaymentDatum", reader)


def decode_royalty_info(raw: bytes) -> Ok[RoyaltyInfo] | Err[DecodeError]:
    return _decode(raw, "RoyaltyInfo", read_royalty_info)


def decode_trade_action(raw: bytes) -> Ok[TradeAction] | Err[DecodeError]:
    def reader(node: PlutusData) -> TradeAction:
        c = _constr(node, "TradeAction", arity=0, indices=range(3))
        return TradeAction(c.index)

    return _decode(raw, "TradeAction", reader)


def _wrong_variant(expected: str, actual: str) -> WrongVariantError:
    return WrongVariantError(
        message=f"Expected a {expected} datum, found a {actual}",
        code="WRONG_VARIANT",
        timestamp=UtcDatetime.now(),
        source="datum.codec.decode",
        expected=expected,
        actual=actual,
    )


def decode_listing(raw: bytes) -> Ok[Listing] | Err[DecodeError | WrongVariantError]:
    match decode_trade_datum(raw):
        case Err() as e:
            return e
        case Ok(Listing() as listing):
            return Ok(listing)
        case Ok(other):
            return Err(_wrong_variant("Listing", type(other).__name__))


def decode_bid(raw: bytes) -> Ok[Bid] | Err[DecodeError | WrongVariantError]:
    match decode_trade_datum(raw):
        case Err() as e:
            return e
        case Ok(Bid() as bid):
            return Ok(bid)
        case Ok(other):
            return Err(_wrong_variant("Bid", type(other).__name__))


_DECODERS: dict[type, Any] = {
    Listing: decode_listing,
    Bid: decode_bid,
    PaymentDatum: decode_payment_datum,
    RoyaltyInfo: decode_royalty_info,
    TradeAction: decode_trade_action,
}


def decode(
    raw: bytes, expected: type,
) -> Ok[Any] | Err[DecodeError | WrongVariantError]:
    """Decode ``raw`` as the ``expected`` record type (Listing, Bid, ...)."""
    decoder = _DECODERS.get(expected)
    if decoder is None:
        return Err(_decode_error(expected.__name__, "no decoder for this record type"))
    return decoder(raw)
