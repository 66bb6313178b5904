"""Tests for nebula.datum.plutus: Plutus data and its canonical CBOR layout."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from nebula.core.result import Err, Ok
from nebula.datum.plutus import Constr, MalformedData, from_cbor, nullable, to_cbor


class TestConstructorTags:
    @pytest.mark.parametrize(("data", "hex_"), [
        (Constr(0), "d87980"),
        (Constr(2), "d87b80"),
        (Constr(1, (5,)), "d87a9f05ff"),
        (Constr(7), "d9050080"),
        (Constr(127), "d9057880"),
        (Constr(200), "d8668218c880"),
    ])
    def test_layout(self, data: Constr, hex_: str) -> None:
        assert to_cbor(data).hex() == hex_

    @pytest.mark.parametrize("index", [0, 6, 7, 127, 128, 1000])
    def test_round_trip(self, index: int) -> None:
        data = Constr(index, (1, b"\x01"))
        assert from_cbor(to_cbor(data)) == Ok(data)


class TestContainers:
    def test_empty_list_is_definite(self) -> None:
        assert to_cbor([]).hex() == "80"

    def test_non_empty_list_is_indefinite(self) -> None:
        assert to_cbor([1, 2]).hex() == "9f0102ff"

    def test_map_is_definite(self) -> None:
        assert to_cbor({b"a": 1}).hex() == "a1416101"

    def test_long_bytes_are_chunked(self) -> None:
        raw = to_cbor(b"\x07" * 70)
        assert raw.hex() == "5f5840" + "07" * 64 + "46" + "07" * 6 + "ff"
        assert from_cbor(raw) == Ok(b"\x07" * 70)

    def test_64_bytes_stay_definite(self) -> None:
        assert to_cbor(b"\x07" * 64).hex() == "5840" + "07" * 64

    def test_nullable(self) -> None:
        assert nullable(None) == Constr(1)
        assert nullable(3) == Constr(0, (3,))


class TestRejections:
    def test_bool_is_not_plutus_data(self) -> None:
        with pytest.raises(MalformedData):
            to_cbor(True)  # type: ignore[arg-type]

    def test_decode_bool(self) -> None:
        assert isinstance(from_cbor(bytes.fromhex("f5")), Err)

    def test_decode_text(self) -> None:
        assert isinstance(from_cbor(bytes.fromhex("6161")), Err)

    def test_decode_unknown_tag(self) -> None:
        assert isinstance(from_cbor(bytes.fromhex("d8c880")), Err)

    def test_empty_input(self) -> None:
        assert from_cbor(b"") == Err("empty input")

    def test_truncated(self) -> None:
        raw = to_cbor(Constr(0, (1, 2)))
        assert isinstance(from_cbor(raw[:-1]), Err)

    def test_trailing_bytes(self) -> None:
        assert isinstance(from_cbor(to_cbor(Constr(0)) + b"\x00"), Err)


_leaves = st.one_of(
    st.integers(min_value=-(2**64), max_value=2**64),
    st.binary(max_size=100),
)
_data = st.recursive(
    _leaves,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.builds(
            lambda i, fs: Constr(i, tuple(fs)),
            st.integers(min_value=0, max_value=300),
            st.lists(children, max_size=3),
        ),
        st.dictionaries(st.binary(max_size=8), children, max_size=3),
    ),
    max_leaves=12,
)


class TestProperties:
    @given(_data)
    def test_round_trip(self, data: object) -> None:
        assert from_cbor(to_cbor(data)) == Ok(data)  # type: ignore[arg-type]
