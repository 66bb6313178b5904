"""Asset bundles: unit -> quantity maps with "lovelace" for ada.

An asset bundle is a FrozenMap[str, int]; zero quantities are dropped
on construction so that equal holdings always compare equal. The
nested policy -> asset name -> quantity form is what datums carry.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from nebula.core.identifiers import LOVELACE, POLICY_ID_HEX_LEN
from nebula.core.types import FrozenMap

type Assets = FrozenMap[str, int]
type NestedValue = dict[str, dict[str, int]]


def make_assets(entries: Mapping[str, int] | Iterable[tuple[str, int]]) -> Assets:
    """Build a bundle, summing repeated units and dropping zeros."""
    totals: dict[str, int] = {}
    pairs = entries.items() if isinstance(entries, Mapping) else entries
    for unit, qty in pairs:
        totals[unit] = totals.get(unit, 0) + qty
    return FrozenMap(_entries=tuple(sorted((u, q) for u, q in totals.items() if q != 0)))


EMPTY_ASSETS: Assets = make_assets({})


def lovelace_of(assets: Assets) -> int:
    return assets.get(LOVELACE, 0) or 0


def with_lovelace(assets: Assets, lovelace: int) -> Assets:
    return make_assets({**assets.to_dict(), LOVELACE: lovelace})


def add_assets(*bundles: Assets) -> Assets:
    return make_assets(pair for bundle in bundles for pair in bundle.items())


def negate_assets(assets: Assets) -> Assets:
    return make_assets((u, -q) for u, q in assets.items())


def native_units(assets: Assets) -> tuple[str, ...]:
    """All units except lovelace, in sorted order."""
    return tuple(u for u in assets if u != LOVELACE)


def units_under_policy(assets: Assets, policy_id: str) -> tuple[str, ...]:
    return tuple(u for u in native_units(assets) if u[:POLICY_ID_HEX_LEN] == policy_id)


def contains_assets(held: Assets, wanted: Assets) -> bool:
    """True when ``held`` has at least the quantity of every unit in ``wanted``."""
    return all((held.get(u, 0) or 0) >= q for u, q in wanted.items())


def to_nested_value(assets: Assets) -> NestedValue:
    """Flat bundle to policy -> name -> qty; lovelace sits under ("", "")."""
    nested: NestedValue = {}
    lovelace = lovelace_of(assets)
    if lovelace:
        nested[""] = {"": lovelace}
    for unit in native_units(assets):
        policy_id, name = unit[:POLICY_ID_HEX_LEN], unit[POLICY_ID_HEX_LEN:]
        nested.setdefault(policy_id, {})[name] = assets[unit]
    return nested


def from_nested_value(nested: Mapping[str, Mapping[str, int]]) -> Assets:
    pairs: list[tuple[str, int]] = []
    for policy_id, names in nested.items():
        for name, qty in names.items():
            pairs.append((LOVELACE if policy_id == "" else policy_id + name, qty))
    return make_assets(pairs)
