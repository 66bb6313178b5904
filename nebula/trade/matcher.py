"""Matcher: what a bid asks for, and whether a candidate asset qualifies.

A specific bid asks for its asset bundle verbatim. An open bid asks
for one unit of its policy; when it carries type or trait filters the
asset's CIP-68 reference token (label 100, same policy, same name) has
to be read and its metadata checked before the sale may proceed.

    types   non-empty -> the asset's type must be one of them
    traits            -> every filter must pass (logical AND):
                         (negated=False, t): t present
                         (negated=True,  t): t absent
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from nebula.core.errors import (
    ConstraintUnsatisfiedError,
    FieldViolation,
    ReferenceNotFoundError,
    ValidationError,
)
from nebula.core.identifiers import LABEL_REFERENCE, AssetName, from_unit, to_text, to_unit
from nebula.core.result import Err, Ok
from nebula.core.types import UtcDatetime
from nebula.core.value import Assets, make_assets
from nebula.datum.cip68 import AssetMetadata
from nebula.datum.types import RequestedOption, SpecificSymbolWithConstraints, SpecificValue


@final
@dataclass(frozen=True, slots=True)
class Resolution:
    """What the seller must deliver, and the reference unit that proves eligibility."""

    requested_assets: Assets
    reference_unit: str | None = None

    @property
    def requires_reference_proof(self) -> bool:
        return self.reference_unit is not None


def reference_unit_for(unit: str) -> Ok[str] | Err[str]:
    """Reference token (label 100) of ``unit``; any label on ``unit`` is stripped."""
    parts = from_unit(unit)
    return to_unit(parts.policy_id, parts.name, LABEL_REFERENCE)


def requirement(
    option: RequestedOption, asset_name: str | None,
) -> Ok[Resolution] | Err[ValidationError]:
    """Resolve the requested assets without looking at any metadata."""
    match option:
        case SpecificValue(assets):
            return Ok(Resolution(requested_assets=assets))
        case SpecificSymbolWithConstraints(policy_id):
            pass
    if asset_name is None:
        return Err(_invalid("asset_name", "required to sell into an open bid", "None"))
    match AssetName.parse(asset_name):
        case Err(reason):
            return Err(_invalid("asset_name", reason, asset_name))
        case Ok(_):
            unit = policy_id + asset_name
    if not option.is_constrained:
        return Ok(Resolution(requested_assets=make_assets({unit: 1})))
    match reference_unit_for(unit):
        case Err(reason):
            return Err(_invalid("asset_name", reason, asset_name))
        case Ok(reference):
            return Ok(Resolution(requested_assets=make_assets({unit: 1}), reference_unit=reference))


def check_constraints(
    option: SpecificSymbolWithConstraints, unit: str, metadata: AssetMetadata,
) -> Ok[None] | Err[ConstraintUnsatisfiedError]:
    if option.types and metadata.asset_type not in option.types:
        shown = "none" if metadata.asset_type is None else to_text(metadata.asset_type)
        return Err(_unsatisfied(
            unit, f"type '{shown}' not in {sorted(to_text(t) for t in option.types)}",
        ))
    for f in option.traits:
        present = f.trait in metadata.traits
        if present and f.negated:
            return Err(_unsatisfied(unit, f"trait '{to_text(f.trait)}' must be absent"))
        if not present and not f.negated:
            return Err(_unsatisfied(unit, f"trait '{to_text(f.trait)}' must be present"))
    return Ok(None)


def resolve(
    option: RequestedOption,
    asset_name: str | None = None,
    metadata: AssetMetadata | None = None,
) -> Ok[Resolution] | Err[ValidationError | ConstraintUnsatisfiedError | ReferenceNotFoundError]:
    """Resolve a bid against a candidate asset and its reference metadata.

    ``metadata`` is the decoded reference datum of the candidate, or
    None when the reference token could not be found.
    """
    match requirement(option, asset_name):
        case Err() as e:
            return e
        case Ok(resolution):
            pass
    if resolution.reference_unit is None or not isinstance(option, SpecificSymbolWithConstraints):
        return Ok(resolution)
    if metadata is None:
        return Err(ReferenceNotFoundError(
            message=f"Reference token {resolution.reference_unit} not found",
            code="REFERENCE_NOT_FOUND",
            timestamp=UtcDatetime.now(),
            source="trade.matcher.resolve",
            reference_unit=resolution.reference_unit,
        ))
    unit = option.policy_id + (asset_name or "")
    match check_constraints(option, unit, metadata):
        case Err() as e:
            return e
        case Ok(_):
            return Ok(resolution)


def _invalid(path: str, constraint: str, actual: str) -> ValidationError:
    return ValidationError(
        message=f"Invalid {path}: {constraint}",
        code="MATCH_VALIDATION",
        timestamp=UtcDatetime.now(),
        source="trade.matcher.requirement",
        fields=(FieldViolation(path=path, constraint=constraint, actual_value=actual),),
    )


def _unsatisfied(unit: str, constraint: str) -> ConstraintUnsatisfiedError:
    return ConstraintUnsatisfiedError(
        message=f"Asset {unit} does not satisfy the bid: {constraint}",
        code="CONSTRAINT_UNSATISFIED",
        timestamp=UtcDatetime.now(),
        source="trade.matcher.check_constraints",
        unit=unit,
        constraint=constraint,
    )
