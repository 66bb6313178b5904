"""Royalty fee engine.

For each recipient, in schedule order:

    fee_to_pay = floor(gross * 10 / fee)
    payout     = fixed_fee if fee_to_pay < min_ada else fee_to_pay
    remainder -= payout            (remainder starts at gross)

and the split fails the moment the remainder is no longer positive.
The validator recomputes exactly this, so the integer arithmetic and
the strict ``<`` must not change. Recipient order is significant: it
decides which recipient exhausts the remainder.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from math import floor
from typing import final

from nebula.core.errors import FieldViolation, InsufficientFundsError, ValidationError
from nebula.core.result import Err, Ok
from nebula.core.types import UtcDatetime
from nebula.datum.types import PlutusAddress, RoyaltyInfo, RoyaltyRecipient


@final
@dataclass(frozen=True, slots=True)
class Payout:
    address: PlutusAddress
    lovelace: int


@final
@dataclass(frozen=True, slots=True)
class FeeSplit:
    """Ordered payouts plus what is left for the seller.

    INV: remainder + sum(payout.lovelace) == gross, remainder > 0.
    """

    gross: int
    payouts: tuple[Payout, ...]
    remainder: int

    @property
    def total_fees(self) -> int:
        return sum(p.lovelace for p in self.payouts)


def recipient_payout(gross: int, recipient: RoyaltyRecipient, min_ada: int) -> int:
    """Lovelace owed to one recipient for a trade of ``gross``."""
    fee_to_pay = (gross * 10) // recipient.fee
    return recipient.fixed_fee if fee_to_pay < min_ada else fee_to_pay


def split(gross: int, schedule: RoyaltyInfo) -> Ok[FeeSplit] | Err[InsufficientFundsError]:
    remainder = gross
    payouts: list[Payout] = []
    for i, recipient in enumerate(schedule.recipients):
        payout = recipient_payout(gross, recipient, schedule.min_ada)
        remainder -= payout
        if remainder <= 0:
            return Err(InsufficientFundsError(
                message=f"No lovelace left after royalty recipient {i}",
                code="INSUFFICIENT_FUNDS",
                timestamp=UtcDatetime.now(),
                source="ledger.fees.split",
                gross=gross,
                remainder=remainder,
                recipient_index=i,
            ))
        payouts.append(Payout(address=recipient.address, lovelace=payout))
    return Ok(FeeSplit(gross=gross, payouts=tuple(payouts), remainder=remainder))


def encode_fee_rate(rate: Decimal) -> Ok[int] | Err[ValidationError]:
    """Royalty rate (0.02 for 2%) to the on-chain ``fee`` field: floor(10 / rate).

    Computed on exact rationals, so a rate given as Decimal("0.03") maps
    to 333 without binary floating point drift.
    """
    violation: FieldViolation | None = None
    if not isinstance(rate, Decimal) or not rate.is_finite() or rate <= 0:
        violation = FieldViolation(
            path="royalty.fee", constraint="must be a positive Decimal", actual_value=str(rate),
        )
    else:
        fee = floor(Fraction(10) / Fraction(rate))
        if fee >= 1:
            return Ok(fee)
        violation = FieldViolation(
            path="royalty.fee", constraint="must encode to fee >= 1 (rate <= 10)",
            actual_value=str(rate),
        )
    return Err(ValidationError(
        message="Invalid royalty rate",
        code="ROYALTY_VALIDATION",
        timestamp=UtcDatetime.now(),
        source="ledger.fees.encode_fee_rate",
        fields=(violation,),
    ))


def decode_fee_rate(fee: int) -> Fraction:
    """Effective rate charged for an encoded ``fee`` (10 / fee)."""
    return Fraction(10, fee)
