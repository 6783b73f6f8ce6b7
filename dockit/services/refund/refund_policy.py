"""
Booking cancellation refund policy.

Cancellations at least six hours before the scheduled charging start are
refunded the amount paid minus the non-refundable platform fee and a slot
occupancy fee of 5 % of the original amount. Later cancellations get
nothing.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from dockit.core.config import RefundSettings, settings
from dockit.schemas.refund import RefundCalculation

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_refund(
    original_amount: Decimal,
    platform_fee: Decimal,
    hours_before_charge: Decimal,
    policy: Optional[RefundSettings] = None,
) -> RefundCalculation:
    policy = policy or settings.refund
    original = _money(original_amount)
    fee = _money(platform_fee)
    hours = max(Decimal(str(hours_before_charge)), Decimal("0"))
    percentage = Decimal(policy.SLOT_OCCUPANCY_FEE_PERCENTAGE)

    if hours < policy.MINIMUM_HOURS_BEFORE_CHARGE:
        return RefundCalculation(
            eligible=False,
            original_amount=original,
            platform_fee=fee,
            base_refund=ZERO,
            slot_occupancy_fee_percentage=percentage,
            slot_occupancy_fee=ZERO,
            final_refund_amount=ZERO,
            hours_before_charge=hours,
            reason=(
                f"Cancellations less than {policy.MINIMUM_HOURS_BEFORE_CHARGE} hours "
                f"before the charging slot are not refundable"
            ),
        )

    base_refund = max(original - fee, ZERO)
    slot_fee = _money(original * percentage / Decimal("100"))
    return RefundCalculation(
        eligible=True,
        original_amount=original,
        platform_fee=fee,
        base_refund=base_refund,
        slot_occupancy_fee_percentage=percentage,
        slot_occupancy_fee=slot_fee,
        final_refund_amount=max(base_refund - slot_fee, ZERO),
        hours_before_charge=hours,
    )
