"""
Licence and premium pricing.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from uuid import UUID

from dockit.core.config import LicensingSettings, settings
from dockit.models.subscription.subscription_payment import SubscriptionPayment
from dockit.schemas.common.enums import (
    PaymentStatus,
    PaymentSubject,
    PaymentType,
    PremiumPlanType,
    SubscriptionType,
)
from dockit.schemas.subscription.pricing import PriceQuote
from dockit.utils.string_utils import clean_text, generate_reference


def calculate_vat(amount: Decimal, rate: Decimal) -> Decimal:
    """VAT rounded to the nearest whole rupee."""
    vat = (Decimal(amount) * Decimal(rate)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return vat.quantize(Decimal("0.01"))


def _quote(
    subject: PaymentSubject,
    plan_type: str,
    base: Decimal,
    period_days: int,
    licensing: LicensingSettings,
) -> PriceQuote:
    base = Decimal(base).quantize(Decimal("0.01"))
    vat = calculate_vat(base, licensing.VAT_RATE)
    return PriceQuote(
        subject=subject,
        plan_type=plan_type,
        base_amount=base,
        vat_rate=licensing.VAT_RATE,
        vat_amount=vat,
        total_amount=base + vat,
        currency=licensing.CURRENCY,
        period_days=period_days,
    )


def quote_station_premium(
    plan_type: PremiumPlanType,
    licensing: Optional[LicensingSettings] = None,
) -> PriceQuote:
    licensing = licensing or settings.licensing
    if plan_type == PremiumPlanType.YEARLY:
        return _quote(
            PaymentSubject.STATION_PREMIUM,
            plan_type.value,
            licensing.PREMIUM_YEARLY_PRICE,
            licensing.PREMIUM_YEARLY_DAYS,
            licensing,
        )
    return _quote(
        PaymentSubject.STATION_PREMIUM,
        plan_type.value,
        licensing.PREMIUM_MONTHLY_PRICE,
        licensing.PREMIUM_MONTHLY_DAYS,
        licensing,
    )


def quote_vendor_license(licensing: Optional[LicensingSettings] = None) -> PriceQuote:
    licensing = licensing or settings.licensing
    return _quote(
        PaymentSubject.VENDOR_LICENSE,
        SubscriptionType.YEARLY.value,
        licensing.VENDOR_YEARLY_PRICE,
        licensing.YEARLY_PERIOD_DAYS,
        licensing,
    )


def build_payment(
    quote: PriceQuote,
    vendor_id: UUID,
    payment_type: PaymentType,
    paid_at: datetime,
    station_id: Optional[UUID] = None,
    transaction_id: Optional[str] = None,
    payment_method: Optional[str] = None,
) -> SubscriptionPayment:
    """Completed payment row for a quote; a reference is generated when none is given."""
    return SubscriptionPayment(
        vendor_id=vendor_id,
        station_id=station_id,
        subject=quote.subject,
        payment_type=payment_type,
        plan_type=quote.plan_type,
        transaction_id=clean_text(transaction_id) or generate_reference("PAY"),
        base_amount=quote.base_amount,
        vat_amount=quote.vat_amount,
        total_amount=quote.total_amount,
        currency=quote.currency,
        payment_method=clean_text(payment_method),
        status=PaymentStatus.COMPLETED,
        paid_at=paid_at,
    )
