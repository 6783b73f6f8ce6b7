"""
Price quote schema for licence and premium plans.
"""

from decimal import Decimal

from dockit.schemas.common.base import BaseSchema
from dockit.schemas.common.enums import PaymentSubject

__all__ = ["PriceQuote"]


class PriceQuote(BaseSchema):
    """Base price, VAT rounded to the nearest rupee, and total."""

    subject: PaymentSubject
    plan_type: str
    base_amount: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    total_amount: Decimal
    currency: str
    period_days: int
