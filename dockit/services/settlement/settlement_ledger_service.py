"""
Settlement ledger service.

Completed bookings and orders enter the ledger as pending revenue. An admin
(or the vendor, for urgent payouts) settles one vendor-day at a time:

    pending --initiate--> in settlement process --complete--> settled

A day can only be initiated for its whole pending amount, and only one
request per vendor-day may be processing at any time.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from dockit.core.config import SettlementSettings, settings
from dockit.core.exceptions import (
    BusinessRuleViolation,
    ConcurrentModificationError,
    DuplicateEntryError,
    ErrorCode,
)
from dockit.models.settlement.settlement_request import SettlementRequest
from dockit.models.settlement.settlement_transaction import SettlementTransaction
from dockit.repositories.base.base_repository import AuditContext
from dockit.repositories.settlement import (
    BucketTotals,
    SettlementRequestRepository,
    SettlementTransactionRepository,
)
from dockit.repositories.vendor.vendor_repository import VendorRepository
from dockit.schemas.common.enums import (
    SettlementRequestStatus,
    SettlementRequestType,
    TransactionSettlementStatus,
)
from dockit.schemas.settlement import (
    DailySettlement,
    SettlementRequestResponse,
    SettlementTransactionResponse,
    TransactionRecordRequest,
    VendorSettlementOverview,
)
from dockit.services.base.base_service import BaseService
from dockit.services.base.notification_dispatcher import NotificationDispatcher, NotificationEvent
from dockit.services.base.service_result import ServiceResult
from dockit.utils.date_utils import resolve_now, utc_date
from dockit.utils.string_utils import clean_text, generate_reference

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


@dataclass
class PaymentAdjustment:
    """Post-completion change to a booking's amount."""

    kind: str  # "additional_charge" or "refund"
    amount: Decimal
    status: str = "processed"


def calculate_merchant_revenue(
    total_amount: Decimal,
    merchant_amount: Optional[Decimal] = None,
    adjustments: Iterable[PaymentAdjustment] = (),
    platform_fee: Optional[Decimal] = None,
) -> Decimal:
    """
    Revenue owed to the merchant for one booking or order.

    The platform fee is taken from the original amount only and never takes
    it below zero; processed additional charges are then added and processed
    refunds subtracted in full.
    """
    if merchant_amount is not None:
        revenue = Decimal(merchant_amount)
    else:
        fee = settings.settlement.PLATFORM_FEE if platform_fee is None else Decimal(platform_fee)
        revenue = max(Decimal(total_amount) - fee, ZERO)

    for adjustment in adjustments:
        if adjustment.status != "processed":
            continue
        if adjustment.kind == "additional_charge":
            revenue += Decimal(adjustment.amount)
        elif adjustment.kind == "refund":
            revenue -= Decimal(adjustment.amount)

    return max(revenue, ZERO).quantize(CENT)


def _bucket(totals: BucketTotals, status: TransactionSettlementStatus) -> Decimal:
    return totals.get(status, (ZERO, 0))[0]


class SettlementLedgerService(BaseService):
    """Per-vendor, per-day settlement ledger."""

    def __init__(
        self,
        db_session: Session,
        notifier: Optional[NotificationDispatcher] = None,
        settlement_settings: Optional[SettlementSettings] = None,
    ):
        super().__init__(db_session, notifier)
        self.config = settlement_settings or settings.settlement
        self.vendor_repo = VendorRepository(db_session)
        self.transaction_repo = SettlementTransactionRepository(db_session)
        self.request_repo = SettlementRequestRepository(db_session)

    # -------------------------------------------------------------------------
    # Ledger input
    # -------------------------------------------------------------------------

    def record_transaction(
        self,
        request: TransactionRecordRequest,
    ) -> ServiceResult[SettlementTransactionResponse]:
        """Add a completed booking or order to its vendor-day as pending revenue."""
        try:
            with self.transaction():
                self.vendor_repo.get_by_id(request.vendor_id)
                if self.transaction_repo.find_by_source(request.source_type, request.source_id):
                    raise BusinessRuleViolation(
                        ErrorCode.ALREADY_EXISTS,
                        "Transaction already recorded for this source",
                        {"source_type": request.source_type.value, "source_id": request.source_id},
                    )
                record = self.transaction_repo.create(
                    SettlementTransaction(
                        vendor_id=request.vendor_id,
                        source_type=request.source_type,
                        source_id=request.source_id,
                        final_amount=Decimal(request.final_amount).quantize(CENT),
                        completed_at=request.completed_at,
                        settlement_date=utc_date(request.completed_at),
                        settlement_status=TransactionSettlementStatus.PENDING,
                    )
                )
        except Exception as e:
            return self._handle_exception(e, "record settlement transaction", request.source_id)

        self._logger.info(
            "Settlement transaction recorded",
            extra={
                "vendor_id": str(request.vendor_id),
                "source_type": request.source_type.value,
                "source_id": request.source_id,
                "final_amount": str(record.final_amount),
                "settlement_date": record.settlement_date.isoformat(),
            },
        )
        return ServiceResult.success(SettlementTransactionResponse.model_validate(record))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def build_daily_settlement(self, vendor_id: UUID, settlement_date: date) -> DailySettlement:
        totals = self.transaction_repo.bucket_totals(vendor_id, settlement_date)
        pending = _bucket(totals, TransactionSettlementStatus.PENDING)
        in_process = _bucket(totals, TransactionSettlementStatus.IN_SETTLEMENT)
        settled = _bucket(totals, TransactionSettlementStatus.SETTLED)
        open_request = self.request_repo.find_open(vendor_id, settlement_date)
        return DailySettlement(
            vendor_id=vendor_id,
            date=settlement_date,
            total_to_be_received=pending + in_process + settled,
            pending_settlement=pending,
            in_settlement_process=in_process,
            payment_settled=settled,
            transaction_count=sum(count for _, count in totals.values()),
            open_settlement_id=open_request.id if open_request else None,
        )

    def get_daily_settlement(self, vendor_id: UUID, settlement_date: date) -> ServiceResult[DailySettlement]:
        try:
            self.vendor_repo.get_by_id(vendor_id)
            daily = self.build_daily_settlement(vendor_id, settlement_date)
        except Exception as e:
            return self._handle_exception(e, "get daily settlement", vendor_id)
        return ServiceResult.success(daily)

    def get_settlement_request(self, settlement_id: UUID) -> ServiceResult[SettlementRequestResponse]:
        try:
            request = self.request_repo.get_by_id(settlement_id)
        except Exception as e:
            return self._handle_exception(e, "get settlement request", settlement_id)
        return ServiceResult.success(SettlementRequestResponse.model_validate(request))

    def list_settlement_transactions(
        self,
        settlement_id: UUID,
    ) -> ServiceResult[List[SettlementTransactionResponse]]:
        """Transactions claimed by a settlement request, oldest completion first."""
        try:
            request = self.request_repo.get_by_id(settlement_id)
            transactions = self.transaction_repo.find_by_request(request.id)
        except Exception as e:
            return self._handle_exception(e, "list settlement transactions", settlement_id)
        return ServiceResult.success([SettlementTransactionResponse.model_validate(t) for t in transactions])

    def list_settlement_requests(
        self,
        vendor_id: Optional[UUID] = None,
        status: Optional[SettlementRequestStatus] = None,
    ) -> ServiceResult[List[SettlementRequestResponse]]:
        try:
            requests = self.request_repo.list_by_vendor(vendor_id, status)
        except Exception as e:
            return self._handle_exception(e, "list settlement requests", vendor_id)
        return ServiceResult.success([SettlementRequestResponse.model_validate(r) for r in requests])

    def list_vendors_with_pending_settlements(self) -> ServiceResult[List[VendorSettlementOverview]]:
        """Vendors with money pending or in process, largest pending amount first."""
        try:
            overview = []
            for vendor_id, totals in self.transaction_repo.vendor_bucket_totals().items():
                pending = _bucket(totals, TransactionSettlementStatus.PENDING)
                in_process = _bucket(totals, TransactionSettlementStatus.IN_SETTLEMENT)
                settled = _bucket(totals, TransactionSettlementStatus.SETTLED)
                if pending <= 0 and in_process <= 0:
                    continue
                vendor = self.vendor_repo.get_by_id(vendor_id)
                overview.append(
                    VendorSettlementOverview(
                        vendor_id=vendor_id,
                        business_name=vendor.business_name,
                        total_to_be_received=pending + in_process + settled,
                        pending_settlement=pending,
                        in_settlement_process=in_process,
                        payment_settled=settled,
                        pending_dates=self.transaction_repo.pending_dates(vendor_id),
                        has_bank_details=vendor.has_bank_details,
                    )
                )
        except Exception as e:
            return self._handle_exception(e, "list vendors with pending settlements")

        overview.sort(key=lambda item: item.pending_settlement, reverse=True)
        return ServiceResult.success(overview)

    # -------------------------------------------------------------------------
    # Workflow
    # -------------------------------------------------------------------------

    def initiate_settlement(
        self,
        vendor_id: UUID,
        settlement_date: date,
        amount: Decimal,
        audit: AuditContext,
        now: Optional[datetime] = None,
        request_type: SettlementRequestType = SettlementRequestType.REGULAR,
        reason: Optional[str] = None,
    ) -> ServiceResult[SettlementRequestResponse]:
        """
        Move the whole pending amount of a vendor-day into a processing request.

        Checks run in a fixed order: vendor, open request, bank details,
        something to settle, exact amount.
        """
        now = resolve_now(now)
        try:
            with self.transaction():
                vendor = self.vendor_repo.get_by_id(vendor_id)

                if self.request_repo.find_open(vendor_id, settlement_date) is not None:
                    raise self._already_in_progress(vendor_id, settlement_date)

                if not vendor.has_bank_details:
                    raise BusinessRuleViolation(
                        ErrorCode.MISSING_BANK_DETAILS,
                        "Vendor has no bank details on file",
                        {"vendor_id": str(vendor_id)},
                    )

                # The amount is summed from exactly the rows that get claimed
                pending_rows = self.transaction_repo.pending_rows(vendor_id, settlement_date)
                pending_ids = [transaction_id for transaction_id, _ in pending_rows]
                pending = sum((row_amount for _, row_amount in pending_rows), ZERO)
                if pending <= 0:
                    raise BusinessRuleViolation(
                        ErrorCode.NOTHING_TO_SETTLE,
                        "No pending amount for this date",
                        {"vendor_id": str(vendor_id), "date": settlement_date.isoformat()},
                    )

                amount = Decimal(amount)
                if abs(amount - pending) > self.config.AMOUNT_TOLERANCE:
                    raise BusinessRuleViolation(
                        ErrorCode.AMOUNT_MISMATCH,
                        "Settlement amount must equal the pending amount",
                        {"requested": str(amount), "pending": str(pending)},
                    )

                try:
                    settlement = self.request_repo.create(
                        SettlementRequest(
                            settlement_reference=generate_reference("STL"),
                            vendor_id=vendor_id,
                            settlement_date=settlement_date,
                            amount=pending,
                            transaction_count=len(pending_ids),
                            status=SettlementRequestStatus.PROCESSING,
                            request_type=request_type,
                            reason=clean_text(reason),
                            bank_account_number=vendor.bank_account_number,
                            bank_account_holder_name=vendor.bank_account_holder_name,
                            bank_name=vendor.bank_name,
                            requested_by=audit.actor,
                            requested_at=now,
                        )
                    )
                except DuplicateEntryError as e:
                    # Lost the race against another initiator for the same vendor-day
                    raise self._already_in_progress(vendor_id, settlement_date) from e

                claimed = self.transaction_repo.claim(pending_ids, settlement.id)
                if claimed != len(pending_ids):
                    raise ConcurrentModificationError(
                        "Pending transactions changed while initiating settlement",
                        {"expected": len(pending_ids), "claimed": claimed},
                    )
        except Exception as e:
            return self._handle_exception(e, "initiate settlement", vendor_id)

        self._logger.info(
            "Settlement initiated",
            extra={
                "vendor_id": str(vendor_id),
                "settlement_date": settlement_date.isoformat(),
                "settlement_reference": settlement.settlement_reference,
                "amount": str(settlement.amount),
                "request_type": request_type.value,
                "actor": audit.actor,
            },
        )
        return ServiceResult.success(
            SettlementRequestResponse.model_validate(settlement),
            message="Settlement initiated",
        )

    def request_urgent_settlement(
        self,
        vendor_id: UUID,
        settlement_date: date,
        amount: Decimal,
        reason: Optional[str],
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[SettlementRequestResponse]:
        """Vendor-initiated payout of one day; same guards as an admin initiation."""
        return self.initiate_settlement(
            vendor_id,
            settlement_date,
            amount,
            audit,
            now=now,
            request_type=SettlementRequestType.URGENT,
            reason=reason,
        )

    def complete_settlement(
        self,
        settlement_id: UUID,
        payment_reference: Optional[str],
        processing_notes: Optional[str],
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[SettlementRequestResponse]:
        """Confirm the payout; the claimed money moves to settled."""
        now = resolve_now(now)
        reference = (payment_reference or "").strip()
        try:
            with self.transaction():
                if len(reference) < self.config.PAYMENT_REFERENCE_MIN_LENGTH:
                    raise BusinessRuleViolation(
                        ErrorCode.INVALID_REFERENCE,
                        f"Payment reference must be at least "
                        f"{self.config.PAYMENT_REFERENCE_MIN_LENGTH} characters",
                        {"field": "payment_reference"},
                    )

                settlement = self.request_repo.get_by_id(settlement_id)
                if not settlement.is_open:
                    raise BusinessRuleViolation(
                        ErrorCode.ALREADY_COMPLETED,
                        "Settlement has already been completed",
                        {
                            "settlement_id": str(settlement_id),
                            "payment_reference": settlement.payment_reference,
                        },
                    )

                self.request_repo.update(
                    settlement,
                    {
                        "status": SettlementRequestStatus.COMPLETED,
                        "payment_reference": reference,
                        "processing_notes": clean_text(processing_notes),
                        "processed_by": audit.actor,
                        "processed_at": now,
                    },
                )
                settled = self.transaction_repo.settle(settlement.id, now, reference)
        except Exception as e:
            return self._handle_exception(e, "complete settlement", settlement_id)

        self._logger.info(
            "Settlement completed",
            extra={
                "settlement_id": str(settlement_id),
                "vendor_id": str(settlement.vendor_id),
                "amount": str(settlement.amount),
                "transactions_settled": settled,
                "actor": audit.actor,
            },
        )
        self._notify(
            NotificationEvent.SETTLEMENT_COMPLETED,
            settlement.vendor_id,
            "Settlement completed",
            f"Rs. {settlement.amount} for {settlement.settlement_date:%Y-%m-%d} has been paid "
            f"(reference {reference}).",
            {
                "settlement_id": str(settlement.id),
                "settlement_reference": settlement.settlement_reference,
                "amount": str(settlement.amount),
                "payment_reference": reference,
            },
        )
        return ServiceResult.success(
            SettlementRequestResponse.model_validate(settlement),
            message="Settlement completed",
        )

    @staticmethod
    def _already_in_progress(vendor_id: UUID, settlement_date: date) -> BusinessRuleViolation:
        return BusinessRuleViolation(
            ErrorCode.SETTLEMENT_ALREADY_IN_PROGRESS,
            "A settlement for this date is already in progress",
            {"vendor_id": str(vendor_id), "date": settlement_date.isoformat()},
        )
