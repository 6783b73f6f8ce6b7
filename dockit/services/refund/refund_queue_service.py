"""
Refund queue service.

Refund requests are created when a booking is cancelled early enough and
wait in a first-in, first-out queue until an operator pays them out and
records the gateway or bank transaction id.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from dockit.core.config import RefundSettings, settings
from dockit.core.exceptions import BusinessRuleViolation, ErrorCode
from dockit.models.refund.refund_audit_entry import RefundAuditEntry
from dockit.models.refund.refund_request import RefundRequest
from dockit.repositories.base.base_repository import AuditContext
from dockit.repositories.refund import RefundRequestRepository
from dockit.schemas.common.enums import QueueOrdering, RefundAuditAction, RefundStatus
from dockit.schemas.refund import (
    RefundCalculation,
    RefundCreateRequest,
    RefundListResponse,
    RefundResponse,
)
from dockit.services.base.base_service import BaseService
from dockit.services.base.notification_dispatcher import NotificationDispatcher, NotificationEvent
from dockit.services.base.service_result import ServiceResult
from dockit.services.refund.refund_policy import calculate_refund
from dockit.utils.date_utils import resolve_now
from dockit.utils.string_utils import clean_text, generate_reference, is_blank


class RefundQueueService(BaseService):
    """Creation, FIFO listing and manual processing of refunds."""

    def __init__(
        self,
        db_session: Session,
        notifier: Optional[NotificationDispatcher] = None,
        refund_settings: Optional[RefundSettings] = None,
    ):
        super().__init__(db_session, notifier)
        self.config = refund_settings or settings.refund
        self.refund_repo = RefundRequestRepository(db_session)

    def calculate(
        self,
        original_amount: Decimal,
        platform_fee: Decimal,
        hours_before_charge: Decimal,
    ) -> RefundCalculation:
        return calculate_refund(original_amount, platform_fee, hours_before_charge, self.config)

    def create_refund(
        self,
        request: RefundCreateRequest,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[RefundResponse]:
        """Queue a refund for a cancelled booking."""
        now = resolve_now(now)
        try:
            with self.transaction():
                calculation = self.calculate(
                    request.original_amount,
                    request.platform_fee,
                    request.hours_before_charge,
                )
                if not calculation.eligible or calculation.final_refund_amount <= 0:
                    raise BusinessRuleViolation(
                        ErrorCode.REFUND_NOT_ELIGIBLE,
                        calculation.reason or "Nothing to refund after fees",
                        {
                            "booking_id": request.booking_id,
                            "hours_before_charge": str(calculation.hours_before_charge),
                            "final_refund_amount": str(calculation.final_refund_amount),
                        },
                    )

                if self.refund_repo.find_by_booking(request.booking_id) is not None:
                    raise BusinessRuleViolation(
                        ErrorCode.ALREADY_EXISTS,
                        "A refund already exists for this booking",
                        {"booking_id": request.booking_id},
                    )

                refund = self.refund_repo.create(
                    RefundRequest(
                        refund_reference=generate_reference("RF"),
                        user_id=request.user_id,
                        booking_id=request.booking_id,
                        vendor_id=request.vendor_id,
                        refund_status=RefundStatus.PENDING,
                        original_amount=calculation.original_amount,
                        platform_fee_deducted=calculation.platform_fee,
                        slot_occupancy_fee=calculation.slot_occupancy_fee,
                        slot_occupancy_fee_percentage=calculation.slot_occupancy_fee_percentage,
                        final_refund_amount=calculation.final_refund_amount,
                        hours_before_charge=calculation.hours_before_charge,
                        cancellation_reason=clean_text(request.reason),
                        created_at=now,
                        updated_at=now,
                    )
                )
                self._audit(refund, RefundAuditAction.CREATED, audit, now, request.reason)
        except Exception as e:
            return self._handle_exception(e, "create refund", request.booking_id)

        self._logger.info(
            "Refund queued",
            extra={
                "refund_reference": refund.refund_reference,
                "booking_id": refund.booking_id,
                "final_refund_amount": str(refund.final_refund_amount),
                "actor": audit.actor,
            },
        )
        return ServiceResult.success(RefundResponse.model_validate(refund), message="Refund queued")

    # -------------------------------------------------------------------------
    # Queue
    # -------------------------------------------------------------------------

    def list_refunds(
        self,
        status: Optional[RefundStatus] = RefundStatus.PENDING,
        ordering: QueueOrdering = QueueOrdering.FIFO,
        page: int = 1,
        page_size: int = 20,
    ) -> ServiceResult[RefundListResponse]:
        try:
            items, total = self.refund_repo.list_queue(status, ordering, page, page_size)
        except Exception as e:
            return self._handle_exception(e, "list refunds")
        return ServiceResult.success(
            RefundListResponse(
                items=[RefundResponse.model_validate(r) for r in items],
                total=total,
                page=page,
                page_size=page_size,
            )
        )

    def next_pending_refund(self) -> ServiceResult[Optional[RefundResponse]]:
        try:
            refund = self.refund_repo.next_pending()
        except Exception as e:
            return self._handle_exception(e, "get next pending refund")
        if refund is None:
            return ServiceResult.success(None, message="Refund queue is empty")
        return ServiceResult.success(RefundResponse.model_validate(refund))

    def get_refund(self, refund_id: UUID) -> ServiceResult[RefundResponse]:
        try:
            refund = self.refund_repo.get_by_id(refund_id)
        except Exception as e:
            return self._handle_exception(e, "get refund", refund_id)
        return ServiceResult.success(RefundResponse.model_validate(refund))

    # -------------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------------

    def process_refund(
        self,
        refund_id: UUID,
        transaction_id: Optional[str],
        remarks: Optional[str],
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[RefundResponse]:
        """
        Mark a pending refund as paid out.

        The transaction id is checked before the refund is loaded, so a blank
        id is reported even for unknown refunds.
        """
        now = resolve_now(now)
        try:
            with self.transaction():
                if is_blank(transaction_id):
                    raise BusinessRuleViolation(
                        ErrorCode.MISSING_TRANSACTION_ID,
                        "Transaction ID is required",
                        {"field": "transaction_id"},
                    )

                refund = self.refund_repo.get_by_id(refund_id)
                self._ensure_pending(refund)

                self.refund_repo.update(
                    refund,
                    {
                        "refund_status": RefundStatus.COMPLETED,
                        "transaction_id": transaction_id.strip(),
                        "remarks": clean_text(remarks),
                        "processed_by": audit.actor,
                        "processed_at": now,
                    },
                )
                self._audit(
                    refund,
                    RefundAuditAction.COMPLETED,
                    audit,
                    now,
                    f"Transaction {refund.transaction_id}",
                )
        except Exception as e:
            return self._handle_exception(e, "process refund", refund_id)

        self._logger.info(
            "Refund processed",
            extra={
                "refund_reference": refund.refund_reference,
                "transaction_id": refund.transaction_id,
                "amount": str(refund.final_refund_amount),
                "actor": audit.actor,
            },
        )
        self._notify(
            NotificationEvent.REFUND_PROCESSED,
            refund.user_id,
            "Refund processed",
            f"Your refund of Rs. {refund.final_refund_amount} has been processed. "
            f"Transaction ID: {refund.transaction_id}",
            {
                "refund_id": str(refund.id),
                "refund_reference": refund.refund_reference,
                "booking_id": refund.booking_id,
                "amount": str(refund.final_refund_amount),
                "transaction_id": refund.transaction_id,
            },
        )
        return ServiceResult.success(RefundResponse.model_validate(refund), message="Refund processed")

    def reject_refund(
        self,
        refund_id: UUID,
        reason: Optional[str],
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[RefundResponse]:
        now = resolve_now(now)
        try:
            with self.transaction():
                if is_blank(reason):
                    raise BusinessRuleViolation(
                        ErrorCode.MISSING_REQUIRED_FIELD,
                        "A reason is required to reject a refund",
                        {"field": "reason"},
                    )

                refund = self.refund_repo.get_by_id(refund_id)
                self._ensure_pending(refund)

                self.refund_repo.update(
                    refund,
                    {
                        "refund_status": RefundStatus.REJECTED,
                        "rejection_reason": reason.strip(),
                        "processed_by": audit.actor,
                        "processed_at": now,
                    },
                )
                self._audit(refund, RefundAuditAction.REJECTED, audit, now, reason.strip())
        except Exception as e:
            return self._handle_exception(e, "reject refund", refund_id)

        self._logger.info(
            "Refund rejected",
            extra={"refund_reference": refund.refund_reference, "actor": audit.actor},
        )
        self._notify(
            NotificationEvent.REFUND_REJECTED,
            refund.user_id,
            "Refund rejected",
            f"Your refund for booking {refund.booking_id} was rejected: {refund.rejection_reason}",
            {"refund_id": str(refund.id), "booking_id": refund.booking_id},
        )
        return ServiceResult.success(RefundResponse.model_validate(refund), message="Refund rejected")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _ensure_pending(refund: RefundRequest) -> None:
        if refund.refund_status != RefundStatus.PENDING:
            raise BusinessRuleViolation(
                ErrorCode.INVALID_STATE,
                f"Refund is {refund.refund_status.value}, only pending refunds can be changed",
                {"refund_id": str(refund.id), "refund_status": refund.refund_status.value},
            )

    def _audit(
        self,
        refund: RefundRequest,
        action: RefundAuditAction,
        audit: AuditContext,
        now: datetime,
        details: Optional[str] = None,
    ) -> None:
        refund.audit_entries.append(
            RefundAuditEntry(
                action=action,
                performed_by=audit.actor,
                details=clean_text(details),
                performed_at=now,
            )
        )
        self.refund_repo.flush()
