"""Tests for the refund policy and the refund queue."""

import logging
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from dockit.core.exceptions import ErrorCode
from dockit.schemas.common.enums import QueueOrdering, RefundAuditAction, RefundStatus
from dockit.schemas.refund import RefundCreateRequest
from dockit.services.base.notification_dispatcher import NotificationEvent
from dockit.services.refund import RefundQueueService, calculate_refund


def refund_request(booking_id: str, amount: str = "1000", fee: str = "100", hours: str = "24", **kwargs):
    return RefundCreateRequest(
        booking_id=booking_id,
        user_id=kwargs.pop("user_id", "user-42"),
        original_amount=Decimal(amount),
        platform_fee=Decimal(fee),
        hours_before_charge=Decimal(hours),
        **kwargs,
    )


@pytest.fixture
def queue(refund_service, admin, now):
    """Three pending refunds created one minute apart, oldest first."""
    created = []
    for index, booking in enumerate(["BK-1", "BK-2", "BK-3"]):
        result = refund_service.create_refund(
            refund_request(booking), admin, now=now + timedelta(minutes=index)
        )
        created.append(result.unwrap())
    return created


class TestRefundPolicy:
    def test_scenario_d(self):
        calculation = calculate_refund(Decimal("1000"), Decimal("100"), Decimal("12"))
        assert calculation.eligible is True
        assert calculation.base_refund == Decimal("900.00")
        assert calculation.slot_occupancy_fee == Decimal("50.00")
        assert calculation.final_refund_amount == Decimal("850.00")

    def test_exactly_six_hours_is_eligible(self):
        assert calculate_refund(Decimal("500"), Decimal("5"), Decimal("6")).eligible is True

    def test_late_cancellation_gets_nothing(self):
        calculation = calculate_refund(Decimal("1000"), Decimal("100"), Decimal("5.9"))
        assert calculation.eligible is False
        assert calculation.final_refund_amount == Decimal("0.00")
        assert calculation.reason

    def test_final_amount_never_negative(self):
        calculation = calculate_refund(Decimal("10"), Decimal("10"), Decimal("48"))
        assert calculation.final_refund_amount == Decimal("0.00")


class TestCreateRefund:
    def test_refund_is_queued_with_breakdown(self, refund_service, admin, now):
        refund = refund_service.create_refund(refund_request("BK-9", reason="plans changed"), admin, now=now).unwrap()
        assert refund.refund_status == RefundStatus.PENDING
        assert refund.refund_reference.startswith("RF")
        assert refund.platform_fee_deducted == Decimal("100.00")
        assert refund.slot_occupancy_fee == Decimal("50.00")
        assert refund.final_refund_amount == Decimal("850.00")
        assert refund.cancellation_reason == "plans changed"
        assert [entry.action for entry in refund.audit_entries] == [RefundAuditAction.CREATED]

    def test_ineligible_cancellation_is_rejected(self, refund_service, admin, now):
        result = refund_service.create_refund(refund_request("BK-9", hours="2"), admin, now=now)
        assert result.error_code == ErrorCode.REFUND_NOT_ELIGIBLE

    def test_zero_refund_is_rejected(self, refund_service, admin, now):
        result = refund_service.create_refund(refund_request("BK-9", amount="5", fee="5"), admin, now=now)
        assert result.error_code == ErrorCode.REFUND_NOT_ELIGIBLE

    def test_one_refund_per_booking(self, refund_service, admin, now):
        refund_service.create_refund(refund_request("BK-9"), admin, now=now).unwrap()
        result = refund_service.create_refund(refund_request("BK-9"), admin, now=now)
        assert result.error_code == ErrorCode.ALREADY_EXISTS


class TestListing:
    def test_pending_refunds_are_fifo(self, refund_service, queue):
        listing = refund_service.list_refunds().unwrap()
        assert [r.booking_id for r in listing.items] == ["BK-1", "BK-2", "BK-3"]
        assert listing.total == 3

    def test_lifo_on_request(self, refund_service, queue):
        listing = refund_service.list_refunds(ordering=QueueOrdering.LIFO).unwrap()
        assert [r.booking_id for r in listing.items] == ["BK-3", "BK-2", "BK-1"]

    def test_pagination(self, refund_service, queue):
        page = refund_service.list_refunds(page=2, page_size=2).unwrap()
        assert [r.booking_id for r in page.items] == ["BK-3"]
        assert page.total == 3

    def test_processed_refunds_leave_pending_queue(self, refund_service, queue, admin, now):
        refund_service.process_refund(queue[0].id, "BANK-001", None, admin, now=now).unwrap()

        pending = refund_service.list_refunds().unwrap()
        assert [r.booking_id for r in pending.items] == ["BK-2", "BK-3"]
        completed = refund_service.list_refunds(status=RefundStatus.COMPLETED).unwrap()
        assert [r.booking_id for r in completed.items] == ["BK-1"]

    def test_next_pending_is_oldest(self, refund_service, queue):
        assert refund_service.next_pending_refund().unwrap().booking_id == "BK-1"

    def test_next_pending_on_empty_queue(self, refund_service):
        result = refund_service.next_pending_refund()
        assert result.is_success
        assert result.data is None


class TestProcessRefund:
    def test_process_pending_refund(self, refund_service, queue, admin, now, notifier):
        result = refund_service.process_refund(
            queue[0].id, " ESEWA-TXN-88 ", "paid to wallet", admin, now=now + timedelta(hours=1)
        )
        refund = result.unwrap()
        assert refund.refund_status == RefundStatus.COMPLETED
        assert refund.transaction_id == "ESEWA-TXN-88"
        assert refund.remarks == "paid to wallet"
        assert refund.processed_by == "admin-1"
        assert refund.processed_at == now + timedelta(hours=1)
        assert [e.action for e in refund.audit_entries] == [
            RefundAuditAction.CREATED,
            RefundAuditAction.COMPLETED,
        ]

        assert notifier.events() == [NotificationEvent.REFUND_PROCESSED]
        assert notifier.sent[0]["recipient_id"] == "user-42"

    def test_blank_transaction_id_checked_first(self, refund_service, admin, now):
        result = refund_service.process_refund(uuid4(), "   ", None, admin, now=now)
        assert result.error_code == ErrorCode.MISSING_TRANSACTION_ID

    def test_unknown_refund(self, refund_service, admin, now):
        result = refund_service.process_refund(uuid4(), "BANK-001", None, admin, now=now)
        assert result.error_code == ErrorCode.NOT_FOUND

    def test_terminal_refund_cannot_be_processed_again(self, refund_service, queue, admin, now):
        refund_service.process_refund(queue[0].id, "BANK-001", None, admin, now=now).unwrap()
        result = refund_service.process_refund(queue[0].id, "BANK-002", None, admin, now=now)
        assert result.error_code == ErrorCode.INVALID_STATE

        assert refund_service.get_refund(queue[0].id).unwrap().transaction_id == "BANK-001"

    def test_notification_failure_keeps_payout(
        self, db_session, refund_service, queue, unreachable_notifier, admin, now, caplog
    ):
        offline = RefundQueueService(db_session, unreachable_notifier)
        with caplog.at_level(logging.WARNING):
            result = offline.process_refund(queue[0].id, "KHALTI-301", None, admin, now=now)

        assert result.is_success
        assert "Notification delivery failed" in caplog.text

        db_session.expire_all()
        stored = refund_service.get_refund(queue[0].id).unwrap()
        assert stored.refund_status == RefundStatus.COMPLETED
        assert stored.transaction_id == "KHALTI-301"


class TestRejectRefund:
    def test_reject_requires_reason(self, refund_service, queue, admin, now):
        result = refund_service.reject_refund(queue[0].id, "", admin, now=now)
        assert result.error_code == ErrorCode.MISSING_REQUIRED_FIELD

    def test_reject_pending_refund(self, refund_service, queue, admin, now, notifier):
        refund = refund_service.reject_refund(queue[1].id, "duplicate booking", admin, now=now).unwrap()
        assert refund.refund_status == RefundStatus.REJECTED
        assert refund.rejection_reason == "duplicate booking"
        assert refund.audit_entries[-1].action == RefundAuditAction.REJECTED
        assert notifier.events() == [NotificationEvent.REFUND_REJECTED]

    def test_rejected_refund_cannot_be_processed(self, refund_service, queue, admin, now):
        refund_service.reject_refund(queue[1].id, "duplicate booking", admin, now=now).unwrap()
        result = refund_service.process_refund(queue[1].id, "BANK-001", None, admin, now=now)
        assert result.error_code == ErrorCode.INVALID_STATE
