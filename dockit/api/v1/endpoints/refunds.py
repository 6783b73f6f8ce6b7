"""
Refund queue endpoints.
"""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dockit.api import deps
from dockit.api.responses import service_response
from dockit.repositories.base.base_repository import AuditContext
from dockit.schemas.common.enums import QueueOrdering, RefundStatus
from dockit.schemas.refund import RefundCreateRequest, RefundProcessRequest, RefundRejectRequest
from dockit.services.base.notification_dispatcher import NotificationDispatcher
from dockit.services.base.service_result import ServiceResult
from dockit.services.refund import RefundQueueService

router = APIRouter(prefix="/refunds", tags=["Refunds"])


def get_refund_service(
    db: Session = Depends(deps.get_db),
    notifier: NotificationDispatcher = Depends(deps.get_notifier),
) -> RefundQueueService:
    return RefundQueueService(db, notifier)


@router.post("", status_code=201)
def create_refund(
    payload: RefundCreateRequest,
    service: RefundQueueService = Depends(get_refund_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.create_refund(payload, audit), status_code=201)


@router.get("")
def list_refunds(
    status: RefundStatus = Query(RefundStatus.PENDING),
    ordering: QueueOrdering = Query(QueueOrdering.FIFO),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    service: RefundQueueService = Depends(get_refund_service),
):
    """Refund queue, oldest first unless ``ordering=lifo``."""
    return service_response(service.list_refunds(status, ordering, page, page_size))


@router.get("/next")
def next_pending_refund(service: RefundQueueService = Depends(get_refund_service)):
    return service_response(service.next_pending_refund())


@router.get("/calculate")
def calculate_refund(
    original_amount: Decimal = Query(..., gt=0),
    platform_fee: Decimal = Query(Decimal("0"), ge=0),
    hours_before_charge: Decimal = Query(..., ge=0),
    service: RefundQueueService = Depends(get_refund_service),
):
    calculation = service.calculate(original_amount, platform_fee, hours_before_charge)
    return service_response(ServiceResult.success(calculation))


@router.get("/{refund_id}")
def get_refund(refund_id: UUID, service: RefundQueueService = Depends(get_refund_service)):
    return service_response(service.get_refund(refund_id))


@router.post("/{refund_id}/process")
def process_refund(
    refund_id: UUID,
    payload: RefundProcessRequest,
    service: RefundQueueService = Depends(get_refund_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    """Record the payout transaction id; only pending refunds can be processed."""
    result = service.process_refund(refund_id, payload.transaction_id, payload.remarks, audit)
    return service_response(result)


@router.post("/{refund_id}/reject")
def reject_refund(
    refund_id: UUID,
    payload: RefundRejectRequest,
    service: RefundQueueService = Depends(get_refund_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.reject_refund(refund_id, payload.reason, audit))
