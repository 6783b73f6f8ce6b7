"""
Settlement ledger endpoints.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dockit.api import deps
from dockit.api.responses import service_response
from dockit.repositories.base.base_repository import AuditContext
from dockit.schemas.common.enums import SettlementRequestStatus
from dockit.schemas.settlement import (
    SettlementCompleteRequest,
    SettlementInitiateRequest,
    TransactionRecordRequest,
    UrgentSettlementRequest,
)
from dockit.services.base.notification_dispatcher import NotificationDispatcher
from dockit.services.settlement import SettlementLedgerService

router = APIRouter(tags=["Settlements"])


def get_ledger_service(
    db: Session = Depends(deps.get_db),
    notifier: NotificationDispatcher = Depends(deps.get_notifier),
) -> SettlementLedgerService:
    return SettlementLedgerService(db, notifier)


@router.post("/settlements/transactions", status_code=201)
def record_transaction(
    payload: TransactionRecordRequest,
    service: SettlementLedgerService = Depends(get_ledger_service),
):
    """Add a completed booking or order to the ledger as pending revenue."""
    return service_response(service.record_transaction(payload), status_code=201)


@router.get("/settlements/vendors")
def list_vendors_with_pending(service: SettlementLedgerService = Depends(get_ledger_service)):
    return service_response(service.list_vendors_with_pending_settlements())


@router.get("/settlements")
def list_settlement_requests(
    vendor_id: Optional[UUID] = Query(None),
    status: Optional[SettlementRequestStatus] = Query(None),
    service: SettlementLedgerService = Depends(get_ledger_service),
):
    return service_response(service.list_settlement_requests(vendor_id, status))


@router.post("/settlements", status_code=201)
def initiate_settlement(
    payload: SettlementInitiateRequest,
    service: SettlementLedgerService = Depends(get_ledger_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    result = service.initiate_settlement(payload.vendor_id, payload.date, payload.amount, audit)
    return service_response(result, status_code=201)


@router.get("/settlements/{settlement_id}")
def get_settlement_request(
    settlement_id: UUID,
    service: SettlementLedgerService = Depends(get_ledger_service),
):
    return service_response(service.get_settlement_request(settlement_id))


@router.get("/settlements/{settlement_id}/transactions")
def list_settlement_transactions(
    settlement_id: UUID,
    service: SettlementLedgerService = Depends(get_ledger_service),
):
    return service_response(service.list_settlement_transactions(settlement_id))


@router.post("/settlements/{settlement_id}/complete")
def complete_settlement(
    settlement_id: UUID,
    payload: SettlementCompleteRequest,
    service: SettlementLedgerService = Depends(get_ledger_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    result = service.complete_settlement(
        settlement_id,
        payload.payment_reference,
        payload.processing_notes,
        audit,
    )
    return service_response(result)


@router.get("/vendors/{vendor_id}/settlements/{settlement_date}")
def get_daily_settlement(
    vendor_id: UUID,
    settlement_date: date,
    service: SettlementLedgerService = Depends(get_ledger_service),
):
    return service_response(service.get_daily_settlement(vendor_id, settlement_date))


@router.post("/vendors/{vendor_id}/settlements/urgent", status_code=201)
def request_urgent_settlement(
    vendor_id: UUID,
    payload: UrgentSettlementRequest,
    service: SettlementLedgerService = Depends(get_ledger_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    result = service.request_urgent_settlement(
        vendor_id,
        payload.date,
        payload.amount,
        payload.reason,
        audit,
    )
    return service_response(result, status_code=201)
