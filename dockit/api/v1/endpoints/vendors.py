"""
Vendor accounts and charging stations.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dockit.api import deps
from dockit.api.responses import service_response
from dockit.repositories.base.base_repository import AuditContext
from dockit.schemas.subscription import StationCreateRequest
from dockit.schemas.vendor import BankDetailsUpdate, VendorCreateRequest
from dockit.services.base.notification_dispatcher import NotificationDispatcher
from dockit.services.vendor import VendorService

router = APIRouter(prefix="/vendors", tags=["Vendors"])


def get_vendor_service(
    db: Session = Depends(deps.get_db),
    notifier: NotificationDispatcher = Depends(deps.get_notifier),
) -> VendorService:
    return VendorService(db, notifier)


@router.post("", status_code=201)
def register_vendor(
    payload: VendorCreateRequest,
    service: VendorService = Depends(get_vendor_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    """Register a vendor; a 7-day trial licence starts immediately."""
    return service_response(service.register_vendor(payload, audit), status_code=201)


@router.get("/{vendor_id}")
def get_vendor(vendor_id: UUID, service: VendorService = Depends(get_vendor_service)):
    return service_response(service.get_vendor(vendor_id))


@router.post("/{vendor_id}/verify")
def verify_vendor(
    vendor_id: UUID,
    service: VendorService = Depends(get_vendor_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.verify_vendor(vendor_id, audit))


@router.put("/{vendor_id}/bank-details")
def update_bank_details(
    vendor_id: UUID,
    payload: BankDetailsUpdate,
    service: VendorService = Depends(get_vendor_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.update_bank_details(vendor_id, payload, audit))


@router.post("/{vendor_id}/stations", status_code=201)
def register_station(
    vendor_id: UUID,
    payload: StationCreateRequest,
    service: VendorService = Depends(get_vendor_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.register_station(vendor_id, payload, audit), status_code=201)


@router.get("/{vendor_id}/stations")
def list_stations(vendor_id: UUID, service: VendorService = Depends(get_vendor_service)):
    return service_response(service.list_stations(vendor_id))
