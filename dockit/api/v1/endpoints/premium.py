"""
Station premium (Dockit recommended) endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dockit.api import deps
from dockit.api.responses import service_response
from dockit.repositories.base.base_repository import AuditContext
from dockit.schemas.common.enums import PremiumPlanType
from dockit.schemas.subscription import (
    AutoRenewRequest,
    BulkPremiumRequest,
    PremiumActivationRequest,
    PremiumDeactivationRequest,
    PremiumExtensionRequest,
)
from dockit.services.base.notification_dispatcher import NotificationDispatcher
from dockit.services.subscription import StationPremiumService

router = APIRouter(tags=["Station Premium"])


def get_premium_service(
    db: Session = Depends(deps.get_db),
    notifier: NotificationDispatcher = Depends(deps.get_notifier),
) -> StationPremiumService:
    return StationPremiumService(db, notifier)


@router.get("/premium/quote/{plan_type}")
def quote_premium(plan_type: PremiumPlanType, service: StationPremiumService = Depends(get_premium_service)):
    return service_response(service.quote(plan_type))


@router.get("/premium/stations")
def list_premium_stations(service: StationPremiumService = Depends(get_premium_service)):
    """Stations currently shown as Dockit recommended."""
    return service_response(service.list_premium_stations())


@router.get("/stations/{station_id}/premium")
def get_station_premium(station_id: UUID, service: StationPremiumService = Depends(get_premium_service)):
    return service_response(service.get_station_premium(station_id))


@router.post("/stations/{station_id}/premium/activate")
def activate_premium(
    station_id: UUID,
    payload: PremiumActivationRequest,
    service: StationPremiumService = Depends(get_premium_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.activate_station_premium(station_id, payload, audit))


@router.post("/stations/{station_id}/premium/extend")
def extend_premium(
    station_id: UUID,
    payload: PremiumExtensionRequest,
    service: StationPremiumService = Depends(get_premium_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.extend_station_premium(station_id, payload, audit))


@router.post("/stations/{station_id}/premium/deactivate")
def deactivate_premium(
    station_id: UUID,
    payload: PremiumDeactivationRequest,
    service: StationPremiumService = Depends(get_premium_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.deactivate_station_premium(station_id, payload, audit))


@router.put("/stations/{station_id}/premium/auto-renew")
def set_premium_auto_renew(
    station_id: UUID,
    payload: AutoRenewRequest,
    service: StationPremiumService = Depends(get_premium_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.set_auto_renew(station_id, payload.auto_renew, audit))


@router.post("/premium/bulk-action")
def bulk_manage_premium(
    payload: BulkPremiumRequest,
    service: StationPremiumService = Depends(get_premium_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    """Activate, extend or deactivate premium on many stations; per-station outcomes are returned."""
    return service_response(service.bulk_manage_premium(payload, audit))
