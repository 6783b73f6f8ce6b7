"""
Vendor licence endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dockit.api import deps
from dockit.api.responses import service_response
from dockit.repositories.base.base_repository import AuditContext
from dockit.schemas.common.enums import FeatureFlag
from dockit.schemas.subscription import (
    AutoRenewRequest,
    SubscriptionExtensionRequest,
    SubscriptionModifyRequest,
    SubscriptionRenewalRequest,
    SubscriptionUpgradeRequest,
)
from dockit.services.base.notification_dispatcher import NotificationDispatcher
from dockit.services.base.service_result import ServiceResult
from dockit.services.subscription import VendorSubscriptionService, quote_vendor_license

router = APIRouter(tags=["Vendor Subscriptions"])


def get_subscription_service(
    db: Session = Depends(deps.get_db),
    notifier: NotificationDispatcher = Depends(deps.get_notifier),
) -> VendorSubscriptionService:
    return VendorSubscriptionService(db, notifier)


@router.get("/subscriptions/quote")
def quote_license():
    """Price of the yearly vendor licence, VAT included."""
    return service_response(ServiceResult.success(quote_vendor_license()))


@router.post("/subscriptions/expire-lapsed")
def expire_lapsed_subscriptions(service: VendorSubscriptionService = Depends(get_subscription_service)):
    """Sweep: mark every lapsed licence expired and deactivate its stations."""
    return service_response(service.expire_lapsed_subscriptions())


@router.get("/vendors/{vendor_id}/subscription")
def get_subscription(
    vendor_id: UUID,
    service: VendorSubscriptionService = Depends(get_subscription_service),
):
    return service_response(service.get_vendor_subscription(vendor_id))


@router.get("/vendors/{vendor_id}/subscription/status")
def get_expiration_status(
    vendor_id: UUID,
    service: VendorSubscriptionService = Depends(get_subscription_service),
):
    return service_response(service.check_expiration(vendor_id))


@router.get("/vendors/{vendor_id}/subscription/features/{flag}")
def has_feature(
    vendor_id: UUID,
    flag: FeatureFlag,
    service: VendorSubscriptionService = Depends(get_subscription_service),
):
    return service_response(service.has_feature(vendor_id, flag))


@router.get("/vendors/{vendor_id}/subscription/history")
def get_history(
    vendor_id: UUID,
    service: VendorSubscriptionService = Depends(get_subscription_service),
):
    return service_response(service.get_history(vendor_id))


@router.get("/vendors/{vendor_id}/subscription/payments")
def list_payments(
    vendor_id: UUID,
    service: VendorSubscriptionService = Depends(get_subscription_service),
):
    return service_response(service.list_payments(vendor_id))


@router.post("/vendors/{vendor_id}/subscription/extend")
def extend_subscription(
    vendor_id: UUID,
    payload: SubscriptionExtensionRequest,
    service: VendorSubscriptionService = Depends(get_subscription_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.extend_subscription(vendor_id, payload, audit))


@router.patch("/vendors/{vendor_id}/subscription")
def modify_subscription(
    vendor_id: UUID,
    payload: SubscriptionModifyRequest,
    service: VendorSubscriptionService = Depends(get_subscription_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    """Admin override of type, status, dates or station cap; a reason is required."""
    return service_response(service.modify_subscription(vendor_id, payload, audit))


@router.post("/vendors/{vendor_id}/subscription/upgrade")
def upgrade_to_yearly(
    vendor_id: UUID,
    payload: SubscriptionUpgradeRequest,
    service: VendorSubscriptionService = Depends(get_subscription_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.upgrade_trial_to_yearly(vendor_id, payload, audit))


@router.post("/vendors/{vendor_id}/subscription/renew")
def renew_subscription(
    vendor_id: UUID,
    payload: SubscriptionRenewalRequest,
    service: VendorSubscriptionService = Depends(get_subscription_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.renew_subscription(vendor_id, payload, audit))


@router.put("/vendors/{vendor_id}/subscription/auto-renew")
def set_auto_renew(
    vendor_id: UUID,
    payload: AutoRenewRequest,
    service: VendorSubscriptionService = Depends(get_subscription_service),
    audit: AuditContext = Depends(deps.get_audit_context),
):
    return service_response(service.set_auto_renew(vendor_id, payload.auto_renew, audit))
