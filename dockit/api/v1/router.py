"""
API v1 Router - Main Entry Point
Aggregates all v1 endpoints of the licensing core
"""

from fastapi import APIRouter

from dockit.api.v1.endpoints import premium, refunds, settlements, subscriptions, vendors

router = APIRouter(
    responses={
        400: {"description": "Business rule violation"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(vendors.router)
router.include_router(subscriptions.router)
router.include_router(premium.router)
router.include_router(settlements.router)
router.include_router(refunds.router)
