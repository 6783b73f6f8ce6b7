"""
Envelope helpers turning a ServiceResult into an HTTP response.

Success:  {"success": true, "message": ..., "data": ...}
Failure:  {"success": false, "message": ..., "error": {...}}
"""

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from dockit.services.base.service_result import ServiceResult


def service_response(result: ServiceResult, status_code: int = 200) -> JSONResponse:
    if result.is_success:
        return JSONResponse(
            status_code=status_code,
            content=jsonable_encoder(
                {"success": True, "message": result.message, "data": result.data}
            ),
        )

    error = result.error
    return JSONResponse(
        status_code=error.status_code,
        content=jsonable_encoder(
            {"success": False, "message": error.message, "error": error.to_dict()}
        ),
    )
