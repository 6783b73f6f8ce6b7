"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dockit.api.middleware import register_middlewares
from dockit.api.v1.router import router as api_v1_router
from dockit.core.config import settings
from dockit.core.database import init_db
from dockit.core.exceptions import BaseAppException, ErrorCode
from dockit.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Production schemas are managed by migrations
    if not settings.is_production:
        init_db()
    yield


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException):
        logger.warning(
            f"Request rejected: {exc.message}",
            extra={"error_code": exc.error_code.value, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder({"success": False, "message": exc.message, **exc.to_dict()}),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=jsonable_encoder(
                {
                    "success": False,
                    "message": "Request validation failed",
                    "error": {
                        "code": ErrorCode.VALIDATION_ERROR.value,
                        "message": "Request validation failed",
                        "details": {"errors": exc.errors()},
                    },
                }
            ),
        )


def create_app() -> FastAPI:
    """
    Application factory.

    - Configures logging and the app title/version from Settings.
    - Registers request tracking middleware and exception handlers.
    - Includes the versioned API router under API_V1_PREFIX.
    """
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    register_middlewares(app)
    register_exception_handlers(app)
    app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": settings.APP_VERSION}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("dockit.main:app", host="0.0.0.0", port=8000, log_level=settings.logging.LOG_LEVEL.value.lower())


if __name__ == "__main__":
    run()
