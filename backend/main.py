from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.app.config import get_settings
from backend.app.routers import catalogue, health, proxy
from catalogue_builder.errors import DocumentAssemblyFailed, ValidationFailed
from catalogue_builder.logging_utils import get_logger, setup_logging

logger = get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationFailed)
    async def validation_failed(request: Request, exc: ValidationFailed):
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_invalid(request: Request, exc: RequestValidationError):
        return _error(400, "Invalid request body")

    @app.exception_handler(DocumentAssemblyFailed)
    async def assembly_failed(request: Request, exc: DocumentAssemblyFailed):
        logger.error("Catalogue assembly failed on %s: %s", request.url.path, exc)
        return _error(500, "Failed to generate PDF")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(log_file=settings.log_file)
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
    )
    register_exception_handlers(app)
    app.include_router(health.router)
    app.include_router(proxy.router)
    app.include_router(catalogue.router)
    return app


app = create_app()
