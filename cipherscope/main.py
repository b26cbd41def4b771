import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cipherscope.api.v1.router import api_router
from cipherscope.core.config import get_settings
from cipherscope.core.exceptions import (
    CipherscopeError,
    DecryptionError,
    EngineNotFoundError,
    InputTooLargeError,
    PatternNotFoundError,
    ValidationError,
)
from cipherscope.models.schemas import ErrorResponse

settings = get_settings()

logger = logging.getLogger(__name__)


def error_status(exc: CipherscopeError) -> int:
    """HTTP status for a library error."""
    if isinstance(exc, InputTooLargeError):
        return status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, (PatternNotFoundError, EngineNotFoundError)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, DecryptionError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def cipherscope_error_handler(request: Request, exc: CipherscopeError) -> JSONResponse:
    """Render library errors as ErrorResponse bodies."""
    status_code = error_status(exc)
    if status_code >= 500:
        logger.error("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc.message)

    body = ErrorResponse(error=type(exc).__name__, message=exc.message, details=exc.details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Encoding, cipher and hash detection API. "
            "Detect and peel nested encodings, break classical ciphers, "
            "and identify hash formats."
        ),
        version="0.1.0",
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url=f"{settings.api_v1_prefix}/docs",
        redoc_url=f"{settings.api_v1_prefix}/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CipherscopeError, cipherscope_error_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


app = create_app()


def run() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "cipherscope.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
