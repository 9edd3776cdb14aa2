import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import uvicorn

from bucket_gateway.api.routers import files as files_router
from bucket_gateway.core.config import Settings, get_settings
from bucket_gateway.core.errors import ApiError
from bucket_gateway.core.logging import configure_logging
from bucket_gateway.services.staging import ensure_staging_dir
from bucket_gateway.services.storage import StorageService

logger = logging.getLogger(__name__)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


def create_app(
    settings: Settings | None = None,
    storage: StorageService | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    if not settings.bucket_name:
        logger.warning("AWS_BUCKET_NAME is not set; storage requests will fail")

    app = FastAPI(
        debug=settings.debug,
        title="Bucket Gateway API",
    )
    app.state.settings = settings
    app.state.storage = storage or StorageService(settings)
    ensure_staging_dir(settings.upload_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ApiError, api_error_handler)

    app.include_router(files_router.router)

    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


app = create_app()


def serve() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Server running on port %d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
