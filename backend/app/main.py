import logging
from contextlib import asynccontextmanager

import requests
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.catalog import router as catalog_router
from app.api.vocabulary_lists import router as vocabulary_lists_router
from app.config import Settings, get_settings
from app.db.session import Database
from app.services.generation import (
    EmptyResponse,
    GenerationClient,
    MalformedResponse,
    ServiceUnavailable,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceUnavailable)
    async def service_unavailable_handler(request: Request, exc: ServiceUnavailable):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "The vocabulary generator is starting up. Please try again shortly."},
        )

    @app.exception_handler(MalformedResponse)
    @app.exception_handler(EmptyResponse)
    async def generation_failed_handler(request: Request, exc: Exception):
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": f"Vocabulary generation failed: {exc}"},
        )

    @app.exception_handler(requests.RequestException)
    async def generation_transport_handler(request: Request, exc: requests.RequestException):
        logger.error("Generation service request failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": "Could not reach the vocabulary generator."},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


def create_app(
    settings: Settings | None = None,
    generation_client: GenerationClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings.database_url)
        database.create_all()
        client = generation_client or GenerationClient(settings)
        app.state.database = database
        app.state.generation_client = client
        try:
            yield
        finally:
            client.close()
            database.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    app.include_router(catalog_router)
    app.include_router(vocabulary_lists_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
