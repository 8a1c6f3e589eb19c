"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from therapist_relay.api.errors import (
    relay_error_handler,
    request_validation_handler,
    unhandled_error_handler,
)
from therapist_relay.api.routes import chat as chat_routes
from therapist_relay.config.settings import load_settings
from therapist_relay.core.errors import RelayError
from therapist_relay.providers.registry import get_provider_registry


load_dotenv()

logging.basicConfig(
    level=load_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# request lines carry query-param API keys
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = load_settings()
    app = FastAPI(title="Therapist Relay", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.on_event("startup")
    async def startup_event() -> None:
        """Resolve the active provider once at startup."""

        provider = get_provider_registry().load()
        if not provider.config.has_api_key:
            logger.warning("%s API key not configured", provider.config.name)

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        """Serve the chat widget page explicitly."""

        index_file = settings.frontend_dir / "index.html"
        if not index_file.exists():
            raise HTTPException(status_code=404, detail="index.html not found")
        return FileResponse(index_file)

    app.include_router(chat_routes.router)

    if settings.frontend_dir.exists():
        app.mount("/", StaticFiles(directory=settings.frontend_dir, html=True), name="frontend")

    return app


app = create_app()
