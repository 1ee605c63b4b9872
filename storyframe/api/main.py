"""Main FastAPI application for Storyframe."""

from typing import Callable

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storyframe import __version__
from storyframe.core.env_loader import ensure_env_loaded
from storyframe.core.exceptions import InvalidRequestError, MissingConfigError
from storyframe.core.logging_config import get_logger
from storyframe.llm.gemini_client import GeminiClient

from .jobs import JobStore
from .routers import storyboards
from .settings import get_settings

ensure_env_loaded()

logger = get_logger("api.main")


async def _invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})


async def _missing_config_handler(request: Request, exc: MissingConfigError) -> JSONResponse:
    logger.error(f"Configuration missing: {exc.message}")
    return JSONResponse(status_code=503, content={"detail": exc.message})


def create_app(client_factory: Callable[[], GeminiClient] = None) -> FastAPI:
    """Build the API app. `client_factory` makes one Gemini client per job."""
    settings = get_settings()

    app = FastAPI(
        title="Storyframe API",
        description="Storyboard generation: narration, images and speech for every clip",
        version=__version__,
    )
    app.state.jobs = JobStore(max_jobs=settings.max_jobs)
    app.state.client_factory = client_factory or GeminiClient

    app.add_exception_handler(InvalidRequestError, _invalid_request_handler)
    app.add_exception_handler(MissingConfigError, _missing_config_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(storyboards.router, prefix="/api/storyboards", tags=["storyboards"])

    @app.get("/")
    async def root():
        return {"message": "Storyframe API", "version": __version__}

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "jobs": len(app.state.jobs)}

    return app


app = create_app()


def start_server(host: str = None, port: int = None, reload: bool = None):
    """Start the FastAPI server."""
    settings = get_settings()
    uvicorn.run(
        "storyframe.api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.reload if reload is None else reload,
        log_level="warning",
    )


if __name__ == "__main__":
    start_server()
