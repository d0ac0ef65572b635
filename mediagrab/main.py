import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from rich.console import Console

from mediagrab.api import download, health, preview
from mediagrab.config.settings import Config, load_config
from mediagrab.core.logging import setup_logging
from mediagrab.core.state import state
from mediagrab.i18n import i18n
from mediagrab.services.extractor import CommandLineExtractor, YtDlpExtractor
from mediagrab.services.ytdlp import YTDLPCommandBuilder, detect_version

console = Console()


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Build the application around one configuration object"""
    config = config or load_config()
    setup_logging(config.logging)
    i18n.default_locale = config.i18n.default_locale

    app = FastAPI(
        title=config.api.title,
        description=config.api.description,
        version=config.api.version,
        docs_url="/docs" if config.api.debug else None,
        redoc_url=None
    )

    app.state.config = config
    app.state.extractor = YtDlpExtractor(config)
    app.state.fallback = CommandLineExtractor(config)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "Content-Length", "X-Total-Size", "X-Request-ID"],
    )

    @app.middleware("http")
    async def assign_request_id(request: Request, call_next):
        request.state.request_id = uuid.uuid4().hex[:8]
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        return response

    # Routes
    app.include_router(health.router, tags=["Health"])
    app.include_router(preview.router, tags=["Preview"])
    app.include_router(download.router, tags=["Download"])

    @app.on_event("startup")
    async def startup_event():
        version = await detect_version(YTDLPCommandBuilder(config))
        state.ytdlp_available = version is not None
        state.ytdlp_version = version or "unknown"

        if version:
            console.print(f"[green]✓ yt-dlp {version}[/green]")
        else:
            console.print(
                "[yellow]⚠ yt-dlp not found. Install it or set YTDLP_BINARY_PATH; "
                "preview and download requests will fail with 503[/yellow]"
            )

    return app


app = create_app()


def run():
    """Console entry point"""
    uvicorn.run("mediagrab.main:app", host="0.0.0.0", port=8000)
