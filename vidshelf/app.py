# vidshelf/app.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from vidshelf import __version__
from vidshelf.config import Settings
from vidshelf.holder import CatalogHolder
from vidshelf.loader import VIDEOS_SUBDIR
from vidshelf.reloader import CatalogReloader
from vidshelf.streaming import build_router

logger = logging.getLogger("vidshelf.app")

INDEX_TEMPLATE = "index.html"


def _server_error() -> PlainTextResponse:
    return PlainTextResponse("Internal Server Error", status_code=500)


def create_app(
    settings: Settings,
    holder: CatalogHolder,
    reloader: Optional[CatalogReloader] = None,
) -> FastAPI:
    """
    Build the web app around an already loaded catalog.

    The index template is loaded here so a missing or broken template fails
    startup (jinja2.TemplateError) instead of the first request. When a
    reloader is given it runs for the lifetime of the app.
    """
    templates = Jinja2Templates(directory=str(settings.templates_dir))
    templates.get_template(INDEX_TEMPLATE)

    @asynccontextmanager
    async def lifespan(app_obj: FastAPI):
        if reloader is not None:
            await run_in_threadpool(reloader.start)
        try:
            yield
        finally:
            if reloader is not None:
                await run_in_threadpool(reloader.stop)

    app = FastAPI(title="vidshelf", version=__version__, lifespan=lifespan)

    @app.get("/healthz", response_class=PlainTextResponse)
    def healthz():
        return "ok"

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request):
        videos = holder.load()
        if not isinstance(videos, tuple):
            logger.error("catalog holder returned %s instead of a catalog", type(videos).__name__)
            return _server_error()

        try:
            return templates.TemplateResponse(
                request,
                INDEX_TEMPLATE,
                {"title": settings.title, "videos": videos},
            )
        except Exception:
            logger.exception("template execution error")
            return _server_error()

    # registered before the mount so video requests get range support
    app.include_router(build_router(settings.static_dir / VIDEOS_SUBDIR))
    app.mount("/static", StaticFiles(directory=str(settings.static_dir), check_dir=False), name="static")

    return app
