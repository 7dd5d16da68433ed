# vidshelf/cli.py
from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

import uvicorn
from jinja2 import TemplateError

from vidshelf.app import create_app
from vidshelf.config import Settings, parse_settings
from vidshelf.errors import CatalogError, ConfigError
from vidshelf.holder import CatalogHolder
from vidshelf.loader import load_catalog
from vidshelf.reloader import CatalogReloader
from vidshelf.watcher import WatchfilesSource

logger = logging.getLogger("vidshelf")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_server(settings: Settings) -> Optional[uvicorn.Server]:
    """Load the initial catalog and wire the app; None if startup must abort."""
    try:
        initial = load_catalog(settings.videos_path, settings.static_dir)
    except CatalogError as e:
        logger.critical("Failed to load video metadata from %s: %s", settings.videos_path, e)
        return None
    logger.info("Initial load: %d validated video(s).", len(initial))

    holder = CatalogHolder(initial)
    reloader = None
    if settings.watch:
        reloader = CatalogReloader(
            settings.videos_path,
            settings.static_dir,
            holder,
            WatchfilesSource(),
            delay=settings.debounce,
        )
    else:
        logger.info("Catalog reloading disabled")

    try:
        app = create_app(settings, holder, reloader)
    except TemplateError as e:
        logger.critical("Failed to parse template in %s: %s", settings.templates_dir, e)
        return None

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=int(settings.shutdown_grace),
    )
    return uvicorn.Server(config)


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = parse_settings(argv)
    except ConfigError as e:
        print(f"vidshelf: {e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    server = build_server(settings)
    if server is None:
        return 1

    logger.info("Starting server on %s:%d", settings.host, settings.port)
    server.run()
    logger.info("Server shutdown complete.")
    return 0
