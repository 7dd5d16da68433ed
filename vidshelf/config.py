# vidshelf/config.py
from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Sequence

from vidshelf.errors import ConfigError
from vidshelf.reloader import DEFAULT_DEBOUNCE

ENV_PREFIX = "VIDSHELF_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8080
    videos_path: Path = Path("videos.json")
    static_dir: Path = Path("static")
    templates_dir: Path = Path("templates")
    title: str = "Video Shelf"
    debounce: float = DEFAULT_DEBOUNCE
    watch: bool = True
    log_level: str = "INFO"
    shutdown_grace: float = 5.0


def _port(raw: str, source: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ConfigError(f"{source}: port must be an integer, got {raw!r}") from None
    if not 0 <= port <= 65535:
        raise ConfigError(f"{source}: port out of range: {port}")
    return port


def _seconds(raw: str, source: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{source}: expected a number of seconds, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{source}: must not be negative: {value}")
    return value


def _flag(raw: str, source: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"{source}: expected a boolean, got {raw!r}")


def _level(raw: str, source: str) -> str:
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"{source}: unknown log level {raw!r}")
    return level


def _text(raw: str, source: str) -> str:
    return raw


def _path(raw: str, source: str) -> Path:
    return Path(raw)


def _no_watch(raw: str, source: str) -> bool:
    return not _flag(raw, source)


# env suffix -> (Settings field, converter)
_ENV_FIELDS = {
    "HOST": ("host", _text),
    "PORT": ("port", _port),
    "VIDEOS": ("videos_path", _path),
    "STATIC": ("static_dir", _path),
    "TEMPLATES": ("templates_dir", _path),
    "TITLE": ("title", _text),
    "DEBOUNCE": ("debounce", _seconds),
    "NO_WATCH": ("watch", _no_watch),
    "LOG_LEVEL": ("log_level", _level),
}


def from_env(environ: Optional[Mapping[str, str]] = None, base: Settings = Settings()) -> Settings:
    """Apply VIDSHELF_* environment overrides on top of ``base``."""
    env = os.environ if environ is None else environ
    changes = {}
    for suffix, (field, convert) in _ENV_FIELDS.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is not None:
            changes[field] = convert(raw, ENV_PREFIX + suffix)
    return replace(base, **changes)


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="vidshelf", description="Serve a JSON-driven catalog of local videos.")
    p.add_argument("--host", default=defaults.host, help="interface to listen on (default: %(default)s)")
    p.add_argument("--port", default=str(defaults.port), help="port to listen on (default: %(default)s)")
    p.add_argument("--videos", default=str(defaults.videos_path), help="path to videos.json (default: %(default)s)")
    p.add_argument("--static", default=str(defaults.static_dir), help="static assets directory (default: %(default)s)")
    p.add_argument("--templates", default=str(defaults.templates_dir), help="templates directory (default: %(default)s)")
    p.add_argument("--title", default=defaults.title, help="page title to display")
    p.add_argument("--debounce", default=str(defaults.debounce), help="reload debounce in seconds (default: %(default)s)")
    p.add_argument("--no-watch", dest="watch", action="store_false", default=defaults.watch,
                   help="serve the startup catalog without watching for changes")
    p.add_argument("--log-level", default=defaults.log_level, help="logging level (default: %(default)s)")
    return p


def parse_settings(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Defaults, then environment, then command line flags."""
    base = from_env(environ)
    args = build_parser(base).parse_args(argv)
    return replace(
        base,
        host=args.host,
        port=_port(args.port, "--port"),
        videos_path=Path(args.videos),
        static_dir=Path(args.static),
        templates_dir=Path(args.templates),
        title=args.title,
        debounce=_seconds(args.debounce, "--debounce"),
        watch=args.watch,
        log_level=_level(args.log_level, "--log-level"),
    )
