# vidshelf/loader.py
"""
Catalog loader: read the JSON document, validate every record and return
the records that are safe to show.

A record is kept only when its fileName is a bare file name, the file exists
under ``<static_dir>/videos/`` and both title and description are non-blank.
Rejected records are logged and dropped; only an unreadable or unparsable
document is an error.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from vidshelf.errors import CatalogParseError, CatalogReadError
from vidshelf.models import CATALOG_DOCUMENT, Catalog, VideoRecord

logger = logging.getLogger("vidshelf.loader")

VIDEOS_SUBDIR = "videos"

_SEPARATORS = re.compile(r"[/\\]")

PathLike = Union[str, Path]


def base_name(file_name: str) -> str:
    """Last path segment of ``file_name``, treating both slashes as separators."""
    trimmed = file_name.rstrip("/\\")
    if not trimmed:
        return file_name
    return _SEPARATORS.split(trimmed)[-1]


def read_document(source_path: PathLike) -> list[VideoRecord]:
    path = Path(source_path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise CatalogReadError(f"cannot read {path}: {e}") from e

    try:
        # only the wire name "fileName" is read from documents
        parsed = CATALOG_DOCUMENT.validate_json(raw, by_alias=True, by_name=False)
    except ValidationError as e:
        raise CatalogParseError(f"{path} is not a JSON array of videos: {e}") from e

    return [record if record is not None else VideoRecord() for record in parsed or ()]


def validate_record(record: VideoRecord, videos_dir: Path) -> bool:
    file_name = record.file_name
    if not file_name.strip():
        logger.warning("skipping video with empty fileName: title=%r", record.title)
        return False

    name = base_name(file_name)
    if name != file_name or name in (".", ".."):
        logger.warning("skipping video with disallowed path in fileName: %r", file_name)
        return False

    candidate = videos_dir / name
    try:
        candidate.stat()
    except FileNotFoundError:
        logger.warning("video file does not exist, skipping: %s", candidate)
        return False
    except OSError as e:
        logger.warning("unable to stat video file %s: %s (skipping)", candidate, e)
        return False

    if not record.title.strip():
        logger.warning("skipping video with empty title for fileName=%r", file_name)
        return False
    if not record.description.strip():
        logger.warning("skipping video with empty description for fileName=%r", file_name)
        return False
    return True


def load_catalog(source_path: PathLike, static_dir: PathLike) -> Catalog:
    """Load and validate the catalog document.

    Raises CatalogReadError or CatalogParseError; never returns None.
    """
    records = read_document(source_path)
    videos_dir = Path(static_dir) / VIDEOS_SUBDIR

    catalog = tuple(r for r in records if validate_record(r, videos_dir))
    logger.info("validated %d of %d video(s) from %s", len(catalog), len(records), source_path)
    return catalog
