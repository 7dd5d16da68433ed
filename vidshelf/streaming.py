# vidshelf/streaming.py
from __future__ import annotations

import mimetypes
import re
from email.utils import formatdate
from hashlib import md5
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response, StreamingResponse

CHUNK_SIZE = 512 * 1024
CACHE_CONTROL = "public, max-age=3600"

_RANGE = re.compile(r"bytes=(\d*)-(\d*)$")


class RangeNotSatisfiable(Exception):
    pass


def resolve_video(videos_dir: Path, name: str) -> Path | None:
    """Regular file ``name`` directly inside ``videos_dir``, or None."""
    try:
        root = videos_dir.resolve()
        p = (root / name).resolve()
        if p.parent != root or not p.is_file():
            return None
    except (OSError, ValueError):
        # e.g. embedded null bytes in the name
        return None
    return p


def headers_for_file(p: Path) -> dict:
    st = p.stat()
    etag = '"' + md5(f"{st.st_mtime_ns}-{st.st_size}".encode()).hexdigest() + '"'
    ct, _ = mimetypes.guess_type(p.name)
    return {
        "Content-Type": ct or "application/octet-stream",
        "Accept-Ranges": "bytes",
        "ETag": etag,
        "Last-Modified": formatdate(st.st_mtime, usegmt=True),
        "Cache-Control": CACHE_CONTROL,
    }


def parse_range(header: str, size: int) -> tuple[int, int]:
    """Inclusive (start, end) for a single ``bytes=`` range against ``size`` bytes."""
    m = _RANGE.match(header.strip())
    if not m:
        raise RangeNotSatisfiable(f"invalid range header {header!r}")

    start_str, end_str = m.groups()
    if start_str == "":
        # suffix range: bytes=-N
        if end_str == "" or int(end_str) <= 0:
            raise RangeNotSatisfiable(f"invalid suffix range {header!r}")
        start = max(size - int(end_str), 0)
        end = size - 1
    else:
        start = int(start_str)
        end = min(int(end_str), size - 1) if end_str else size - 1

    if start > end or start >= size:
        raise RangeNotSatisfiable(f"range {header!r} outside {size} bytes")
    return start, end


def iter_file(p: Path, start: int, end: int, chunk: int = CHUNK_SIZE):
    with p.open("rb") as f:
        f.seek(start)
        remaining = end - start + 1
        while remaining > 0:
            data = f.read(min(chunk, remaining))
            if not data:
                break
            remaining -= len(data)
            yield data


def build_router(videos_dir: Path, prefix: str = "/static/videos") -> APIRouter:
    """Routes serving files of ``videos_dir`` with byte-range support."""
    router = APIRouter()

    @router.api_route(prefix + "/{name}", methods=["GET", "HEAD"])
    def get_video(name: str, request: Request):
        p = resolve_video(videos_dir, name)
        if p is None:
            raise HTTPException(status_code=404, detail="Video not found")

        headers = headers_for_file(p)
        size = p.stat().st_size
        rng = request.headers.get("range")

        if rng:
            try:
                start, end = parse_range(rng, size)
            except RangeNotSatisfiable:
                return Response(status_code=416, headers={"Content-Range": f"bytes */{size}"})
            status = 206
            headers["Content-Range"] = f"bytes {start}-{end}/{size}"
        else:
            status = 200
            start, end = 0, size - 1

        headers["Content-Length"] = str(end - start + 1)
        if request.method == "HEAD":
            return Response(status_code=status, headers=headers)
        return StreamingResponse(iter_file(p, start, end), status_code=status, headers=headers)

    return router
