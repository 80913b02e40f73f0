"""
Static file responses for the dev server
"""

import os
from pathlib import Path
from typing import BinaryIO, Iterator

from fastapi.responses import StreamingResponse

from .access_log import RequestLog
from .config import content_type_for
from .errors import StaticFileNotFound

CHUNK_SIZE = 64 * 1024


def resolve(root: Path, url: str) -> Path:
    """Filesystem path for a URL under root, query string ignored"""
    path = url.split("?", 1)[0]
    base = Path(root).resolve()
    # Symlinks inside root are followed, only ".." segments may not leave it
    target = Path(os.path.normpath(base / path.lstrip("/")))
    if target != base and base not in target.parents:
        raise PermissionError(f"{path} is outside of {base}")
    return target


def iter_file(handle: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = handle.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        handle.close()


def serve_file(root: Path, url: str, log: RequestLog) -> StreamingResponse:
    # The file is opened before any header goes out, so a failure is a clean 404
    try:
        target = resolve(root, url)
        handle = open(target, "rb")
    except OSError as error:
        raise StaticFileNotFound(url, error) from error

    log(200)
    return StreamingResponse(
        iter_file(handle),
        status_code=200,
        media_type=content_type_for(target),
    )
