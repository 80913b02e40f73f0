"""
Fixed configuration for the dev server listeners
"""

from pathlib import Path
from types import MappingProxyType
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent

HOST = "127.0.0.1"

MIME_TYPES = MappingProxyType({
    ".css": "text/css; charset=utf-8",
    ".html": "text/html; charset=utf-8",
    ".js": "text/javascript; charset=utf-8",
    ".json": "application/json",
    ".mjs": "text/javascript; charset=utf-8",
    ".png": "image/png",
    ".svg": "image/svg+xml",
    ".ttf": "font/ttf",
    ".txt": "text/plain",
    ".wasm": "application/wasm",
})


def content_type_for(path: Union[str, Path]) -> Optional[str]:
    """Content type for a file path by its extension, None when unmapped"""
    return MIME_TYPES.get(Path(path).suffix)


class Upstream(BaseModel):
    model_config = ConfigDict(frozen=True)

    prefix: str = "/api/"
    hostname: str


class Listener(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    port: int
    root: Path
    fallback: str = "/index.html"
    upstream: Optional[Upstream] = None


LISTENERS = (
    Listener(
        name="Small example",
        port=8080,
        root=BASE_DIR / "example",
        fallback="/index.html",
    ),
    Listener(
        name="Concourse example",
        port=8081,
        root=BASE_DIR / "concourse" / "web",
        fallback="/public/index.html",
        upstream=Upstream(prefix="/api/", hostname="ci.concourse-ci.org"),
    ),
)
