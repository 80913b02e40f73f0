import re
from typing import Optional

from .config import Upstream

# A dot and word characters at the very end of the path
FILE_PATTERN = re.compile(r"\.\w+\Z", re.ASCII)


def looks_like_file(url: str) -> bool:
    path = url.split("?", 1)[0]
    return FILE_PATTERN.search(path) is not None


def effective_path(url: str, fallback: str) -> str:
    """Path to serve for a URL: the URL itself for files, the shell document otherwise"""
    return url if looks_like_file(url) else fallback


def is_proxied(path: str, upstream: Optional[Upstream]) -> bool:
    return upstream is not None and path.startswith(upstream.prefix)
