"""
Per-request access log lines

Each line reads ``HH:MM:SS METHOD host url <fields> | <elapsed> ms`` where the
time is when the request arrived and the elapsed time is measured up to the
moment the line is written.
"""

import copy
import logging
import time
from datetime import datetime
from typing import Any, Optional, Tuple

from fastapi import Request

logger = logging.getLogger("devserver.access")


def format_time(moment: datetime) -> str:
    return moment.strftime("%H:%M:%S")


def request_url(request: Request) -> str:
    """Path and query of a request as the client sent it"""
    path = request.scope.get("raw_path") or request.url.path.encode()
    url = path.decode("latin-1")
    query = request.scope.get("query_string", b"")
    if query:
        url += "?" + query.decode("latin-1")
    return url


class RequestLog:
    """Timer plus request summary, written out one outcome at a time"""

    def __init__(self, method: str, host: str, url: str,
                 started_at: Optional[datetime] = None,
                 started: Optional[float] = None):
        self.summary = f"{method} {host} {url}"
        self.started_at = started_at or datetime.now()
        self.started = time.monotonic() if started is None else started
        self.prefix: Tuple[Any, ...] = ()

    @classmethod
    def for_request(cls, request: Request) -> "RequestLog":
        return cls(request.method, request.headers.get("host", "-"), request_url(request))

    def annotate(self, *fields: Any) -> "RequestLog":
        """Same request and timer, with fields placed ahead of every later line"""
        log = copy.copy(self)
        log.prefix = self.prefix + fields
        return log

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)

    def line(self, *fields: Any) -> str:
        parts = [format_time(self.started_at), self.summary]
        parts.extend(str(field) for field in self.prefix + fields)
        parts.extend(["|", str(self.elapsed_ms()), "ms"])
        return " ".join(parts)

    def __call__(self, *fields: Any) -> None:
        logger.info(self.line(*fields))
