"""
Request level failures and the plain-text responses they turn into
"""

import traceback
from typing import Union

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse


def format_cause(cause: BaseException) -> str:
    return "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))


class StaticFileNotFound(Exception):
    status_code = 404

    def __init__(self, url: str, cause: BaseException):
        super().__init__(f"File not found: {url}")
        self.url = url
        self.cause = cause

    def body(self) -> str:
        return f"File not found: {self.url}\n\n{format_cause(self.cause)}"


class UpstreamUnavailable(Exception):
    status_code = 503

    def __init__(self, hostname: str, cause: BaseException):
        super().__init__(f"Failed to proxy to {hostname}")
        self.hostname = hostname
        self.cause = cause

    def body(self) -> str:
        return f"Failed to proxy to {self.hostname}. Is it down?\n\n{format_cause(self.cause)}"


async def request_error_handler(request: Request,
                                exc: Union[StaticFileNotFound, UpstreamUnavailable]) -> PlainTextResponse:
    log = getattr(request.state, "log", None)
    if log is not None:
        log(exc.status_code)
    return PlainTextResponse(exc.body(), status_code=exc.status_code)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StaticFileNotFound, request_error_handler)
    app.add_exception_handler(UpstreamUnavailable, request_error_handler)
