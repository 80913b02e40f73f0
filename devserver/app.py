"""
FastAPI application for one dev server listener
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request

from .access_log import RequestLog
from .config import Listener
from .errors import register_error_handlers
from .proxy import make_client, proxy_request
from .routing import effective_path, is_proxied
from .static import serve_file

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(listener: Listener, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    """Build the app serving listener.root, proxying listener.upstream when set"""
    client = make_client(transport) if listener.upstream is not None else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if client is not None:
            await client.aclose()

    app = FastAPI(
        title=listener.name,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    register_error_handlers(app)

    @app.api_route("/{path:path}", methods=METHODS)
    async def handle(path: str, request: Request):
        log = RequestLog.for_request(request)
        request.state.log = log

        if is_proxied(request.scope["path"], listener.upstream):
            return await proxy_request(client, request, listener.upstream.hostname, log)

        url = request.scope["path"]
        query = request.scope.get("query_string", b"")
        if query:
            url += "?" + query.decode("latin-1")
        target = effective_path(url, listener.fallback)
        if target != url:
            log = log.annotate(f"-> {target}")
            request.state.log = log
        return serve_file(listener.root, target, log)

    return app
