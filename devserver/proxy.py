"""
Reverse proxy from a local listener to a fixed HTTPS upstream
"""

from typing import Optional

import httpx
from fastapi import Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from .access_log import RequestLog, request_url
from .errors import UpstreamUnavailable


def make_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=transport, timeout=None, follow_redirects=False)


def has_body(request: Request) -> bool:
    return "content-length" in request.headers or "transfer-encoding" in request.headers


def upstream_headers(request: Request, hostname: str) -> list:
    headers = [(key, value) for key, value in request.headers.raw if key.lower() != b"host"]
    headers.append((b"host", hostname.encode("ascii")))
    return headers


async def proxy_request(client: httpx.AsyncClient, request: Request,
                        hostname: str, log: RequestLog) -> StreamingResponse:
    upstream_req = client.build_request(
        method=request.method,
        url=f"https://{hostname}{request_url(request)}",
        headers=upstream_headers(request, hostname),
        content=request.stream() if has_body(request) else None,
    )
    try:
        resp = await client.send(upstream_req, stream=True)
    except httpx.TransportError as error:
        raise UpstreamUnavailable(hostname, error) from error

    log(f"-> {hostname}", resp.status_code)
    response = StreamingResponse(
        resp.aiter_raw(),
        status_code=resp.status_code,
        background=BackgroundTask(resp.aclose),
    )
    # Relay upstream headers as-is, repeated ones included
    response.raw_headers = [(key.lower(), value) for key, value in resp.headers.raw]
    return response
