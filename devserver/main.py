#!/usr/bin/env python3
"""
Run every dev server listener on one event loop
"""

import asyncio
import logging
import sys
from typing import Iterable, List, Tuple

import uvicorn

from .app import create_app
from .config import HOST, LISTENERS, Listener

logger = logging.getLogger("devserver")


def configure_logging(level: int = logging.INFO) -> None:
    # Access lines carry their own timestamp
    logging.basicConfig(stream=sys.stdout, level=level, format="%(message)s")


def build_server(listener: Listener) -> uvicorn.Server:
    config = uvicorn.Config(
        create_app(listener),
        host=HOST,
        port=listener.port,
        access_log=False,
        log_level="warning",
    )
    return uvicorn.Server(config)


def bound_port(server: uvicorn.Server, default: int) -> int:
    for srv in server.servers:
        for sock in srv.sockets:
            return sock.getsockname()[1]
    return default


async def announce(server: uvicorn.Server, listener: Listener) -> None:
    while not server.started:
        if server.should_exit:
            return
        await asyncio.sleep(0.05)
    logger.info("%s ready at: http://localhost:%d", listener.name, bound_port(server, listener.port))


async def run_servers(servers: List[Tuple[uvicorn.Server, Listener]]) -> None:
    tasks = []
    for server, listener in servers:
        tasks.append(server.serve())
        tasks.append(announce(server, listener))
    await asyncio.gather(*tasks)
    logger.info("All listeners stopped")


async def serve(listeners: Iterable[Listener] = LISTENERS) -> None:
    await run_servers([(build_server(listener), listener) for listener in listeners])


def main() -> None:
    configure_logging()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        # uvicorn re-raises the captured SIGINT after its servers have shut down
        pass


if __name__ == "__main__":
    main()
