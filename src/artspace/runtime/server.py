from __future__ import annotations

import contextlib
import logging
import os
import socket
import threading
import time
import webbrowser
from dataclasses import dataclass

import uvicorn

from ..sdk.client import ArtSpaceClient
from .app import create_app

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtSpaceServer:
    host: str
    port: int
    url: str

    def client(self) -> ArtSpaceClient:
        """HTTP client bound to this server."""
        return ArtSpaceClient(self.url.rstrip("/"))


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url:
        return ""
    # Allow passing just host:port.
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """Best-effort probe to determine if an artspace server is reachable."""

    import httpx

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            data = r.json()
            return bool(data.get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    open_browser: bool = True,
    log_level: str = "info",
    access_log: bool = False,
    new_server: bool = False,
    connect_timeout_s: float = 0.2,
) -> ArtSpaceServer | ArtSpaceClient:
    """Start artspace (API + optional frontend) with a single Python call.

    Behavior:
    - If ARTSPACE_URL is set, attach to that existing server (client mode) unless
      `new_server=True`.
    - Otherwise, if `port != 0` and a server is already reachable at http://{host}:{port},
      attach to it unless `new_server=True`.
    - Otherwise start a new local server in a daemon thread and return an `ArtSpaceServer`.

    `port=0` means "pick a free port", so there is nothing to attach to. Uvicorn's
    access log is off by default because clients poll `/api/events`.
    """

    env_url = _normalize_base_url(os.getenv("ARTSPACE_URL", ""))

    if env_url and not new_server:
        if _is_server_alive(env_url, timeout_s=connect_timeout_s):
            logger.info("attaching to existing server at %s", env_url)
            if open_browser:
                webbrowser.open(env_url + "/")
            return ArtSpaceClient(env_url)

    if port != 0 and not new_server:
        default_url = _normalize_base_url(f"http://{host}:{port}")
        if _is_server_alive(default_url, timeout_s=connect_timeout_s):
            logger.info("attaching to existing server at %s", default_url)
            if open_browser:
                webbrowser.open(default_url + "/")
            return ArtSpaceClient(default_url)

    if port == 0:
        port = _find_free_port(host)

    app = create_app()

    config = uvicorn.Config(app, host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    # Wait for the socket so a subsequent client probe doesn't race with startup.
    deadline = time.monotonic() + 5.0
    while not server.started and thread.is_alive() and time.monotonic() < deadline:
        time.sleep(0.01)

    url = f"http://{host}:{port}/"
    logger.info("artspace listening on %s", url)
    if open_browser:
        webbrowser.open(url)

    return ArtSpaceServer(host=host, port=port, url=url)
