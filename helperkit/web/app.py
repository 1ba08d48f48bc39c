"""
Utility functions for serving a helperkit web application.
"""
import socket

import uvicorn

from helperkit.core.runtime import Runtime
from helperkit.web.api import create_app
from helperkit.web.routing import Dispatcher


def pick_free_port(host: str, port: int | None) -> int:
    """Find a free port on localhost."""
    if port is not None:
        return port
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((host, 0))  # 0 = let OS choose
        return int(s.getsockname()[1])


def make_url(host: str, port: int) -> str:
    """Construct a URL string from host and port."""
    return f"http://{host}:{port}"


def run_app(rt: Runtime, host: str = "127.0.0.1", port: int | None = None,
            dispatcher: Dispatcher | None = None) -> None:
    """Launch the web service for a Runtime."""
    app = create_app(rt, dispatcher)
    port = pick_free_port(host, port)
    rt.logger.info("Starting helperkit app at %s", make_url(host, port))
    uvicorn.run(app, host=host, port=port, log_level="info")
