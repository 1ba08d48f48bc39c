"""
Convention-based request dispatch.

`GET /users/show` calls the handler registered as `getUsers` (or `get_users`)
with the request and "show". Unknown handlers answer 404.
"""
import logging
from typing import Callable

from fastapi import Request
from fastapi.responses import Response

from helperkit.web.helpers import abort, call_handler

logger = logging.getLogger(__name__)

Handler = Callable[..., object]


def split_route(path: str) -> tuple[str, str | None]:
    """First two segments of a request path: (dir, method)."""
    parts = path.strip("/").split("/")
    directory = parts[0]
    method = parts[1] if len(parts) > 1 else None
    return directory, method


def handler_names(http_method: str, directory: str) -> list[str]:
    """Candidate handler names: camel form first, then snake form."""
    verb = http_method.lower()
    names = [verb + directory[:1].upper() + directory[1:]]
    if directory:
        names.append(f"{verb}_{directory}")
    return names


class Dispatcher:
    """
    Registry of route handlers. Use the `register` method as a decorator:

        dispatcher = Dispatcher()

        @dispatcher.register()
        def getUsers(request, method): ...
    """
    def __init__(self):
        self._handlers: dict[str, Handler] = {}

    def register(self, name: str | None = None):
        """Decorator registering a handler under its function name (or `name`)."""
        def _wrap(func: Handler) -> Handler:
            key = name or func.__name__
            if key in self._handlers:
                raise ValueError(f"Handler '{key}' is already registered.")
            self._handlers[key] = func
            return func
        return _wrap

    def get(self, name: str) -> Handler | None:
        return self._handlers.get(name)

    @property
    def names(self) -> list[str]:
        return sorted(self._handlers)

    def resolve(self, http_method: str, path: str) -> tuple[Handler | None, str | None]:
        """Find the handler for a method and path, plus the argument to call it with."""
        directory, method = split_route(path)
        for name in handler_names(http_method, directory):
            if handler := self._handlers.get(name):
                return handler, method
        return None, method

    async def dispatch(self, request: Request) -> Response:
        handler, method = self.resolve(request.method, request.url.path)
        if handler is None:
            logger.debug("No handler for %s %s", request.method, request.url.path)
            abort(404, "Not Found")
        return await call_handler(handler, request, method)
