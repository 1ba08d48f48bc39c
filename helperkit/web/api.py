"""
FastAPI app factory for helperkit applications.
"""
import secrets

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.middleware.sessions import SessionMiddleware

from helperkit.core.runtime import Runtime
from helperkit.web.deps import build_templates
from helperkit.web.helpers import Abort, DumpAndDie, dump
from helperkit.web.routing import Dispatcher

DISPATCH_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(rt: Runtime, dispatcher: Dispatcher | None = None) -> FastAPI:
    """Create and configure the FastAPI app for a helperkit Runtime."""
    app = FastAPI(title=rt.settings.app_name)
    app.state.rt = rt
    app.state.templates = build_templates(rt)
    app.state.dispatcher = dispatcher

    secret_key = rt.app_key
    if not secret_key:
        rt.logger.warning("No APP_KEY set; sessions will not survive a restart")
        secret_key = secrets.token_urlsafe(32)
    app.add_middleware(SessionMiddleware, secret_key=secret_key)

    @app.exception_handler(Abort)
    async def abort_handler(request: Request, exc: Abort):
        return PlainTextResponse(exc.detail or "", status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(DumpAndDie)
    async def dump_handler(request: Request, exc: DumpAndDie):
        return HTMLResponse(dump(exc.value))

    # Health check endpoint
    @app.get("/health")
    def health():
        return {"ok": True}

    if dispatcher is not None:
        async def dispatch(request: Request):
            return await dispatcher.dispatch(request)
        app.add_api_route("/{path:path}", dispatch, methods=DISPATCH_METHODS, include_in_schema=False)
    return app
