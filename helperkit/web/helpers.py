"""
Request, session, response and view helpers for FastAPI/Starlette apps.

Each helper is a thin wrapper: request input and server variables are plain
mappings, sessions are Starlette's signed-cookie session, views are Jinja2
templates from the runtime's views directory.
"""
import inspect
import json
import logging
import pprint
import secrets
from pathlib import Path
from typing import Any, TYPE_CHECKING
from urllib.parse import urlencode

from fastapi import HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from markupsafe import Markup

from helperkit.utils.dict_path import data_get, value
from helperkit.utils.parse import clean, sanitize

if TYPE_CHECKING:
    from helperkit.core.runtime import Runtime

logger = logging.getLogger(__name__)


class Abort(HTTPException):
    """Raised by abort(); rendered as a plain-text response with the message."""


class DumpAndDie(Exception):
    """Raised by dd(); rendered as an HTML dump of the value."""

    def __init__(self, val: Any):
        super().__init__("dd() called")
        self.value = val


# --- Request input ---

async def collect_request_data(request: Request) -> dict[str, Any]:
    """
    Merge cookies, query parameters, form fields and a JSON object body into
    one mapping. Later sources win. Repeated `name[]` keys collect into lists.
    """
    data: dict[str, Any] = dict(request.cookies)
    data.update(_multi_to_dict(request.query_params.multi_items()))
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        fields = [(k, v) for k, v in form.multi_items() if isinstance(v, str)]
        data.update(_multi_to_dict(fields))
    elif content_type.startswith("application/json"):
        body = await request.body()
        try:
            payload = json.loads(body) if body else None
        except ValueError:
            logger.warning("Ignoring malformed JSON body on %s", request.url.path)
            payload = None
        if isinstance(payload, dict):
            data.update(payload)
    return data


def _multi_to_dict(items: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, val in items:
        if key.endswith("[]"):
            result.setdefault(key[:-2], []).append(val)
        else:
            result[key] = val
    return result


def request_input(data: dict[str, Any], key: Any, default: Any = None) -> Any:
    """
    Get a sanitized value from the merged request data.
    A list of keys returns a list of values, one per key.
    """
    if isinstance(key, (list, tuple)):
        return [request_input(data, k, default) for k in key]
    key = clean(key, empty_to_none=False)
    val = data.get(key)
    if val is None:
        val = value(default)
    return sanitize(val)


# --- Server variables ---

def server_vars(request: Request, rt: 'Runtime | None' = None) -> dict[str, Any]:
    """Build a CGI-style mapping (REQUEST_METHOD, HTTP_HOST, ...) for a request."""
    url = request.url
    query = url.query
    variables: dict[str, Any] = {
        "REQUEST_METHOD": request.method,
        "REQUEST_URI": url.path + (f"?{query}" if query else ""),
        "QUERY_STRING": query,
        "HTTP_HOST": request.headers.get("host", url.netloc),
        "HTTPS": "on" if url.scheme == "https" else "off",
        "SERVER_NAME": url.hostname or "",
        "SERVER_PORT": url.port,
        "REMOTE_ADDR": request.client.host if request.client else "",
    }
    for name, val in request.headers.items():
        variables["HTTP_" + name.upper().replace("-", "_")] = val
    if rt is None:
        rt = getattr(request.app.state, "rt", None)
    if rt is not None:
        variables["DOCUMENT_ROOT"] = str(rt.document_root)
    return variables


def server(request: Request, key: str, default: Any = None) -> Any:
    variables = server_vars(request)
    if key in variables:
        return variables[key]
    return value(default)


# --- Session ---

def session(request: Request, key: Any = None, default: Any = None) -> Any:
    """
    session(request) -> the whole session
    session(request, {"k": v}) -> stores each item, returns None
    session(request, "k", default) -> single-level lookup
    """
    store = request.session
    if key is None:
        return store
    if isinstance(key, dict):
        for session_key, session_value in key.items():
            store[session_key] = session_value
        return None
    if key in store:
        return store[key]
    return value(default)


def old(request: Request, key: str, default: Any = None) -> Any:
    """Previously submitted input, flashed to session['old']."""
    return data_get(request.session, ["old", key], default)


def auth(request: Request) -> Any:
    """The authenticated user stored in the session, if any."""
    return request.session.get("user")


def csrf_token(request: Request) -> str:
    """The session's CSRF token, created on first use."""
    token = request.session.get("csrf_token")
    if not token:
        token = secrets.token_hex(32)
        request.session["csrf_token"] = token
    return token


def csrf_field(request: Request) -> Markup:
    return Markup('<input type="hidden" name="csrf_token" value="{}">').format(csrf_token(request))


def method_field(method: str) -> Markup:
    return Markup('<input type="hidden" name="_method" value="{}">').format(method.upper())


# --- Responses ---

def abort(code: int, message: str = "") -> None:
    """Stop handling the request with a status code and plain-text message."""
    raise Abort(status_code=code, detail=message)


def redirect(url: str, status_code: int = 302) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status_code)


def response(content: str = "", status: int = 200, headers: dict[str, str] | None = None) -> Response:
    return HTMLResponse(content=content, status_code=status, headers=headers)


def json_response(data: Any, status: int = 200, headers: dict[str, str] | None = None) -> JSONResponse:
    """JSON response. Any Content-Type in headers is replaced by application/json."""
    headers = {k: v for k, v in (headers or {}).items() if k.lower() != "content-type"}
    return JSONResponse(content=data, status_code=status, headers=headers)


def to_response(result: Any) -> Response:
    """Coerce a handler's return value into a Response."""
    if isinstance(result, Response):
        return result
    if result is None:
        return Response(status_code=204)
    if isinstance(result, str):
        return response(result)
    return json_response(result)


async def call_handler(handler, *args) -> Response:
    """Call a sync or async handler and coerce its result into a Response."""
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return to_response(result)


# --- URLs ---

def url(request: Request, path: str = "", parameters: dict[str, Any] | None = None,
        secure: bool | None = None) -> str:
    """Absolute URL on the current host, with optional query parameters."""
    if secure is None:
        secure = request.url.scheme == "https"
    scheme = "https://" if secure else "http://"
    host = request.headers.get("host", request.url.netloc)
    base_url = (scheme + host).rstrip("/")
    full = f"{base_url}/{(path or '').lstrip('/')}"
    if parameters:
        full += "?" + urlencode(parameters, doseq=True)
    return full


# --- Views ---

def view(request: Request, name: str, data: dict[str, Any] | None = None,
         merge_data: dict[str, Any] | None = None) -> HTMLResponse:
    """Render `<views>/<name>.html` with data merged with merge_data."""
    rt = request.app.state.rt
    template_name = f"{name.strip('/')}.html"
    views_dir: Path = rt.views_dir
    if not (views_dir / template_name).is_file():
        abort(404, f"View [{name}] not found.")
    context = {**(data or {}), **(merge_data or {})}
    return request.app.state.templates.TemplateResponse(request, template_name, context)


# --- Debugging ---

def dump(val: Any) -> Markup:
    """Readable HTML dump of a value."""
    return Markup("<pre>{}</pre>").format(pprint.pformat(val))


def dd(val: Any) -> None:
    """Dump a value and stop handling the request."""
    raise DumpAndDie(val)
