"""
Allows dependency injection of the Runtime and the merged request input into
FastAPI routes.

Example:
from helperkit.web.deps import RT, Input

def my_route(rt: RT, data: Input):
    # 'rt' is the Runtime, 'data' the merged cookies/query/form/JSON input
"""
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates

from helperkit.core.runtime import Runtime
from helperkit.web.helpers import collect_request_data, csrf_field, method_field, old


# --- Runtime Dependency injection ---
def get_runtime(request: Request) -> Runtime:
    """Dependency to retrieve the Runtime from the FastAPI request state."""
    return request.app.state.rt

# type alias for dependency injection
RT = Annotated[Runtime, Depends(get_runtime)]


# --- Request input Dependency injection ---
async def get_request_data(request: Request) -> dict[str, Any]:
    """Dependency collecting cookies, query params, form fields and JSON body."""
    return await collect_request_data(request)

Input = Annotated[dict[str, Any], Depends(get_request_data)]


# --- Templates setup ---
def build_templates(rt: Runtime) -> Jinja2Templates:
    """Jinja2 templates rooted at the runtime's views directory."""
    templates = Jinja2Templates(directory=str(rt.views_dir))
    templates.env.globals["asset"] = rt.asset
    templates.env.globals["config"] = rt.config.get
    templates.env.globals["csrf_field"] = csrf_field
    templates.env.globals["method_field"] = method_field
    templates.env.globals["old"] = old
    return templates
