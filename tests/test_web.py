"""
Tests for the web helpers through a FastAPI TestClient.
"""
from fastapi import Request
from fastapi.testclient import TestClient

from helperkit.web import helpers
from helperkit.web.helpers import request_input
from helperkit.web.routing import Dispatcher, handler_names, split_route
from helperkit.utils.parse import sanitize


# --- pure helpers ---

def test_sanitize_strips_tags_and_encodes_quotes():
    assert sanitize("<b>bold</b> \"q\" 'a'") == "bold &#34;q&#34; &#39;a&#39;"
    assert sanitize(["<i>x</i>", 3]) == ["x", 3]
    assert sanitize({"k": "<p>v"}) == {"k": "v"}


def test_request_input():
    data = {"items": "<script>x</script>", "tags": ["a", "<b>b</b>"], "empty": None}
    assert request_input(data, "items") == "x"
    assert request_input(data, "tags") == ["a", "b"]
    assert request_input(data, "missing") is None
    assert request_input(data, "missing", "default value") == "default value"
    assert request_input(data, "empty", "default") == "default"
    assert request_input(data, ["items", "other"]) == ["x", None]


def test_split_route_and_handler_names():
    assert split_route("/users/show/extra") == ("users", "show")
    assert split_route("/users") == ("users", None)
    assert split_route("/") == ("", None)
    assert handler_names("GET", "users") == ["getUsers", "get_users"]
    assert handler_names("POST", "") == ["post"]


def test_method_field_and_dump():
    assert helpers.method_field("put") == '<input type="hidden" name="_method" value="PUT">'
    assert helpers.dump({"a": "<b>"}) == "<pre>{&#39;a&#39;: &#39;&lt;b&gt;&#39;}</pre>"


def test_dispatcher_rejects_duplicate_names():
    dispatcher = Dispatcher()

    @dispatcher.register()
    def getUsers(request, method):  # pylint: disable=invalid-name,unused-argument
        return "ok"

    assert dispatcher.names == ["getUsers"]
    try:
        dispatcher.register("getUsers")(lambda request, method: None)
    except ValueError as e:
        assert "already registered" in str(e)
    else:
        raise AssertionError("duplicate registration should fail")


# --- through the app ---

def test_health(client: TestClient):
    assert client.get("/health").json() == {"ok": True}


def test_dispatch_by_convention(client: TestClient, dispatcher: Dispatcher):
    @dispatcher.register()
    def getUsers(request: Request, method):  # pylint: disable=invalid-name,unused-argument
        return {"method": method}

    @dispatcher.register()
    async def post_users(request: Request, method):  # pylint: disable=unused-argument
        data = await helpers.collect_request_data(request)
        return helpers.json_response({"name": request_input(data, "name")}, 201)

    assert client.get("/users/show").json() == {"method": "show"}
    assert client.get("/users").json() == {"method": None}
    res = client.post("/users", data={"name": "<em>Ann</em>"})
    assert res.status_code == 201
    assert res.json() == {"name": "Ann"}


def test_dispatch_unknown_route_is_404(client: TestClient):
    res = client.get("/nowhere/at/all")
    assert res.status_code == 404
    assert res.text == "Not Found"


def test_abort_and_redirect(client: TestClient, dispatcher: Dispatcher):
    @dispatcher.register()
    def getSecret(request, method):  # pylint: disable=invalid-name,unused-argument
        helpers.abort(403, "Forbidden")

    @dispatcher.register()
    def getOld(request, method):  # pylint: disable=invalid-name,unused-argument
        return helpers.redirect("/new")

    res = client.get("/secret")
    assert res.status_code == 403
    assert res.text == "Forbidden"
    res = client.get("/old", follow_redirects=False)
    assert res.status_code == 302
    assert res.headers["location"] == "/new"


def test_request_data_merges_sources(client: TestClient, dispatcher: Dispatcher):
    @dispatcher.register()
    async def post_echo(request, method):  # pylint: disable=unused-argument
        return await helpers.collect_request_data(request)

    client.cookies.set("theme", "dark")
    res = client.post("/echo?page=2&tag[]=a&tag[]=b", json={"page": 3, "q": "x"})
    assert res.json() == {"theme": "dark", "page": 3, "tag": ["a", "b"], "q": "x"}


def test_session_helpers(client: TestClient, dispatcher: Dispatcher):
    @dispatcher.register()
    def post_login(request, method):  # pylint: disable=unused-argument
        helpers.session(request, {"user": {"id": 7}, "old": {"email": "a@b.c"}})
        return "ok"

    @dispatcher.register()
    def get_me(request, method):  # pylint: disable=unused-argument
        return {
            "user": helpers.auth(request),
            "old_email": helpers.old(request, "email"),
            "old_name": helpers.old(request, "name", "anon"),
            "missing": helpers.session(request, "nope", "dflt"),
            "all": sorted(helpers.session(request)),
        }

    assert client.get("/me").json()["user"] is None
    client.post("/login")
    assert client.get("/me").json() == {
        "user": {"id": 7},
        "old_email": "a@b.c",
        "old_name": "anon",
        "missing": "dflt",
        "all": ["old", "user"],
    }


def test_server_and_url(client: TestClient, dispatcher: Dispatcher, test_runtime):
    @dispatcher.register()
    def get_info(request, method):  # pylint: disable=unused-argument
        return {
            "method": helpers.server(request, "REQUEST_METHOD"),
            "uri": helpers.server(request, "REQUEST_URI"),
            "agent": helpers.server(request, "HTTP_X_CUSTOM"),
            "root": helpers.server(request, "DOCUMENT_ROOT"),
            "missing": helpers.server(request, "NOPE", "d"),
            "url": helpers.url(request, "search", {"q": "laravel"}),
            "secure": helpers.url(request, "/user/profile", secure=True),
        }

    res = client.get("/info?x=1", headers={"X-Custom": "yes"})
    assert res.json() == {
        "method": "GET",
        "uri": "/info?x=1",
        "agent": "yes",
        "root": str(test_runtime.document_root),
        "missing": "d",
        "url": "http://testserver/search?q=laravel",
        "secure": "https://testserver/user/profile",
    }


def test_view_rendering(client: TestClient, dispatcher: Dispatcher):
    @dispatcher.register()
    def get_home(request, method):  # pylint: disable=unused-argument
        return helpers.view(request, "home", {"name": "<John>", "greeting": "hi"}, {"greeting": "hello"})

    @dispatcher.register()
    def get_missing(request, method):  # pylint: disable=unused-argument
        return helpers.view(request, "nope")

    res = client.get("/home")
    assert res.status_code == 200
    assert "<h1>Hello &lt;John&gt;</h1>" in res.text
    assert "<p>hello</p>" in res.text
    assert 'name="csrf_token"' in res.text
    res = client.get("/missing")
    assert res.status_code == 404
    assert res.text == "View [nope] not found."


def test_dd_renders_dump(client: TestClient, dispatcher: Dispatcher):
    @dispatcher.register()
    def get_debug(request, method):  # pylint: disable=unused-argument
        helpers.dd({"x": 1})

    res = client.get("/debug")
    assert res.status_code == 200
    assert res.text == "<pre>{&#39;x&#39;: 1}</pre>"


def test_json_response_forces_content_type(client: TestClient, dispatcher: Dispatcher):
    @dispatcher.register()
    def get_data(request, method):  # pylint: disable=unused-argument
        return helpers.json_response({"ok": True}, headers={"Content-Type": "text/plain", "X-A": "1"})

    res = client.get("/data")
    assert res.headers["content-type"] == "application/json"
    assert res.headers["x-a"] == "1"


def test_dependencies_in_custom_routes(client: TestClient):
    # pylint: disable=import-outside-toplevel
    from helperkit.web.deps import Input, RT

    @client.app.get("/custom/route")
    def custom(rt: RT, data: Input):
        return {"app": rt.settings.app_name, "q": request_input(data, "q")}

    # catch-all dispatch is registered first, so mount ahead of it
    client.app.router.routes.insert(0, client.app.router.routes.pop())
    assert client.get("/custom/route?q=<b>hi</b>").json() == {"app": "Test App", "q": "hi"}
