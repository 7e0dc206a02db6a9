import pytest
from run import create_app, server_options

@pytest.fixture
def api_client(tmp_path):
    """Flask test client backed by a throwaway SQLite file."""
    app = create_app({"database": str(tmp_path / "api.sqlite"), "debug": False, "logging_level": "WARNING"})
    app.testing = True
    with app.test_client() as client:
        yield client, app

def signup(client, username="alice", password="pw"):
    return client.post("/signup", json={"username": username, "password": password})

def test_me_logged_out(api_client):
    client, _ = api_client
    resp = client.get("/me")
    assert resp.status_code == 200
    assert resp.get_json() == {"user": None, "authenticated": False}

def test_signup_then_duplicate(api_client):
    client, _ = api_client
    resp = signup(client)
    assert resp.status_code == 201
    assert resp.get_json()["user"] == {"username": "alice"}
    assert signup(client).status_code == 409

def test_signup_requires_fields(api_client):
    client, _ = api_client
    resp = client.post("/signup", json={"username": "", "password": "pw"})
    assert resp.status_code == 400
    assert "required" in resp.get_json()["error"]

def test_login_logout_flow(api_client):
    client, _ = api_client
    signup(client)
    client.post("/logout")
    assert client.get("/me").get_json()["authenticated"] is False
    bad = client.post("/login", json={"username": "alice", "password": "nope"})
    assert bad.status_code == 401
    ok = client.post("/login", data={"username": "alice", "password": "pw", "remember": "on"})
    assert ok.status_code == 200
    assert ok.get_json() == {"user": {"username": "alice"}, "remember": True}
    assert client.get("/me").get_json()["user"] == {"username": "alice"}

def test_login_without_remember_lost_on_new_app(api_client, tmp_path):
    client, _ = api_client
    signup(client)
    client.post("/logout")
    client.post("/login", json={"username": "alice", "password": "pw", "remember": False})
    assert client.get("/me").get_json()["authenticated"] is True
    restarted = create_app({"database": str(tmp_path / "api.sqlite"), "debug": False, "logging_level": "WARNING"})
    with restarted.test_client() as c2:
        assert c2.get("/me").get_json()["authenticated"] is False

@pytest.mark.parametrize("method,url", [
    ("get", "/films"),
    ("post", "/films"),
    ("get", "/films/abc"),
    ("delete", "/films/abc"),
    ("get", "/search?q=x"),
    ("get", "/stats"),
    ("get", "/filters"),
    ("get", "/searches/recent"),
    ("post", "/films/import"),
])
def test_protected_routes_require_login(api_client, method, url):
    client, _ = api_client
    resp = getattr(client, method)(url)
    assert resp.status_code == 401

def test_import_template_is_public(api_client):
    client, _ = api_client
    resp = client.get("/films/import/template")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert resp.data.decode().startswith("Title,Director,Actors,Genre,ID Number,Year,Tags")

def test_stores_injected_in_config(api_client):
    _, app = api_client
    assert app.config["SESSION_STORE"] is not None
    assert app.config["LIBRARY_STORE"] is not None

@pytest.mark.parametrize("url", ["/signup", "/login"])
def test_non_object_json_body_rejected(api_client, url):
    client, _ = api_client
    resp = client.post(url, json=["x"])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "request body must be a JSON object"

def test_import_non_object_json_body_rejected(api_client):
    client, _ = api_client
    signup(client)
    resp = client.post("/films/import", json=["Title,Director,ID\nHeat,Mann,A-1"])
    assert resp.status_code == 400

def test_server_runs_single_threaded():
    opts = server_options({"host": "0.0.0.0", "port": 8080, "debug": False})
    assert opts == {"host": "0.0.0.0", "port": 8080, "debug": False, "threaded": False}
