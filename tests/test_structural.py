import pytest
from run import create_app
from app.repo import InMemoryRepo, RepoError
from app.service import CatalogService

@pytest.fixture
def client(tmp_path):
    app = create_app({"database": str(tmp_path / "structural.sqlite")})
    repo = InMemoryRepo()
    app.config["SERVICE"] = CatalogService(repo)
    app.testing = True
    with app.test_client() as c:
        yield c, repo

# ---------- Structural tests covering the app wiring ----------

def test_index_lists_routes(client):
    c, repo = client
    r = c.get("/")
    assert r.status_code == 200
    routes = r.get_json()
    paths = {x["path"] for x in routes}
    assert {"/", "/titles", "/titles/year", "/titles/cast", "/titles/<title_id>",
            "/directors", "/directors/<director_id>", "/directors/<director_id>/titles"} <= paths
    assert all(x["methods"] == ["GET"] for x in routes)

def test_cors_headers_on_every_response(client):
    c, repo = client
    for path in ("/", "/titles", "/directors/abc", "/nope"):
        r = c.get(path)
        assert r.headers["Access-Control-Allow-Origin"] == "*"

@pytest.mark.parametrize("path", ["/", "/titles", "/titles/1", "/directors", "/directors/1/titles", "/nope"])
def test_store_gate_returns_503(client, path):
    c, repo = client
    repo.available = False
    r = c.get(path)
    assert r.status_code == 503
    assert r.get_json() == {"error": "Service unavailable"}

def test_unknown_route_is_json_404(client):
    c, repo = client
    r = c.get("/does/not/exist")
    assert r.status_code == 404
    assert r.get_json() == {"error": "Not found"}

def test_wrong_method_is_json_405(client):
    c, repo = client
    r = c.post("/titles")
    assert r.status_code == 405
    assert r.get_json() == {"error": "Method not allowed"}

def test_unexpected_error_is_hidden(client):
    c, repo = client
    def boom(*args, **kwargs):
        raise RuntimeError("secret internals")
    repo.list_directors = boom
    r = c.get("/directors")
    assert r.status_code == 500
    assert r.get_json() == {"error": "Internal server error"}
    assert b"secret" not in r.data

def test_store_error_maps_to_400(client):
    c, repo = client
    def down(*args, **kwargs):
        raise RepoError("disk I/O error")
    repo.list_titles = down
    repo.list_directors = down
    assert c.get("/titles").status_code == 400
    assert c.get("/titles/cast?name=x").get_json() == {"error": "No results"}
    assert c.get("/directors").get_json() == {"error": "Director not found"}
