from fastapi import FastAPI
from fastapi.testclient import TestClient

from origin_policy import CachedStaticFiles, OriginPolicyMiddleware


def _client(allowed_origins):
    app = FastAPI()
    app.add_middleware(OriginPolicyMiddleware, allowed_origins=allowed_origins)

    @app.get("/ping")
    def ping():
        return {"ok": True}

    return TestClient(app)


def test_request_without_origin_is_allowed():
    response = _client({"http://localhost:5500"}).get("/ping")
    assert response.status_code == 200


def test_allow_listed_origin():
    response = _client({"http://localhost:5500"}).get(
        "/ping", headers={"Origin": "http://localhost:5500"}
    )
    assert response.status_code == 200


def test_origin_match_is_exact():
    client = _client({"http://localhost:5500"})
    for origin in ["http://localhost:5501", "https://localhost:5500", "http://localhost:5500/"]:
        response = client.get("/ping", headers={"Origin": origin})
        assert response.status_code == 403
        assert response.json() == {"error": "CORS policy violation"}


def test_cached_static_files(tmp_path):
    (tmp_path / "styles.css").write_text("body {}")
    app = FastAPI()
    app.mount("/assets", CachedStaticFiles(directory=tmp_path, max_age=86400), name="assets")

    response = TestClient(app).get("/assets/styles.css")
    assert response.status_code == 200
    assert response.headers["cache-control"] == "public, max-age=86400"
    assert response.headers["etag"]
