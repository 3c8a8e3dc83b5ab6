from fastapi.testclient import TestClient

from backend.app.main import (
    LOCAL_DEVELOPMENT_ORIGINS,
    _load_allowed_origins_from_env,
    _resolve_allowed_origins,
    _split_raw_origins,
    app,
)


def test_split_raw_origins_accepts_commas_and_whitespace():
    raw = "https://portal.example.com, http://127.0.0.1:3000 http://0.0.0.0:3000"
    assert _split_raw_origins(raw) == [
        "https://portal.example.com",
        "http://127.0.0.1:3000",
        "http://0.0.0.0:3000",
    ]


def test_load_allowed_origins_from_env_normalizes_values(monkeypatch):
    monkeypatch.setenv(
        "BACKEND_ALLOWED_ORIGINS",
        "https://portal.example.com/ https://portal.example.com",
    )

    assert _load_allowed_origins_from_env() == ["https://portal.example.com"]


def test_configured_origins_keep_local_dev_servers(monkeypatch):
    monkeypatch.setenv("BACKEND_ALLOWED_ORIGINS", "https://portal.example.com")

    origins = _resolve_allowed_origins()

    assert "https://portal.example.com" in origins
    assert LOCAL_DEVELOPMENT_ORIGINS <= set(origins)


def test_health_endpoint_includes_cors_headers_for_local_dev_origin():
    client = TestClient(app)

    response = client.options(
        "/",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers.get("access-control-allow-origin") == "http://localhost:3000"
