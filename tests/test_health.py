from types import SimpleNamespace

from fastapi.testclient import TestClient

from quizplay.api.routes import health as health_routes
from quizplay.main import app


async def _ok_check() -> dict[str, str]:
    return {"status": "ok"}


def test_health_ok(monkeypatch) -> None:
    monkeypatch.setattr(health_routes, "_check_database", _ok_check)
    monkeypatch.setattr(health_routes, "_check_redis", _ok_check)
    monkeypatch.setattr(health_routes, "_check_celery_worker", _ok_check)

    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "checks": {
            "database": {"status": "ok"},
            "redis": {"status": "ok"},
            "celery": {"status": "ok"},
        },
    }


def test_live_ok() -> None:
    client = TestClient(app)
    response = client.get("/live")
    assert response.status_code == 200
    assert response.json() == {"status": "live"}


def test_health_returns_503_when_dependency_failed(monkeypatch) -> None:
    async def _failed_redis() -> dict[str, str]:
        return {"status": "failed", "error": "redis_unavailable"}

    monkeypatch.setattr(health_routes, "_check_database", _ok_check)
    monkeypatch.setattr(health_routes, "_check_redis", _failed_redis)
    monkeypatch.setattr(health_routes, "_check_celery_worker", _ok_check)

    client = TestClient(app)
    response = client.get("/health")

    assert response.status_code == 503
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["checks"]["redis"] == {"status": "failed", "error": "redis_unavailable"}


def test_database_check_hides_raw_exception_text(monkeypatch) -> None:
    class _BrokenSession:
        async def __aenter__(self):
            raise RuntimeError("password authentication failed for user quizplay")

        async def __aexit__(self, *args) -> None:
            return None

    monkeypatch.setattr(health_routes, "_check_redis", _ok_check)
    monkeypatch.setattr(health_routes, "_check_celery_worker", _ok_check)
    monkeypatch.setattr(health_routes, "SessionLocal", lambda: _BrokenSession())

    client = TestClient(app)
    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["checks"]["database"] == {"status": "failed", "error": "database_unavailable"}
    assert "password" not in response.text


def test_celery_check_reports_missing_workers(monkeypatch) -> None:
    inspector = SimpleNamespace(ping=lambda: {})
    fake_control = SimpleNamespace(inspect=lambda timeout: inspector)
    monkeypatch.setattr(health_routes, "celery_app", SimpleNamespace(control=fake_control))

    assert health_routes._check_celery_worker_sync() == {"status": "failed", "error": "celery_no_workers"}


def test_celery_check_counts_workers(monkeypatch) -> None:
    inspector = SimpleNamespace(ping=lambda: {"worker@a": {"ok": "pong"}, "worker@b": {"ok": "pong"}})
    fake_control = SimpleNamespace(inspect=lambda timeout: inspector)
    monkeypatch.setattr(health_routes, "celery_app", SimpleNamespace(control=fake_control))

    assert health_routes._check_celery_worker_sync() == {"status": "ok", "workers": 2}
