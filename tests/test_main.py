from fastapi.testclient import TestClient

import main


def test_root():
    assert TestClient(main.app).get("/").json() == {"message": "Pesantren CMS API running"}


def test_database_report_without_database():
    body = TestClient(main.app).get("/test").json()
    assert body["backend"] == "✅ Running"
    assert body["database"] == "❌ Not Available"
    assert body["collections"] == []


def test_routes_answer_503_without_database():
    response = TestClient(main.app).get("/api/news")
    assert response.status_code == 503
    assert response.json() == {"success": False, "error": "Database not available"}


def test_startup_without_database_url():
    with TestClient(main.app) as client:
        assert client.get("/").status_code == 200


def test_unknown_route_uses_error_envelope():
    response = TestClient(main.app).get("/api/nope")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Not Found"}
