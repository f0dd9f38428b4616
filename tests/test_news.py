NEWS = {
    "title": "Santri Juara Olimpiade Sains",
    "excerpt": "Tim santri meraih medali emas.",
    "content": "<p>Alhamdulillah, tim santri meraih medali emas.</p>",
    "category": "Prestasi",
}


def create_news(client, **overrides):
    response = client.post("/api/admin/news", json={**NEWS, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_news_derives_slug_and_defaults(client):
    news = create_news(client)
    assert news["slug"] == "santri-juara-olimpiade-sains"
    assert news["status"] == "draft"
    assert news["published_at"] is None
    assert news["views"] == 0
    assert news["author"]["name"] == "Admin"
    assert news["created_at"]


def test_publishing_sets_published_at(client):
    news = create_news(client, status="published")
    assert news["published_at"] is not None

    draft = create_news(client, title="Kabar Lain")
    response = client.put(f"/api/admin/news/{draft['id']}", json={"status": "published"})
    assert response.status_code == 200
    assert response.json()["data"]["published_at"] is not None


def test_public_list_only_shows_published(client):
    create_news(client, status="published")
    create_news(client, title="Masih Draft")

    body = client.get("/api/news").json()
    assert body["success"] is True
    titles = [n["title"] for n in body["data"]["news"]]
    assert titles == [NEWS["title"]]
    assert body["data"]["pagination"]["total"] == 1
    assert body["data"]["categories"] == ["Prestasi"]


def test_public_detail_increments_views_and_lists_related(client, db):
    create_news(client, status="published")
    create_news(client, title="Berita Terkait", status="published")

    response = client.get("/api/news/santri-juara-olimpiade-sains")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["views"] == 1
    assert [r["slug"] for r in data["related_news"]] == ["berita-terkait"]
    assert db["news"].find_one({"slug": "santri-juara-olimpiade-sains"})["views"] == 1


def test_draft_is_not_public(client):
    create_news(client)
    response = client.get("/api/news/santri-juara-olimpiade-sains")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "News not found"}


def test_update_title_rederives_slug(client):
    news = create_news(client)
    response = client.put(f"/api/admin/news/{news['id']}", json={"title": "Judul Baru"})
    assert response.json()["data"]["slug"] == "judul-baru"


def test_invalid_priority_is_rejected(client):
    news = create_news(client)
    response = client.put(f"/api/admin/news/{news['id']}", json={"priority": 9})
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"
    assert "priority" in response.json()["details"]


def test_duplicate_title_conflicts(client):
    create_news(client)
    response = client.post("/api/admin/news", json=NEWS)
    assert response.status_code == 409
    assert response.json()["success"] is False


def test_delete_news(client, db):
    news = create_news(client)
    assert client.delete(f"/api/admin/news/{news['id']}").status_code == 200
    assert db["news"].count_documents({}) == 0
    assert client.delete(f"/api/admin/news/{news['id']}").status_code == 404


def test_malformed_id_is_400(client):
    response = client.put("/api/admin/news/not-an-id", json={"title": "x"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid id format"


def test_missing_required_field_persists_nothing(client, db):
    payload = {k: v for k, v in NEWS.items() if k != "title"}
    response = client.post("/api/admin/news", json=payload)
    assert response.status_code == 400
    assert "title" in response.json()["details"]
    assert db["news"].count_documents({}) == 0
