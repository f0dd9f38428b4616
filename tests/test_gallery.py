import media

IMAGE_URL = "https://res.cloudinary.com/demo/image/upload/v17/pesantren/gallery/apel.jpg"


def create_item(client, **payload):
    body = {"category": "Events", "status": "published", **payload}
    response = client.post("/api/admin/gallery", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_image_item_uses_image_as_cover(client):
    item = create_item(client, title="Apel Pagi", image_url=IMAGE_URL)
    assert item["type"] == "image"
    assert item["cover_image"] == IMAGE_URL
    assert item["content"]["url"] == IMAGE_URL


def test_image_item_requires_url(client):
    response = client.post("/api/admin/gallery", json={"title": "Kosong", "category": "Events"})
    assert response.status_code == 400
    assert response.json()["error"] == "Image URL is required"


def test_video_item_takes_youtube_thumbnail(client):
    item = create_item(client, title="Profil Pondok", type="video", category="Videos",
                       youtube_url="https://youtu.be/dQw4w9WgXcQ")
    assert item["content"]["youtube_id"] == "dQw4w9WgXcQ"
    assert item["cover_image"] == "https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg"


def test_video_item_with_bad_url_is_rejected(client):
    response = client.post("/api/admin/gallery", json={
        "title": "Salah", "category": "Videos", "type": "video", "youtube_url": "https://vimeo.com/1",
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid YouTube URL"


def test_album_items_are_ordered(client):
    item = create_item(client, title="Wisuda", type="album", items=[
        {"url": "https://example.org/b.jpg", "order": 2},
        {"url": "https://example.org/a.jpg", "order": 1},
    ])
    assert [i["url"] for i in item["items"]] == ["https://example.org/a.jpg", "https://example.org/b.jpg"]
    assert item["cover_image"] == "https://example.org/a.jpg"


def test_empty_album_is_rejected(client):
    response = client.post("/api/admin/gallery", json={
        "title": "Album Kosong", "category": "Events", "type": "album", "items": [],
    })
    assert response.status_code == 400


def test_public_list_filters_and_puts_featured_first(client):
    create_item(client, title="Lomba Pidato", category="Events", image_url=IMAGE_URL)
    create_item(client, title="Pawai Muharram", category="Events", image_url=IMAGE_URL, featured=True)
    create_item(client, title="Sepak Bola", category="Sports", image_url=IMAGE_URL)
    create_item(client, title="Draft Foto", category="Events", image_url=IMAGE_URL, status="draft")

    body = client.get("/api/gallery", params={"category": "Events", "limit": 12}).json()
    titles = [i["title"] for i in body["data"]["data"]]
    assert titles == ["Pawai Muharram", "Lomba Pidato"]
    assert body["data"]["pagination"]["limit"] == 12

    everything = client.get("/api/gallery", params={"category": "All"}).json()
    assert everything["data"]["pagination"]["total"] == 3


def test_public_status_param_cannot_expose_drafts(client):
    create_item(client, title="Draft Foto", image_url=IMAGE_URL, status="draft")
    body = client.get("/api/gallery", params={"status": "draft"}).json()
    assert body["data"]["data"] == []


def test_detail_counts_views(client, db):
    create_item(client, title="Apel Pagi", image_url=IMAGE_URL)
    first = client.get("/api/gallery/apel-pagi")
    assert first.status_code == 200
    assert first.json()["data"]["view_count"] == 1
    assert client.get("/api/gallery/apel-pagi").json()["data"]["view_count"] == 2
    assert db["gallery"].find_one({"slug": "apel-pagi"})["view_count"] == 2


def test_replacing_image_deletes_old_asset(client, monkeypatch):
    deleted = []
    monkeypatch.setattr(media, "delete_asset", lambda url, resource_type="image": deleted.append(url))
    item = create_item(client, title="Apel Pagi", image_url=IMAGE_URL)

    new_url = "https://res.cloudinary.com/demo/image/upload/v18/pesantren/gallery/apel-baru.jpg"
    response = client.put(f"/api/admin/gallery/{item['id']}", json={"image_url": new_url, "cover_image": new_url})
    assert response.status_code == 200
    assert response.json()["data"]["content"]["url"] == new_url
    assert deleted == [IMAGE_URL]


def test_delete_removes_document(client, db):
    item = create_item(client, title="Apel Pagi", image_url=IMAGE_URL)
    assert client.delete(f"/api/admin/gallery/{item['id']}").status_code == 200
    assert db["gallery"].count_documents({}) == 0
