from datetime import datetime

import pytest
from bson import ObjectId
from fastapi import HTTPException

from cache import TTLCache
from utils import (extract_youtube_id, generate_receipt_number, oid, pagination, read_time, search_filter,
                   slugify, to_str_id)


@pytest.mark.parametrize("title, expected", [
    ("Hello World!", "hello-world"),
    ("  Santri   Berprestasi  ", "santri-berprestasi"),
    ("Ramadhan -- 1446 H", "ramadhan-1446-h"),
    ("Ma'had & Madrasah", "mahad-madrasah"),
    ("---", ""),
])
def test_slugify(title, expected):
    assert slugify(title) == expected


def test_slugify_is_idempotent():
    slug = slugify("Wisuda Tahfidz Angkatan 12")
    assert slugify(slug) == slug


def test_slugify_max_length_does_not_end_with_hyphen():
    slug = slugify("abcd efgh", max_length=5)
    assert slug == "abcd"


def test_read_time_rounds_up():
    assert read_time("word " * 200) == 1
    assert read_time("word " * 201) == 2
    assert read_time("") == 0


def test_receipt_number_format_and_uniqueness():
    first, second = generate_receipt_number(), generate_receipt_number()
    assert first.startswith("RCP-")
    assert first != second


@pytest.mark.parametrize("url", [
    "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
    "https://youtu.be/dQw4w9WgXcQ",
    "https://www.youtube.com/embed/dQw4w9WgXcQ",
    "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
])
def test_extract_youtube_id(url):
    assert extract_youtube_id(url) == "dQw4w9WgXcQ"


def test_extract_youtube_id_rejects_other_urls():
    assert extract_youtube_id("https://vimeo.com/123") is None
    assert extract_youtube_id(None) is None


def test_search_filter_escapes_regex():
    query = search_filter("a+b", ["title", "content"])
    assert query == {"$or": [
        {"title": {"$regex": r"a\+b", "$options": "i"}},
        {"content": {"$regex": r"a\+b", "$options": "i"}},
    ]}
    assert search_filter("", ["title"]) == {}


def test_pagination_pages():
    assert pagination(2, 10, 25) == {"page": 2, "limit": 10, "total": 25, "pages": 3}


def test_to_str_id_converts_ids_and_dates():
    _id, other = ObjectId(), ObjectId()
    doc = to_str_id({"_id": _id, "ref": other, "created_at": datetime(2024, 1, 2, 3, 4, 5)})
    assert doc == {"id": str(_id), "ref": str(other), "created_at": "2024-01-02T03:04:05"}


def test_oid_rejects_malformed_ids():
    with pytest.raises(HTTPException) as exc:
        oid("not-an-id")
    assert exc.value.status_code == 400


def test_ttl_cache_expires_after_ttl():
    now = [0.0]
    cache = TTLCache(ttl=30, clock=lambda: now[0])
    cache.set("k", {"v": 1})
    now[0] = 29.9
    assert cache.get("k") == {"v": 1}
    now[0] = 30
    assert cache.get("k") is None
