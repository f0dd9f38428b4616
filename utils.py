import math
import re
import secrets
import time
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from fastapi import HTTPException
from pymongo.collection import Collection

YOUTUBE_PATTERNS = [
    re.compile(r'(?:https?://)?(?:www\.)?youtube\.com/watch\?v=([a-zA-Z0-9_-]{11})'),
    re.compile(r'(?:https?://)?youtu\.be/([a-zA-Z0-9_-]{11})'),
    re.compile(r'(?:https?://)?(?:www\.)?youtube\.com/embed/([a-zA-Z0-9_-]{11})'),
    re.compile(r'(?:https?://)?(?:www\.)?youtube\.com/watch\?.*&v=([a-zA-Z0-9_-]{11})'),
]

WORDS_PER_MINUTE = 200


def to_str_id(doc: Optional[dict]):
    if not doc:
        return doc
    d = dict(doc)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    # convert datetime to iso
    for k, v in list(d.items()):
        if isinstance(v, datetime):
            d[k] = v.isoformat()
        elif isinstance(v, ObjectId):
            d[k] = str(v)
    return d


def oid(id_str: str) -> ObjectId:
    if not ObjectId.is_valid(id_str):
        raise HTTPException(status_code=400, detail="Invalid id format")
    return ObjectId(id_str)


def id_or_slug_filter(value: str) -> dict:
    if ObjectId.is_valid(value):
        return {"_id": ObjectId(value)}
    return {"slug": value}


def slugify(title: str, max_length: Optional[int] = None) -> str:
    """lowercase, keep [a-z0-9], whitespace and '-', collapse to single hyphens"""
    slug = title.lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'-+', '-', slug).strip('-')
    if max_length:
        slug = slug[:max_length].rstrip('-')
    return slug


def read_time(content: str) -> int:
    """Minutes to read at 200 words per minute, rounded up."""
    words = len(content.split())
    return math.ceil(words / WORDS_PER_MINUTE)


def generate_receipt_number() -> str:
    return f"RCP-{int(time.time() * 1000)}-{secrets.token_hex(5).upper()[:9]}"


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    for pattern in YOUTUBE_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def youtube_thumbnail(video_id: str) -> str:
    return f"https://img.youtube.com/vi/{video_id}/hqdefault.jpg"


def search_filter(search: Optional[str], fields: List[str]) -> dict:
    if not search:
        return {}
    pattern = re.escape(search)
    return {"$or": [{f: {"$regex": pattern, "$options": "i"}} for f in fields]}


def pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def paginated_find(collection: Collection, query: dict, page: int, limit: int, sort,
                   projection: Optional[dict] = None):
    """Run a page of `query`. Returns (items, pagination dict)."""
    page = max(page, 1)
    limit = max(limit, 1)
    total = collection.count_documents(query)
    cursor = collection.find(query, projection).sort(sort).skip((page - 1) * limit).limit(limit)
    items = [to_str_id(d) for d in cursor]
    return items, pagination(page, limit, total)


def sort_spec(sort_by: str, sort_order: str, allowed: List[str], default: str):
    field = sort_by if sort_by in allowed else default
    return [(field, 1 if sort_order == "asc" else -1)]
