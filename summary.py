"""
Admin dashboard summary

One payload with content counts, donation totals, the admin user count and
the 8 most recent news/blog/event documents. The store reads are independent
and run concurrently; any single read that fails counts as zero (or an empty
list) instead of failing the whole summary.

The composed payload is kept in a TTL cache for SUMMARY_TTL_SECONDS. Writes
elsewhere never invalidate it, so the dashboard may lag by up to that long.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, List

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pymongo.database import Database

from auth import get_current_admin
from cache import TTLCache
from database import get_db_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["summary"])

SUMMARY_TTL_SECONDS = 30
CACHE_KEY = "admin-summary"
RECENT_PER_TYPE = 5
RECENT_LIMIT = 8

COUNTED = [
    ("news", "news"),
    ("blogs", "blog"),
    ("events", "event"),
    ("gallery", "gallery"),
    ("testimonials", "testimonial"),
]
RECENT_SOURCES = [("news", "news"), ("blog", "blog"), ("event", "event")]


def new_summary_cache() -> TTLCache:
    return TTLCache(ttl=SUMMARY_TTL_SECONDS)


def get_summary_cache(request: Request) -> TTLCache:
    return request.app.state.summary_cache


async def _best_effort(label: str, fn: Callable[[], Any], fallback):
    try:
        return await run_in_threadpool(fn)
    except Exception as e:
        logger.warning("Summary query %s failed, using %r: %s", label, fallback, e)
        return fallback


def _recent(db: Database, collection_name: str, kind: str) -> List[dict]:
    cursor = db[collection_name].find(
        {}, {"title": 1, "name": 1, "slug": 1, "created_at": 1}
    ).sort("created_at", -1).limit(RECENT_PER_TYPE)
    return [dict(doc, type=kind) for doc in cursor]


def _created_ts(doc: dict) -> float:
    created = doc.get("created_at")
    if isinstance(created, datetime):
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return created.timestamp()
    return 0.0


def _iso(value) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    return datetime.now(timezone.utc).isoformat()


def merge_recent(groups: List[List[dict]], limit: int = RECENT_LIMIT) -> List[dict]:
    """Newest first across all groups; documents without created_at sort last."""
    merged = [doc for group in groups for doc in group if doc]
    merged.sort(key=_created_ts, reverse=True)
    return [
        {
            "id": str(doc["_id"]),
            "type": doc["type"],
            "title": doc.get("title") or doc.get("name") or doc.get("slug") or "(untitled)",
            "created_at": _iso(doc.get("created_at")),
        }
        for doc in merged[:limit]
    ]


async def build_summary(db: Database) -> dict:
    count_tasks = [
        _best_effort(label, lambda name=name: db[name].count_documents({}), 0)
        for label, name in COUNTED
    ]
    donation_task = _best_effort(
        "donations", lambda: list(db["donation"].find({}, {"amount": 1})), []
    )
    users_task = _best_effort("users", lambda: db["admin_user"].count_documents({}), 0)

    *counts, donation_docs, user_count = await asyncio.gather(*count_tasks, donation_task, users_task)

    amounts = [d.get("amount") for d in donation_docs]
    total_amount = sum(a for a in amounts if isinstance(a, (int, float)) and not isinstance(a, bool))

    recent_groups = await asyncio.gather(*[
        _best_effort(f"recent {kind}", lambda name=name, kind=kind: _recent(db, name, kind), [])
        for kind, name in RECENT_SOURCES
    ])

    return {
        "success": True,
        "stats": {
            "content": {label: count for (label, _), count in zip(COUNTED, counts)},
            "donations": {"count": len(donation_docs), "total_amount": total_amount},
            "users": user_count,
        },
        "recent": merge_recent(recent_groups),
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/summary")
async def admin_summary(
    db_provider: Callable[[], Database] = Depends(get_db_provider),
    cache: TTLCache = Depends(get_summary_cache),
    admin=Depends(get_current_admin),
):
    cached = cache.get(CACHE_KEY)
    if cached is not None:
        return {**cached, "cached": True}
    db = db_provider()
    try:
        data = await build_summary(db)
    except Exception:
        logger.exception("Failed to build admin summary")
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to load summary"})
    cache.set(CACHE_KEY, data)
    return data
