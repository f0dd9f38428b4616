import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from auth import get_current_admin
from database import create_document, get_db
from media import delete_asset
from schemas import News, NewsAuthor, NewsCreate, NewsUpdate
from utils import oid, paginated_find, search_filter, slugify, sort_spec, to_str_id

from routes.common import find_or_404, merge_and_save, view_published

logger = logging.getLogger(__name__)

router = APIRouter(tags=["news"])

COLLECTION = "news"
SLUG_MAX_LENGTH = 100
SORTABLE = ["created_at", "published_at", "title", "views", "priority"]


# Public

@router.get("/api/news")
def list_published_news(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    sortBy: str = "published_at",
    sortOrder: str = "desc",
    db: Database = Depends(get_db),
):
    query = {"status": "published"}
    query.update(search_filter(search, ["title", "excerpt", "content", "tags"]))
    if category and category != "all":
        query["category"] = category
    if featured:
        query["featured"] = True

    items, page_info = paginated_find(
        db[COLLECTION], query, page, limit, sort_spec(sortBy, sortOrder, SORTABLE, "published_at")
    )
    categories = db[COLLECTION].distinct("category", {"status": "published"})
    return {"success": True, "data": {"news": items, "pagination": page_info, "categories": categories}}


@router.get("/api/news/{slug}")
def get_published_news(slug: str, db: Database = Depends(get_db)):
    doc = view_published(db, COLLECTION, slug, "views", "News")

    related = db[COLLECTION].find(
        {"category": doc.get("category"), "status": "published", "_id": {"$ne": doc["_id"]}},
        {"title": 1, "slug": 1, "excerpt": 1, "image": 1, "published_at": 1, "category": 1},
    ).sort("published_at", -1).limit(3)

    data = to_str_id(doc)
    data["related_news"] = [to_str_id(r) for r in related]
    return {"success": True, "data": data}


# Admin

@router.get("/api/admin/news")
def admin_list_news(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[int] = None,
    sortBy: str = "created_at",
    sortOrder: str = "desc",
    db: Database = Depends(get_db),
    admin=Depends(get_current_admin),
):
    query = search_filter(search, ["title", "excerpt", "author.name"])
    if status:
        query["status"] = status
    if category:
        query["category"] = category
    if priority:
        query["priority"] = priority

    items, page_info = paginated_find(
        db[COLLECTION], query, page, limit, sort_spec(sortBy, sortOrder, SORTABLE, "created_at")
    )
    return {"success": True, "data": {"data": items, "pagination": page_info}}


@router.get("/api/admin/news/{news_id}")
def admin_get_news(news_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    return {"success": True, "data": to_str_id(find_or_404(db, COLLECTION, news_id, "News"))}


@router.post("/api/admin/news", status_code=201)
def admin_create_news(payload: NewsCreate, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    data = payload.model_dump()
    data["author"] = payload.author or NewsAuthor()
    news = News(
        **data,
        slug=slugify(payload.title, SLUG_MAX_LENGTH),
        published_at=datetime.now(timezone.utc) if payload.status == "published" else None,
    )
    news_id = create_document(db, COLLECTION, news)
    logger.info("News %s created by %s", news_id, admin["email"])
    return {"success": True, "data": to_str_id(db[COLLECTION].find_one({"_id": oid(news_id)}))}


@router.put("/api/admin/news/{news_id}")
def admin_update_news(news_id: str, payload: NewsUpdate, db: Database = Depends(get_db),
                      admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(news_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="News not found")

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("title"):
        updates["slug"] = slugify(updates["title"], SLUG_MAX_LENGTH)
    if updates.get("status") == "published" and existing.get("status") != "published":
        updates["published_at"] = datetime.now(timezone.utc)

    saved = merge_and_save(db, COLLECTION, News, existing, updates)
    if "image" in updates and updates["image"] != existing.get("image"):
        delete_asset(existing.get("image"))
    return {"success": True, "data": saved}


@router.delete("/api/admin/news/{news_id}")
def admin_delete_news(news_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(news_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="News not found")
    delete_asset(existing.get("image"))
    db[COLLECTION].delete_one({"_id": existing["_id"]})
    return {"success": True, "message": "News deleted successfully"}
