import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from auth import get_current_admin
from database import create_document, get_db
from media import delete_asset
from schemas import BlogAuthor, BlogCreate, BlogPost, BlogUpdate, Seo
from utils import oid, paginated_find, read_time, search_filter, slugify, sort_spec, to_str_id

from routes.common import find_or_404, merge_and_save, view_published

logger = logging.getLogger(__name__)

router = APIRouter(tags=["blog"])

COLLECTION = "blog"
DEFAULT_FEATURED_IMAGE = "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=800&h=400&fit=crop"
LIST_FIELDS = {
    "title": 1, "slug": 1, "excerpt": 1, "featured_image": 1, "author": 1,
    "category": 1, "published_at": 1, "views": 1, "tags": 1, "read_time": 1,
}


@router.get("/api/blog")
def list_published_posts(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: Database = Depends(get_db),
):
    query = {"status": "published"}
    query.update(search_filter(search, ["title", "excerpt", "content"]))
    if category:
        query["category"] = category
    items, page_info = paginated_find(
        db[COLLECTION], query, page, limit, [("published_at", -1), ("created_at", -1)], LIST_FIELDS
    )
    return {"success": True, "data": {"blogs": items, "pagination": page_info}}


@router.get("/api/blog/{slug}")
def get_published_post(slug: str, db: Database = Depends(get_db)):
    doc = view_published(db, COLLECTION, slug, "views", "Blog")
    return {"success": True, "data": to_str_id(doc)}


@router.get("/api/admin/blog")
def admin_list_posts(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
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
    sort = sort_spec(sortBy, sortOrder, ["created_at", "published_at", "title", "views"], "created_at")
    items, page_info = paginated_find(db[COLLECTION], query, page, limit, sort)
    return {"success": True, "data": {"data": items, "pagination": page_info}}


@router.get("/api/admin/blog/{post_id}")
def admin_get_post(post_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    return {"success": True, "data": to_str_id(find_or_404(db, COLLECTION, post_id, "Blog"))}


@router.post("/api/admin/blog", status_code=201)
def admin_create_post(payload: BlogCreate, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    data = payload.model_dump()
    data.update(
        slug=payload.slug or slugify(payload.title),
        featured_image=payload.featured_image or DEFAULT_FEATURED_IMAGE,
        author=payload.author or BlogAuthor(),
        seo=payload.seo or Seo(),
        read_time=read_time(payload.content),
        published_at=datetime.now(timezone.utc) if payload.status == "published" else None,
    )
    post_id = create_document(db, COLLECTION, BlogPost(**data))
    logger.info("Blog post %s created by %s", post_id, admin["email"])
    return {"success": True, "data": to_str_id(db[COLLECTION].find_one({"_id": oid(post_id)})),
            "message": "Blog created successfully"}


@router.put("/api/admin/blog/{post_id}")
def admin_update_post(post_id: str, payload: BlogUpdate, db: Database = Depends(get_db),
                      admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(post_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Blog not found")

    updates = payload.model_dump(exclude_unset=True)
    if "content" in updates and updates["content"] != existing.get("content"):
        updates["read_time"] = read_time(updates["content"] or "")
    if updates.get("status") == "published" and not existing.get("published_at"):
        updates["published_at"] = datetime.now(timezone.utc)

    saved = merge_and_save(db, COLLECTION, BlogPost, existing, updates)
    if "featured_image" in updates and updates["featured_image"] != existing.get("featured_image"):
        delete_asset(existing.get("featured_image"))
    return {"success": True, "data": saved, "message": "Blog updated successfully"}


@router.delete("/api/admin/blog/{post_id}")
def admin_delete_post(post_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(post_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Blog not found")
    delete_asset(existing.get("featured_image"))
    db[COLLECTION].delete_one({"_id": existing["_id"]})
    return {"success": True, "message": "Blog deleted successfully"}
