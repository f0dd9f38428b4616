import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from auth import get_current_admin
from database import create_document, get_db
from media import delete_assets
from schemas import AlbumItem, GalleryCreate, GalleryItem, GalleryItemInput, GalleryUpdate, MediaContent, Seo
from utils import (extract_youtube_id, oid, paginated_find, search_filter, slugify, sort_spec, to_str_id,
                   youtube_thumbnail)

from routes.common import find_or_404, merge_and_save, view_published

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gallery"])

COLLECTION = "gallery"


def build_album_items(inputs: List[GalleryItemInput]) -> List[AlbumItem]:
    items = []
    for index, item in enumerate(inputs):
        youtube_id = None
        if item.type == "youtube":
            youtube_id = extract_youtube_id(item.url)
            if not youtube_id:
                raise HTTPException(status_code=400, detail="Invalid YouTube URL")
        items.append(AlbumItem(
            type=item.type,
            url=item.url,
            caption=item.caption,
            alt_text=item.alt_text,
            youtube_id=youtube_id,
            order=item.order if item.order is not None else index,
        ))
    return sorted(items, key=lambda i: i.order)


def build_video_content(youtube_url: Optional[str], caption=None, alt_text=None) -> MediaContent:
    youtube_id = extract_youtube_id(youtube_url)
    if not youtube_id:
        raise HTTPException(status_code=400, detail="Invalid YouTube URL")
    return MediaContent(type="youtube", url=youtube_url, youtube_id=youtube_id, caption=caption, alt_text=alt_text)


def media_urls(doc: dict) -> List[str]:
    """Every hosted image referenced by a gallery document."""
    urls = [doc.get("cover_image")]
    content = doc.get("content") or {}
    if content.get("type") == "image":
        urls.append(content.get("url"))
    for item in doc.get("items") or []:
        if item.get("type") == "image":
            urls.append(item.get("url"))
    return list(dict.fromkeys(u for u in urls if u))


@router.get("/api/gallery")
def list_published_gallery(
    page: int = 1,
    limit: int = 12,
    search: Optional[str] = None,
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    db: Database = Depends(get_db),
):
    query = {"status": "published"}
    if category and category != "All":
        query["category"] = category
    if featured:
        query["featured"] = True
    query.update(search_filter(search, ["title", "description", "tags"]))
    items, page_info = paginated_find(db[COLLECTION], query, page, limit, [("featured", -1), ("created_at", -1)])
    return {"success": True, "data": {"data": items, "pagination": page_info}}


@router.get("/api/gallery/{slug}")
def get_published_gallery_item(slug: str, db: Database = Depends(get_db)):
    doc = view_published(db, COLLECTION, slug, "view_count", "Gallery item")
    return {"success": True, "data": to_str_id(doc)}


@router.get("/api/admin/gallery")
def admin_list_gallery(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    type: Optional[str] = None,
    sortBy: str = "created_at",
    sortOrder: str = "desc",
    db: Database = Depends(get_db),
    admin=Depends(get_current_admin),
):
    query = search_filter(search, ["title", "description", "tags"])
    if status and status != "all":
        query["status"] = status
    if category and category != "all":
        query["category"] = category
    if type and type != "all":
        query["type"] = type
    sort = sort_spec(sortBy, sortOrder, ["created_at", "title", "view_count"], "created_at")
    items, page_info = paginated_find(db[COLLECTION], query, page, limit, sort)
    return {"success": True, "data": {"data": items, "pagination": page_info}}


@router.get("/api/admin/gallery/{item_id}")
def admin_get_gallery_item(item_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    return {"success": True, "data": to_str_id(find_or_404(db, COLLECTION, item_id, "Gallery item"))}


@router.post("/api/admin/gallery", status_code=201)
def admin_create_gallery_item(payload: GalleryCreate, db: Database = Depends(get_db),
                              admin=Depends(get_current_admin)):
    content = None
    items = []
    cover_image = payload.cover_image

    if payload.type == "image":
        url = payload.image_url or payload.cover_image
        if not url:
            raise HTTPException(status_code=400, detail="Image URL is required")
        content = MediaContent(type="image", url=url, caption=payload.caption, alt_text=payload.alt_text)
        cover_image = cover_image or url
    elif payload.type == "video":
        if not payload.youtube_url:
            raise HTTPException(status_code=400, detail="YouTube URL is required for video items")
        content = build_video_content(payload.youtube_url, payload.caption, payload.alt_text)
        cover_image = cover_image or youtube_thumbnail(content.youtube_id)
    else:
        if not payload.items:
            raise HTTPException(status_code=400, detail="Album requires at least one item")
        items = build_album_items(payload.items)
        if not cover_image:
            first = items[0]
            cover_image = youtube_thumbnail(first.youtube_id) if first.type == "youtube" else first.url

    gallery_item = GalleryItem(
        title=payload.title,
        slug=slugify(payload.title),
        description=payload.description,
        type=payload.type,
        cover_image=cover_image,
        content=content,
        items=items,
        category=payload.category,
        tags=payload.tags,
        status=payload.status,
        featured=payload.featured,
        seo=payload.seo or Seo(),
    )
    item_id = create_document(db, COLLECTION, gallery_item)
    logger.info("Gallery item %s (%s) created by %s", item_id, payload.type, admin["email"])
    return {"success": True, "data": to_str_id(db[COLLECTION].find_one({"_id": oid(item_id)})),
            "message": "Gallery item created successfully"}


@router.put("/api/admin/gallery/{item_id}")
def admin_update_gallery_item(item_id: str, payload: GalleryUpdate, db: Database = Depends(get_db),
                              admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(item_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Gallery item not found")

    updates = payload.model_dump(exclude_unset=True, exclude={"image_url", "youtube_url", "items", "caption", "alt_text"})
    kind = existing.get("type", "image")
    if kind == "image" and payload.image_url:
        updates["content"] = MediaContent(
            type="image", url=payload.image_url, caption=payload.caption, alt_text=payload.alt_text
        ).model_dump()
    elif kind == "video" and payload.youtube_url:
        updates["content"] = build_video_content(payload.youtube_url, payload.caption, payload.alt_text).model_dump()
    elif kind == "album" and payload.items is not None:
        if not payload.items:
            raise HTTPException(status_code=400, detail="Album requires at least one item")
        updates["items"] = [i.model_dump() for i in build_album_items(payload.items)]

    saved = merge_and_save(db, COLLECTION, GalleryItem, existing, updates)

    still_used = set(media_urls(saved))
    delete_assets(u for u in media_urls(existing) if u not in still_used)
    return {"success": True, "data": saved, "message": "Gallery item updated successfully"}


@router.delete("/api/admin/gallery/{item_id}")
def admin_delete_gallery_item(item_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(item_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Gallery item not found")
    delete_assets(media_urls(existing))
    db[COLLECTION].delete_one({"_id": existing["_id"]})
    return {"success": True, "message": "Gallery item deleted successfully"}
