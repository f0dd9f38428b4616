import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from auth import get_current_admin
from database import create_document, get_db
from media import delete_asset
from schemas import Event, EventCreate, EventUpdate, Organizer, Seo
from utils import oid, paginated_find, search_filter, slugify, to_str_id

from routes.common import find_or_404, merge_and_save

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])

COLLECTION = "event"
LIST_FIELDS = {
    "title": 1, "slug": 1, "description": 1, "featured_image": 1, "date": 1, "time": 1,
    "location": 1, "category": 1, "tags": 1, "registration_open": 1, "capacity": 1,
    "registered": 1, "price": 1, "currency": 1,
}


def _now():
    # stored datetimes come back naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


@router.get("/api/events")
def list_published_events(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    category: Optional[str] = None,
    upcoming: bool = False,
    db: Database = Depends(get_db),
):
    query = {"status": "published"}
    query.update(search_filter(search, ["title", "description", "location", "tags"]))
    if category:
        query["category"] = category
    if upcoming:
        query["date"] = {"$gte": _now()}
    items, page_info = paginated_find(db[COLLECTION], query, page, limit, [("date", 1)], LIST_FIELDS)
    return {"success": True, "data": {"events": items, "pagination": page_info}}


@router.get("/api/events/{slug}")
def get_published_event(slug: str, db: Database = Depends(get_db)):
    event = db[COLLECTION].find_one({"slug": slug, "status": "published"})
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    related = db[COLLECTION].find(
        {
            "category": event.get("category"),
            "status": "published",
            "_id": {"$ne": event["_id"]},
            "date": {"$gte": _now()},
        },
        {"title": 1, "slug": 1, "description": 1, "featured_image": 1, "date": 1, "time": 1, "location": 1},
    ).sort("date", 1).limit(3)
    return {"success": True, "data": {"event": to_str_id(event), "related_events": [to_str_id(r) for r in related]}}


@router.get("/api/admin/events")
def admin_list_events(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    db: Database = Depends(get_db),
    admin=Depends(get_current_admin),
):
    query = search_filter(search, ["title", "description", "location"])
    if status:
        query["status"] = status
    if category:
        query["category"] = category
    items, page_info = paginated_find(db[COLLECTION], query, page, limit, [("date", -1)])
    return {"success": True, "data": {"data": items, "pagination": page_info}}


@router.get("/api/admin/events/{event_id}")
def admin_get_event(event_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    return {"success": True, "data": to_str_id(find_or_404(db, COLLECTION, event_id, "Event"))}


@router.post("/api/admin/events", status_code=201)
def admin_create_event(payload: EventCreate, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    data = payload.model_dump()
    data.update(
        slug=payload.slug or slugify(payload.title),
        registered=0,
        organizer=payload.organizer or Organizer(),
        seo=payload.seo or Seo(),
    )
    event_id = create_document(db, COLLECTION, Event(**data))
    logger.info("Event %s created by %s", event_id, admin["email"])
    return {"success": True, "data": to_str_id(db[COLLECTION].find_one({"_id": oid(event_id)})),
            "message": "Event created successfully"}


@router.put("/api/admin/events/{event_id}")
def admin_update_event(event_id: str, payload: EventUpdate, db: Database = Depends(get_db),
                       admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(event_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Event not found")
    updates = payload.model_dump(exclude_unset=True)
    saved = merge_and_save(db, COLLECTION, Event, existing, updates)
    if "featured_image" in updates and updates["featured_image"] != existing.get("featured_image"):
        delete_asset(existing.get("featured_image"))
    return {"success": True, "data": saved, "message": "Event updated successfully"}


@router.delete("/api/admin/events/{event_id}")
def admin_delete_event(event_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(event_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Event not found")
    delete_asset(existing.get("featured_image"))
    db[COLLECTION].delete_one({"_id": existing["_id"]})
    return {"success": True, "message": "Event deleted successfully"}
