import logging
import math
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from auth import get_current_admin
from database import create_document, get_db
from media import delete_asset
from schemas import Testimonial, TestimonialCreate, TestimonialSubmit, TestimonialUpdate
from utils import oid, paginated_find, search_filter, to_str_id

from routes.common import merge_and_save

logger = logging.getLogger(__name__)

router = APIRouter(tags=["testimonials"])

COLLECTION = "testimonial"
MIN_CONTENT_LENGTH = 50
MAX_CONTENT_LENGTH = 300
PRIVATE_FIELDS = {"email": 0, "phone": 0, "approved_by": 0}


def check_content_length(content: str):
    length = len(content.strip())
    if length < MIN_CONTENT_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Testimonial must be at least {MIN_CONTENT_LENGTH} characters",
        )
    if length > MAX_CONTENT_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Testimonial must be at most {MAX_CONTENT_LENGTH} characters",
        )


@router.get("/api/testimonials")
def list_approved_testimonials(
    page: int = 1,
    limit: int = 9,
    category: Optional[str] = None,
    featured: bool = False,
    db: Database = Depends(get_db),
):
    query = {"status": "approved"}
    if category and category != "all":
        query["category"] = category
    if featured:
        query["featured"] = True
    items, page_info = paginated_find(
        db[COLLECTION], query, page, limit, [("featured", -1), ("created_at", -1)], PRIVATE_FIELDS
    )
    page_info["has_more"] = page_info["page"] < math.ceil(page_info["total"] / page_info["limit"])
    return {"success": True, "data": items, "pagination": page_info}


@router.post("/api/testimonials/submit", status_code=201)
def submit_testimonial(payload: TestimonialSubmit, db: Database = Depends(get_db)):
    if not payload.name.strip() or not payload.content.strip():
        raise HTTPException(status_code=400, detail="Name and testimonial content are required")
    check_content_length(payload.content)

    testimonial = Testimonial(
        name=payload.name.strip(),
        role=payload.position or "Visitor",
        content=payload.content.strip(),
        rating=payload.rating,
        avatar=payload.avatar,
        category=payload.category,
        email=payload.email,
        phone=payload.phone,
        location=payload.location,
        # public submissions always wait for moderation
        status="pending",
        featured=False,
        source="public",
    )
    testimonial_id = create_document(db, COLLECTION, testimonial)
    logger.info("Public testimonial %s submitted", testimonial_id)
    return {
        "success": True,
        "data": to_str_id(db[COLLECTION].find_one({"_id": oid(testimonial_id)})),
        "message": "Testimonial submitted. It will appear once approved by an admin.",
    }


@router.get("/api/admin/testimonials")
def admin_list_testimonials(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    db: Database = Depends(get_db),
    admin=Depends(get_current_admin),
):
    query = search_filter(search, ["name", "content", "role"])
    if status:
        query["status"] = status
    if category:
        query["category"] = category
    items, page_info = paginated_find(db[COLLECTION], query, page, limit, [("created_at", -1)])
    return {"success": True, "data": {"data": items, "pagination": page_info}}


@router.get("/api/admin/testimonials/{testimonial_id}")
def admin_get_testimonial(testimonial_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    doc = db[COLLECTION].find_one({"_id": oid(testimonial_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Testimonial not found")
    return {"success": True, "data": to_str_id(doc)}


@router.post("/api/admin/testimonials", status_code=201)
def admin_create_testimonial(payload: TestimonialCreate, db: Database = Depends(get_db),
                             admin=Depends(get_current_admin)):
    check_content_length(payload.content)
    testimonial = Testimonial(
        **payload.model_dump(),
        source="admin",
        approved_by=admin["email"] if payload.status == "approved" else None,
        approved_at=datetime.now(timezone.utc) if payload.status == "approved" else None,
    )
    testimonial_id = create_document(db, COLLECTION, testimonial)
    return {"success": True, "data": to_str_id(db[COLLECTION].find_one({"_id": oid(testimonial_id)})),
            "message": "Testimonial created successfully"}


@router.put("/api/admin/testimonials/{testimonial_id}")
def admin_update_testimonial(testimonial_id: str, payload: TestimonialUpdate, db: Database = Depends(get_db),
                             admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(testimonial_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Testimonial not found")
    updates = payload.model_dump(exclude_unset=True)
    if updates.get("content") is not None:
        check_content_length(updates["content"])
    if updates.get("status") == "approved" and existing.get("status") != "approved":
        updates["approved_at"] = datetime.now(timezone.utc)
        updates["approved_by"] = admin["email"]
    saved = merge_and_save(db, COLLECTION, Testimonial, existing, updates)
    return {"success": True, "data": saved, "message": "Testimonial updated successfully"}


@router.delete("/api/admin/testimonials/{testimonial_id}")
def admin_delete_testimonial(testimonial_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(testimonial_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Testimonial not found")
    delete_asset(existing.get("avatar"))
    db[COLLECTION].delete_one({"_id": existing["_id"]})
    return {"success": True, "message": "Testimonial deleted successfully"}
