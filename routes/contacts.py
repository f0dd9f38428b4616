import logging
import re
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.database import Database

from auth import get_current_admin
from database import create_document, get_db
from schemas import Contact, ContactCreate, ContactSubmit, ContactUpdate
from utils import oid, paginated_find, search_filter, to_str_id

from routes.common import merge_and_save

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contacts"])

COLLECTION = "contact"
EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s.]+(\.[^@\s.]+)*\.[^@\s.]{2,}$')
STATUSES = ("unread", "read", "replied", "archived")


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (request.client.host if request.client else "unknown")


@router.post("/api/contact/submit", status_code=201)
def submit_contact(payload: ContactSubmit, request: Request, db: Database = Depends(get_db)):
    name, email = payload.name.strip(), payload.email.strip().lower()
    subject, message = payload.subject.strip(), payload.message.strip()
    if not (name and email and subject and message):
        raise HTTPException(status_code=400, detail="All fields are required (name, email, subject and message)")
    if not EMAIL_RE.match(email):
        raise HTTPException(status_code=400, detail="Invalid email format")
    if len(message) < 10:
        raise HTTPException(status_code=400, detail="Message must be at least 10 characters")
    if len(message) > 2000:
        raise HTTPException(status_code=400, detail="Message must be at most 2000 characters")

    contact = Contact(
        name=name,
        email=email,
        subject=subject,
        message=message,
        source="website",
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent", "unknown"),
    )
    contact_id = create_document(db, COLLECTION, contact)
    logger.info("Contact message %s received", contact_id)
    return {
        "success": True,
        "data": {"id": contact_id, "message": "Your message has been sent. We will reply as soon as possible."},
    }


@router.get("/api/admin/contacts")
def admin_list_contacts(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    db: Database = Depends(get_db),
    admin=Depends(get_current_admin),
):
    query = search_filter(search, ["name", "email", "subject", "message"])
    if status:
        query["status"] = status
    if priority:
        query["priority"] = priority
    items, page_info = paginated_find(db[COLLECTION], query, page, limit, [("created_at", -1)])

    stats = {s: 0 for s in STATUSES}
    for row in db[COLLECTION].aggregate([{"$group": {"_id": "$status", "count": {"$sum": 1}}}]):
        if row["_id"] in stats:
            stats[row["_id"]] = row["count"]
    return {"success": True, "data": {"data": items, "pagination": page_info, "stats": stats}}


@router.get("/api/admin/contacts/{contact_id}")
def admin_get_contact(contact_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    doc = db[COLLECTION].find_one({"_id": oid(contact_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Contact not found")
    return {"success": True, "data": to_str_id(doc)}


@router.post("/api/admin/contacts", status_code=201)
def admin_create_contact(payload: ContactCreate, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    contact = Contact(**payload.model_dump(), source="admin")
    contact_id = create_document(db, COLLECTION, contact)
    return {"success": True, "data": to_str_id(db[COLLECTION].find_one({"_id": oid(contact_id)})),
            "message": "Contact created successfully"}


@router.put("/api/admin/contacts/{contact_id}")
def admin_update_contact(contact_id: str, payload: ContactUpdate, db: Database = Depends(get_db),
                         admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(contact_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Contact not found")
    updates = payload.model_dump(exclude_unset=True)
    if updates.get("status") == "replied" and existing.get("status") != "replied":
        updates["responded_at"] = datetime.now(timezone.utc)
        updates["responded_by"] = admin["email"]
    saved = merge_and_save(db, COLLECTION, Contact, existing, updates)
    return {"success": True, "data": saved, "message": "Contact updated successfully"}


@router.delete("/api/admin/contacts/{contact_id}")
def admin_delete_contact(contact_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    result = db[COLLECTION].delete_one({"_id": oid(contact_id)})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Contact not found")
    return {"success": True, "message": "Contact deleted successfully"}
