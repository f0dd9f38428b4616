import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from auth import get_current_admin
from database import get_db
from schemas import Donation, DonationCreate, DonationSubmit, DonationUpdate
from utils import generate_receipt_number, oid, paginated_find, search_filter, to_str_id

from routes.campaigns import record_donation
from routes.common import merge_and_save

logger = logging.getLogger(__name__)

router = APIRouter(tags=["donations"])

COLLECTION = "donation"


@router.post("/api/donations", status_code=201)
def submit_donation(payload: DonationSubmit, db: Database = Depends(get_db)):
    # no payment gateway: public donations are recorded as already paid
    donation = Donation(
        **payload.model_dump(),
        payment_status="completed",
        payment_date=datetime.now(timezone.utc),
        receipt_number=generate_receipt_number(),
    )
    donation_id = record_donation(db, donation)
    logger.info("Donation %s received, receipt %s", donation_id, donation.receipt_number)
    return {"success": True, "data": to_str_id(db[COLLECTION].find_one({"_id": oid(donation_id)})),
            "message": "Donation successful"}


@router.get("/api/admin/donations")
def admin_list_donations(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    campaign: Optional[str] = None,
    db: Database = Depends(get_db),
    admin=Depends(get_current_admin),
):
    query = search_filter(search, ["donor_name", "donor_email", "campaign"])
    if status:
        query["payment_status"] = status
    if campaign:
        query["campaign"] = campaign
    items, page_info = paginated_find(db[COLLECTION], query, page, limit, [("created_at", -1)])
    return {"success": True, "data": {"data": items, "pagination": page_info}}


@router.get("/api/admin/donations/{donation_id}")
def admin_get_donation(donation_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    doc = db[COLLECTION].find_one({"_id": oid(donation_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Donation not found")
    return {"success": True, "data": to_str_id(doc)}


@router.post("/api/admin/donations", status_code=201)
def admin_create_donation(payload: DonationCreate, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    data = payload.model_dump()
    data["receipt_number"] = payload.receipt_number or generate_receipt_number()
    if payload.payment_status == "completed":
        data["payment_date"] = datetime.now(timezone.utc)
    donation_id = record_donation(db, Donation(**data))
    return {"success": True, "data": to_str_id(db[COLLECTION].find_one({"_id": oid(donation_id)})),
            "message": "Donation created successfully"}


@router.put("/api/admin/donations/{donation_id}")
def admin_update_donation(donation_id: str, payload: DonationUpdate, db: Database = Depends(get_db),
                          admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(donation_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Donation not found")
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No data provided")
    if (updates.get("payment_status") == "completed" and existing.get("payment_status") != "completed"
            and not existing.get("payment_date")):
        updates["payment_date"] = datetime.now(timezone.utc)
    saved = merge_and_save(db, COLLECTION, Donation, existing, updates)
    return {"success": True, "data": saved, "message": "Donation updated successfully"}


@router.delete("/api/admin/donations/{donation_id}")
def admin_delete_donation(donation_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    result = db[COLLECTION].delete_one({"_id": oid(donation_id)})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Donation not found")
    return {"success": True, "message": "Donation deleted successfully"}
