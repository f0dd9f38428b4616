"""
Donation campaigns.

Donations point at a campaign by slug. Recording a donation against a
campaign is two writes with no transaction: the donation is inserted first,
then the campaign totals are bumped with a single atomic $inc and progress
and status are derived from the new totals. When the campaign write fails
the donation is flagged `needs_reconciliation` so it can be found and
replayed later.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from pymongo import ReturnDocument
from pymongo.database import Database

from auth import get_current_admin
from database import create_document, get_db
from media import delete_asset
from schemas import CampaignCreate, CampaignUpdate, Donation, DonationCampaign
from utils import oid, paginated_find, search_filter, slugify, to_str_id

from routes.common import find_or_404, merge_and_save

logger = logging.getLogger(__name__)

router = APIRouter(tags=["campaigns"])

COLLECTION = "donation_campaign"
DONATIONS = "donation"


class CampaignUpdateError(Exception):
    """The campaign could not be credited after its donation was saved."""


def compute_progress(collected: float, goal: float) -> float:
    if not goal or goal <= 0:
        return 0
    return min(collected / goal * 100, 100)


def find_active_campaign(db: Database, slug: str) -> Optional[dict]:
    return db[COLLECTION].find_one({"slug": slug, "status": "active"})


def credit_campaign(db: Database, campaign_id: ObjectId, amount: float) -> dict:
    now = datetime.now(timezone.utc)
    campaign = db[COLLECTION].find_one_and_update(
        {"_id": campaign_id},
        {"$inc": {"collected": amount, "donor_count": 1}, "$set": {"updated_at": now}},
        return_document=ReturnDocument.AFTER,
    )
    if campaign is None:
        raise CampaignUpdateError(f"Campaign {campaign_id} no longer exists")

    collected, goal = campaign.get("collected", 0), campaign.get("goal", 0)
    db[COLLECTION].update_one({"_id": campaign_id}, {"$set": {"progress": compute_progress(collected, goal)}})
    if goal and collected >= goal:
        db[COLLECTION].update_one({"_id": campaign_id, "status": "active"}, {"$set": {"status": "completed"}})
    return db[COLLECTION].find_one({"_id": campaign_id})


def record_donation(db: Database, donation: Donation) -> str:
    """
    Insert `donation` and credit its campaign, if any. A campaign slug that
    does not resolve to an active campaign is a 404 and nothing is written.
    """
    campaign = None
    if donation.campaign:
        campaign = find_active_campaign(db, donation.campaign)
        if campaign is None:
            raise HTTPException(status_code=404, detail="Campaign not found or not active")

    donation_id = create_document(db, DONATIONS, donation)
    if campaign is None:
        return donation_id

    try:
        updated = credit_campaign(db, campaign["_id"], donation.amount)
    except Exception:
        logger.exception("Donation %s saved but campaign %s was not credited", donation_id, donation.campaign)
        db[DONATIONS].update_one({"_id": ObjectId(donation_id)}, {"$set": {"needs_reconciliation": True}})
        raise
    logger.info("Campaign %s credited %s, collected %s", updated["slug"], donation.amount, updated["collected"])
    return donation_id


@router.get("/api/campaigns")
def list_active_campaigns(db: Database = Depends(get_db)):
    docs = [to_str_id(d) for d in db[COLLECTION].find({"status": "active"}).sort([("featured", -1), ("created_at", -1)])]
    return {"success": True, "data": docs, "total": len(docs)}


@router.get("/api/campaigns/{slug}")
def get_active_campaign(slug: str, db: Database = Depends(get_db)):
    doc = find_active_campaign(db, slug)
    if not doc:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return {"success": True, "data": to_str_id(doc)}


@router.get("/api/admin/campaigns")
def admin_list_campaigns(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    db: Database = Depends(get_db),
    admin=Depends(get_current_admin),
):
    query = search_filter(search, ["title", "description"])
    if status:
        query["status"] = status
    if category:
        query["category"] = category
    items, page_info = paginated_find(db[COLLECTION], query, page, limit, [("created_at", -1)])
    return {"success": True, "data": {"data": items, "pagination": page_info}}


@router.get("/api/admin/campaigns/{campaign_id}")
def admin_get_campaign(campaign_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    return {"success": True, "data": to_str_id(find_or_404(db, COLLECTION, campaign_id, "Campaign"))}


@router.post("/api/admin/campaigns", status_code=201)
def admin_create_campaign(payload: CampaignCreate, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    data = payload.model_dump()
    data["slug"] = payload.slug or slugify(payload.title)
    data["progress"] = compute_progress(payload.collected, payload.goal)
    campaign_id = create_document(db, COLLECTION, DonationCampaign(**data))
    logger.info("Campaign %s created by %s", data["slug"], admin["email"])
    return {"success": True, "data": to_str_id(db[COLLECTION].find_one({"_id": oid(campaign_id)})),
            "message": "Campaign created successfully"}


@router.put("/api/admin/campaigns/{campaign_id}")
def admin_update_campaign(campaign_id: str, payload: CampaignUpdate, db: Database = Depends(get_db),
                          admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(campaign_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Campaign not found")
    updates = payload.model_dump(exclude_unset=True)
    if "goal" in updates or "collected" in updates:
        merged = {**existing, **updates}
        updates["progress"] = compute_progress(merged.get("collected") or 0, merged.get("goal") or 0)
    saved = merge_and_save(db, COLLECTION, DonationCampaign, existing, updates)
    if "image" in updates and updates["image"] != existing.get("image"):
        delete_asset(existing.get("image"))
    return {"success": True, "data": saved, "message": "Campaign updated successfully"}


@router.delete("/api/admin/campaigns/{campaign_id}")
def admin_delete_campaign(campaign_id: str, db: Database = Depends(get_db), admin=Depends(get_current_admin)):
    existing = db[COLLECTION].find_one({"_id": oid(campaign_id)})
    if not existing:
        raise HTTPException(status_code=404, detail="Campaign not found")
    delete_asset(existing.get("image"))
    db[COLLECTION].delete_one({"_id": existing["_id"]})
    return {"success": True, "message": "Campaign deleted successfully"}
