from typing import Type

from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.database import Database

from database import update_document
from utils import id_or_slug_filter, to_str_id


def find_or_404(db: Database, collection_name: str, id_or_slug: str, label: str) -> dict:
    doc = db[collection_name].find_one(id_or_slug_filter(id_or_slug))
    if not doc:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return doc


def view_published(db: Database, collection_name: str, slug: str, counter: str, label: str) -> dict:
    """Bump the view counter of a published document and return it with the new count."""
    doc = db[collection_name].find_one_and_update(
        {"slug": slug, "status": "published"},
        {"$inc": {counter: 1}},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return doc


def merge_and_save(db: Database, collection_name: str, model: Type[BaseModel], existing: dict, updates: dict) -> dict:
    """
    Partial update: existing+updates is validated as a whole document
    (raises pydantic.ValidationError), then only the updates are $set.
    """
    model.model_validate({**existing, **updates})
    if updates:
        update_document(db, collection_name, {"_id": existing["_id"]}, updates)
    return to_str_id(db[collection_name].find_one({"_id": existing["_id"]}))
