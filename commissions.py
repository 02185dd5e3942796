"""
Commission routes.

A visitor requests custom work from an artist; only that artist can then move
the request through its lifecycle, price it and keep private notes.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from pymongo.database import Database

from auth import get_current_user, require_artist, user_summary
from config import COMMISSION_BRIEF_MIN_LENGTH
from database import get_db, create_document, serialize_doc, to_object_id, now_utc
from lifecycle import CommissionStatus, InvalidTransition, is_terminal, next_status
from schemas import Commission as CommissionSchema

logger = logging.getLogger("artfolio.commissions")

router = APIRouter(prefix="/api/commissions", tags=["commissions"])


class CommissionIn(BaseModel):
    artist_id: str
    brief: str
    deadline: Optional[datetime] = None


class CommissionUpdate(BaseModel):
    status: Optional[CommissionStatus] = None
    price: Optional[float] = Field(None, gt=0)
    notes: Optional[str] = None


def load_commission(db: Database, commission_id: str) -> dict:
    commission = db["commission"].find_one({"_id": to_object_id(commission_id, "commission")})
    if not commission:
        raise HTTPException(status_code=404, detail="Commission not found")
    return commission


@router.post("", status_code=201)
def request_commission(data: CommissionIn, current_user: dict = Depends(get_current_user),
                       db: Database = Depends(get_db)):
    brief = data.brief.strip()
    if len(brief) < COMMISSION_BRIEF_MIN_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Brief must be at least {COMMISSION_BRIEF_MIN_LENGTH} characters",
        )
    artist = db["user"].find_one({"_id": to_object_id(data.artist_id, "artist")})
    if not artist or artist.get("role") != "artist":
        raise HTTPException(status_code=404, detail="Artist not found")
    if data.artist_id == current_user["id"]:
        raise HTTPException(status_code=400, detail="You cannot commission yourself")

    commission = CommissionSchema(
        requester_id=current_user["id"],
        artist_id=data.artist_id,
        brief=brief,
        deadline=data.deadline,
    )
    commission_id = create_document(db, "commission", commission)
    logger.info("Commission %s requested by %s from artist %s", commission_id, current_user["id"], data.artist_id)
    return serialize_doc(load_commission(db, commission_id))


@router.get("/artist")
def artist_inbox(current_user: dict = Depends(require_artist), db: Database = Depends(get_db)):
    docs = db["commission"].find({"artist_id": current_user["id"]}).sort("created_at", -1)
    out = []
    for d in docs:
        item = serialize_doc(d)
        item["requester"] = user_summary(db, item.get("requester_id"), ("username", "email"))
        out.append(item)
    return out


@router.get("/mine")
def my_requests(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    docs = db["commission"].find({"requester_id": current_user["id"]}).sort("created_at", -1)
    out = []
    for d in docs:
        item = serialize_doc(d)
        # notes are the artist's private workspace
        item.pop("notes", None)
        item["artist"] = user_summary(db, item.get("artist_id"))
        out.append(item)
    return out


@router.patch("/{commission_id}")
def update_commission(commission_id: str, data: CommissionUpdate, current_user: dict = Depends(get_current_user),
                      db: Database = Depends(get_db)):
    commission = load_commission(db, commission_id)
    if commission.get("artist_id") != current_user["id"]:
        raise HTTPException(status_code=403, detail="Only the commissioned artist can update this request")

    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    for field in ("status", "price"):
        if field in changes and changes[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be null")

    current = commission.get("status", CommissionStatus.PENDING.value)
    try:
        status = next_status(current, data.status.value if data.status is not None else None)
    except InvalidTransition as e:
        raise HTTPException(status_code=400, detail=str(e))

    update_dict = {"updated_at": now_utc()}
    if status.value != current:
        update_dict["status"] = status.value
    if data.price is not None:
        if is_terminal(CommissionStatus(current)):
            raise HTTPException(status_code=400, detail=f"Cannot change the price of a {current} commission")
        update_dict["price"] = data.price
    if "notes" in changes:
        update_dict["notes"] = data.notes

    db["commission"].update_one({"_id": commission["_id"]}, {"$set": update_dict})
    if "status" in update_dict:
        logger.info("Commission %s moved %s -> %s", commission_id, current, status.value)
    return serialize_doc(load_commission(db, commission_id))
