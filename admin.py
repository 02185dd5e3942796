"""
Admin moderation routes. Every route here sits behind the admin-only guard.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from pymongo.database import Database

from artworks import load_artwork, present_many, present_comments, user_map
from auth import require_admin
from database import get_db, get_documents, serialize_doc, to_object_id, now_utc
from orders import present_orders

logger = logging.getLogger("artfolio.admin")

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])

NEWEST_FIRST = [("created_at", -1)]


class BanInput(BaseModel):
    banned: bool


class FlagInput(BaseModel):
    flagged: bool


@router.get("/stats")
def stats(db: Database = Depends(get_db)):
    users = db["user"]
    total_volume = sum(o.get("amount") or 0 for o in db["order"].find({}, {"amount": 1}))
    return {
        "total_users": users.count_documents({}),
        "total_artists": users.count_documents({"role": "artist"}),
        "total_visitors": users.count_documents({"role": "visitor"}),
        "total_admins": users.count_documents({"role": "admin"}),
        "total_artworks": db["artwork"].count_documents({}),
        "total_orders": db["order"].count_documents({}),
        "total_commissions": db["commission"].count_documents({}),
        "total_volume": round(total_volume, 2),
        "flagged_items": db["artwork"].count_documents({"flagged": True}),
    }


@router.get("/users")
def list_users(db: Database = Depends(get_db)):
    return [serialize_doc(u) for u in get_documents(db, "user", sort=NEWEST_FIRST)]


@router.get("/artworks")
def list_all_artworks(db: Database = Depends(get_db)):
    return present_many(db, get_documents(db, "artwork", sort=NEWEST_FIRST))


@router.get("/flagged")
def list_flagged(db: Database = Depends(get_db)):
    return present_many(db, get_documents(db, "artwork", {"flagged": True}, sort=NEWEST_FIRST))


@router.get("/sales")
def list_sales(db: Database = Depends(get_db)):
    return present_orders(db, get_documents(db, "order", sort=NEWEST_FIRST), with_buyer=True)


@router.patch("/users/{user_id}/ban")
def set_ban(user_id: str, data: BanInput, current_user: dict = Depends(require_admin),
            db: Database = Depends(get_db)):
    if user_id == current_user["id"]:
        raise HTTPException(status_code=400, detail="You cannot ban yourself")
    oid = to_object_id(user_id, "user")
    res = db["user"].update_one({"_id": oid}, {"$set": {"banned": data.banned, "updated_at": now_utc()}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="User not found")
    user = db["user"].find_one({"_id": oid})
    logger.info("Admin %s set banned=%s on user %s", current_user["id"], data.banned, user_id)
    return {
        "message": "User banned successfully" if data.banned else "User unbanned successfully",
        "user": {"id": user_id, "username": user.get("username"), "banned": user.get("banned", False)},
    }


@router.patch("/artworks/{artwork_id}/flag")
def set_flag(artwork_id: str, data: FlagInput, current_user: dict = Depends(require_admin),
             db: Database = Depends(get_db)):
    oid = to_object_id(artwork_id, "artwork")
    res = db["artwork"].update_one({"_id": oid}, {"$set": {"flagged": data.flagged, "updated_at": now_utc()}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Artwork not found")
    logger.info("Admin %s set flagged=%s on artwork %s", current_user["id"], data.flagged, artwork_id)
    artwork = present_many(db, [load_artwork(db, artwork_id)])[0]
    return {"message": "Artwork flagged" if data.flagged else "Artwork unflagged", "artwork": artwork}


@router.delete("/artworks/{artwork_id}")
def delete_artwork(artwork_id: str, current_user: dict = Depends(require_admin), db: Database = Depends(get_db)):
    artwork = load_artwork(db, artwork_id)
    db["artwork"].delete_one({"_id": artwork["_id"]})
    logger.info("Admin %s deleted artwork %s", current_user["id"], artwork_id)
    return {"message": "Artwork deleted successfully", "artwork": serialize_doc(artwork)}


@router.delete("/artworks/{artwork_id}/comments/{comment_id}")
def delete_comment(artwork_id: str, comment_id: str, current_user: dict = Depends(require_admin),
                   db: Database = Depends(get_db)):
    artwork = load_artwork(db, artwork_id)
    if not any(c.get("id") == comment_id for c in artwork.get("comments", [])):
        raise HTTPException(status_code=404, detail="Comment not found")
    db["artwork"].update_one({"_id": artwork["_id"]}, {"$pull": {"comments": {"id": comment_id}}})
    logger.info("Admin %s removed comment %s from artwork %s", current_user["id"], comment_id, artwork_id)
    comments = load_artwork(db, artwork_id).get("comments", [])
    users = user_map(db, [c.get("user_id") for c in comments])
    return {"message": "Comment deleted successfully", "comments": present_comments(comments, users)}
