"""
Artwork catalog routes: browse, publish, edit, like, comment, delete.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from pymongo.database import Database

from auth import get_current_user, require_artist
from database import get_db, create_document, serialize_doc, to_object_id, now_utc
from schemas import Artwork as ArtworkSchema

logger = logging.getLogger("artfolio.artworks")

router = APIRouter(prefix="/api/artworks", tags=["artworks"])

SORTS = {
    "new": ("created_at", -1),
    "oldest": ("created_at", 1),
    "price_asc": ("price", 1),
    "price_desc": ("price", -1),
}


def split_tags(tags: Union[List[str], str, None]) -> List[str]:
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [t.strip() for t in tags if t and t.strip()]


def user_map(db: Database, user_ids, fields=("username", "profile_image")) -> Dict[str, dict]:
    """Fetch the referenced users in one query, keyed by string id."""
    oids = [ObjectId(u) for u in set(user_ids) if isinstance(u, str) and ObjectId.is_valid(u)]
    if not oids:
        return {}
    projection = {f: 1 for f in fields}
    return {str(u["_id"]): serialize_doc(u) for u in db["user"].find({"_id": {"$in": oids}}, projection)}


def present(doc: dict, artists: Dict[str, dict], users: Optional[Dict[str, dict]] = None) -> dict:
    """Public view of an artwork: populated artist, derived counts, populated comment authors."""
    out = serialize_doc(doc)
    out["artist"] = artists.get(out.get("artist_id"))
    likes = out.get("likes") or []
    comments = out.get("comments") or []
    out["likes_count"] = len(likes)
    out["comments_count"] = len(comments)
    if users is not None:
        out["comments"] = present_comments(comments, users)
    return out


def present_comments(comments: List[dict], users: Dict[str, dict]) -> List[dict]:
    return [{**c, "user": users.get(c.get("user_id"))} for c in comments]


def present_many(db: Database, docs: List[dict]) -> List[dict]:
    artists = user_map(db, [d.get("artist_id") for d in docs])
    return [present(d, artists) for d in docs]


def present_one(db: Database, doc: dict) -> dict:
    comment_authors = [c.get("user_id") for c in doc.get("comments", [])]
    users = user_map(db, [doc.get("artist_id")] + comment_authors, ("username", "profile_image", "bio"))
    return present(doc, users, users)


def load_artwork(db: Database, artwork_id: str) -> dict:
    artwork = db["artwork"].find_one({"_id": to_object_id(artwork_id, "artwork")})
    if not artwork:
        raise HTTPException(status_code=404, detail="Artwork not found")
    return artwork


def ensure_owner_or_admin(artwork: dict, current_user: dict):
    if current_user.get("role") != "admin" and artwork.get("artist_id") != current_user["id"]:
        raise HTTPException(status_code=403, detail="Only the owner or an admin can do this")


# Models
class ArtworkIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: str = Field(..., min_length=1)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    tags: Union[List[str], str, None] = None
    is_for_sale: bool = False


class ArtworkUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    tags: Union[List[str], str, None] = None
    is_for_sale: Optional[bool] = None


class CommentIn(BaseModel):
    text: str


# Routes
@router.get("")
def list_artworks(
    q: Optional[str] = None,
    category: Optional[str] = None,
    artist: Optional[str] = None,
    for_sale: Optional[bool] = None,
    sort: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    page: int = Query(1, ge=1),
    db: Database = Depends(get_db),
):
    query: Dict[str, Any] = {}
    if q:
        # plain substring search, user text never acts as a pattern
        pattern = re.escape(q)
        query["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
            {"tags": {"$regex": pattern, "$options": "i"}},
            {"category": {"$regex": pattern, "$options": "i"}},
        ]
    if category:
        query["category"] = category
    if artist:
        query["artist_id"] = artist
    if for_sale is not None:
        query["is_for_sale"] = for_sale
    if sort is not None and sort != "popular" and sort not in SORTS:
        raise HTTPException(status_code=400, detail=f"Unknown sort '{sort}'")

    collection = db["artwork"]
    total = collection.count_documents(query)
    skip = (page - 1) * limit

    if sort == "popular":
        pipeline = [
            {"$match": query},
            {"$addFields": {"_likes_count": {"$size": "$likes"}}},
            {"$sort": {"_likes_count": -1, "created_at": -1}},
            {"$skip": skip},
            {"$limit": limit},
            {"$project": {"_likes_count": 0}},
        ]
        docs = list(collection.aggregate(pipeline))
    else:
        field, direction = SORTS[sort or "new"]
        docs = list(collection.find(query).sort(field, direction).skip(skip).limit(limit))

    return {"items": present_many(db, docs), "total": total, "page": page, "limit": limit}


@router.get("/user/liked")
def liked_artworks(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    docs = list(db["artwork"].find({"likes": current_user["id"]}).sort("created_at", -1))
    return present_many(db, docs)


@router.get("/user/uploaded")
def uploaded_artworks(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    docs = list(db["artwork"].find({"artist_id": current_user["id"]}).sort("created_at", -1))
    return present_many(db, docs)


@router.get("/{artwork_id}")
def get_artwork(artwork_id: str, db: Database = Depends(get_db)):
    return present_one(db, load_artwork(db, artwork_id))


@router.post("", status_code=201)
def create_artwork(data: ArtworkIn, current_user: dict = Depends(require_artist), db: Database = Depends(get_db)):
    artwork = ArtworkSchema(
        artist_id=current_user["id"],
        title=data.title.strip(),
        description=data.description,
        image_url=data.image_url,
        price=data.price,
        category=data.category,
        tags=split_tags(data.tags),
        is_for_sale=data.is_for_sale,
    )
    artwork_id = create_document(db, "artwork", artwork)
    logger.info("Artist %s published artwork %s", current_user["id"], artwork_id)
    return present_one(db, load_artwork(db, artwork_id))


@router.patch("/{artwork_id}")
def update_artwork(artwork_id: str, data: ArtworkUpdate, current_user: dict = Depends(get_current_user),
                   db: Database = Depends(get_db)):
    artwork = load_artwork(db, artwork_id)
    ensure_owner_or_admin(artwork, current_user)
    update_dict = data.model_dump(exclude_unset=True)
    for required in ("title", "image_url", "is_for_sale"):
        if required in update_dict and update_dict[required] is None:
            del update_dict[required]
    if not update_dict:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "tags" in update_dict:
        update_dict["tags"] = split_tags(update_dict["tags"])
    update_dict["updated_at"] = now_utc()
    db["artwork"].update_one({"_id": artwork["_id"]}, {"$set": update_dict})
    return present_one(db, load_artwork(db, artwork_id))


@router.patch("/{artwork_id}/like")
def toggle_like(artwork_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    oid = to_object_id(artwork_id, "artwork")
    uid = current_user["id"]
    collection = db["artwork"]
    # Add only if absent; when nothing matched, the caller already liked it (or it is gone)
    res = collection.update_one({"_id": oid, "likes": {"$ne": uid}},
                                {"$addToSet": {"likes": uid}, "$set": {"updated_at": now_utc()}})
    liked = res.matched_count == 1
    if not liked:
        res = collection.update_one({"_id": oid}, {"$pull": {"likes": uid}, "$set": {"updated_at": now_utc()}})
        if res.matched_count == 0:
            raise HTTPException(status_code=404, detail="Artwork not found")
    out = present_one(db, load_artwork(db, artwork_id))
    out["liked"] = liked
    return out


@router.put("/{artwork_id}/like")
def add_like(artwork_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    res = db["artwork"].update_one({"_id": to_object_id(artwork_id, "artwork")},
                                   {"$addToSet": {"likes": current_user["id"]}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Artwork not found")
    out = present_one(db, load_artwork(db, artwork_id))
    out["liked"] = True
    return out


@router.delete("/{artwork_id}/like")
def remove_like(artwork_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    res = db["artwork"].update_one({"_id": to_object_id(artwork_id, "artwork")},
                                   {"$pull": {"likes": current_user["id"]}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Artwork not found")
    out = present_one(db, load_artwork(db, artwork_id))
    out["liked"] = False
    return out


@router.post("/{artwork_id}/comments", status_code=201)
def add_comment(artwork_id: str, data: CommentIn, current_user: dict = Depends(get_current_user),
                db: Database = Depends(get_db)):
    text = data.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Comment text is required")
    comment = {
        "id": str(ObjectId()),
        "user_id": current_user["id"],
        "text": text,
        "created_at": now_utc(),
    }
    res = db["artwork"].update_one({"_id": to_object_id(artwork_id, "artwork")}, {"$push": {"comments": comment}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Artwork not found")
    artwork = load_artwork(db, artwork_id)
    comments = artwork.get("comments", [])
    users = user_map(db, [c.get("user_id") for c in comments])
    return present_comments(comments, users)


@router.delete("/{artwork_id}")
def delete_artwork(artwork_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    artwork = load_artwork(db, artwork_id)
    ensure_owner_or_admin(artwork, current_user)
    db["artwork"].delete_one({"_id": artwork["_id"]})
    logger.info("Artwork %s deleted by %s", artwork_id, current_user["id"])
    return {"ok": True, "id": artwork_id}
