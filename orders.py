"""
Order routes: purchase a print, buyer history, artist sales history.

Orders are append-only. The amount is copied from the artwork at purchase
time, so later price edits never rewrite past orders.
"""

import logging
from typing import Dict, List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from pymongo.database import Database

import config
from auth import get_current_user, require_artist
from artworks import user_map
from database import get_db, create_document, serialize_doc, to_object_id
from schemas import Order as OrderSchema

logger = logging.getLogger("artfolio.orders")

router = APIRouter(prefix="/api/orders", tags=["orders"])


class OrderIn(BaseModel):
    artwork_id: Optional[str] = None


def artwork_map(db: Database, artwork_ids) -> Dict[str, dict]:
    oids = [ObjectId(a) for a in set(artwork_ids) if isinstance(a, str) and ObjectId.is_valid(a)]
    if not oids:
        return {}
    return {str(a["_id"]): serialize_doc(a) for a in db["artwork"].find({"_id": {"$in": oids}})}


def present_orders(db: Database, docs: List[dict], with_buyer: bool = False) -> List[dict]:
    artworks = artwork_map(db, [d.get("artwork_id") for d in docs])
    buyers = user_map(db, [d.get("buyer_id") for d in docs], ("username",)) if with_buyer else {}
    out = []
    for d in docs:
        item = serialize_doc(d)
        # None when the artwork has since been deleted
        item["artwork"] = artworks.get(item.get("artwork_id"))
        if with_buyer:
            item["buyer"] = buyers.get(item.get("buyer_id"))
        out.append(item)
    return out


@router.post("", status_code=201)
def purchase(data: OrderIn, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    if not data.artwork_id:
        raise HTTPException(status_code=400, detail="Artwork ID is required")
    artwork = db["artwork"].find_one({"_id": to_object_id(data.artwork_id, "artwork")})
    if not artwork:
        raise HTTPException(status_code=404, detail="Artwork not found")
    if not artwork.get("is_for_sale"):
        raise HTTPException(status_code=400, detail="This artwork is not available for purchase")
    price = artwork.get("price")
    if not price or price <= 0:
        raise HTTPException(status_code=400, detail="This artwork does not have a valid price")
    if artwork.get("artist_id") == current_user["id"]:
        raise HTTPException(status_code=400, detail="You cannot purchase your own artwork")
    if not config.ALLOW_REPEAT_PURCHASES and db["order"].find_one(
        {"buyer_id": current_user["id"], "artwork_id": data.artwork_id}
    ):
        raise HTTPException(status_code=409, detail="You have already purchased this artwork")

    order = OrderSchema(buyer_id=current_user["id"], artwork_id=data.artwork_id, amount=price)
    order_id = create_document(db, "order", order)
    logger.info("Order %s: buyer %s bought artwork %s for %.2f", order_id, current_user["id"], data.artwork_id, price)
    return serialize_doc(db["order"].find_one({"_id": ObjectId(order_id)}))


@router.get("/my-orders")
def my_orders(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    docs = list(db["order"].find({"buyer_id": current_user["id"]}).sort("created_at", -1))
    return present_orders(db, docs)


@router.get("/sales/history")
def sales_history(current_user: dict = Depends(require_artist), db: Database = Depends(get_db)):
    owned = [str(a["_id"]) for a in db["artwork"].find({"artist_id": current_user["id"]}, {"_id": 1})]
    if not owned:
        return []
    docs = list(db["order"].find({"artwork_id": {"$in": owned}}).sort("created_at", -1))
    return present_orders(db, docs, with_buyer=True)
