"""
Database Schemas

Each Pydantic model represents a MongoDB collection in the ArtFolio database.
Model name lowercased is the collection name (User -> "user").
References to other documents are stored as string ids.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

Role = Literal["visitor", "artist", "admin"]


class User(BaseModel):
    username: str = Field(..., description="Unique display name")
    email: EmailStr = Field(..., description="Unique login email, stored lowercased")
    password_hash: str = Field(..., description="BCrypt hashed password")
    role: Role = Field("visitor", description="Role: visitor | artist | admin")
    bio: str = ""
    profile_image: str = ""
    commission_open: bool = Field(False, description="Artist is accepting commission requests")
    banned: bool = False


class Comment(BaseModel):
    id: str = Field(..., description="Comment id, unique within the artwork")
    user_id: str
    text: str
    created_at: datetime


class Artwork(BaseModel):
    artist_id: str = Field(..., description="Owning artist's user id")
    title: str
    description: Optional[str] = None
    image_url: str
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_for_sale: bool = False
    likes: List[str] = Field(default_factory=list, description="User ids; kept duplicate-free")
    comments: List[Comment] = Field(default_factory=list)
    flagged: bool = Field(False, description="Admin moderation marker")


class Commission(BaseModel):
    requester_id: str
    artist_id: str
    brief: str
    status: Literal["pending", "accepted", "completed", "rejected"] = "pending"
    price: Optional[float] = Field(None, gt=0, description="Set by the artist, never the requester")
    deadline: Optional[datetime] = None
    notes: Optional[str] = Field(None, description="Private artist notes")


class Order(BaseModel):
    buyer_id: str
    artwork_id: str
    amount: float = Field(..., gt=0, description="Artwork price snapshotted at purchase time")
    status: Literal["pending", "completed"] = "completed"
