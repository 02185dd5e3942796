"""
Authentication & authorization.

Password hashing, JWT issuing/decoding, the bearer-token dependency and the
three role guards (any user, artist-or-admin, admin-only), plus the
/api/auth routes.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, EmailStr, Field
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from config import (
    SECRET_KEY,
    ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    BCRYPT_ROUNDS,
    PASSWORD_MIN_LENGTH,
)
from database import get_db, create_document, serialize_doc, to_object_id, now_utc
from schemas import User as UserSchema

logger = logging.getLogger("artfolio.auth")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# Utilities

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


def token_for(user: dict) -> str:
    return create_access_token({"sub": str(user["_id"]), "role": user.get("role", "visitor")})


def public_user(user: dict) -> Dict[str, Any]:
    return serialize_doc(user)


# Dependencies

def get_current_user(authorization: Optional[str] = Header(default=None),
                     db: Database = Depends(get_db)) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1].strip()
    payload = decode_token(token)
    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise HTTPException(status_code=401, detail="Invalid token")
    try:
        oid = to_object_id(user_id)
    except HTTPException:
        raise HTTPException(status_code=401, detail="Invalid token")
    user = db["user"].find_one({"_id": oid})
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    # The token stays valid after a ban, so the check happens against the stored user
    if user.get("banned"):
        logger.info("Rejected request from banned user %s", user_id)
        raise HTTPException(status_code=403, detail="Account banned")
    return serialize_doc(user)


def require_artist(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user.get("role") not in ("artist", "admin"):
        raise HTTPException(status_code=403, detail="Artist access required")
    return current_user


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user


def user_summary(db: Database, user_id: Optional[str], fields=("username", "profile_image")) -> Optional[dict]:
    """Small embedded view of a referenced user, or None if it no longer exists."""
    if not user_id or not isinstance(user_id, str):
        return None
    try:
        oid = to_object_id(user_id)
    except HTTPException:
        return None
    projection = {f: 1 for f in fields}
    user = db["user"].find_one({"_id": oid}, projection)
    return serialize_doc(user) if user else None


# Auth models
class RegisterInput(BaseModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str
    role: Literal["visitor", "artist"] = "visitor"


class LoginInput(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Dict[str, Any]


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=30)
    bio: Optional[str] = Field(None, max_length=2000)
    profile_image: Optional[str] = None
    commission_open: Optional[bool] = None


# Routes
@router.post("/register", response_model=TokenResponse, status_code=201)
def register(payload: RegisterInput, db: Database = Depends(get_db)):
    email = payload.email.lower()
    username = payload.username.strip()
    if len(payload.password) < PASSWORD_MIN_LENGTH:
        raise HTTPException(status_code=400, detail=f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if db["user"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="Email already registered")
    if db["user"].find_one({"username": username}):
        raise HTTPException(status_code=400, detail="Username already taken")
    user_model = UserSchema(
        username=username,
        email=email,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    try:
        user_id = create_document(db, "user", user_model)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email or username already registered")
    user = db["user"].find_one({"_id": to_object_id(user_id)})
    logger.info("Registered %s account %s", payload.role, user_id)
    return TokenResponse(access_token=token_for(user), user=public_user(user))


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginInput, db: Database = Depends(get_db)):
    user = db["user"].find_one({"email": payload.email.lower()})
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        logger.info("Failed login for %s", payload.email.lower())
        raise HTTPException(status_code=400, detail="Invalid email or password")
    if user.get("banned"):
        raise HTTPException(status_code=403, detail="Account banned")
    return TokenResponse(access_token=token_for(user), user=public_user(user))


@router.get("/me")
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.patch("/me")
def update_me(data: ProfileUpdate, current_user: dict = Depends(get_current_user),
              db: Database = Depends(get_db)):
    update_dict = data.model_dump(exclude_unset=True)
    if not update_dict:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "commission_open" in update_dict and current_user.get("role") != "artist":
        raise HTTPException(status_code=400, detail="Only artists can open commissions")
    if update_dict.get("username") is not None:
        update_dict["username"] = update_dict["username"].strip()
        clash = db["user"].find_one({"username": update_dict["username"]})
        if clash and str(clash["_id"]) != current_user["id"]:
            raise HTTPException(status_code=400, detail="Username already taken")
    update_dict = {k: v for k, v in update_dict.items() if v is not None}
    update_dict["updated_at"] = now_utc()
    oid = to_object_id(current_user["id"])
    try:
        db["user"].update_one({"_id": oid}, {"$set": update_dict})
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Username already taken")
    return serialize_doc(db["user"].find_one({"_id": oid}))


@router.get("/artists")
def list_artists(commission_open: Optional[bool] = None, db: Database = Depends(get_db)) -> List[dict]:
    query: Dict[str, Any] = {"role": "artist", "banned": {"$ne": True}}
    if commission_open is not None:
        query["commission_open"] = commission_open
    cursor = db["user"].find(query, {"email": 0, "password_hash": 0}).sort("username", 1)
    return [serialize_doc(u) for u in cursor]
