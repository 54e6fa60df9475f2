"""
User Routes

POST /users/register - Register new user, returns JWT token
POST /users/login - Login and get JWT token
GET /users/profile - Get own profile
PUT /users/profile - Update profile fields
POST /users/avatar - Upload avatar image
GET /users/avatar/formats - Get supported avatar formats
PUT /users/privacy - Update privacy settings
GET /users/export - Export own data
DELETE /users/account - Delete account and owned data
"""

import logging
from datetime import datetime
from fastapi import APIRouter, HTTPException, Depends, UploadFile, File
from pymongo.errors import DuplicateKeyError

from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.core.auth import hash_password, verify_password, create_user_token, get_current_user
from guidancehub.services.mongo_service import serialize_doc
from guidancehub.utils.file_upload import save_avatar, get_supported_formats
from guidancehub.schemas.schemas import (
    RegisterRequest, LoginRequest, ProfileUpdate, PrivacySettings,
    TokenResponse, MessageResponse, UserRole
)

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger(__name__)

# Collections holding documents owned by a user, with the owning field
OWNED_COLLECTIONS = [
    ("user_responses", "user"),
    ("notifications", "user"),
    ("user_segments", "user"),
    ("reviews", "user"),
    ("applications", "student"),
]


def public_user(user: dict) -> dict:
    """User document without the password hash."""
    data = serialize_doc({k: v for k, v in user.items() if k != "password"})
    return data


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(request: RegisterRequest):
    """Register a new student account and return an access token."""
    users = get_collection(COLLECTIONS["users"])
    if users.find_one({"email": request.email}):
        raise HTTPException(status_code=400, detail="User already exists")

    now = datetime.utcnow()
    user = {
        **request.model_dump(exclude={"password"}, mode="json"),
        "password": hash_password(request.password),
        "role": UserRole.student.value,
        "academic_interests": request.academic_interests or [],
        "privacy_settings": PrivacySettings().model_dump(mode="json"),
        "created_at": now,
        "updated_at": now,
    }
    try:
        user["_id"] = users.insert_one(user).inserted_id
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")

    logger.info("Registered user %s", user["_id"])
    return TokenResponse(access_token=create_user_token(user["_id"]), user=public_user(user))


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = get_collection(COLLECTIONS["users"]).find_one({"email": request.email})
    if not user or not verify_password(request.password, user["password"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return TokenResponse(access_token=create_user_token(user["_id"]), user=public_user(user))


@router.get("/profile")
async def get_profile(user: dict = Depends(get_current_user)):
    """Get current user's profile."""
    return public_user(user)


@router.put("/profile")
async def update_profile(data: ProfileUpdate, user: dict = Depends(get_current_user)):
    """Update profile. Only provided fields are updated."""
    updates = data.model_dump(exclude_unset=True, mode="json")
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    updates["updated_at"] = datetime.utcnow()
    users = get_collection(COLLECTIONS["users"])
    users.update_one({"_id": user["_id"]}, {"$set": updates})
    return public_user(users.find_one({"_id": user["_id"]}))


@router.post("/avatar")
async def upload_avatar(
    file: UploadFile = File(..., description="Avatar image (JPG, JPEG, PNG or GIF)"),
    user: dict = Depends(get_current_user)
):
    """Upload a new avatar image and set it on the profile."""
    avatar_url = await save_avatar(file, str(user["_id"]))
    get_collection(COLLECTIONS["users"]).update_one(
        {"_id": user["_id"]},
        {"$set": {"avatar": avatar_url, "updated_at": datetime.utcnow()}}
    )
    return {"message": "Avatar uploaded successfully", "avatar": avatar_url}


@router.get("/avatar/formats")
async def avatar_formats():
    """Get supported avatar formats."""
    return get_supported_formats()


@router.put("/privacy")
async def update_privacy(settings: PrivacySettings, user: dict = Depends(get_current_user)):
    """Replace privacy settings."""
    privacy = settings.model_dump(mode="json")
    get_collection(COLLECTIONS["users"]).update_one(
        {"_id": user["_id"]},
        {"$set": {"privacy_settings": privacy, "updated_at": datetime.utcnow()}}
    )
    return {"message": "Privacy settings updated", "privacy_settings": privacy}


@router.get("/export")
async def export_data(user: dict = Depends(get_current_user)):
    """Export all profile data of the current user."""
    return {"user_data": public_user(user), "export_date": datetime.utcnow()}


@router.delete("/account", response_model=MessageResponse)
async def delete_account(user: dict = Depends(get_current_user)):
    """Delete account together with attempts, notifications, memberships, reviews and applications."""
    segments = get_collection(COLLECTIONS["segments"])
    for membership in get_collection(COLLECTIONS["user_segments"]).find({"user": user["_id"]}):
        segments.update_one({"_id": membership["segment"]}, {"$inc": {"user_count": -1}})

    for collection, field in OWNED_COLLECTIONS:
        get_collection(COLLECTIONS[collection]).delete_many({field: user["_id"]})
    get_collection(COLLECTIONS["users"]).delete_one({"_id": user["_id"]})

    logger.info("Deleted account %s", user["_id"])
    return MessageResponse(message="Account deleted successfully")
