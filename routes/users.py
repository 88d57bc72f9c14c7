from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import InvalidInput
from app.security import Claim, get_current_claim
from app.uploader import ImageUploader, get_uploader
from schemas.schemas import ProfileResponse, ProfileUpdate, UserResponse
from services import users

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix = "/api",
    tags = ["Users"]
)

@router.get("/users", response_model = List[UserResponse], summary = "List every registered user")
def get_users(db: Session = Depends(get_db)):
    return users.list_users(db)

@router.get(
    "/user",
    response_model = UserResponse,
    summary = "Fetch the profile of the caller",
    responses = {
        401: {"description": "Missing authentication token."},
        403: {"description": "Invalid or expired authentication token."},
        404: {"description": "The user behind the token no longer exists."},
    })
def get_user(db: Session = Depends(get_db), claim: Claim = Depends(get_current_claim)):
    return users.get_user(db, claim.id)

@router.put(
    "/profile/update",
    response_model = ProfileResponse,
    summary = "Update the caller's username, email and profile picture",
    description = """Multipart form. A `profile_pic` file is uploaded to the image host and its URL stored;
    without a file, `profile_pic_url` (or nothing) becomes the stored image reference.

    **Authentication Required**
      - This endpoint requires a valid JWT token.""")
def update_profile(
    username: str = Form(...),
    email: str = Form(...),
    profile_pic_url: Optional[str] = Form(None),
    profile_pic: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    claim: Claim = Depends(get_current_claim),
    uploader: ImageUploader = Depends(get_uploader)):

    try:
        profile = ProfileUpdate(username = username, email = email)
    except ValidationError as exc:
        raise InvalidInput(f"Invalid profile: {exc.errors()[0]['msg']}")

    if profile_pic is not None and profile_pic.filename:
        mime_type = profile_pic.content_type or ""
        if not mime_type.startswith("image/"):
            raise InvalidInput("profile_pic must be an image")
        data = profile_pic.file.read()
        if not data:
            raise InvalidInput("profile_pic is empty")
        profile_pic_url = uploader.upload(data, mime_type)
    else:
        logger.info("No new image uploaded for user %d, keeping %r", claim.id, profile_pic_url)

    user = users.update_profile(db, claim.id, profile, profile_pic_url or None)
    return ProfileResponse(username = user.username, email = user.email, profile_pic_url = user.profile_pic_url)
