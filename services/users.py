import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import Conflict, InvalidCredentials, NotFound
from app.security import Claim, create_access_token, get_password_hash, verify_password
from config import Settings
from models.models import ROLE_ADMIN, ROLE_USER, User
from schemas.schemas import ProfileUpdate, UserCreate

logger = logging.getLogger(__name__)


def role_for(username: str, settings: Settings) -> str:
    return ROLE_ADMIN if username in settings.admin_usernames else ROLE_USER


def _identity_taken(db: Session, username: str, email: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(User).filter(or_(User.username == username, User.email == email))
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def register_user(db: Session, user_data: UserCreate, settings: Settings) -> User:
    if _identity_taken(db, user_data.username, user_data.email):
        raise Conflict("Username or email already in use")

    new_user = User(
        username = user_data.username,
        email = user_data.email,
        password_hash = get_password_hash(user_data.password),
        role = role_for(user_data.username, settings),
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username or email already in use")
    db.refresh(new_user)
    logger.info("Registered user %s with role %s", new_user.username, new_user.role)
    return new_user


def authenticate(db: Session, identifier: str, password: str) -> User:
    """Find the user by username or email and check the password."""
    user = db.query(User).filter(or_(User.username == identifier, User.email == identifier)).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %r", identifier)
        raise InvalidCredentials("Invalid username/email or password")
    return user


def issue_token(user: User, settings: Settings) -> str:
    return create_access_token(Claim(id = user.id, role = user.role), settings)


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.id).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound("User not found")
    return user


def update_profile(db: Session, user_id: int, profile: ProfileUpdate, profile_pic_url: Optional[str]) -> User:
    """Replace the identity fields and image reference; the role is left alone."""
    user = get_user(db, user_id)
    if _identity_taken(db, profile.username, profile.email, exclude_id = user_id):
        raise Conflict("Username or email already in use")

    user.username = profile.username
    user.email = profile.email
    user.profile_pic_url = profile_pic_url
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username or email already in use")
    db.refresh(user)
    logger.info("Updated profile of user %d", user_id)
    return user
