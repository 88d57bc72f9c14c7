from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from config import Settings, get_settings
from schemas.schemas import UserCreate, UserLogin, UserResponse, TokenResponse
from services import users

router = APIRouter(
    prefix = "/api",
    tags = ["Authentication"]
)

@router.post("/register", response_model = UserResponse, status_code = status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """
    Register a new user in the system.

    This endpoint creates a new user account after verifying that neither the
    username nor the email is already taken. The password is securely hashed
    before being stored, and the role is `admin` only for the configured
    privileged usernames.

    Args:
        user_data (UserCreate): The user details including username, email, and password.
        db (Session): Database session dependency.
        settings (Settings): Application settings dependency.

    Raises:
        Conflict: If the username or the email is already in use.

    Returns:
        UserResponse: The newly created user object.
    """
    return users.register_user(db, user_data, settings)

@router.post("/login", response_model = TokenResponse)
def login(login_data: UserLogin, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """
    Authenticate a user and generate an access token.

    The identifier may be either the username or the email of the account.

    Raises:
        InvalidCredentials: If no user matches or the password is wrong.

    Returns:
        dict: A dictionary containing the signed token.
    """
    user = users.authenticate(db, login_data.identifier, login_data.password)
    return {"token": users.issue_token(user, settings)}
