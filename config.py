"""
Configuration Module

This module loads environment variables and builds the immutable settings object
for the application, such as database connection details, authentication settings
and image hosting credentials.

Dependencies:
    - dotenv for loading environment variables
    - logging for application warnings
"""
import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple
from dotenv import load_dotenv, find_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from the .env file, if there is one
load_dotenv(find_dotenv())

DEFAULT_ADMIN_USERNAMES = ("Admin1", "Admin2", "Admin3")
INSECURE_SECRET = "secretkey123"


def _split(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    # -----------------------------------
    # Database Configuration
    # -----------------------------------
    database_url: str = "sqlite:///./bookstore.db"

    # -----------------------------------
    # Security Configuration
    # -----------------------------------
    jwt_secret: str = INSECURE_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: Optional[int] = None
    admin_usernames: Tuple[str, ...] = DEFAULT_ADMIN_USERNAMES

    # -----------------------------------
    # Image Hosting Configuration
    # -----------------------------------
    cloudinary_cloud_name: str = ""
    cloudinary_upload_preset: str = "ouum5xwe"

    # -----------------------------------
    # Server Configuration
    # -----------------------------------
    port: int = 10000
    cors_origins: Tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build the settings from the process environment."""
        secret = os.getenv("JWT_SECRET")
        if not secret:
            secret = INSECURE_SECRET
            logger.warning("!!!WARNING!!!: JWT_SECRET is not set! Using an insecure default.")

        expire = os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES")
        admins = os.getenv("ADMIN_USERNAMES")
        origins = os.getenv("CORS_ORIGINS")

        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            jwt_secret=secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", cls.jwt_algorithm),
            access_token_expire_minutes=int(expire) if expire else None,
            admin_usernames=_split(admins) if admins else DEFAULT_ADMIN_USERNAMES,
            cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME", ""),
            cloudinary_upload_preset=os.getenv("CLOUDINARY_UPLOAD_PRESET", cls.cloudinary_upload_preset),
            port=int(os.getenv("PORT", cls.port)),
            cors_origins=_split(origins) if origins else ("*",),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings, built once on first use."""
    return Settings.from_env()
