import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field

from src.specs.common.errors import ConfigurationError


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _positive_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer", details={"value": raw})
    return value


class Settings(BaseModel):
    """Runtime settings read from the Functions app environment."""

    cosmos_connection_string: Optional[str] = None
    cosmos_endpoint: Optional[str] = None
    cosmos_database: Optional[str] = None
    posts_container: str = "posts"
    comments_container: str = "comments"

    blob_connection_string: Optional[str] = None
    blob_account_url: Optional[str] = None
    media_container: str = "media"
    media_path_prefix: str = "covers"
    media_public_base_url: Optional[str] = None
    upload_chunk_size: int = Field(4 * 1024 * 1024, gt=0)

    auth_jwks_url: Optional[str] = None
    auth_audience: Optional[str] = None
    auth_issuer: Optional[str] = None
    session_cookie_name: str = "blog_session"
    login_url: str = "/api/admin/login"
    provider_signin_url: str = "/.auth/login/aad"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            cosmos_connection_string=_env("COSMOS_DB_CONNECTION_STRING"),
            cosmos_endpoint=_env("COSMOS_DB_ENDPOINT"),
            cosmos_database=_env("COSMOS_DB_NAME"),
            posts_container=_env("COSMOS_DB_CONTAINER_POSTS", "posts"),
            comments_container=_env("COSMOS_DB_CONTAINER_COMMENTS", "comments"),
            blob_connection_string=_env("PUBLIC_BLOB_CONNECTION_STRING"),
            blob_account_url=_env("PUBLIC_BLOB_ACCOUNT_URL"),
            media_container=_env("MEDIA_CONTAINER", "media"),
            media_path_prefix=_env("MEDIA_PATH_PREFIX", "covers"),
            media_public_base_url=_env("MEDIA_PUBLIC_BASE_URL"),
            upload_chunk_size=_positive_int("MEDIA_UPLOAD_CHUNK_SIZE", 4 * 1024 * 1024),
            auth_jwks_url=_env("AUTH_JWKS_URL"),
            auth_audience=_env("AUTH_AUDIENCE"),
            auth_issuer=_env("AUTH_ISSUER"),
            session_cookie_name=_env("AUTH_SESSION_COOKIE", "blog_session"),
            login_url=_env("AUTH_LOGIN_URL", "/api/admin/login"),
            provider_signin_url=_env("AUTH_PROVIDER_SIGNIN_URL", "/.auth/login/aad"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get or create the singleton Settings instance"""
    return Settings.from_env()
