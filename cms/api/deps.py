import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cms.adapters.clock import SystemClock
from cms.adapters.fs.filestore import FileSystemStore
from cms.adapters.sqlite.repos import SQLiteActivityRepo, SQLiteContentRepo, SQLiteUserRepo
from cms.api.auth_utils import read_subject
from cms.domain.entities import Identity
from cms.rules.adapter import RulesAdapter
from cms.rules.models import Rules

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("CMS_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "cms.db")
        self.uploads_dir = self.data_dir / "uploads"
        self.rules_path = Path(os.environ.get("CMS_RULES_PATH", self.base_dir / "rules.yaml"))
        self.cors_origins = [
            o.strip()
            for o in os.environ.get("CMS_CORS_ORIGINS", "http://localhost:3000").split(",")
            if o.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules (loaded once at startup) ---
def get_rules(request: Request) -> Rules:
    rules: Rules = request.app.state.rules
    return rules


def get_rules_adapter(rules: Rules = Depends(get_rules)) -> RulesAdapter:
    return RulesAdapter(rules)


# --- Repos ---
def get_content_repo(settings: Settings = Depends(get_settings)) -> SQLiteContentRepo:
    return SQLiteContentRepo(settings.db_path)


def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


def get_activity_repo(settings: Settings = Depends(get_settings)) -> SQLiteActivityRepo:
    return SQLiteActivityRepo(settings.db_path)


# --- Adapters ---
def get_file_store(request: Request) -> FileSystemStore:
    """Attachment root acquired by the application lifespan."""
    store: FileSystemStore = request.app.state.file_store
    return store


_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Auth ---
bearer_scheme = HTTPBearer(auto_error=False)


def _token_from_request(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    # Header first, then the HttpOnly cookie
    if credentials is not None:
        return credentials.credentials
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        return cookie_token.split(" ", 1)[1]
    return None


def _resolve_identity(token: str, user_repo: SQLiteUserRepo) -> Identity | None:
    user_id = read_subject(token)
    if user_id is None:
        return None

    user = user_repo.get_by_id(user_id)
    if not user:
        return None
    return Identity(user_id=user.id, name=user.name, role=user.role)


def get_optional_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> Identity | None:
    """Identity of the caller, or None for anonymous or unusable tokens."""
    token = _token_from_request(request, credentials)
    if not token:
        return None
    identity = _resolve_identity(token, user_repo)
    if identity is None:
        logger.debug("Ignoring unusable token on public request")
    return identity


def get_current_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> Identity:
    token = _token_from_request(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = _resolve_identity(token, user_repo)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized, admin access required",
        )
    return identity
