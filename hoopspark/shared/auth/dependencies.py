"""FastAPI dependencies for config, collaborators and caller identity."""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hoopspark.shared.auth.auth_provider import AuthProvider, SupabaseAuthProvider
from hoopspark.shared.config import IntakeConfig
from hoopspark.shared.records.record_store import SqlRecordStore
from hoopspark.shared.storage.object_storage import S3ObjectStorage

security = HTTPBearer(auto_error=False)


@lru_cache
def get_config() -> IntakeConfig:
    return IntakeConfig.from_env()


@lru_cache
def get_record_store() -> SqlRecordStore:
    return SqlRecordStore()


@lru_cache
def get_object_storage() -> S3ObjectStorage:
    return S3ObjectStorage()


def get_bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Optional[str]:
    """Bearer token from the Authorization header, or None."""
    return credentials.credentials if credentials else None


def get_auth_provider(token: Optional[str] = Depends(get_bearer_token)) -> AuthProvider:
    """Per-request auth provider resolving the caller's bearer token."""
    return SupabaseAuthProvider(token)
