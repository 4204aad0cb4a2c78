"""
FastAPI dependencies for dependency injection.

This module provides the singleton key-value store, the per-request
URL pool service and the shared-secret check.

Pattern: Dependency Injection
- Loose coupling between routes and the store backend
- Easy to test (override get_store with an in-memory store)
"""

import secrets
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from urlpool_app.config import settings
from urlpool_app.store.factory import KVStoreFactory, KVStoreBackend
from urlpool_app.store.strategies import KVStoreStrategy

AUTH_SCHEME = "Secret"


@lru_cache()
def get_store() -> KVStoreStrategy:
    """
    Get key-value store instance (singleton).

    Factory gets config from settings internally.
    @lru_cache ensures this is called only once.
    """
    backend = KVStoreBackend(settings.kv_backend)
    return KVStoreFactory.create(backend)


def get_url_pool_service(store: KVStoreStrategy = Depends(get_store)):
    """Get URLPoolService with the store injected"""
    from urlpool_app.services.url_pool_service import URLPoolService
    return URLPoolService(store=store)


def require_secret(authorization: Optional[str] = Header(None)) -> None:
    """
    Check `Authorization: Secret <token>` against the configured secret.

    Skipped when no secret is configured. Runs before the service (and
    therefore the store) is touched.

    Raises:
        HTTPException: 401 on a missing or wrong header
    """
    if not settings.secret:
        return

    expected = f"{AUTH_SCHEME} {settings.secret}"
    if authorization is None or not secrets.compare_digest(
        authorization.encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing secret"
        )
