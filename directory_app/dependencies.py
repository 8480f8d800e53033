"""
FastAPI dependencies for dependency injection.

Provides the cache singleton, the session factory used by background click
recording, the caller's identity, and one provider per service.

Pattern: Dependency Injection
- Routes depend on services, services depend on infrastructure
- Tests override get_db / get_session_factory / get_cache
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from directory_app.auth.identity import Actor, IdentityProvider
from directory_app.cache.factory import CacheFactory, CacheBackend
from directory_app.cache.strategies import CacheStrategy
from directory_app.config import settings
from directory_app.database.connection import SessionLocal, get_db
from directory_app.services.analytics_service import AnalyticsService
from directory_app.services.catalog_service import CatalogService
from directory_app.services.category_service import CategoryService
from directory_app.services.click_recorder import ClickRecorder
from directory_app.services.favorite_service import FavoriteService
from directory_app.services.tool_service import ToolService


@lru_cache()
def get_cache() -> CacheStrategy:
    """Cache instance (singleton), backend chosen by settings.cache_backend."""
    backend = CacheBackend(settings.cache_backend)
    return CacheFactory.create(backend)


def get_session_factory():
    """Session factory for work that outlives the request (background tasks)."""
    return SessionLocal


def get_actor_id(request: Request) -> Optional[str]:
    """User id asserted by the upstream auth layer, None when anonymous."""
    value = request.headers.get(settings.identity_header)
    return value.strip() if value and value.strip() else None


def get_identity_provider(db: Session = Depends(get_db)) -> IdentityProvider:
    return IdentityProvider(db)


def get_actor(
    actor_id: Optional[str] = Depends(get_actor_id),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> Actor:
    """Resolved for this request only; mutating services re-resolve on each call."""
    return identity.resolve(actor_id)


def get_click_recorder(session_factory=Depends(get_session_factory)) -> ClickRecorder:
    return ClickRecorder(session_factory=session_factory)


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_category_service(
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> CategoryService:
    return CategoryService(db=db, identity=identity)


def get_tool_service(
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
    cache: CacheStrategy = Depends(get_cache),
) -> ToolService:
    return ToolService(db=db, identity=identity, cache=cache)


def get_favorite_service(
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> FavoriteService:
    return FavoriteService(db=db, identity=identity)


def get_analytics_service(
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> AnalyticsService:
    return AnalyticsService(db=db, identity=identity)
