"""
Identity resolution and capability checks.

The caller's user id comes from the request (see dependencies.get_actor_id);
its capability is read from the profiles table on every call to resolve().
Nothing is cached: a role revoked between two requests takes effect on the
next mutating call.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from directory_app.errors import AuthorizationError, TransientStoreError
from directory_app.models.profile import Profile


class Capability(str, Enum):
    ADMIN = "admin"
    USER = "user"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class Actor:
    user_id: Optional[str]
    capability: Capability

    @property
    def is_authenticated(self) -> bool:
        return self.capability is not Capability.UNAUTHENTICATED

    @property
    def is_admin(self) -> bool:
        return self.capability is Capability.ADMIN


ANONYMOUS = Actor(user_id=None, capability=Capability.UNAUTHENTICATED)


class IdentityProvider:
    """Resolves a user id to an Actor using the profiles table."""

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, user_id: Optional[str]) -> Actor:
        if not user_id:
            return ANONYMOUS

        try:
            profile = self.db.query(Profile).filter(Profile.id == user_id).first()
        except SQLAlchemyError as e:
            raise TransientStoreError("resolve identity", e) from e

        # Signed-in users without a profile row are ordinary users
        if profile is not None and profile.role == Capability.ADMIN.value:
            return Actor(user_id=user_id, capability=Capability.ADMIN)
        return Actor(user_id=user_id, capability=Capability.USER)

    def require_admin(self, user_id: Optional[str], action: str) -> Actor:
        """Resolve the actor and fail unless it holds the admin capability."""
        actor = self.resolve(user_id)
        if not actor.is_authenticated:
            raise AuthorizationError(f"Sign in to {action}", authenticated=False)
        if not actor.is_admin:
            raise AuthorizationError(f"Administrator role required to {action}")
        return actor

    def require_user(self, user_id: Optional[str], action: str) -> Actor:
        actor = self.resolve(user_id)
        if not actor.is_authenticated:
            raise AuthorizationError(f"Sign in to {action}", authenticated=False)
        return actor
