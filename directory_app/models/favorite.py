from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from directory_app.database.connection import Base


class Favorite(Base):
    """A user's bookmark of a tool. At most one row per (user_id, tool_id)."""
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "tool_id", name="uq_favorites_user_tool"),
    )

    user_id = Column(String(36), primary_key=True)
    tool_id = Column(
        String(36),
        ForeignKey("tools.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
