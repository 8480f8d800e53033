from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime

from directory_app.database.connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClickEvent(Base):
    """
    Append-only record of a tool being opened.

    Source of truth for analytics. Rows are never updated or deleted, so there
    is no foreign key to tools: events outlive the tool they point to.
    """
    __tablename__ = "clicks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tool_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(36), nullable=True, index=True)  # NULL = anonymous
    clicked_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    referrer = Column(String(2048), nullable=True)
    user_agent = Column(String(512), nullable=True)

    def __repr__(self):
        return f"<ClickEvent {self.id} for tool {self.tool_id}>"
