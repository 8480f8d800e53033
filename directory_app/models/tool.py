from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from directory_app.database.connection import Base
from directory_app.models._ids import new_id


class Tool(Base):
    """
    A cataloged external AI tool.

    clicks_count is a cache of COUNT(clicks WHERE tool_id = id). It is bumped
    atomically in the same transaction that inserts each click event and can
    be rebuilt from the event log by ToolService.reconcile_click_counts.
    """
    __tablename__ = "tools"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    url = Column(String(2048), nullable=False)
    icon = Column(String(255), nullable=True)  # URL or symbolic icon name
    category_id = Column(
        String(36),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    clicks_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Tool {self.name}>"
