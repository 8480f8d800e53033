from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from directory_app.database.connection import Base
from directory_app.models._ids import new_id


class Category(Base):
    """
    Administrator-defined grouping of tools.

    Deleting a category never deletes its tools: they are moved to
    uncategorized (category_id = NULL) by the category service.
    """
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Category {self.name}>"
