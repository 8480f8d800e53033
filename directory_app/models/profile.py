from sqlalchemy import Column, String

from directory_app.database.connection import Base


class Profile(Base):
    """Role attribute per user id; role is "user" or "admin"."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    role = Column(String(20), nullable=False, default="user")
