"""
Database models for the tool directory.

Categories and tools are administrator-owned, favorites belong to the user
who created them, and clicks are an append-only event log.
"""

from .category import Category
from .tool import Tool
from .favorite import Favorite
from .click import ClickEvent
from .profile import Profile

__all__ = ["Category", "Tool", "Favorite", "ClickEvent", "Profile"]
