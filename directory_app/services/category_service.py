import logging
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from directory_app.auth.identity import IdentityProvider
from directory_app.errors import NotFoundError, ReferentialConflictError, ValidationError
from directory_app.models.category import Category
from directory_app.models.tool import Tool
from directory_app.schemas.category import CategoryCreate, CategoryDeletion, CategoryUpdate
from directory_app.services.store import store_operation
from directory_app.services.validation import validate_category

logger = logging.getLogger(__name__)


class DeletionState(str, Enum):
    """Terminal states of a delete request (Blocked is raised as ReferentialConflictError)."""
    DELETED = "deleted"
    CANCELLED = "cancelled"


class CategoryService:
    """
    Category CRUD and the category deletion lifecycle.

    Every mutating call resolves the caller's capability first; nothing about
    the caller is kept between calls.

    Deletion (soft cascade):
        Requested -> ReferenceCheck -> Delete              (no tools reference it)
                                    -> Blocked             (tools reference it, confirm not given)
                                    -> Cancelled           (confirm=False)
                                    -> Reassign & Delete   (confirm=True)
    Reassigned tools keep existing with category_id = NULL (uncategorized).
    """

    def __init__(self, db: Session, identity: IdentityProvider):
        self.db = db
        self.identity = identity

    async def list_categories(self) -> List[Category]:
        with store_operation(self.db, "list categories"):
            return self.db.query(Category).order_by(Category.name).all()

    async def create_category(self, actor_id: Optional[str], data: CategoryCreate) -> Category:
        self.identity.require_admin(actor_id, "add categories")
        name, description = validate_category(data.name, data.description)

        with store_operation(self.db, "create category"):
            self._ensure_unique_name(name)
            category = Category(name=name, description=description)
            self.db.add(category)
            self.db.commit()
            self.db.refresh(category)

        logger.info("Category %s created by %s", category.id, actor_id)
        return category

    async def update_category(
        self,
        actor_id: Optional[str],
        category_id: str,
        data: CategoryUpdate,
    ) -> Category:
        self.identity.require_admin(actor_id, "edit categories")
        name, description = validate_category(data.name, data.description)

        with store_operation(self.db, "update category"):
            category = self._get_or_404(category_id)
            self._ensure_unique_name(name, exclude_id=category_id)
            category.name = name
            category.description = description
            self.db.commit()
            self.db.refresh(category)

        return category

    async def delete_category(
        self,
        actor_id: Optional[str],
        category_id: str,
        confirm: Optional[bool] = None,
    ) -> CategoryDeletion:
        """
        Delete a category, moving its tools to uncategorized once confirmed.

        Args:
            confirm: None to ask, True to reassign dependent tools and delete,
                False to cancel. Ignored when no tool references the category.

        Raises:
            ReferentialConflictError: tools reference the category and confirm
                is None; the category is left untouched.
        """
        self.identity.require_admin(actor_id, "delete categories")

        with store_operation(self.db, "delete category"):
            category = self._get_or_404(category_id)
            dependent = self.count_dependent_tools(category_id)

            if dependent > 0:
                if confirm is None:
                    raise ReferentialConflictError(category_id, dependent)
                if confirm is False:
                    logger.info("Deletion of category %s cancelled", category_id)
                    return CategoryDeletion(
                        category_id=category_id,
                        state=DeletionState.CANCELLED.value,
                    )
                self.db.query(Tool).filter(Tool.category_id == category_id).update(
                    {Tool.category_id: None}, synchronize_session=False
                )

            self.db.delete(category)
            self.db.commit()

        logger.info(
            "Category %s deleted by %s, %d tool(s) moved to uncategorized",
            category_id, actor_id, dependent,
        )
        return CategoryDeletion(
            category_id=category_id,
            state=DeletionState.DELETED.value,
            reassigned_tools=dependent,
        )

    def count_dependent_tools(self, category_id: str) -> int:
        return self.db.query(Tool).filter(Tool.category_id == category_id).count()

    def _get_or_404(self, category_id: str) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if category is None:
            raise NotFoundError("Category not found", detail=f"category_id={category_id}")
        return category

    def _ensure_unique_name(self, name: str, exclude_id: Optional[str] = None):
        query = self.db.query(Category).filter(Category.name == name)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first() is not None:
            raise ValidationError("name", f"A category named '{name}' already exists")
