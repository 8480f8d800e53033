"""
Browsable catalog view.

Joins tools with category names and favorite flags, then applies the
selected bucket and the free-text query. Pure: callers load the records.
"""

from typing import AbstractSet, Dict, List, Mapping, Optional, Sequence

from directory_app.config import settings
from directory_app.schemas.catalog import CatalogBucket, CatalogTool, CatalogView


def matches_query(tool: CatalogTool, query: str) -> bool:
    """Case-insensitive substring match on name or description; blank matches all."""
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return needle in tool.name.lower() or needle in (tool.description or "").lower()


def bucket_names(categories: Sequence, authenticated: bool) -> List[str]:
    """All Tools first, then My Favorites for signed-in users, then categories in store order."""
    names = [settings.all_tools_bucket]
    if authenticated:
        names.append(settings.favorites_bucket)
    names.extend(category.name for category in categories)
    return names


def join_tools(
    tools: Sequence,
    categories: Sequence,
    favorite_ids: AbstractSet[str],
    clicks: Optional[Dict[str, int]] = None,
) -> List[CatalogTool]:
    """
    Attach category names and favorite flags to raw tool records.

    `clicks` overrides the stored counter per tool id (used for the
    optimistic count held by CatalogState).
    """
    names = {category.id: category.name for category in categories}
    clicks = clicks or {}
    return [
        CatalogTool(
            id=tool.id,
            name=tool.name,
            description=tool.description or "",
            url=tool.url,
            icon=tool.icon,
            category_id=tool.category_id,
            category=names.get(tool.category_id, settings.uncategorized_label),
            clicks_count=clicks.get(tool.id, tool.clicks_count or 0),
            is_favorite=tool.id in favorite_ids,
        )
        for tool in tools
    ]


def in_bucket(tool: CatalogTool, bucket: str, category_ids: Mapping[str, str]) -> bool:
    """Category buckets match on the tool's category id, never on the display label."""
    if bucket == settings.all_tools_bucket:
        return True
    if bucket == settings.favorites_bucket:
        return tool.is_favorite
    category_id = category_ids.get(bucket)
    return category_id is not None and tool.category_id == category_id


def build_catalog_view(
    categories: Sequence,
    tools: Sequence,
    favorite_ids: AbstractSet[str],
    query: str = "",
    selected: Optional[str] = None,
    authenticated: bool = False,
    clicks: Optional[Dict[str, int]] = None,
) -> CatalogView:
    """
    Produce the filtered catalog for one request.

    A selected bucket that does not exist (deleted category, favorites while
    signed out, nothing chosen yet) falls back to the first bucket.
    Tool order is the input order.
    """
    buckets = bucket_names(categories, authenticated)
    category_ids = {category.name: category.id for category in categories}
    if selected not in buckets:
        selected = buckets[0]

    # Favorites only mean something for a signed-in user
    favorites = favorite_ids if authenticated else frozenset()
    joined = join_tools(tools, categories, favorites, clicks)
    searched = [tool for tool in joined if matches_query(tool, query)]

    return CatalogView(
        selected=selected,
        query=query or "",
        buckets=[
            CatalogBucket(
                name=name,
                count=sum(1 for tool in searched if in_bucket(tool, name, category_ids)),
            )
            for name in buckets
        ],
        tools=[tool for tool in searched if in_bucket(tool, selected, category_ids)],
    )
