"""
Tests for the catalog view and the catalog state transitions.
"""
import asyncio
from types import SimpleNamespace

import pytest

from directory_app.catalog.state import (
    CatalogState,
    ClickCounter,
    counts_reconciled,
    favorite_toggled,
    tool_clicked,
)
from directory_app.catalog.view import build_catalog_view, bucket_names
from directory_app.errors import AuthorizationError, NotFoundError
from directory_app.services.catalog_service import CatalogService
from directory_app.services.click_recorder import ClickRecorder
from directory_app.services.favorite_service import FavoriteService

from tests.conftest import USER_ID, TestingSessionLocal

CATEGORIES = [
    SimpleNamespace(id="c1", name="Chat"),
    SimpleNamespace(id="c2", name="Image"),
]


def tool(tool_id, name, description="", category_id=None, clicks_count=0):
    return SimpleNamespace(
        id=tool_id,
        name=name,
        description=description,
        url=f"https://{tool_id}.example.com",
        icon=None,
        category_id=category_id,
        clicks_count=clicks_count,
    )


TOOLS = [
    tool("t1", "ChatGPT", "Conversational assistant", "c1", 10),
    tool("t2", "Claude", "Helpful chat model", "c1", 7),
    tool("t3", "Midjourney", "Image generation", "c2", 3),
    tool("t4", "Orphan", "No category left"),
]


class TestCatalogView:
    """Bucket selection and text search"""

    def test_all_tools_is_default(self):
        view = build_catalog_view(CATEGORIES, TOOLS, set())

        assert view.selected == "All Tools"
        assert [t.id for t in view.tools] == ["t1", "t2", "t3", "t4"]

    def test_category_bucket(self):
        view = build_catalog_view(CATEGORIES, TOOLS, set(), selected="Chat")

        assert [t.id for t in view.tools] == ["t1", "t2"]

    def test_query_matches_name_or_description_case_insensitive(self):
        view = build_catalog_view(CATEGORIES, TOOLS, set(), query="CHAT")

        # name "ChatGPT", description "Helpful chat model"
        assert [t.id for t in view.tools] == ["t1", "t2"]

    def test_query_and_bucket_combine(self):
        view = build_catalog_view(CATEGORIES, TOOLS, set(), query="generation", selected="Chat")

        assert view.tools == []

    def test_blank_query_matches_everything(self):
        view = build_catalog_view(CATEGORIES, TOOLS, set(), query="   ")

        assert len(view.tools) == 4

    def test_favorites_bucket_for_signed_in_user(self):
        view = build_catalog_view(
            CATEGORIES, TOOLS, {"t3"}, selected="My Favorites", authenticated=True
        )

        assert [t.id for t in view.tools] == ["t3"]
        assert view.tools[0].is_favorite

    def test_favorites_bucket_unavailable_when_signed_out(self):
        view = build_catalog_view(CATEGORIES, TOOLS, {"t3"}, selected="My Favorites")

        assert view.selected == "All Tools"
        assert "My Favorites" not in [b.name for b in view.buckets]
        assert not any(t.is_favorite for t in view.tools)

    def test_missing_bucket_falls_back_to_first(self):
        view = build_catalog_view(CATEGORIES, TOOLS, set(), selected="Deleted Category")

        assert view.selected == "All Tools"
        assert len(view.tools) == 4

    def test_bucket_order(self):
        assert bucket_names(CATEGORIES, authenticated=True) == [
            "All Tools", "My Favorites", "Chat", "Image",
        ]
        assert bucket_names(CATEGORIES, authenticated=False) == ["All Tools", "Chat", "Image"]

    def test_bucket_counts_follow_query(self):
        view = build_catalog_view(CATEGORIES, TOOLS, {"t1"}, query="chat", authenticated=True)

        counts = {b.name: b.count for b in view.buckets}
        assert counts == {"All Tools": 2, "My Favorites": 1, "Chat": 2, "Image": 0}

    def test_tools_without_category_are_labelled(self):
        view = build_catalog_view(CATEGORIES, TOOLS, set(), query="orphan")

        assert view.tools[0].category == "Uncategorized"

    def test_category_bucket_matches_by_id_not_label(self):
        lookalike = CATEGORIES + [SimpleNamespace(id="c9", name="Uncategorized")]

        view = build_catalog_view(lookalike, TOOLS, set(), selected="Uncategorized")

        assert view.selected == "Uncategorized"
        assert view.tools == []
        assert {b.name: b.count for b in view.buckets}["Uncategorized"] == 0

    def test_tool_with_deleted_category_only_in_all_tools(self):
        stale = [tool("t9", "Stale", category_id="gone")]

        view = build_catalog_view(CATEGORIES, stale, set())

        assert {b.name: b.count for b in view.buckets} == {"All Tools": 1, "Chat": 0, "Image": 0}

    def test_click_overrides(self):
        view = build_catalog_view(CATEGORIES, TOOLS, set(), clicks={"t3": 4})

        assert {t.id: t.clicks_count for t in view.tools}["t3"] == 4


class TestCatalogState:
    """Optimistic click counts and favorites"""

    @pytest.fixture
    def state(self):
        return CatalogState.from_records(TOOLS, {"t1"})

    def test_click_is_shown_immediately(self, state):
        clicked = tool_clicked(state, "t3")

        assert clicked.displayed("t3") == 4
        assert clicked.counters["t3"] == ClickCounter(persisted=3, pending=1)
        # previous state is untouched
        assert state.displayed("t3") == 3

    def test_reconcile_absorbs_pending(self, state):
        clicked = tool_clicked(tool_clicked(state, "t3"), "t3")

        reconciled = counts_reconciled(clicked, {"t3": 4})

        assert reconciled.counters["t3"] == ClickCounter(persisted=4, pending=1)
        assert reconciled.displayed("t3") == 5

    def test_reconcile_with_clicks_from_others(self, state):
        clicked = tool_clicked(state, "t3")

        # two other users clicked as well: the store already holds all three
        reconciled = counts_reconciled(clicked, {"t3": 6})

        assert reconciled.counters["t3"] == ClickCounter(persisted=6, pending=0)

    def test_reconcile_with_stale_store_value_keeps_pending(self, state):
        clicked = tool_clicked(state, "t3")

        reconciled = counts_reconciled(clicked, {"t3": 3})

        assert reconciled.displayed("t3") == 4

    def test_lower_store_value_is_accepted(self, state):
        reconciled = counts_reconciled(state, {"t1": 8})

        assert reconciled.counters["t1"] == ClickCounter(persisted=8, pending=0)

    def test_unknown_tool_click(self, state):
        assert tool_clicked(state, "new").displayed("new") == 1

    def test_favorite_toggle(self, state):
        added = favorite_toggled(state, "t2", True)
        removed = favorite_toggled(added, "t1", False)

        assert added.favorites == frozenset({"t1", "t2"})
        assert removed.favorites == frozenset({"t2"})

    def test_displayed_counts_feed_the_view(self, state):
        clicked = tool_clicked(state, "t2")

        view = build_catalog_view(
            CATEGORIES, TOOLS, clicked.favorites,
            authenticated=True, clicks=clicked.displayed_counts(),
        )

        assert {t.id: t.clicks_count for t in view.tools}["t2"] == 8


class TestCatalogService:
    """Catalog responses rendered from the state container"""

    @pytest.fixture
    def service(self, db_session):
        return CatalogService(db_session)

    @pytest.fixture
    def favorites(self, db_session, identity):
        return FavoriteService(db_session, identity)

    def test_open_tool_returns_optimistic_count(self, service, identity, make_tool):
        target = make_tool("Counted", clicks_count=4)

        opened = asyncio.run(service.open_tool(identity.resolve(USER_ID), target.id))

        assert opened.clicks_count == 5
        assert opened.url == target.url

    def test_open_unknown_tool(self, service, identity):
        with pytest.raises(NotFoundError):
            asyncio.run(service.open_tool(identity.resolve(None), "missing"))

    def test_set_favorite_returns_refreshed_view(self, service, favorites, identity, make_tool):
        starred = make_tool("Starred")
        make_tool("Plain")

        view = asyncio.run(service.set_favorite(
            identity.resolve(USER_ID), starred.id, True, favorites, selected="My Favorites"
        ))

        assert view.selected == "My Favorites"
        assert [t.id for t in view.tools] == [starred.id]
        assert view.tools[0].is_favorite

    def test_unset_favorite(self, service, favorites, identity, make_tool):
        starred = make_tool("Starred")
        actor = identity.resolve(USER_ID)
        asyncio.run(service.set_favorite(actor, starred.id, True, favorites))

        view = asyncio.run(service.set_favorite(actor, starred.id, False, favorites))

        assert not any(t.is_favorite for t in view.tools)
        assert {b.name: b.count for b in view.buckets}["My Favorites"] == 0

    def test_clicks_recorded_meanwhile_are_reconciled(
        self, service, favorites, identity, make_tool
    ):
        target = make_tool("Busy", clicks_count=2)
        recorder = ClickRecorder(session_factory=TestingSessionLocal)

        class ClickWhileSaving(FavoriteService):
            async def add_favorite(self, actor_id, tool_id):
                recorder.record_click(tool_id, "someone-else")
                return await super().add_favorite(actor_id, tool_id)

        racing = ClickWhileSaving(favorites.db, favorites.identity)
        view = asyncio.run(service.set_favorite(
            identity.resolve(USER_ID), target.id, True, racing
        ))

        assert view.tools[0].clicks_count == 3

    def test_anonymous_cannot_favorite(self, service, favorites, identity, make_tool):
        target = make_tool("Starred")

        with pytest.raises(AuthorizationError):
            asyncio.run(service.set_favorite(identity.resolve(None), target.id, True, favorites))
