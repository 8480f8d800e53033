"""
Tests for tool management, click recording and counter reconciliation.
"""
import asyncio
import logging

import pytest
from sqlalchemy.exc import OperationalError

from directory_app.cache.strategies import tool_url_key
from directory_app.errors import AuthorizationError, NotFoundError, ValidationError
from directory_app.models import ClickEvent, Favorite, Tool
from directory_app.schemas.tool import ToolCreate, ToolUpdate
from directory_app.services.click_recorder import ClickRecorder
from directory_app.services.tool_service import ToolService

from tests.conftest import ADMIN_ID, USER_ID, TestingSessionLocal


@pytest.fixture
def service(db_session, identity, cache):
    return ToolService(db_session, identity, cache=cache)


@pytest.fixture
def recorder():
    return ClickRecorder(session_factory=TestingSessionLocal)


class TestToolService:
    """Tool CRUD"""

    def test_create_tool(self, service, make_category):
        category = make_category("Chat")

        tool = asyncio.run(service.create_tool(ADMIN_ID, ToolCreate(
            name="ChatGPT",
            description="Assistant",
            url="https://chat.openai.com",
            icon="message-square",
            category_id=category.id,
        )))

        assert tool.id
        assert tool.clicks_count == 0
        assert tool.category_id == category.id

    @pytest.mark.parametrize("url", ["chat.openai.com", "not a url", "ftp://files.example.com", "https://"])
    def test_url_must_be_absolute(self, service, make_category, url):
        category = make_category("Chat")

        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(service.create_tool(ADMIN_ID, ToolCreate(
                name="Bad", url=url, category_id=category.id,
            )))

        assert exc_info.value.field == "url"

    def test_name_required(self, service, make_category):
        category = make_category("Chat")

        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(service.create_tool(ADMIN_ID, ToolCreate(
                name=" ", url="https://example.com", category_id=category.id,
            )))

        assert exc_info.value.field == "name"

    def test_category_required_and_must_exist(self, service):
        with pytest.raises(ValidationError) as missing:
            asyncio.run(service.create_tool(ADMIN_ID, ToolCreate(name="A", url="https://a.example.com")))
        with pytest.raises(ValidationError) as unknown:
            asyncio.run(service.create_tool(ADMIN_ID, ToolCreate(
                name="A", url="https://a.example.com", category_id="nope",
            )))

        assert missing.value.field == "category_id"
        assert unknown.value.field == "category_id"

    def test_user_cannot_create(self, service, db_session, make_category):
        category = make_category("Chat")

        with pytest.raises(AuthorizationError):
            asyncio.run(service.create_tool(USER_ID, ToolCreate(
                name="A", url="https://a.example.com", category_id=category.id,
            )))

        assert db_session.query(Tool).count() == 0

    def test_update_keeps_click_count(self, service, make_category, make_tool):
        category = make_category("Chat")
        tool = make_tool("Old", category, clicks_count=5)

        updated = asyncio.run(service.update_tool(ADMIN_ID, tool.id, ToolUpdate(
            name="New", url="https://new.example.com", category_id=category.id,
        )))

        assert updated.name == "New"
        assert updated.clicks_count == 5

    def test_update_unknown_tool(self, service, make_category):
        category = make_category("Chat")

        with pytest.raises(NotFoundError):
            asyncio.run(service.update_tool(ADMIN_ID, "missing", ToolUpdate(
                name="New", url="https://new.example.com", category_id=category.id,
            )))

    def test_delete_tool_keeps_click_history(self, service, db_session, recorder, make_tool):
        tool = make_tool("Gone")
        db_session.add(Favorite(user_id=USER_ID, tool_id=tool.id))
        db_session.commit()
        recorder.record_click(tool.id)

        asyncio.run(service.delete_tool(ADMIN_ID, tool.id))

        db_session.expire_all()
        assert db_session.get(Tool, tool.id) is None
        assert db_session.query(Favorite).filter_by(tool_id=tool.id).count() == 0
        assert db_session.query(ClickEvent).filter_by(tool_id=tool.id).count() == 1


class TestDestinationCache:
    """Cache-aside lookups for click-throughs"""

    def test_lookup_populates_cache(self, service, cache, make_tool):
        tool = make_tool("Cached", url="https://cached.example.com/")

        assert asyncio.run(service.get_destination(tool.id)) == "https://cached.example.com/"
        assert asyncio.run(cache.get(tool_url_key(tool.id))) == "https://cached.example.com/"

    def test_unknown_tool(self, service):
        assert asyncio.run(service.get_destination("missing")) is None

    def test_edit_invalidates_cache(self, service, make_category, make_tool):
        category = make_category("Chat")
        tool = make_tool("Moving", category, url="https://old.example.com/")
        asyncio.run(service.get_destination(tool.id))

        asyncio.run(service.update_tool(ADMIN_ID, tool.id, ToolUpdate(
            name="Moving", url="https://new.example.com/", category_id=category.id,
        )))

        assert asyncio.run(service.get_destination(tool.id)) == "https://new.example.com/"


class TestClickRecorder:
    """Append-only click events with an atomic counter"""

    def test_records_event_and_increments_counter(self, recorder, db_session, make_tool):
        tool = make_tool("Clicked")

        assert recorder.record_click(tool.id, USER_ID, "https://ref.example.com", "pytest") is True

        db_session.expire_all()
        event = db_session.query(ClickEvent).filter_by(tool_id=tool.id).one()
        assert event.user_id == USER_ID
        assert event.referrer == "https://ref.example.com"
        assert event.user_agent == "pytest"
        assert event.clicked_at is not None
        assert db_session.get(Tool, tool.id).clicks_count == 1

    def test_every_click_is_a_new_event(self, recorder, db_session, make_tool):
        tool = make_tool("Popular")

        for _ in range(3):
            recorder.record_click(tool.id)

        db_session.expire_all()
        assert db_session.query(ClickEvent).filter_by(tool_id=tool.id).count() == 3
        assert db_session.get(Tool, tool.id).clicks_count == 3

    def test_anonymous_click(self, recorder, db_session, make_tool):
        tool = make_tool("Public")

        recorder.record_click(tool.id, user_id=None)

        event = db_session.query(ClickEvent).filter_by(tool_id=tool.id).one()
        assert event.user_id is None

    def test_unknown_tool_is_dropped(self, recorder, db_session, caplog):
        with caplog.at_level(logging.WARNING):
            assert recorder.record_click("missing") is False

        assert db_session.query(ClickEvent).count() == 0
        assert "unknown tool" in caplog.text

    def test_store_failure_is_logged_not_raised(self, db_session, make_tool, caplog):
        tool = make_tool("Flaky")

        class BrokenSession:
            def execute(self, *args, **kwargs):
                raise OperationalError("UPDATE tools", {}, Exception("database is locked"))

            def rollback(self):
                pass

            def close(self):
                pass

        recorder = ClickRecorder(session_factory=BrokenSession)
        with caplog.at_level(logging.WARNING):
            assert recorder.record_click(tool.id) is False

        assert "Failed to record click" in caplog.text
        assert db_session.query(ClickEvent).count() == 0

    def test_failed_rollback_on_dead_connection_is_swallowed(self, make_tool, caplog):
        tool = make_tool("Flaky")

        class DeadSession:
            def execute(self, *args, **kwargs):
                raise OperationalError("UPDATE tools", {}, Exception("server closed the connection"))

            def rollback(self):
                raise OperationalError("ROLLBACK", {}, Exception("server closed the connection"))

            def close(self):
                raise OperationalError("CLOSE", {}, Exception("server closed the connection"))

        recorder = ClickRecorder(session_factory=DeadSession)
        with caplog.at_level(logging.WARNING):
            assert recorder.record_click(tool.id) is False

        assert "Rollback after click" in caplog.text
        assert "Closing click session" in caplog.text

    def test_session_factory_failure_is_swallowed(self, caplog):
        def no_session():
            raise RuntimeError("pool exhausted")

        recorder = ClickRecorder(session_factory=no_session)

        assert recorder.record_click("any") is False


class TestReconcile:
    """Rebuilding clicks_count from the click log"""

    def test_counter_matches_event_log_after_reconcile(
        self, service, recorder, db_session, make_tool
    ):
        drifted = make_tool("Drifted", clicks_count=42)
        fresh = make_tool("Fresh")
        recorder.record_click(drifted.id)
        recorder.record_click(fresh.id)
        recorder.record_click(fresh.id)

        result = asyncio.run(service.reconcile_click_counts(ADMIN_ID))

        assert result.tools_checked == 2
        assert result.tools_corrected == 1
        db_session.expire_all()
        for tool in db_session.query(Tool).all():
            events = db_session.query(ClickEvent).filter_by(tool_id=tool.id).count()
            assert tool.clicks_count == events

    def test_requires_admin(self, service):
        with pytest.raises(AuthorizationError):
            asyncio.run(service.reconcile_click_counts(USER_ID))
