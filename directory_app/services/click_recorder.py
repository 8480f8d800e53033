"""
Click Recorder

Appends one ClickEvent per tool opening. Runs after the redirect has been
sent (FastAPI background task), so nothing here may raise: failures are
logged and the click is dropped. There is no retry at this layer.

The tool's cached clicks_count is bumped with an atomic
UPDATE ... SET clicks_count = clicks_count + 1 in the same transaction as the
event insert, so the counter and the log move together and concurrent clicks
cannot lose increments.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from directory_app.database.connection import SessionLocal
from directory_app.models.click import ClickEvent
from directory_app.models.tool import Tool

logger = logging.getLogger(__name__)

REFERRER_MAX = 2048
USER_AGENT_MAX = 512


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    if value is None:
        return None
    return value[:limit]


def _close(db, tool_id: str):
    try:
        db.close()
    except Exception as e:
        logger.warning("Closing click session for tool %s failed: %s", tool_id, e)


def _discard(db, tool_id: str):
    """Roll back and close; a dead connection can fail both."""
    try:
        db.rollback()
    except Exception as e:
        logger.warning("Rollback after click on tool %s failed: %s", tool_id, e)
    _close(db, tool_id)


class ClickRecorder:
    """
    Records click events with its own short-lived sessions.

    Args:
        session_factory: callable returning a new Session (SessionLocal by default)
    """

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def record_click(
        self,
        tool_id: str,
        user_id: Optional[str] = None,
        referrer: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        """
        Store a click for tool_id. Returns True if it was stored.

        Never raises.
        """
        try:
            db = self.session_factory()
        except Exception:
            logger.exception("Could not open a session to record click on tool %s", tool_id)
            return False

        try:
            result = db.execute(
                update(Tool)
                .where(Tool.id == tool_id)
                .values(clicks_count=Tool.clicks_count + 1)
            )
            if result.rowcount == 0:
                _discard(db, tool_id)
                logger.warning("Dropping click for unknown tool %s", tool_id)
                return False

            db.add(ClickEvent(
                tool_id=tool_id,
                user_id=user_id or None,
                clicked_at=datetime.now(timezone.utc),
                referrer=_clip(referrer, REFERRER_MAX),
                user_agent=_clip(user_agent, USER_AGENT_MAX),
            ))
            db.commit()
        except SQLAlchemyError as e:
            logger.warning("Failed to record click on tool %s: %s", tool_id, e)
            _discard(db, tool_id)
            return False

        _close(db, tool_id)
        logger.debug("Recorded click on tool %s (user=%s)", tool_id, user_id or "anonymous")
        return True
