"""Chat statistics recorder.

Counts messages per sender, per distinct content, and per hour of day, day
of week and month for each room. Buckets are taken in the statistics
timezone (KST by default). Day of week runs 0=Sunday .. 6=Saturday.
"""
from __future__ import annotations

import datetime
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from dateutil import tz

from db import models
from utils.text_utils import is_blacklisted
from .commands import IncomingMessage

logger = logging.getLogger(__name__)

DEFAULT_STATS_TIMEZONE = "Asia/Seoul"


class ChatStatistics:
    def __init__(self, db_path: str, timezone: Optional[datetime.tzinfo] = None):
        self.db_path = db_path
        self.timezone = timezone or tz.gettz(DEFAULT_STATS_TIMEZONE)

    def local_time(self, timestamp: int) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(timestamp, tz=self.timezone)

    def hour_of(self, timestamp: int) -> int:
        return self.local_time(timestamp).hour

    def day_of_week_of(self, timestamp: int) -> int:
        return (self.local_time(timestamp).weekday() + 1) % 7

    def month_of(self, timestamp: int) -> int:
        return self.local_time(timestamp).month

    async def record_message(self, message: IncomingMessage) -> bool:
        """Record one message; returns False when it was filtered out."""
        if is_blacklisted(message.content):
            return False
        ts = int(message.time or time.time())
        await models.record_chat_message(
            self.db_path,
            message.room_id,
            message.sender_hash,
            message.sender_name,
            message.content,
            ts,
            self.hour_of(ts),
            self.day_of_week_of(ts),
            self.month_of(ts),
        )
        return True

    async def top_users(self, room_id: str, limit: int = 10) -> List[Dict[str, Any]]:
        return await models.get_top_users(self.db_path, room_id, limit)

    async def user_rank(self, room_id: str, sender_hash: str) -> Optional[Tuple[int, int]]:
        return await models.get_user_rank(self.db_path, room_id, sender_hash)

    async def top_messages(self, room_id: str, limit: int = 10) -> List[Dict[str, Any]]:
        return await models.get_top_messages(self.db_path, room_id, limit)

    async def room_summary(self, room_id: str) -> Tuple[int, int]:
        return await models.get_room_statistics(self.db_path, room_id)

    async def hourly(self, room_id: str, sender_hash: Optional[str] = None) -> List[Tuple[int, int]]:
        return await models.get_period_statistics(self.db_path, "hour", room_id, sender_hash)

    async def daily(self, room_id: str, sender_hash: Optional[str] = None) -> List[Tuple[int, int]]:
        return await models.get_period_statistics(self.db_path, "day_of_week", room_id, sender_hash)

    async def monthly(self, room_id: str, sender_hash: Optional[str] = None) -> List[Tuple[int, int]]:
        return await models.get_period_statistics(self.db_path, "month", room_id, sender_hash)

    async def content_enabled(self, room_id: str) -> bool:
        return await models.is_message_content_enabled(self.db_path, room_id)

    async def set_content_enabled(self, room_id: str, room_name: str, enabled: bool, set_by: str) -> int:
        """Toggle message content ranking for a room; disabling wipes stored contents."""
        deleted = await models.set_message_content_enabled(
            self.db_path, room_id, room_name, enabled, set_by, int(time.time())
        )
        logger.warning(
            "[RANKING_%s] Room %s set by %s (%s contents deleted)",
            "ENABLE" if enabled else "DISABLE", room_name, set_by, deleted,
        )
        return deleted

    async def purge_blacklisted(self) -> int:
        """Drop stored message contents that the blacklist would now reject."""
        deleted = await models.delete_message_contents_where(self.db_path, is_blacklisted)
        logger.info("[STARTUP] Deleted %s blacklisted message contents", deleted)
        return deleted
