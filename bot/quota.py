"""Per-room daily request quotas.

A room may carry one daily limit. Non-admin senders are counted per
(room, sender, calendar day); the day is part of the counter key so counters
reset by themselves at midnight in the ledger timezone.
"""
from __future__ import annotations

import datetime
import logging
import sqlite3
import time
from dataclasses import dataclass
from typing import Callable, Optional

from dateutil import tz

from db import models
from .admins import AdminRegistry
from .approval import PURPOSE_LIMIT, ApprovalCode, ApprovalCodeStore, ApprovalResult, Rejection

logger = logging.getLogger(__name__)


@dataclass
class UsageInfo:
    has_limit: bool
    daily_limit: Optional[int] = None
    used_today: Optional[int] = None


def parse_limit(value) -> Optional[int]:
    """Return value as a positive int, or None when it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


class QuotaLedger:
    def __init__(
        self,
        db_path: str,
        admins: AdminRegistry,
        codes: ApprovalCodeStore,
        clock: Callable[[], float] = time.time,
        timezone: Optional[datetime.tzinfo] = None,
    ):
        self.db_path = db_path
        self.admins = admins
        self.codes = codes
        self.clock = clock
        self.timezone = timezone or tz.UTC

    def today(self) -> str:
        return datetime.datetime.fromtimestamp(self.clock(), tz=self.timezone).strftime("%Y-%m-%d")

    async def set_limit(self, room_id: str, room_name: str, daily_limit, set_by: str) -> bool:
        limit = parse_limit(daily_limit)
        if limit is None:
            return False
        await models.upsert_room_limit(self.db_path, room_id, room_name, limit, set_by, int(self.clock()))
        logger.warning("[REQUEST_LIMIT_SET] Limit set to %s for room %s by %s", limit, room_name, set_by)
        return True

    async def request_limit(self, room_id: str, room_name: str, daily_limit, requested_by: str) -> Optional[str]:
        """Issue an approval code for a new room limit; None when the limit is invalid."""
        limit = parse_limit(daily_limit)
        if limit is None:
            return None
        return await self.codes.create_code(
            PURPOSE_LIMIT,
            {"daily_limit": limit},
            requester=requested_by,
            room_id=room_id,
            room_name=room_name,
        )

    async def approve_limit(self, code: str, approver: str) -> ApprovalResult:
        if not await self.admins.is_admin(approver):
            return ApprovalResult.rejected(Rejection.UNAUTHORIZED)

        set_at = int(self.clock())

        def _apply(cur: sqlite3.Cursor, record: ApprovalCode) -> Optional[Rejection]:
            limit = parse_limit(record.payload.get("daily_limit"))
            if limit is None or not record.room_id:
                return Rejection.INVALID_INPUT
            models.upsert_room_limit_on(cur, record.room_id, record.room_name or "", limit, approver, set_at)
            return None

        result = await self.codes.approve(code, PURPOSE_LIMIT, on_claim=_apply)
        if result:
            logger.warning(
                "[REQUEST_LIMIT_SET] Limit %s approved for room %s",
                result.record.payload.get("daily_limit"), result.record.room_name,
            )
        return result

    async def remove_limit(self, room_id: str, remover: str) -> bool:
        if not await self.admins.is_admin(remover):
            return False
        return await models.delete_room_limit(self.db_path, room_id)

    async def check_limit(self, room_id: str, identity: str) -> bool:
        if await self.admins.is_admin(identity):
            return True
        room_limit = await models.get_room_limit(self.db_path, room_id)
        if room_limit is None:
            return True
        used = await models.get_daily_request_count(self.db_path, room_id, identity, self.today())
        return used < int(room_limit["daily_limit"])

    async def increment(self, room_id: str, identity: str) -> None:
        if await self.admins.is_admin(identity):
            return
        await models.increment_daily_request(self.db_path, room_id, identity, self.today(), int(self.clock()))

    async def get_usage(self, room_id: str, identity: str) -> UsageInfo:
        room_limit = await models.get_room_limit(self.db_path, room_id)
        if room_limit is None:
            return UsageInfo(has_limit=False)
        used = await models.get_daily_request_count(self.db_path, room_id, identity, self.today())
        return UsageInfo(has_limit=True, daily_limit=int(room_limit["daily_limit"]), used_today=used)
