"""Admin registry: the chief admin plus admins approved by the chief."""
from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from db import models
from .approval import PURPOSE_ADMIN, ApprovalCode, ApprovalCodeStore, ApprovalResult, Rejection

logger = logging.getLogger(__name__)

CHIEF_ADMIN_HASH = "7df4a497868641e1de7bdac030efdabaca6fbcb52fe600ce58077d357d240900"


@dataclass
class AdminEntry:
    room_name: str
    sender_name: str
    sender_hash: str
    added_at: int
    room_id: Optional[str] = None
    added_by: Optional[str] = None


class AdminRegistry:
    """Tracks who holds admin privilege.

    The chief admin is never stored; it is recognised by comparing hashes and
    can be neither promoted nor removed.
    """

    def __init__(
        self,
        db_path: str,
        codes: ApprovalCodeStore,
        chief_hash: str = CHIEF_ADMIN_HASH,
        clock: Callable[[], float] = time.time,
    ):
        self.db_path = db_path
        self.codes = codes
        self.chief_hash = chief_hash
        self.clock = clock

    def is_chief(self, identity: str) -> bool:
        return bool(identity) and identity == self.chief_hash

    async def is_admin(self, identity: str) -> bool:
        if self.is_chief(identity):
            return True
        return await models.is_admin_user(self.db_path, identity)

    async def request_promotion(self, identity: str, display_name: str, room_id: str, room_name: str) -> str:
        return await self.codes.create_code(
            PURPOSE_ADMIN,
            {"sender_hash": identity, "sender_name": display_name},
            requester=identity,
            room_id=room_id,
            room_name=room_name,
        )

    async def approve_promotion(self, code: str, approver: str) -> ApprovalResult:
        if not self.is_chief(approver):
            return ApprovalResult.rejected(Rejection.UNAUTHORIZED)

        added_at = int(self.clock())

        def _promote(cur: sqlite3.Cursor, record: ApprovalCode) -> Optional[Rejection]:
            subject = record.payload.get("sender_hash") or record.requester
            if self.is_chief(subject):
                return Rejection.UNAUTHORIZED
            try:
                models.insert_admin_user(cur, {
                    "sender_hash": subject,
                    "sender_name": record.payload.get("sender_name"),
                    "room_id": record.room_id,
                    "room_name": record.room_name,
                    "added_by": approver,
                    "added_at": added_at,
                })
            except sqlite3.IntegrityError:
                return Rejection.CONFLICT
            return None

        result = await self.codes.approve(code, PURPOSE_ADMIN, on_claim=_promote)
        if result:
            logger.warning("[ADMIN_ADD] %s promoted to admin", result.record.payload.get("sender_name"))
        else:
            logger.warning("[ADMIN_ADD] Promotion approval by %s failed: %s", approver, result.rejection.value)
        return result

    async def remove(self, identity: str, remover: str) -> bool:
        if not self.is_chief(remover):
            return False
        if self.is_chief(identity):
            return False
        removed = await models.delete_admin_user(self.db_path, identity)
        if removed:
            logger.warning("[ADMIN_REMOVE] Admin %s removed", identity)
        return removed

    async def list_admins(self) -> List[AdminEntry]:
        rows = await models.list_admin_users(self.db_path)
        return [
            AdminEntry(
                room_name=r.get("room_name") or "",
                sender_name=r.get("sender_name") or "",
                sender_hash=r["sender_hash"],
                added_at=int(r["added_at"]),
                room_id=r.get("room_id"),
                added_by=r.get("added_by"),
            )
            for r in rows
        ]
