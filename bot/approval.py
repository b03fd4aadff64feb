"""Short-lived, single-use approval codes.

A code binds a pending privileged action (admin promotion, room quota) to the
identity that asked for it; a second party confirms it by quoting the code.
"""
from __future__ import annotations

import enum
import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from db import models

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
CODE_TTL_SECONDS = 600

PURPOSE_ADMIN = "admin"
PURPOSE_LIMIT = "limit"


class Rejection(str, enum.Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"


@dataclass
class ApprovalCode:
    code: str
    purpose: str
    requester: str
    created_at: int
    expires_at: int
    payload: Dict[str, Any] = field(default_factory=dict)
    room_id: Optional[str] = None
    room_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ApprovalCode":
        return cls(
            code=row["code"],
            purpose=row["purpose"],
            requester=row["requester"],
            created_at=int(row["created_at"]),
            expires_at=int(row["expires_at"]),
            payload=dict(row.get("payload") or {}),
            room_id=row.get("room_id"),
            room_name=row.get("room_name"),
        )


@dataclass
class ApprovalResult:
    ok: bool
    record: Optional[ApprovalCode] = None
    rejection: Optional[Rejection] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def rejected(cls, reason: Rejection, record: Optional[ApprovalCode] = None) -> "ApprovalResult":
        return cls(ok=False, record=record, rejection=reason)


def generate_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str) -> str:
    return str(code or "").strip().upper()


class ApprovalCodeStore:
    """Issues, approves and sweeps approval codes held in the shared store."""

    def __init__(self, db_path: str, clock: Callable[[], float] = time.time, ttl_seconds: int = CODE_TTL_SECONDS):
        self.db_path = db_path
        self.clock = clock
        self.ttl_seconds = ttl_seconds

    def now(self) -> int:
        return int(self.clock())

    async def create_code(
        self,
        purpose: str,
        payload: Optional[Dict[str, Any]],
        requester: str,
        room_id: Optional[str] = None,
        room_name: Optional[str] = None,
    ) -> str:
        code = generate_code()
        created_at = self.now()
        await models.insert_approval_code(self.db_path, {
            "code": code,
            "purpose": purpose,
            "payload": payload or {},
            "requester": requester,
            "room_id": room_id,
            "room_name": room_name,
            "created_at": created_at,
            "expires_at": created_at + self.ttl_seconds,
        })
        logger.debug("Issued %s approval code for %s", purpose, requester)
        return code

    async def approve(
        self,
        code: str,
        purpose: str,
        on_claim: Optional[Callable[[Any, ApprovalCode], Optional[Rejection]]] = None,
    ) -> ApprovalResult:
        """Consume a live code exactly once.

        ``on_claim(cursor, record)`` runs inside the claiming transaction and
        may return a Rejection to abort; the code then stays live. Expected
        failures come back as a rejected result, never as an exception.
        """
        wanted = normalize_code(code)
        if len(wanted) != CODE_LENGTH:
            return ApprovalResult.rejected(Rejection.NOT_FOUND)

        hook = None
        if on_claim is not None:
            def hook(cur, row):
                return on_claim(cur, ApprovalCode.from_row(row))

        row, reason = await models.claim_approval_code(self.db_path, wanted, purpose, self.now(), hook)
        record = ApprovalCode.from_row(row) if row else None
        if reason is None:
            return ApprovalResult(ok=True, record=record)
        return ApprovalResult.rejected(Rejection(reason), record)

    async def sweep(self) -> int:
        """Delete every code whose expiry has passed; return how many went."""
        return await models.delete_expired_approval_codes(self.db_path, self.now())
