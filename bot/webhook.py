"""FastAPI front door for the messaging relay.

The relay posts every room message to ``/api/kakao/notify`` and sends back
whatever text the reply carries.
"""
from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from dateutil import tz
from fastapi import FastAPI
from pydantic import BaseModel, ConfigDict, Field

from db.models import init_db
from .admins import CHIEF_ADMIN_HASH, AdminRegistry
from .approval import ApprovalCodeStore
from .commands import BotContext
from .handlers import build_registry
from .pipeline import RequestPipeline
from .quota import QuotaLedger
from .reference import load_reference_data
from .simsim import SimSimReplies
from .stats import DEFAULT_STATS_TIMEZONE, ChatStatistics
from .sweeper import DEFAULT_SWEEP_INTERVAL_SECONDS, run_sweeper

logger = logging.getLogger(__name__)

MESSAGE_EVENT = "message"
SEND_TEXT = "send_text"


class MessageData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_name: str = Field("", alias="roomName")
    room_id: str = Field("", alias="roomId")
    sender_name: str = Field("", alias="senderName")
    sender_hash: str = Field("", alias="senderHash")
    content: str = ""
    is_group_chat: bool = Field(True, alias="isGroupChat")
    time: Optional[int] = None


class NotifyRequest(BaseModel):
    event: str = MESSAGE_EVENT
    data: Optional[MessageData] = None


def _reply(room_id: str = "", message: str = "") -> Dict[str, Any]:
    return {"action": SEND_TEXT if message else "", "roomId": room_id, "message": message}


def build_pipeline(db_path: str, chief_hash: Optional[str] = None) -> RequestPipeline:
    """Wire the services together from environment settings."""
    codes = ApprovalCodeStore(db_path)
    admins = AdminRegistry(db_path, codes, chief_hash=chief_hash or os.getenv("CHIEF_ADMIN_HASH") or CHIEF_ADMIN_HASH)
    quota = QuotaLedger(db_path, admins, codes, timezone=tz.gettz(os.getenv("QUOTA_TIMEZONE", "UTC")))
    stats = ChatStatistics(db_path, timezone=tz.gettz(os.getenv("STATS_TIMEZONE", DEFAULT_STATS_TIMEZONE)))
    registry = build_registry()
    context = BotContext(
        admins=admins,
        quota=quota,
        stats=stats,
        reference=load_reference_data(),
        registry=registry,
        simsim=SimSimReplies(db_path),
    )
    return RequestPipeline(registry, context)


def create_app(db_path: Optional[str] = None, chief_hash: Optional[str] = None) -> FastAPI:
    db_path = db_path or os.getenv("DB_PATH", "dogebot.db")
    pipeline = build_pipeline(db_path, chief_hash)
    interval = float(os.getenv("SWEEP_INTERVAL_SECONDS", DEFAULT_SWEEP_INTERVAL_SECONDS))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Initializing database: %s", db_path)
        await init_db(db_path)
        await pipeline.context.stats.purge_blacklisted()
        sweeper = asyncio.create_task(run_sweeper(pipeline.context.admins.codes, interval))
        try:
            yield
        finally:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass

    app = FastAPI(
        title="Dogebot API",
        description="Chat command backend for the messaging relay.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.pipeline = pipeline
    app.state.db_path = db_path

    @app.post("/api/kakao/notify")
    async def notify(request: NotifyRequest) -> Dict[str, Any]:
        data = request.data
        if request.event != MESSAGE_EVENT or data is None:
            return _reply()
        message = await pipeline.handle_message(
            data.room_id,
            data.room_name,
            data.sender_hash,
            data.sender_name,
            data.is_group_chat,
            data.content,
            data.time,
        )
        return _reply(data.room_id, message)

    @app.get("/api/kakao/pending")
    async def pending() -> Dict[str, Any]:
        # Replies are always returned inline; nothing is ever queued.
        return _reply()

    @app.get("/api/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    return app
