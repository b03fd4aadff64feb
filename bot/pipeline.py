"""Per-message request pipeline.

Received -> StatsRecorded -> Dispatched -> QuotaChecked | QuotaExempt
-> Executed -> RepliedOrSilent
"""
from __future__ import annotations

import logging
import time
from typing import Optional

from .commands import BotContext, CommandRegistry, IncomingMessage

logger = logging.getLogger(__name__)

# Admin and limit management must stay usable when a room hits its limit.
EXEMPT_COMMANDS = frozenset({
    "!관리추가",
    "!관리제거",
    "!관리목록",
    "!제한설정",
    "!제한승인",
    "!제한해제",
    "!제한확인",
})

LIMIT_EXCEEDED_TEMPLATE = (
    "⛔ 오늘의 요청 한도를 초과했습니다.\n\n"
    "사용: {used_today}회 / 제한: {daily_limit}회\n"
    "내일 다시 이용해주세요."
)

GENERIC_FAILURE_REPLY = "요청을 처리하는 중 오류가 발생했습니다."


class RequestPipeline:
    def __init__(self, registry: CommandRegistry, context: BotContext):
        self.registry = registry
        self.context = context

    async def handle_message(
        self,
        room_id: str,
        room_name: str,
        sender_hash: str,
        sender_name: str,
        is_group_chat: bool,
        content: str,
        timestamp: Optional[int] = None,
    ) -> str:
        """Run one message through the pipeline and return the reply ("" for none)."""
        message = IncomingMessage(
            room_id=room_id,
            room_name=room_name,
            sender_hash=sender_hash,
            sender_name=sender_name,
            content=content or "",
            is_group_chat=is_group_chat,
            time=int(timestamp) if timestamp else int(time.time()),
        )
        try:
            return await self._process(message)
        except Exception:
            logger.exception("Failed to handle message in room %s from %s", room_name, sender_name)
            return GENERIC_FAILURE_REPLY

    async def _process(self, message: IncomingMessage) -> str:
        await self.context.stats.record_message(message)

        matcher = self.registry.dispatch(message.content)
        if matcher is None:
            return ""

        if matcher.command not in EXEMPT_COMMANDS:
            quota = self.context.quota
            if not await quota.check_limit(message.room_id, message.sender_hash):
                usage = await quota.get_usage(message.room_id, message.sender_hash)
                logger.info(
                    "[REQUEST_LIMIT] %s over limit in room %s (%s/%s)",
                    message.sender_name, message.room_name, usage.used_today, usage.daily_limit,
                )
                return LIMIT_EXCEEDED_TEMPLATE.format(used_today=usage.used_today, daily_limit=usage.daily_limit)
            await quota.increment(message.room_id, message.sender_hash)

        logger.info("[%s] from %s in room %s", matcher.command, message.sender_name, message.room_name)
        return await matcher.handler(message, self.context)
