"""Learned replies: users teach the bot what to answer to a message."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Tuple

from db import models

logger = logging.getLogger(__name__)


def split_pair(text: str) -> Tuple[str, str]:
    """Split ``"message / response"`` on the first slash; response is "" without one."""
    message, sep, response = str(text or "").partition("/")
    return message.strip(), response.strip() if sep else ""


class SimSimReplies:
    def __init__(self, db_path: str, clock: Callable[[], float] = time.time):
        self.db_path = db_path
        self.clock = clock

    async def add(self, message: str, response: str, created_by: str) -> bool:
        """Register a reply; duplicates of an existing pair are ignored."""
        return await models.insert_simsim_response(
            self.db_path, message.strip(), response.strip(), created_by, int(self.clock())
        )

    async def delete(self, message: str, response: str) -> bool:
        return await models.delete_simsim_response(self.db_path, message.strip(), response.strip())

    async def delete_all(self, message: str) -> int:
        return await models.delete_simsim_responses_for_message(self.db_path, message.strip())

    async def responses(self, message: str) -> List[str]:
        return await models.get_simsim_responses(self.db_path, message.strip())

    async def count(self, message: str) -> int:
        return len(await self.responses(message))

    async def top_messages(self, limit: int = 10) -> List[Dict[str, Any]]:
        return await models.get_top_simsim_messages(self.db_path, limit)
