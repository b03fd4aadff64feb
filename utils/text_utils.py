"""Helpers for filtering and formatting chat message text."""
from __future__ import annotations

from typing import List

# Relay notices for non-text content; none of these count as chat.
BLACKLIST_PATTERNS: List[str] = [
    "이모티콘을 보냈습니다.",
    "(사진)",
    "(동영상)",
    "(파일)",
    "(음성)",
    "(삭제된 메시지입니다)",
    "삭제된 메시지입니다.",
    "(링크)",
    "(지도)",
    "(연락처)",
    "(음악)",
    "샵검색:",
    "샵검색 :",
    "#검색:",
]

COMMAND_PREFIXES = ("/", "!")


def is_blacklisted(content: str) -> bool:
    """True if a message should be kept out of chat statistics.

    Blank messages, commands and relay notices (emoticons, photos, deleted
    messages, ...) are excluded.
    """
    if content is None or not str(content).strip():
        return True
    text = str(content)
    if text.lstrip().startswith(COMMAND_PREFIXES):
        return True
    lowered = text.casefold()
    return any(p.casefold() in lowered for p in BLACKLIST_PATTERNS)


def split_words(content: str) -> List[str]:
    return str(content or "").strip().split()


def format_count(n: int) -> str:
    return f"{int(n):,}"


def parse_bounded_int(value: str, default: int, minimum: int = 1, maximum: int = 50) -> int:
    """Parse an optional count argument, clamped to [minimum, maximum]."""
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return max(minimum, min(maximum, n))
