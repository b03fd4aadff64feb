"""Command registry for the dogebot backend.

This module keeps the ordered list of command matchers and resolves an
incoming message to exactly one of them. Resolution is a linear scan in
registration order and the first accepting predicate wins, so a broad
matcher must be registered after any narrower one sharing its prefix.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List, Optional

from utils.text_utils import split_words

if TYPE_CHECKING:
    from .admins import AdminRegistry
    from .quota import QuotaLedger
    from .reference import ReferenceData
    from .simsim import SimSimReplies
    from .stats import ChatStatistics

Predicate = Callable[[str], bool]


@dataclass
class IncomingMessage:
    """One room message as delivered by the relay."""
    room_id: str
    room_name: str
    sender_hash: str
    sender_name: str
    content: str
    is_group_chat: bool = True
    time: int = 0

    @property
    def args(self) -> List[str]:
        """Whitespace-separated words after the command token."""
        return split_words(self.content)[1:]


@dataclass
class BotContext:
    """Shared services handed to every command handler."""
    admins: "AdminRegistry"
    quota: "QuotaLedger"
    stats: "ChatStatistics"
    reference: "ReferenceData"
    registry: "CommandRegistry"
    simsim: "SimSimReplies"
    rng: random.Random = field(default_factory=random.SystemRandom)


Handler = Callable[[IncomingMessage, BotContext], Awaitable[str]]


def exact(*tokens: str) -> Predicate:
    wanted = frozenset(t.strip().casefold() for t in tokens)

    def _pred(text: str) -> bool:
        return str(text or "").strip().casefold() in wanted

    return _pred


def prefix(token: str) -> Predicate:
    wanted = token.strip().casefold()

    def _pred(text: str) -> bool:
        return str(text or "").strip().casefold().startswith(wanted)

    return _pred


def contains(token: str) -> Predicate:
    wanted = token.casefold()

    def _pred(text: str) -> bool:
        return wanted in str(text or "").casefold()

    return _pred


@dataclass
class CommandMatcher:
    """A registered command: its predicate, handler and help metadata."""
    command: str  # canonical token, e.g. "!주사위"
    predicate: Predicate
    handler: Handler
    description: str = ""
    usage: Optional[str] = None  # usage pattern if command takes arguments
    category: Optional[str] = None  # grouping for help text
    admin_only: bool = False
    show_in_help: bool = True

    def matches(self, text: str) -> bool:
        return self.predicate(text)


class CommandRegistry:
    def __init__(self):
        self._matchers: List[CommandMatcher] = []

    def register(self, matcher: CommandMatcher) -> None:
        """Append a matcher; no de-duplication is done."""
        self._matchers.append(matcher)

    def dispatch(self, text: str) -> Optional[CommandMatcher]:
        for matcher in self._matchers:
            if matcher.matches(text):
                return matcher
        return None

    def commands(self) -> List[CommandMatcher]:
        return list(self._matchers)

    def by_category(self, admin: bool = False) -> Dict[str, List[CommandMatcher]]:
        """Help-visible commands grouped by category, in registration order."""
        categories: Dict[str, List[CommandMatcher]] = {}
        for cmd in self._matchers:
            if not cmd.show_in_help:
                continue
            if cmd.admin_only and not admin:
                continue
            categories.setdefault(cmd.category or "기타", []).append(cmd)
        return categories
