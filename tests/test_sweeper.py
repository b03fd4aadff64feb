import os
import asyncio

import pytest

from db import models
from bot.approval import PURPOSE_ADMIN, ApprovalCodeStore
from bot.sweeper import run_sweeper


DB_PATH = "test_sweeper.db"


class Clock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now


def teardown_module(module):
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(DB_PATH + suffix):
            os.remove(DB_PATH + suffix)


@pytest.mark.asyncio
async def test_sweeper_removes_expired_codes_until_cancelled():
    if os.path.exists(DB_PATH):
        os.remove(DB_PATH)
    await models.init_db(DB_PATH)
    clock = Clock()
    store = ApprovalCodeStore(DB_PATH, clock=clock)
    await store.create_code(PURPOSE_ADMIN, {}, requester="u1")
    clock.now += 1000
    await store.create_code(PURPOSE_ADMIN, {}, requester="u2")

    task = asyncio.create_task(run_sweeper(store, 0.01))
    for _ in range(100):
        await asyncio.sleep(0.01)
        if await models.count_approval_codes(DB_PATH) == 1:
            break
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert await models.count_approval_codes(DB_PATH) == 1


class FlakyStore:
    def __init__(self):
        self.calls = 0

    async def sweep(self):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("database is locked")
        return 0


@pytest.mark.asyncio
async def test_sweeper_survives_errors():
    store = FlakyStore()
    task = asyncio.create_task(run_sweeper(store, 0.01))
    for _ in range(100):
        await asyncio.sleep(0.01)
        if store.calls >= 3:
            break
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert store.calls >= 3
