import os
import re
import asyncio

import pytest

from db import models
from bot.approval import (
    CODE_TTL_SECONDS,
    PURPOSE_ADMIN,
    PURPOSE_LIMIT,
    ApprovalCodeStore,
    Rejection,
    generate_code,
    normalize_code,
)


DB_PATH = "test_approval_codes.db"


class Clock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now


async def setup_db():
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(DB_PATH + suffix):
            os.remove(DB_PATH + suffix)
    await models.init_db(DB_PATH)


def teardown_module(module):
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(DB_PATH + suffix):
            os.remove(DB_PATH + suffix)


def test_generate_code_format():
    for _ in range(50):
        assert re.fullmatch(r"[A-Z0-9]{6}", generate_code())
    assert normalize_code("  ab12cd ") == "AB12CD"
    assert normalize_code(None) == ""


@pytest.mark.asyncio
async def test_code_is_consumed_exactly_once():
    await setup_db()
    store = ApprovalCodeStore(DB_PATH, clock=Clock())
    code = await store.create_code(PURPOSE_ADMIN, {"sender_hash": "u1"}, requester="u1", room_id="r1", room_name="Room")
    assert re.fullmatch(r"[A-Z0-9]{6}", code)

    first = await store.approve(code, PURPOSE_ADMIN)
    assert first
    assert first.record.payload == {"sender_hash": "u1"}
    assert first.record.room_id == "r1"

    second = await store.approve(code, PURPOSE_ADMIN)
    assert not second
    assert second.rejection == Rejection.NOT_FOUND
    assert await models.count_approval_codes(DB_PATH) == 0


@pytest.mark.asyncio
async def test_lowercase_code_is_accepted_and_wrong_purpose_is_not():
    await setup_db()
    store = ApprovalCodeStore(DB_PATH, clock=Clock())
    code = await store.create_code(PURPOSE_LIMIT, {"daily_limit": 5}, requester="u1", room_id="r1")

    wrong = await store.approve(code, PURPOSE_ADMIN)
    assert wrong.rejection == Rejection.NOT_FOUND

    ok = await store.approve(f" {code.lower()} ", PURPOSE_LIMIT)
    assert ok


@pytest.mark.asyncio
async def test_malformed_code_is_not_found():
    await setup_db()
    store = ApprovalCodeStore(DB_PATH, clock=Clock())
    for bad in ("", "ABC", "ABCDEFG", None):
        result = await store.approve(bad, PURPOSE_ADMIN)
        assert result.rejection == Rejection.NOT_FOUND


@pytest.mark.asyncio
async def test_expired_code_is_rejected_until_swept():
    await setup_db()
    clock = Clock()
    store = ApprovalCodeStore(DB_PATH, clock=clock)
    code = await store.create_code(PURPOSE_ADMIN, {}, requester="u1")

    clock.now += CODE_TTL_SECONDS
    result = await store.approve(code, PURPOSE_ADMIN)
    assert result.rejection == Rejection.EXPIRED
    assert await models.count_approval_codes(DB_PATH) == 1

    assert await store.sweep() == 1
    result = await store.approve(code, PURPOSE_ADMIN)
    assert result.rejection == Rejection.NOT_FOUND


@pytest.mark.asyncio
async def test_code_just_before_expiry_is_live():
    await setup_db()
    clock = Clock()
    store = ApprovalCodeStore(DB_PATH, clock=clock)
    code = await store.create_code(PURPOSE_ADMIN, {}, requester="u1")
    clock.now += CODE_TTL_SECONDS - 1
    assert await store.approve(code, PURPOSE_ADMIN)


@pytest.mark.asyncio
async def test_hook_rejection_leaves_code_live():
    await setup_db()
    store = ApprovalCodeStore(DB_PATH, clock=Clock())
    code = await store.create_code(PURPOSE_ADMIN, {"n": 1}, requester="u1")
    seen = []

    def refuse(cur, record):
        seen.append(record.code)
        return Rejection.CONFLICT

    result = await store.approve(code, PURPOSE_ADMIN, on_claim=refuse)
    assert result.rejection == Rejection.CONFLICT
    assert result.record.code == code
    assert seen == [code]

    assert await store.approve(code, PURPOSE_ADMIN)


@pytest.mark.asyncio
async def test_sweep_deletes_all_and_only_expired():
    await setup_db()
    clock = Clock()
    store = ApprovalCodeStore(DB_PATH, clock=clock)
    for _ in range(3):
        await store.create_code(PURPOSE_ADMIN, {}, requester="old")
    clock.now += 300
    fresh = [await store.create_code(PURPOSE_LIMIT, {}, requester="new") for _ in range(2)]
    clock.now += 300

    assert await store.sweep() == 3
    assert await store.sweep() == 0
    assert await models.count_approval_codes(DB_PATH, PURPOSE_LIMIT) == 2
    for code in fresh:
        assert await store.approve(code, PURPOSE_LIMIT)


@pytest.mark.asyncio
async def test_concurrent_approvals_succeed_once():
    await setup_db()
    store = ApprovalCodeStore(DB_PATH, clock=Clock())
    code = await store.create_code(PURPOSE_ADMIN, {}, requester="u1")

    results = await asyncio.gather(*(store.approve(code, PURPOSE_ADMIN) for _ in range(8)))
    assert sum(1 for r in results if r) == 1
    assert all(r.rejection == Rejection.NOT_FOUND for r in results if not r)
