import os
import re

import pytest

from db import models
from bot.admins import AdminRegistry
from bot.approval import ApprovalCodeStore
from bot.commands import BotContext, CommandMatcher, CommandRegistry, exact
from bot.handlers import build_registry
from bot.pipeline import GENERIC_FAILURE_REPLY, RequestPipeline
from bot.quota import QuotaLedger
from bot.reference import load_reference_data
from bot.simsim import SimSimReplies
from bot.stats import ChatStatistics


DB_PATH = "test_pipeline.db"
CHIEF = "chief"
CODE_RE = re.compile(r"승인 코드: ([A-Z0-9]{6})")


async def make_pipeline(registry=None):
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(DB_PATH + suffix):
            os.remove(DB_PATH + suffix)
    await models.init_db(DB_PATH)
    codes = ApprovalCodeStore(DB_PATH)
    admins = AdminRegistry(DB_PATH, codes, chief_hash=CHIEF)
    registry = registry or build_registry()
    context = BotContext(
        admins=admins,
        quota=QuotaLedger(DB_PATH, admins, codes),
        stats=ChatStatistics(DB_PATH),
        reference=load_reference_data(),
        registry=registry,
        simsim=SimSimReplies(DB_PATH),
    )
    return RequestPipeline(registry, context)


def teardown_module(module):
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(DB_PATH + suffix):
            os.remove(DB_PATH + suffix)


async def send(pipeline, content, sender="u1", name="Alice", room="r1"):
    return await pipeline.handle_message(room, "Room One", sender, name, True, content, 1_700_000_000)


@pytest.mark.asyncio
async def test_plain_chat_is_recorded_and_silent():
    pipeline = await make_pipeline()
    assert await send(pipeline, "안녕하세요") == ""
    assert await send(pipeline, "안녕하세요") == ""
    assert await send(pipeline, "!주사위 1") != ""

    top = await pipeline.context.stats.top_users("r1")
    assert top[0]["message_count"] == 2
    messages = await pipeline.context.stats.top_messages("r1")
    assert messages == [{"content": "안녕하세요", "count": 2}]


@pytest.mark.asyncio
async def test_room_limit_scenario():
    pipeline = await make_pipeline()
    assert await pipeline.context.quota.set_limit("r1", "Room One", 3, CHIEF)

    for _ in range(3):
        reply = await send(pipeline, "!주사위 6")
        assert reply.startswith("🎲")

    reply = await send(pipeline, "!주사위 6")
    assert "한도를 초과" in reply
    assert "사용: 3회 / 제한: 3회" in reply

    # non-commands are not counted
    assert await send(pipeline, "하하") == ""
    # management commands stay reachable
    info = await send(pipeline, "!제한확인")
    assert "남은 횟수: 0회" in info
    # admins are never limited
    for _ in range(5):
        assert (await send(pipeline, "!주사위 6", sender=CHIEF, name="Boss")).startswith("🎲")


@pytest.mark.asyncio
async def test_promotion_over_chat():
    pipeline = await make_pipeline()
    reply = await send(pipeline, "!관리추가")
    match = CODE_RE.search(reply)
    assert match
    code = match.group(1)

    denied = await send(pipeline, f"!관리추가 {code}", sender="u2", name="Bob")
    assert "권한이 없습니다" in denied

    approved = await send(pipeline, f"!관리추가 {code.lower()}", sender=CHIEF, name="Boss")
    assert "관리자 승인 완료" in approved
    assert await pipeline.context.admins.is_admin("u1")

    repeated = await send(pipeline, f"!관리추가 {code}", sender=CHIEF, name="Boss")
    assert "승인 실패" in repeated

    listing = await send(pipeline, "!관리목록")
    assert "Alice" in listing
    assert "총 1명의 관리자" in listing


@pytest.mark.asyncio
async def test_limit_approval_over_chat():
    pipeline = await make_pipeline()
    reply = await send(pipeline, "!제한설정 2")
    code = CODE_RE.search(reply).group(1)

    assert "권한이 없습니다" in await send(pipeline, f"!제한승인 {code}", sender="u2")
    done = await send(pipeline, f"!제한승인 {code}", sender=CHIEF, name="Boss")
    assert "요청 제한 설정 완료" in done
    assert "2회/일" in done

    await send(pipeline, "!로또")
    await send(pipeline, "!로또")
    assert "한도를 초과" in await send(pipeline, "!로또")

    removed = await send(pipeline, "!제한해제", sender=CHIEF, name="Boss")
    assert "해제 완료" in removed
    assert (await send(pipeline, "!로또")).startswith("🎱")


@pytest.mark.asyncio
async def test_invalid_limit_request():
    pipeline = await make_pipeline()
    assert "1 이상의 숫자" in await send(pipeline, "!제한설정 0")
    assert "사용법" in await send(pipeline, "!제한설정")


@pytest.mark.asyncio
async def test_handler_failure_becomes_generic_reply():
    async def boom(message, context):
        raise RuntimeError("handler bug")

    registry = CommandRegistry()
    registry.register(CommandMatcher("!boom", exact("!boom"), boom))
    pipeline = await make_pipeline(registry)

    assert await send(pipeline, "!boom") == GENERIC_FAILURE_REPLY
    assert await send(pipeline, "nothing") == ""


@pytest.mark.asyncio
async def test_store_failure_becomes_generic_reply():
    pipeline = await make_pipeline()
    pipeline.context.quota.db_path = os.path.join("missing-dir", "nope", "x.db")
    assert await send(pipeline, "!로또") == GENERIC_FAILURE_REPLY


@pytest.mark.asyncio
async def test_period_stats_and_simsim_over_chat():
    pipeline = await make_pipeline()
    await send(pipeline, "안녕하세요")

    daily = await send(pipeline, "!요일통계")
    assert daily.startswith("📅 요일별 채팅 통계 (KST)")
    assert "수요일" in daily
    monthly = await send(pipeline, "!월별통계")
    assert "11월 ████████ 1" in monthly
    assert (await send(pipeline, "!내시간통계")).startswith("🕐 Alice님의 시간대별 채팅 통계")
    assert "Bob님의 월별 통계 데이터가 없습니다" in await send(pipeline, "!내월별통계", sender="u2", name="Bob")

    assert "등록된 답변이 없습니다" in await send(pipeline, "심심아 안녕")
    assert "개인톡에서만" in await send(pipeline, "!심등록 안녕 / 반가워")
    registered = await pipeline.handle_message("dm", "Alice", "u1", "Alice", False, "!심등록 안녕 / 반가워", 1_700_000_000)
    assert "등록 완료" in registered
    assert await send(pipeline, "심심아 안녕") == "반가워"
    # the substring matcher registered last does not steal simsim queries
    assert "등록된 답변이 없습니다" in await send(pipeline, "심심아 확률")


@pytest.mark.asyncio
async def test_ranking_toggle_over_chat():
    pipeline = await make_pipeline()
    await send(pipeline, "ㅋㅋㅋ")
    assert "1. ㅋㅋㅋ (1회)" in await send(pipeline, "!랭크")

    assert "관리자만" in await send(pipeline, "!랭크비활성화")
    assert "랭킹 비활성화 완료" in await send(pipeline, "!랭크비활성화", sender=CHIEF, name="Boss")
    await send(pipeline, "ㅋㅋㅋ")
    assert "비활성화되어 있습니다" in await send(pipeline, "!랭크")
    assert "🥇 Alice: 2회" in await send(pipeline, "!랭킹")

    assert "랭킹 활성화 완료" in await send(pipeline, "!랭크활성화", sender=CHIEF, name="Boss")
    assert "아직 통계" in await send(pipeline, "!랭크")
