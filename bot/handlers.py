"""Chat command handlers for the dogebot backend."""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Tuple

from utils.text_utils import format_count, parse_bounded_int
from . import admin_commands
from .commands import BotContext, CommandMatcher, CommandRegistry, IncomingMessage, contains, exact, prefix
from .reference import WEATHER_TYPES, PlanetData
from .simsim import split_pair

logger = logging.getLogger(__name__)

CATEGORY_GAMES = "🎮 게임 & 랜덤"
CATEGORY_FUN = "🎭 재미"
CATEGORY_SIMSIM = "💬 심심이"
CATEGORY_STATS = "📊 통계"
CATEGORY_ADMIN = "🔐 관리"
CATEGORY_OTHER = "ℹ️ 기타"

HELP_CATEGORY_ORDER = [CATEGORY_GAMES, CATEGORY_FUN, CATEGORY_SIMSIM, CATEGORY_STATS, CATEGORY_OTHER, CATEGORY_ADMIN]

DICE_MAX = 1_000_000
HAMBURGER_MAX = 4

DAY_NAMES = ["일", "월", "화", "수", "목", "금", "토"]  # index = stored day_of_week
PERIOD_BAR_WIDTH = 8

SIMSIM_DISPLAY_MAX = 20

COLOR_BIOMES = ["RED", "GREEN", "BLUE"]
SPECIAL_BIOMES = [
    "WIRECELLS", "CONTOUR", "BONESPIRE", "IRRISHELLS", "HYDROGARDEN", "MSTRUCT",
    "BEAMS", "HEXAGON", "FRACTCUBE", "BUBBLE", "SHARDS", "GLITCH",
]
GAS_RESOURCES = frozenset({"질소", "설퍼린", "라돈"})

COURSE_DISHES = [
    "수렁늪 거인 포자 튀김", "검은바위 용암게 내장찜", "잿빛골짜기 밤표범 허리살 구이",
    "실바나스의 눈물 절임 샐러드", "황천비룡 꼬리 수프", "저주받은 해골버섯 크림리조또",
    "천둥절벽 들소심장 직화구이", "붉은십자군 성수 마리네이드 치킨", "역병지대 썩은호박 잼 토스트",
    "무쇠드워프 맥주효모 빵", "아제로스 심연조개 버터구이", "불타는 군단 지옥고추 파스타",
    "낙스라마스 거미알 오믈렛", "서리늑대 부족 훈제 늑대갈비", "타나리스 모래가재 그라탕",
    "유령의 뼈마루 골수 스튜", "어둠달 골짜기 광기초 초무침", "검은심연 나가 해초튀김",
    "붉은평원 핏빛사슴 타르타르", "하이잘 세계수 수액 캐러멜", "스톰윈드 하수구쥐 라구소스",
    "오그리마 전투멧돼지 족발찜", "잊혀진 왕의 왕관빵(철관빵)", "광기의 촉수볶음(살짝 미디움)",
    "어비스의 심장 껍질찜", "바람추적자 번개새우 꼬치", "티리스팔 망령양파 수프",
    "울부짖는 협만 바다이끼 냉채", "빛의 성채 성기사 소금절이 대구", "고대정령 나무껍질 칩",
    "지하왕국 굴착벌레 등심 스테이크", "붉은용군단 화염비늘 구이", "청동용군단 시간숙성 치즈",
    "공허방랑자 먹물 라멘", "무너진 사원의 저주비단 두부찜", "은빛소나무 숲 독안개 베리 파이",
    "설원 맘모스 기름 감자볶음", "크라켄 촉수 간장버터 구이", "폭풍해안 소금폭탄 조개탕",
    "사령관의 피묻은 전투식량 볶음밥",
]

MAGIC_CONCH_ANSWERS = [
    "그래", "안 돼", "절대 안 돼", "무조건이야", "언젠가는", "다시 물어봐",
    "아마도", "절대로", "당연하지", "생각해보지도 마", "좋은 생각이야", "별로야",
]

FOODS = [
    "김치찌개", "된장찌개", "순두부찌개", "부대찌개", "제육볶음",
    "삼겹살", "목살", "치킨", "피자", "햄버거",
    "짜장면", "짬뽕", "탕수육", "볶음밥", "우동",
    "라면", "떡볶이", "김밥", "라볶이", "쫄면",
    "냉면", "비빔밥", "김치볶음밥", "돈까스", "돈부리",
    "초밥", "회", "해물탕", "아구찜", "갈비찜",
    "삼계탕", "설렁탕", "곰탕", "감자탕", "해장국",
    "칼국수", "수제비", "국밥", "순대국", "뼈해장국",
    "족발", "보쌈", "양념치킨", "간장치킨", "후라이드치킨",
    "파스타", "스테이크", "샐러드", "샌드위치",
]

MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}


# ---------------- statistics ----------------

def _format_user_ranking(top: List[Dict[str, Any]]) -> str:
    if not top:
        return "아직 통계 데이터가 없습니다."
    lines = ["📊 채팅 랭킹 TOP 10", ""]
    for i, row in enumerate(top, start=1):
        medal = MEDALS.get(i, f"{i}.")
        lines.append(f"{medal} {row['sender_name']}: {format_count(row['message_count'])}회")
    return "\n".join(lines)


async def ranking_cmd(message: IncomingMessage, context: BotContext) -> str:
    return _format_user_ranking(await context.stats.top_users(message.room_id, 10))


async def view_ranking_cmd(message: IncomingMessage, context: BotContext) -> str:
    """Ranking of another room by id. Usage: !조회 (roomId)"""
    args = message.args
    if not args:
        return f"사용법: !조회 (roomId)\n예시: !조회 {message.room_id}"
    logger.info("[VIEW_RANKING] %s viewed rankings of room %s from %s", message.sender_name, args[0], message.room_id)
    return _format_user_ranking(await context.stats.top_users(args[0], 10))


async def my_ranking_cmd(message: IncomingMessage, context: BotContext) -> str:
    result = await context.stats.user_rank(message.room_id, message.sender_hash)
    if result is None:
        return f"{message.sender_name}님의 채팅 기록이 없습니다."
    rank, count = result
    emoji = MEDALS.get(rank, "📊")
    return f"{emoji} {message.sender_name}님의 랭킹\n순위: {rank}위\n채팅 수: {format_count(count)}회"


async def top_messages_cmd(message: IncomingMessage, context: BotContext) -> str:
    """Most repeated chat lines. Usage: !랭크 [count], count capped at 50."""
    if not await context.stats.content_enabled(message.room_id):
        return (
            "❌ 이 방은 랭킹이 비활성화되어 있습니다.\n"
            "관리자가 !랭크활성화 로 다시 켤 수 있습니다."
        )
    args = message.args
    limit = parse_bounded_int(args[0], 10) if args else 10
    top = await context.stats.top_messages(message.room_id, limit)
    if not top:
        return "아직 통계 데이터가 없습니다."
    lines = [f"💬 많이 올라온 채팅 TOP {limit}", ""]
    for i, row in enumerate(top, start=1):
        lines.append(f"{i}. {row['content']} ({format_count(row['count'])}회)")
    return "\n".join(lines)


async def room_info_cmd(message: IncomingMessage, context: BotContext) -> str:
    total, users = await context.stats.room_summary(message.room_id)
    return (
        "ℹ️ 방 정보\n\n"
        f"방 이름: {message.room_name}\n"
        f"방 ID: {message.room_id}\n"
        f"총 메시지 수: {format_count(total)}개\n"
        f"감지된 인원 수: {format_count(users)}명\n"
        f"그룹채팅 여부: {'예' if message.is_group_chat else '아니오'}\n\n"
        "요청자 정보:\n"
        f"• 이름: {message.sender_name}\n"
        f"• 해시: {message.sender_hash}"
    )


def _format_hourly(hours: List[Tuple[int, int]], title: str) -> str:
    peak = max(n for _, n in hours)
    lines = [title, ""]
    for hour, n in hours:
        bar = "█" * max(1, round(10 * n / peak))
        lines.append(f"{hour:02d}시 {bar} {format_count(n)}")
    return "\n".join(lines)


def _period_bar(count: int, peak: int) -> str:
    return "█" * int(count / peak * PERIOD_BAR_WIDTH) if peak else ""


def _format_daily(days: List[Tuple[int, int]], title: str) -> str:
    """All seven days, Sunday first; the busiest day (earliest on ties) is called out."""
    counts = dict(days)
    peak = max(counts.values())
    lines = [title, ""]
    for dow, name in enumerate(DAY_NAMES):
        n = counts.get(dow, 0)
        lines.append(f"{name}요일 {_period_bar(n, peak)} {format_count(n)}")
    best = min(d for d, n in counts.items() if n == peak)
    lines.append("")
    lines.append(f"🔥 최고 활동 요일: {DAY_NAMES[best]}요일 ({format_count(peak)}회)")
    return "\n".join(lines)


def _format_monthly(months: List[Tuple[int, int]], title: str) -> str:
    counts = dict(months)
    peak = max(counts.values())
    lines = [title, ""]
    for month in range(1, 13):
        n = counts.get(month, 0)
        lines.append(f"{month:>2}월 {_period_bar(n, peak)} {format_count(n)}")
    best = min(m for m, n in counts.items() if n == peak)
    lines.append("")
    lines.append(f"🔥 최고 활동 월: {best}월 ({format_count(peak)}회)")
    return "\n".join(lines)


async def hourly_stats_cmd(message: IncomingMessage, context: BotContext) -> str:
    hours = await context.stats.hourly(message.room_id)
    if not hours:
        return "아직 통계 데이터가 없습니다."
    return _format_hourly(hours, "🕐 시간대별 채팅 통계")


async def my_hourly_stats_cmd(message: IncomingMessage, context: BotContext) -> str:
    hours = await context.stats.hourly(message.room_id, message.sender_hash)
    if not hours:
        return f"{message.sender_name}님의 시간대별 통계 데이터가 없습니다."
    return _format_hourly(hours, f"🕐 {message.sender_name}님의 시간대별 채팅 통계")


async def daily_stats_cmd(message: IncomingMessage, context: BotContext) -> str:
    days = await context.stats.daily(message.room_id)
    if not days:
        return "아직 요일별 통계 데이터가 없습니다."
    return _format_daily(days, "📅 요일별 채팅 통계 (KST)")


async def my_daily_stats_cmd(message: IncomingMessage, context: BotContext) -> str:
    days = await context.stats.daily(message.room_id, message.sender_hash)
    if not days:
        return f"{message.sender_name}님의 요일별 통계 데이터가 없습니다."
    return _format_daily(days, f"📅 {message.sender_name}님의 요일별 채팅 통계 (KST)")


async def monthly_stats_cmd(message: IncomingMessage, context: BotContext) -> str:
    months = await context.stats.monthly(message.room_id)
    if not months:
        return "아직 월별 통계 데이터가 없습니다."
    return _format_monthly(months, "📆 월별 채팅 통계 (KST)")


async def my_monthly_stats_cmd(message: IncomingMessage, context: BotContext) -> str:
    months = await context.stats.monthly(message.room_id, message.sender_hash)
    if not months:
        return f"{message.sender_name}님의 월별 통계 데이터가 없습니다."
    return _format_monthly(months, f"📆 {message.sender_name}님의 월별 채팅 통계 (KST)")


# ---------------- ranking toggle ----------------

async def ranking_enable_cmd(message: IncomingMessage, context: BotContext) -> str:
    if not await context.admins.is_admin(message.sender_hash):
        return "⛔ 권한이 없습니다. 관리자만 랭킹을 활성화할 수 있습니다."
    if await context.stats.content_enabled(message.room_id):
        return "ℹ️ 이미 랭킹이 활성화되어 있습니다."
    await context.stats.set_content_enabled(message.room_id, message.room_name, True, message.sender_name)
    return (
        "✅ 랭킹 활성화 완료!\n\n"
        "이제 이 방에서 메시지 내용이 기록되며\n"
        "!랭크 명령어를 사용할 수 있습니다."
    )


async def ranking_disable_cmd(message: IncomingMessage, context: BotContext) -> str:
    """Stop recording message contents in this room and wipe what was stored."""
    if not await context.admins.is_admin(message.sender_hash):
        return "⛔ 권한이 없습니다. 관리자만 랭킹을 비활성화할 수 있습니다."
    if not await context.stats.content_enabled(message.room_id):
        return "ℹ️ 이미 랭킹이 비활성화되어 있습니다."
    await context.stats.set_content_enabled(message.room_id, message.room_name, False, message.sender_name)
    return (
        "✅ 랭킹 비활성화 완료!\n\n"
        "기존 메시지 내용 기록이 모두 삭제되었습니다.\n"
        "이제 메시지 내용이 기록되지 않으며\n"
        "!랭크 명령어를 사용할 수 없습니다.\n\n"
        "💡 채팅 통계(!조회, !내랭킹 등)는 계속 사용 가능합니다."
    )


# ---------------- simsim ----------------

async def simsim_register_cmd(message: IncomingMessage, context: BotContext) -> str:
    """Usage: !심등록 (메시지) / (답변), private chat only."""
    if message.is_group_chat:
        return (
            "⚠️ !심등록은 개인톡에서만 사용 가능합니다.\n"
            "채팅창이 너무 시끄러워지는 것을 방지하기 위함입니다."
        )
    body = message.content.strip()[len("!심등록"):].strip()
    if not body:
        return "사용법: !심등록 (메시지) / (답변)\n예시: !심등록 안녕 / 안녕하세요!"
    if "/" not in body:
        return "❌ 메시지와 답변을 / 로 구분해주세요.\n예시: !심등록 안녕 / 안녕하세요!"
    text, reply = split_pair(body)
    if not text or not reply:
        return "❌ 메시지와 답변을 모두 입력해주세요."
    if not await context.simsim.add(text, reply, message.sender_hash):
        return "ℹ️ 이미 등록된 답변입니다."
    logger.info("[SIMSIM_REGISTER] %s registered a reply for '%s'", message.sender_name, text)
    return f"✅ 등록 완료!\n\n메시지: {text}\n답변: {reply}"


async def simsim_query_cmd(message: IncomingMessage, context: BotContext) -> str:
    text = message.content.strip()[len("심심아"):].strip()
    if not text:
        return "사용법: 심심아 (메시지)\n예시: 심심아 안녕"
    replies = await context.simsim.responses(text)
    if not replies:
        return (
            f"❌ '{text}'에 대한 등록된 답변이 없습니다.\n\n"
            "개인톡에서 !심등록 (메시지) / (답변) 으로 답변을 추가해주세요!"
        )
    return context.rng.choice(replies)


async def simsim_delete_cmd(message: IncomingMessage, context: BotContext) -> str:
    """Chief only. "!심삭제 msg" drops every reply; "!심삭제 msg / reply" drops one."""
    if not context.admins.is_chief(message.sender_hash):
        return "⛔ 권한이 없습니다."
    body = message.content.strip()[len("!심삭제"):].strip()
    if not body:
        return "사용법: !심삭제 (메시지) 또는 !심삭제 (메시지) / (답변)"
    text, reply = split_pair(body)
    if not text:
        return "❌ 삭제할 메시지를 입력해주세요."
    if reply:
        if not await context.simsim.delete(text, reply):
            return f"❌ '{text}' / '{reply}' 답변을 찾을 수 없습니다."
        logger.warning("[SIMSIM_DELETE] Reply for '%s' deleted by %s", text, message.sender_name)
        return f"✅ 삭제 완료!\n\n메시지: {text}\n답변: {reply}"
    deleted = await context.simsim.delete_all(text)
    if not deleted:
        return f"❌ '{text}'에 대한 등록된 답변이 없습니다."
    logger.warning("[SIMSIM_DELETE] %s replies for '%s' deleted by %s", deleted, text, message.sender_name)
    return f"✅ 삭제 완료!\n\n메시지: {text}\n삭제된 답변: {deleted}개"


async def simsim_count_cmd(message: IncomingMessage, context: BotContext) -> str:
    text = message.content.strip()[len("!심몇개"):].strip()
    if not text:
        return "사용법: !심몇개 (메시지)"
    return f"📊 '{text}'에 대한 답변 개수: {await context.simsim.count(text)}개"


async def simsim_ranking_cmd(message: IncomingMessage, context: BotContext) -> str:
    args = message.args
    limit = parse_bounded_int(args[0], 10) if args else 10
    top = await context.simsim.top_messages(limit)
    if not top:
        return "아직 등록된 심심이 메시지가 없습니다."
    lines = [f"🏆 심심이 랭킹 TOP {limit}", ""]
    for i, row in enumerate(top, start=1):
        text = row["message"]
        if len(text) > SIMSIM_DISPLAY_MAX:
            text = text[:SIMSIM_DISPLAY_MAX - 3] + "..."
        lines.append(f"{MEDALS.get(i, f'{i}.')} {text} ({row['count']}개)")
    return "\n".join(lines)


# ---------------- games & random ----------------

async def odd_even_cmd(message: IncomingMessage, context: BotContext) -> str:
    result = context.rng.choice(["홀", "짝"])
    choice = message.content.strip().lstrip("!")
    won = choice == result
    return f"🎲 결과: {result}\n{'✅ 맞췄습니다!' if won else '❌ 틀렸습니다!'}"


async def dice_cmd(message: IncomingMessage, context: BotContext) -> str:
    args = message.args
    if not args:
        return "🎲 사용법: !주사위 (범위)\n예시: !주사위 100 → 1~100 사이의 랜덤 숫자"
    try:
        upper = int(args[0])
    except ValueError:
        upper = 0
    if upper < 1:
        return "❌ 범위는 1 이상의 숫자여야 합니다."
    if upper > DICE_MAX:
        return f"❌ 범위는 최대 {format_count(DICE_MAX)}까지 가능합니다."
    return f"🎲 주사위 (1~{upper})\n결과: {context.rng.randint(1, upper)}"


async def lotto_cmd(message: IncomingMessage, context: BotContext) -> str:
    numbers = sorted(context.rng.sample(range(1, 46), 6))
    return "🎱 로또 번호\n" + ", ".join(str(n) for n in numbers)


async def choice_cmd(message: IncomingMessage, context: BotContext) -> str:
    options = message.args
    if len(options) < 2:
        return (
            "🤔 사용법: !선택 (선택지1) (선택지2) ...\n"
            "예시: !선택 치킨 피자 햄버거\n\n"
            "최소 2개 이상의 선택지를 입력해주세요!"
        )
    return f"🎯 선택 결과: {context.rng.choice(options)}"


async def food_cmd(message: IncomingMessage, context: BotContext) -> str:
    return f"🍴 오늘의 추천 메뉴: {context.rng.choice(FOODS)}"


async def car_gacha_cmd(message: IncomingMessage, context: BotContext) -> str:
    cars = context.reference.cars
    if not cars:
        return "차량 데이터를 불러올 수 없습니다."
    brand = context.rng.choice(cars)
    model = context.rng.choice(brand.models)
    trim = context.rng.choice(model.trims) if model.trims else ""
    return f"🚗 {message.sender_name}님의 차량\n{brand.brand} {model.name} {trim}".rstrip()


async def probability_cmd(message: IncomingMessage, context: BotContext) -> str:
    return f"확률: {context.rng.randint(0, 100)}%"


# ---------------- fun ----------------

async def judge_cmd(message: IncomingMessage, context: BotContext) -> str:
    roll = context.rng.randint(0, 4)
    if roll == 0:
        verdict = "유죄"
    elif roll == 1:
        verdict = "무죄"
    elif roll == 2:
        verdict = f"집행유예 {context.rng.randint(1, 80)}년"
    elif roll == 3:
        verdict = "사형"
    else:
        verdict = f"징역 {context.rng.randint(1, 80)}년"
    return f"⚖️ 판결: {verdict}"


async def magic_conch_cmd(message: IncomingMessage, context: BotContext) -> str:
    return f"🐚 소라고동님: {context.rng.choice(MAGIC_CONCH_ANSWERS)}"


async def deng_cmd(message: IncomingMessage, context: BotContext) -> str:
    return "댕"


async def hamburger_cmd(message: IncomingMessage, context: BotContext) -> str:
    count = context.rng.randint(1, HAMBURGER_MAX)
    return f"🍔 {message.sender_name}가 한번에 먹을 수 있는 햄버거의 갯수는 {count}개다 꿀꿀!"


async def course_meal_cmd(message: IncomingMessage, context: BotContext) -> str:
    appetizer, main, dessert = context.rng.sample(COURSE_DISHES, 3)
    return (
        "🍽️ 오늘의 코스요리\n\n"
        f"🥗 전채: {appetizer}\n\n"
        f"🍖 메인: {main}\n\n"
        f"🍰 디저트: {dessert}"
    )


def _roll_biome(rng: random.Random, planets: PlanetData) -> str:
    keys = list(planets.biomes)
    normal = [k for k in keys if k not in SPECIAL_BIOMES and k not in COLOR_BIOMES] or keys
    roll = rng.randrange(100)
    if roll < 9:
        color = COLOR_BIOMES[roll // 3]
        if color in planets.biomes:
            return color
    elif roll < 19:
        special = [k for k in SPECIAL_BIOMES if k in planets.biomes]
        if special:
            return rng.choice(special)
    return rng.choice(normal)


def _roll_star_system(rng: random.Random, biome_key: str) -> str:
    if biome_key in COLOR_BIOMES:
        return biome_key
    if rng.random() < 0.875:
        return "YELLOW"
    return rng.choice(COLOR_BIOMES)


def generate_planet(rng: random.Random, planets: PlanetData) -> str:
    """Roll one No Man's Sky style planet: biome, star system, weather, resources and hazards."""
    biome_key = _roll_biome(rng, planets)
    biome = planets.biomes[biome_key]
    star_resources = planets.star_systems.get(_roll_star_system(rng, biome_key), ())

    prefix_word = rng.choice(biome.prefixes) if biome.prefixes else "알 수 없는"
    if biome.weather:
        weather_type = rng.choice([k for k in WEATHER_TYPES if k in biome.weather])
        weather = rng.choice(biome.weather[weather_type])
    else:
        weather_type, weather = "normal", "알 수 없음"

    resources = []
    if rng.randrange(100) < 17:
        resources.append(rng.choice(["고대 뼈", "노획 가능한 고물"]))
    resources.extend(p for p in biome.exclusive_plants if p != "없음")
    for resource in biome.exclusive_resources:
        if resource in GAS_RESOURCES and rng.randrange(100) >= 20:
            continue
        resources.append(resource)
    if star_resources:
        resources.append(f"활성 {star_resources[0]}" if weather_type == "extreme" else star_resources[0])

    vile_brood = rng.randrange(100) < 10
    dissonance = rng.randrange(100) < 10
    high_sentinels = rng.randrange(100) < 22

    lines = [f"- {r}" for r in resources]
    if vile_brood:
        lines.insert(0, "- 끔찍한 무리 감지됨")
    if dissonance:
        lines.append("- 부조화 감지됨")
    if high_sentinels:
        lines.append("- 센티널의 활동량 높음")
    text = f"방금 발견한 노 맨즈 스카이 행성이다!\n\n{prefix_word} 행성\n☁️ 날씨: {weather}\n\n" + "\n".join(lines)
    return text.rstrip()


async def planet_gacha_cmd(message: IncomingMessage, context: BotContext) -> str:
    planets = context.reference.planets
    if planets is None or not planets.biomes:
        return "❌ 행성 데이터를 불러올 수 없습니다."
    logger.info("[PLANET_GACHA] %s generated a planet in room %s", message.sender_name, message.room_id)
    return generate_planet(context.rng, planets)


# ---------------- help ----------------

async def help_cmd(message: IncomingMessage, context: BotContext) -> str:
    """Show available commands; admin commands only to admins."""
    is_admin = await context.admins.is_admin(message.sender_hash)
    categories = context.registry.by_category(admin=is_admin)

    sections = []
    for name in HELP_CATEGORY_ORDER + sorted(set(categories) - set(HELP_CATEGORY_ORDER)):
        cmds = categories.get(name)
        if not cmds:
            continue
        lines = [name]
        for cmd in cmds:
            lines.append(f"• {cmd.usage or cmd.command} - {cmd.description}")
        sections.append("\n".join(lines))
    return "📖 사용 가능한 명령어\n\n" + "\n\n".join(sections)


def build_registry() -> CommandRegistry:
    """Register every command. Order matters: the first accepting matcher wins."""
    registry = CommandRegistry()
    register = registry.register

    # admin & request limits (exempt from the daily limit)
    register(CommandMatcher("!관리추가", prefix("!관리추가"), admin_commands.admin_add_cmd,
                            "관리자 승인 요청 / 승인", usage="!관리추가 [승인코드]", category=CATEGORY_ADMIN))
    register(CommandMatcher("!관리제거", prefix("!관리제거"), admin_commands.admin_remove_cmd,
                            "관리자 제거 (최고 관리자)", usage="!관리제거 (SenderHash)", category=CATEGORY_ADMIN, admin_only=True))
    register(CommandMatcher("!관리목록", exact("!관리목록"), admin_commands.admin_list_cmd,
                            "관리자 목록", category=CATEGORY_ADMIN, admin_only=True))
    register(CommandMatcher("!제한설정", prefix("!제한설정"), admin_commands.set_limit_cmd,
                            "하루 요청 제한 설정 요청", usage="!제한설정 (횟수)", category=CATEGORY_ADMIN))
    register(CommandMatcher("!제한승인", prefix("!제한승인"), admin_commands.approve_limit_cmd,
                            "요청 제한 승인", usage="!제한승인 (승인코드)", category=CATEGORY_ADMIN, admin_only=True))
    register(CommandMatcher("!제한해제", exact("!제한해제"), admin_commands.remove_limit_cmd,
                            "요청 제한 해제", category=CATEGORY_ADMIN, admin_only=True))
    register(CommandMatcher("!제한확인", exact("!제한확인"), admin_commands.limit_info_cmd,
                            "오늘 남은 요청 횟수", category=CATEGORY_OTHER))

    # statistics
    register(CommandMatcher("!랭킹", exact("!랭킹"), ranking_cmd, "채팅 랭킹 TOP 10", category=CATEGORY_STATS))
    register(CommandMatcher("!내랭킹", exact("!내랭킹"), my_ranking_cmd, "내 순위 확인", category=CATEGORY_STATS))
    register(CommandMatcher("!조회", prefix("!조회"), view_ranking_cmd,
                            "다른 방 채팅 랭킹 TOP 10", usage="!조회 (roomId)", category=CATEGORY_STATS))
    # both share the "!랭크" prefix
    register(CommandMatcher("!랭크활성화", exact("!랭크활성화"), ranking_enable_cmd,
                            "메시지 내용 기록 켜기", category=CATEGORY_ADMIN, admin_only=True))
    register(CommandMatcher("!랭크비활성화", exact("!랭크비활성화"), ranking_disable_cmd,
                            "메시지 내용 기록 끄기 (기존 기록 삭제)", category=CATEGORY_ADMIN, admin_only=True))
    register(CommandMatcher("!랭크", prefix("!랭크"), top_messages_cmd,
                            "많이 올라온 채팅 TOP (최대 50개)", usage="!랭크 [개수]", category=CATEGORY_STATS))
    register(CommandMatcher("!정보", exact("!정보"), room_info_cmd, "방 정보 및 통계", category=CATEGORY_STATS))
    register(CommandMatcher("!시간통계", exact("!시간통계"), hourly_stats_cmd, "시간대별 채팅 통계", category=CATEGORY_STATS))
    register(CommandMatcher("!내시간통계", exact("!내시간통계"), my_hourly_stats_cmd, "내 시간대별 채팅 통계", category=CATEGORY_STATS))
    register(CommandMatcher("!요일통계", exact("!요일통계"), daily_stats_cmd, "요일별 채팅 통계", category=CATEGORY_STATS))
    register(CommandMatcher("!내요일통계", exact("!내요일통계"), my_daily_stats_cmd, "내 요일별 채팅 통계", category=CATEGORY_STATS))
    register(CommandMatcher("!월별통계", exact("!월별통계"), monthly_stats_cmd, "월별 채팅 통계", category=CATEGORY_STATS))
    register(CommandMatcher("!내월별통계", exact("!내월별통계"), my_monthly_stats_cmd, "내 월별 채팅 통계", category=CATEGORY_STATS))

    # simsim
    register(CommandMatcher("!심등록", prefix("!심등록"), simsim_register_cmd,
                            "답변 등록 (개인톡 전용)", usage="!심등록 (메시지) / (답변)", category=CATEGORY_SIMSIM))
    register(CommandMatcher("심심아", prefix("심심아"), simsim_query_cmd,
                            "등록된 답변 조회", usage="심심아 (메시지)", category=CATEGORY_SIMSIM))
    register(CommandMatcher("!심삭제", prefix("!심삭제"), simsim_delete_cmd,
                            "답변 삭제 (최고 관리자)", usage="!심삭제 (메시지) [/ (답변)]", category=CATEGORY_SIMSIM, admin_only=True))
    register(CommandMatcher("!심몇개", prefix("!심몇개"), simsim_count_cmd,
                            "답변 개수 확인", usage="!심몇개 (메시지)", category=CATEGORY_SIMSIM))
    register(CommandMatcher("!심랭킹", prefix("!심랭킹"), simsim_ranking_cmd,
                            "답변이 많은 메시지 TOP (최대 50개)", usage="!심랭킹 [개수]", category=CATEGORY_SIMSIM))

    # games & random
    register(CommandMatcher("!홀짝", exact("!홀", "!짝"), odd_even_cmd, "홀짝 게임", usage="!홀 / !짝", category=CATEGORY_GAMES))
    register(CommandMatcher("!주사위", prefix("!주사위"), dice_cmd,
                            "1~범위 사이 랜덤 숫자", usage="!주사위 (범위)", category=CATEGORY_GAMES))
    register(CommandMatcher("!로또", prefix("!로또"), lotto_cmd, "로또 번호 생성", category=CATEGORY_GAMES))
    register(CommandMatcher("!선택", prefix("!선택"), choice_cmd,
                            "선택지 중 하나 고르기", usage="!선택 (선택지1) (선택지2) ...", category=CATEGORY_GAMES))
    register(CommandMatcher("!뭐먹지", exact("!뭐먹지"), food_cmd, "음식 추천", category=CATEGORY_GAMES))
    register(CommandMatcher("!차뽑기", exact("!차뽑기"), car_gacha_cmd, "랜덤 차량 뽑기", category=CATEGORY_GAMES))
    register(CommandMatcher("!행성뽑기", exact("!행성뽑기"), planet_gacha_cmd, "노 맨즈 스카이 행성 뽑기", category=CATEGORY_GAMES))
    register(CommandMatcher("!코스요리", exact("!코스요리"), course_meal_cmd, "오늘의 코스요리", category=CATEGORY_GAMES))

    # fun
    register(CommandMatcher("판사님", prefix("판사님"), judge_cmd, "판결 내리기", usage="판사님 (질문)", category=CATEGORY_FUN))
    register(CommandMatcher("소라고동님", prefix("소라고동님"), magic_conch_cmd,
                            "마법의 소라고동님 소환", usage="소라고동님 (질문)", category=CATEGORY_FUN))
    register(CommandMatcher("댕", exact("댕"), deng_cmd, "댕", category=CATEGORY_FUN))
    register(CommandMatcher("!햄최몇", exact("!햄최몇"), hamburger_cmd, "한번에 먹을 수 있는 햄버거 개수", category=CATEGORY_FUN))

    register(CommandMatcher("!도움말", exact("!도움말", "!help"), help_cmd,
                            "이 메시지", usage="!도움말 / !help", category=CATEGORY_OTHER))

    # substring match; anything mentioning it lands here, so it goes last
    register(CommandMatcher("확률", contains("확률"), probability_cmd, "0~100% 랜덤 확률", category=CATEGORY_GAMES))

    logger.debug("Registered %s commands", len(registry.commands()))
    return registry
