"""Admin and request-limit management commands.

These commands are exempt from the daily request limit.
"""
import datetime
import logging

from .approval import Rejection
from .commands import BotContext, IncomingMessage

logger = logging.getLogger(__name__)

NO_PERMISSION_CHIEF = "⛔ 권한이 없습니다. 최고 관리자만 {action}할 수 있습니다."
NO_PERMISSION_ADMIN = "⛔ 권한이 없습니다. 관리자만 {action}할 수 있습니다."


async def admin_add_cmd(message: IncomingMessage, context: BotContext) -> str:
    """Request admin rights (no argument) or approve a request (chief admin, with code).

    Usage: !관리추가 | !관리추가 <code>
    """
    args = message.args
    if not args:
        code = await context.admins.request_promotion(
            message.sender_hash, message.sender_name, message.room_id, message.room_name
        )
        logger.info("[ADMIN_ADD] %s requested admin approval code", message.sender_name)
        return (
            "🔐 관리자 승인 요청\n\n"
            f"승인 코드: {code}\n\n"
            "⏰ 10분 이내에 최고 관리자의 개인톡에서\n"
            f"!관리추가 {code}\n"
            "를 입력하여 승인받으세요.\n\n"
            "⚠️ RoomId마다 SenderHash가 다르므로,\n"
            "반드시 개인톡에서 입력해주세요!"
        )

    if len(args) == 1:
        if not context.admins.is_chief(message.sender_hash):
            return NO_PERMISSION_CHIEF.format(action="승인")
        code = args[0]
        result = await context.admins.approve_promotion(code, message.sender_hash)
        if not result:
            return (
                "❌ 승인 실패\n\n"
                "• 유효하지 않은 코드이거나\n"
                "• 승인 시간이 만료되었거나\n"
                "• 이미 관리자인 사용자입니다."
            )
        return (
            "✅ 관리자 승인 완료!\n\n"
            f"승인 코드: {code.upper()}\n"
            "이제 해당 사용자는 관리자 기능을 사용할 수 있습니다."
        )

    return (
        "🔐 사용법:\n\n"
        "1️⃣ 관리자가 되려는 사람:\n"
        "   !관리추가\n\n"
        "2️⃣ 최고 관리자 (승인):\n"
        "   !관리추가 (승인코드)\n\n"
        "⚠️ 승인은 반드시 개인톡에서 해주세요!"
    )


async def admin_remove_cmd(message: IncomingMessage, context: BotContext) -> str:
    if not context.admins.is_chief(message.sender_hash):
        return NO_PERMISSION_CHIEF.format(action="제거")
    args = message.args
    if not args:
        return "🗑️ 사용법:\n!관리제거 (SenderHash)\n\n예시:\n!관리제거 abc123def456..."
    target = args[0]
    removed = await context.admins.remove(target, message.sender_hash)
    if not removed:
        logger.warning("[ADMIN_REMOVE] Failed to remove admin %s by %s", target, message.sender_name)
        return (
            "❌ 제거 실패\n\n"
            "• 해당 SenderHash는 관리자가 아니거나\n"
            "• 최고 관리자는 제거할 수 없습니다."
        )
    return f"✅ 관리자 제거 완료!\n\nSenderHash: {target}"


async def admin_list_cmd(message: IncomingMessage, context: BotContext) -> str:
    if not await context.admins.is_admin(message.sender_hash):
        return NO_PERMISSION_ADMIN.format(action="조회")

    admins = await context.admins.list_admins()
    if not admins:
        return "👮 등록된 관리자가 없습니다.\n\n(최고 관리자는 목록에 표시되지 않습니다)"

    lines = ["👮 관리자 목록", ""]
    current_room = None
    for entry in admins:
        if entry.room_name != current_room:
            if current_room is not None:
                lines.append("")
            current_room = entry.room_name
            lines.append(f"📍 {entry.room_name}")
        added = datetime.datetime.fromtimestamp(entry.added_at, tz=context.stats.timezone)
        lines.append(f"• {entry.sender_name}")
        lines.append(f"  Hash: {entry.sender_hash[:16]}...")
        lines.append(f"  등록일: {added:%Y-%m-%d %H:%M}")
    lines += ["", "━━━━━━━━━━━━━━━━━━", f"총 {len(admins)}명의 관리자", "", "⚠️ 최고 관리자는 목록에 표시되지 않습니다."]
    logger.info("[ADMIN_LIST] Admin %s viewed admin list (%s admins)", message.sender_name, len(admins))
    return "\n".join(lines)


async def set_limit_cmd(message: IncomingMessage, context: BotContext) -> str:
    """Ask for a daily request limit on this room; an admin confirms it with the issued code.

    Usage: !제한설정 <count>
    """
    args = message.args
    if len(args) != 1:
        return (
            "⚙️ 사용법:\n\n"
            "!제한설정 (횟수)\n"
            "예: !제한설정 10\n\n"
            "💡 관리자가 승인 코드를 입력하면 적용되며,\n"
            "   관리자가 아닌 사용자는 하루에 설정된 횟수만큼만 요청할 수 있습니다."
        )
    code = await context.quota.request_limit(message.room_id, message.room_name, args[0], message.sender_hash)
    if code is None:
        return "❌ 제한 횟수는 1 이상의 숫자여야 합니다.\n\n사용법: !제한설정 (횟수)"
    logger.info("[REQUEST_LIMIT_SET] %s requested limit %s for room %s", message.sender_name, args[0], message.room_name)
    return (
        "🔐 요청 제한 승인 요청\n\n"
        f"제한 횟수: {int(args[0])}회/일\n"
        f"승인 코드: {code}\n\n"
        "⏰ 10분 이내에 관리자가\n"
        f"!제한승인 {code}\n"
        "를 입력하면 적용됩니다."
    )


async def approve_limit_cmd(message: IncomingMessage, context: BotContext) -> str:
    if not await context.admins.is_admin(message.sender_hash):
        return NO_PERMISSION_ADMIN.format(action="제한을 승인")
    args = message.args
    if len(args) != 1:
        return "⚙️ 사용법:\n!제한승인 (승인코드)"
    result = await context.quota.approve_limit(args[0], message.sender_hash)
    if not result:
        if result.rejection == Rejection.INVALID_INPUT:
            return "❌ 승인 실패\n\n• 요청된 제한 횟수가 올바르지 않습니다."
        return "❌ 승인 실패\n\n• 유효하지 않은 코드이거나\n• 승인 시간이 만료되었습니다."
    record = result.record
    return (
        "✅ 요청 제한 설정 완료!\n\n"
        f"방: {record.room_name}\n"
        f"제한 횟수: {record.payload.get('daily_limit')}회/일\n\n"
        "💡 관리자는 제한에서 제외됩니다."
    )


async def remove_limit_cmd(message: IncomingMessage, context: BotContext) -> str:
    if not await context.admins.is_admin(message.sender_hash):
        return NO_PERMISSION_ADMIN.format(action="제한을 해제")
    removed = await context.quota.remove_limit(message.room_id, message.sender_hash)
    if not removed:
        logger.info("[REQUEST_LIMIT_REMOVE] No limit found in room %s", message.room_name)
        return "❌ 이 방에는 설정된 요청 제한이 없습니다."
    logger.warning("[REQUEST_LIMIT_REMOVE] Limit removed from room %s by %s", message.room_name, message.sender_name)
    return "✅ 요청 제한 해제 완료!\n\n이제 이 방에서는 요청 횟수 제한이 없습니다."


async def limit_info_cmd(message: IncomingMessage, context: BotContext) -> str:
    info = await context.quota.get_usage(message.room_id, message.sender_hash)
    if not info.has_limit:
        return "ℹ️ 이 방에는 요청 제한이 없습니다."
    if await context.admins.is_admin(message.sender_hash):
        return f"ℹ️ 이 방의 요청 제한: {info.daily_limit}회/일\n\n💡 관리자는 제한에서 제외됩니다."
    remaining = max(0, info.daily_limit - info.used_today)
    return (
        f"ℹ️ 이 방의 요청 제한: {info.daily_limit}회/일\n"
        f"오늘 사용: {info.used_today}회\n"
        f"남은 횟수: {remaining}회"
    )
