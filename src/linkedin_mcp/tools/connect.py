"""
linkedin_send_connection - 发送好友邀请

点击 Connect 后立即检查限流：命中就在点击 Send 之前短路。
点击 Send 之前再做一次完整分类，Send 是唯一会改变对方状态的动作。
"""

from __future__ import annotations

import logging

from ..core.errors import ElementNotFoundError, ProblemDetectedError
from ..detector.types import DetectedProblem, ProblemReason
from .context import ToolContext, ToolSpec
from .parsing import extract_username
from .types import ConnectionInput, ConnectionOutput, ConnectionStatus

logger = logging.getLogger(__name__)

SETTLE_AFTER_CONNECT_MS = 1000
SETTLE_AFTER_SEND_MS = 2000
DROPDOWN_PAUSE_MS = (500, 1000)
NOTE_PAUSE_MS = (300, 600)
BEFORE_SEND_PAUSE_MS = (1000, 2000)


async def open_connect_dialog(ctx: ToolContext) -> None:
    """直接的 Connect 按钮优先，其次 More 菜单里的 Connect"""
    if await ctx.find("connection.connect_button"):
        await ctx.click("connection.connect_button")
        return

    if await ctx.find("connection.more_button"):
        logger.info("[Connect] Connect button hidden, trying More menu")
        await ctx.click("connection.more_button")
        await ctx.pause_ms(*DROPDOWN_PAUSE_MS)
        if await ctx.find("connection.connect_in_dropdown"):
            await ctx.click("connection.connect_in_dropdown")
            return

    raise ElementNotFoundError(ctx.selectors["connection.connect_button"], "Connect button")


async def add_note(ctx: ToolContext, message: str) -> None:
    if not await ctx.find("connection.add_note_button"):
        # 要求带附言时不能退化成无附言邀请
        raise ElementNotFoundError(ctx.selectors["connection.add_note_button"], "Add a note button")
    await ctx.click("connection.add_note_button")
    await ctx.pause_ms(*NOTE_PAUSE_MS)
    await ctx.type_into("connection.note_textarea", message)


async def check_send_result(ctx: ToolContext) -> None:
    """弹窗还开着且带错误提示时视为界面异常"""
    if not await ctx.find("modal.container"):
        return
    if not await ctx.find("general.error_message"):
        return
    error_text = await ctx.text_of("general.error_message")
    raise ProblemDetectedError(DetectedProblem(
        reason=ProblemReason.UNEXPECTED_UI,
        hint=ctx.detector.hint_for("send_rejected", detail=error_text or "no details"),
    ))


async def handle_connect(ctx: ToolContext, params: ConnectionInput) -> ConnectionOutput:
    username = extract_username(params.profile_url)
    if username and f"/in/{username}" in ctx.current_url:
        await ctx.ensure_clear()
    else:
        await ctx.navigate(params.profile_url)

    if await ctx.find("connection.message_button"):
        logger.info(f"[Connect] Already connected: {params.profile_url}")
        return ConnectionOutput(status=ConnectionStatus.ALREADY_CONNECTED, message="Already connected with this person")
    if await ctx.find("connection.pending_button"):
        logger.info(f"[Connect] Invitation already pending: {params.profile_url}")
        return ConnectionOutput(status=ConnectionStatus.PENDING, message="Connection request already pending")

    await open_connect_dialog(ctx)
    await ctx.wait(SETTLE_AFTER_CONNECT_MS)
    await ctx.ensure_no(ProblemReason.RATE_LIMITED)

    if params.message:
        await add_note(ctx, params.message)

    await ctx.pause_ms(*BEFORE_SEND_PAUSE_MS)
    await ctx.ensure_clear()

    await ctx.click("connection.send_button")
    await ctx.wait(SETTLE_AFTER_SEND_MS)
    await check_send_result(ctx)

    logger.info(f"[Connect] Invitation sent to {params.profile_url} (note={bool(params.message)})")
    return ConnectionOutput(
        status=ConnectionStatus.SENT,
        message="Connection request sent with note" if params.message else "Connection request sent",
    )


TOOL = ToolSpec(
    name="linkedin_send_connection",
    description="Send a connection request to a LinkedIn profile, optionally with a note (max 300 characters).",
    input_model=ConnectionInput,
    handler=handle_connect,
)
