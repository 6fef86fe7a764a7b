"""
linkedin_click / linkedin_type - 通用交互

目标由调用方给出（CSS 选择器或可见文本），动作同样经过调度器和拟人化，
动作之后重新分类页面。
"""

from __future__ import annotations

import logging

from ..core.errors import ElementNotFoundError
from .context import ToolContext, ToolSpec
from .types import ClickInput, ClickOutput, TypeInput, TypeOutput

logger = logging.getLogger(__name__)

SETTLE_AFTER_SCROLL_INTO_VIEW_MS = 500
SETTLE_AFTER_CLICK_MS = 500


async def bring_into_view(ctx: ToolContext, selector: str) -> None:
    element = await ctx.page.query_selector(selector)
    if element is None:
        raise ElementNotFoundError([selector])
    if not await element.is_visible():
        await element.scroll_into_view_if_needed()
        await ctx.wait(SETTLE_AFTER_SCROLL_INTO_VIEW_MS)


async def handle_click(ctx: ToolContext, params: ClickInput) -> ClickOutput:
    selector = params.selector or f'text="{params.text}"'
    logger.info(f"[Interact] Click {selector}")

    await bring_into_view(ctx, selector)
    await ctx.click_selector(selector)
    await ctx.wait(SETTLE_AFTER_CLICK_MS)
    await ctx.ensure_clear()
    return ClickOutput(selector=selector, current_url=ctx.current_url)


async def handle_type(ctx: ToolContext, params: TypeInput) -> TypeOutput:
    logger.info(f"[Interact] Type {len(params.text)} chars into {params.selector}")

    await bring_into_view(ctx, params.selector)
    await ctx.type_selector(params.selector, params.text, clear_first=params.clear_first)
    await ctx.ensure_clear()
    return TypeOutput(characters=len(params.text), current_url=ctx.current_url)


CLICK_TOOL = ToolSpec(
    name="linkedin_click",
    description="Click an element on the current page by CSS selector or visible text.",
    input_model=ClickInput,
    handler=handle_click,
)

TYPE_TOOL = ToolSpec(
    name="linkedin_type",
    description="Type text into an input on the current page, optionally clearing it first.",
    input_model=TypeInput,
    handler=handle_type,
)
