"""linkedin_scroll_results - 在当前搜索结果页滚动并加载更多"""

from __future__ import annotations

import logging

from .context import ToolContext, ToolSpec
from .parsing import parse_results
from .types import ScrollInput, ScrollOutput

logger = logging.getLogger(__name__)

SETTLE_AFTER_SCROLL_MS = 1500
SETTLE_AFTER_LOAD_MORE_MS = 2000
SETTLE_FINAL_MS = 1000


async def handle_scroll(ctx: ToolContext, params: ScrollInput) -> ScrollOutput:
    initial = len(await ctx.find_all("search.result_item"))
    logger.info(f"[Scroll] {params.direction} x{params.amount}, {initial} results loaded")

    for _ in range(params.amount):
        await ctx.scroll(params.direction)
        await ctx.wait(SETTLE_AFTER_SCROLL_MS)

        if await ctx.find("search.load_more"):
            logger.info("[Scroll] Clicking load more")
            await ctx.click("search.load_more")
            await ctx.wait(SETTLE_AFTER_LOAD_MORE_MS)

    await ctx.wait(SETTLE_FINAL_MS)
    await ctx.ensure_clear()

    items = await ctx.find_all("search.result_item")
    new_results = await parse_results(ctx, items[initial:])
    logger.info(f"[Scroll] {len(new_results)} new results, {len(items)} total")
    return ScrollOutput(new_results=new_results, total_loaded=len(items))


TOOL = ToolSpec(
    name="linkedin_scroll_results",
    description="Scroll the current search results page to load more results.",
    input_model=ScrollInput,
    handler=handle_scroll,
)
