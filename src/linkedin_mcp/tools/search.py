"""
linkedin_search - 人员搜索

结果容器存在但没有条目、或出现“无结果”提示时返回空列表；
两者都没出现才视为界面异常。
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from ..browser.waits import POLL_INTERVAL
from ..core.errors import ProblemDetectedError
from ..detector.types import DetectedProblem, ProblemReason
from .context import ToolContext, ToolSpec
from .parsing import parse_results
from .types import SearchInput, SearchOutput

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.linkedin.com/search/results/people/"
RESULTS_TIMEOUT_MS = 5000


def build_search_url(query: str, location: str | None = None) -> str:
    keywords = f"{query} {location}" if location else query
    return f"{SEARCH_URL}?{urlencode({'keywords': keywords, 'origin': 'GLOBAL_SEARCH_HEADER'})}"


async def wait_for_results(ctx: ToolContext, timeout_ms: float) -> str | None:
    """等待“无结果”提示或结果容器出现，返回命中的角色；超时返回 None。

    “无结果”提示按可见判断（有结果时页面里也可能留着隐藏的提示节点），
    结果容器按存在判断（空列表高度为 0）。
    """
    elapsed = 0.0
    budget = timeout_ms / 1000
    while True:
        if await ctx.find("search.no_results") is not None:
            return "search.no_results"
        if await ctx.find("search.results_list", visible=False) is not None:
            return "search.results_list"
        if elapsed >= budget:
            return None
        step = min(POLL_INTERVAL, budget - elapsed)
        await ctx.sleep(step)
        elapsed += step


async def handle_search(ctx: ToolContext, params: SearchInput) -> SearchOutput:
    logger.info(f"[Search] query={params.query!r} location={params.location!r} limit={params.limit}")
    await ctx.navigate(build_search_url(params.query, params.location))

    role = await wait_for_results(ctx, RESULTS_TIMEOUT_MS)
    if role is None:
        raise ProblemDetectedError(DetectedProblem(
            reason=ProblemReason.UNEXPECTED_UI,
            hint=ctx.detector.hint_for("unexpected_ui", target="search results container"),
        ))
    if role == "search.no_results":
        logger.info("[Search] No results")
        return SearchOutput(results=[], total_results=0, has_more=False)

    await ctx.pause(ctx.profile.after_search)
    await ctx.ensure_clear()

    items = await ctx.find_all("search.result_item")
    results = await parse_results(ctx, items, limit=params.limit)
    logger.info(f"[Search] Parsed {len(results)} of {len(items)} result cards")
    return SearchOutput(
        results=results,
        total_results=len(results),
        has_more=len(results) >= params.limit,
    )


TOOL = ToolSpec(
    name="linkedin_search",
    description="Search LinkedIn for people by keywords and optional location.",
    input_model=SearchInput,
    handler=handle_search,
)
