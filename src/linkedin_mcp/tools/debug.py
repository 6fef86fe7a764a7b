"""
linkedin_debug_dom - 选择器诊断

LinkedIn 改版后用它查看哪些角色的候选选择器还能命中。
导航时不做问题检测，登录墙 / 验证码页面本身也值得诊断；
页面状态作为报告的一部分返回。
"""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Error as PlaywrightError

from .context import ToolContext, ToolSpec
from .types import DebugInput

logger = logging.getLogger(__name__)

SAMPLE_LIMIT = 3
SAMPLE_HTML_CHARS = 500
OUTER_HTML_SCRIPT = "el => el.outerHTML"


async def count_matches(page: Any, selector: str) -> int | str:
    try:
        return len(await page.query_selector_all(selector))
    except PlaywrightError as e:
        return f"invalid selector: {str(e).splitlines()[0]}"


async def analyze_roles(ctx: ToolContext) -> dict[str, dict]:
    report = {}
    for role in ctx.selectors:
        counts = {selector: await count_matches(ctx.page, selector) for selector in ctx.selectors[role]}
        report[role] = {
            "matched": any(isinstance(n, int) and n > 0 for n in counts.values()),
            "candidates": counts,
        }
    return report


async def analyze_selector(ctx: ToolContext, selector: str) -> dict:
    elements = await ctx.page.query_selector_all(selector)
    samples = []
    for element in elements[:SAMPLE_LIMIT]:
        html = await element.evaluate(OUTER_HTML_SCRIPT)
        samples.append({
            "visible": await element.is_visible(),
            "text": (await element.text_content() or "").strip()[:200],
            "html": html[:SAMPLE_HTML_CHARS],
        })
    return {"selector": selector, "count": len(elements), "samples": samples}


async def handle_debug(ctx: ToolContext, params: DebugInput) -> dict:
    if params.url:
        await ctx.navigate(params.url, check=False)

    problem = await ctx.detector.inspect(ctx.page)
    roles = await analyze_roles(ctx)
    missing = [role for role, info in roles.items() if not info["matched"]]
    logger.info(f"[Debug] {len(roles) - len(missing)}/{len(roles)} roles matched at {ctx.current_url}")

    report = {
        "url": ctx.current_url,
        "title": await ctx.page.title(),
        "page_state": problem.reason.value if problem else "clear",
        "roles": roles,
        "unmatched_roles": missing,
        "session": ctx.scheduler.get_stats(),
        "browser_generation": ctx.handle.generation,
    }
    if params.selector:
        report["selector_analysis"] = await analyze_selector(ctx, params.selector)
    return report


TOOL = ToolSpec(
    name="linkedin_debug_dom",
    description="Report which selector candidates match on the current (or given) page, for diagnosing UI changes.",
    input_model=DebugInput,
    handler=handle_debug,
)
