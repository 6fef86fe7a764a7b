"""linkedin_screenshot - 截图当前页面或单个元素"""

from __future__ import annotations

from .context import ToolContext, ToolSpec
from .types import ScreenshotInput, ScreenshotOutput


async def handle_screenshot(ctx: ToolContext, params: ScreenshotInput) -> ScreenshotOutput:
    path = await ctx.evidence.capture(
        ctx.page,
        full_page=params.full_page,
        selector=params.element,
    )
    return ScreenshotOutput(screenshot_path=path, current_url=ctx.current_url)


TOOL = ToolSpec(
    name="linkedin_screenshot",
    description="Take a screenshot of the current page, the full page, or a single element.",
    input_model=ScreenshotInput,
    handler=handle_screenshot,
)
