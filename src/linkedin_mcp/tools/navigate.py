"""linkedin_navigate - 打开任意 LinkedIn 地址"""

from __future__ import annotations

from .context import ToolContext, ToolSpec
from .types import NavigateInput, NavigateOutput


async def handle_navigate(ctx: ToolContext, params: NavigateInput) -> NavigateOutput:
    await ctx.navigate(params.url)
    return NavigateOutput(current_url=ctx.current_url)


TOOL = ToolSpec(
    name="linkedin_navigate",
    description="Navigate the browser to a LinkedIn URL.",
    input_model=NavigateInput,
    handler=handle_navigate,
)
