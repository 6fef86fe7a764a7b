"""对外暴露的全部工具，按名称索引"""

from . import connect, debug, interact, navigate, profile, screenshot, scroll, search
from .context import ToolSpec

TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        search.TOOL,
        profile.TOOL,
        scroll.TOOL,
        connect.TOOL,
        navigate.TOOL,
        interact.CLICK_TOOL,
        interact.TYPE_TOOL,
        screenshot.TOOL,
        debug.TOOL,
    )
}
