"""
LinkedIn MCP 服务器

通过持久化 profile 的 Chromium 自动化 LinkedIn。每个工具返回一个 JSON 对象：
- {"status": "success", "data": ...}
- {"status": "needs_human", "reason": ..., "hint": ..., "screenshot_path": ..., "current_url": ...}
- {"status": "error", "message": ...}

启动方式：
    python -m linkedin_mcp
    linkedin-mcp
"""

import logging
import signal
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from mcp.server.fastmcp import FastMCP

from ..config import settings
from ..tools import LinkedInToolkit

logger = logging.getLogger(__name__)

_toolkit: LinkedInToolkit | None = None


def get_toolkit() -> LinkedInToolkit:
    """首次调用时创建；浏览器本身在第一次工具调用时才启动"""
    global _toolkit
    if _toolkit is None:
        _toolkit = LinkedInToolkit(settings)
    return _toolkit


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    logger.info("[Server] LinkedIn MCP server started")
    try:
        yield
    finally:
        if _toolkit is not None:
            await _toolkit.close()
        logger.info("[Server] LinkedIn MCP server stopped")


mcp = FastMCP(
    name="linkedin",
    instructions="""LinkedIn MCP Server - LinkedIn 浏览器自动化服务。

每个工具返回三种状态之一：
- success: 操作完成，data 中是结果
- needs_human: 遇到登录墙 / 验证码 / 限流 / 界面变化，操作已停止。
  请把 hint 和 screenshot_path 转告用户，由用户在浏览器中处理后再重试
- error: 输入非法或内部故障，重试前先修正参数

典型工作流：
1. linkedin_search 搜索人员
2. linkedin_scroll_results 加载更多结果
3. linkedin_get_profile 读取主页
4. linkedin_send_connection 发送邀请（附言最多 300 字符）

人工介入 / 诊断：
- linkedin_navigate, linkedin_click, linkedin_type: 手动推进页面
- linkedin_screenshot: 查看当前页面
- linkedin_debug_dom: 检查选择器是否仍然命中
""",
    lifespan=lifespan,
)


@mcp.tool()
async def linkedin_search(query: str, location: str | None = None, limit: int = 10) -> str:
    """
    Search LinkedIn for people.

    Args:
        query: Search keywords, e.g. "python developer"
        location: Optional location appended to the keywords, e.g. "Warsaw"
        limit: Maximum number of results (1-25, default: 10)

    Returns:
        JSON outcome; on success data has results, total_results and has_more.
    """
    return await get_toolkit().call_json(
        "linkedin_search", {"query": query, "location": location, "limit": limit}
    )


@mcp.tool()
async def linkedin_get_profile(profile_url: str) -> str:
    """
    Read a LinkedIn profile.

    Args:
        profile_url: Profile URL, e.g. "https://www.linkedin.com/in/username/"

    Returns:
        JSON outcome; on success data has name, headline, location, experience,
        about and, when available, email and phone.
    """
    return await get_toolkit().call_json("linkedin_get_profile", {"profile_url": profile_url})


@mcp.tool()
async def linkedin_scroll_results(direction: str = "down", amount: int = 3) -> str:
    """
    Scroll the current search results page to load more results.

    Args:
        direction: "down" or "up" (default: "down")
        amount: Number of scroll actions (1-10, default: 3)

    Returns:
        JSON outcome; on success data has new_results and total_loaded.
    """
    return await get_toolkit().call_json(
        "linkedin_scroll_results", {"direction": direction, "amount": amount}
    )


@mcp.tool()
async def linkedin_send_connection(profile_url: str, message: str | None = None) -> str:
    """
    Send a connection request.

    Args:
        profile_url: Profile URL of the person to connect with
        message: Optional note (max 300 characters)

    Returns:
        JSON outcome; on success data.status is "success", "already_connected" or "pending".
    """
    return await get_toolkit().call_json(
        "linkedin_send_connection", {"profile_url": profile_url, "message": message}
    )


@mcp.tool()
async def linkedin_navigate(url: str) -> str:
    """
    Navigate to a LinkedIn URL.

    Args:
        url: A linkedin.com URL

    Returns:
        JSON outcome; on success data.current_url is the loaded address.
    """
    return await get_toolkit().call_json("linkedin_navigate", {"url": url})


@mcp.tool()
async def linkedin_click(selector: str | None = None, text: str | None = None) -> str:
    """
    Click an element on the current page.

    Args:
        selector: CSS selector of the element
        text: Visible text of the element (used when selector is not given)

    Returns:
        JSON outcome.
    """
    return await get_toolkit().call_json("linkedin_click", {"selector": selector, "text": text})


@mcp.tool()
async def linkedin_type(selector: str, text: str, clear_first: bool = False) -> str:
    """
    Type text into an input on the current page.

    Args:
        selector: CSS selector of the input
        text: Text to type
        clear_first: Clear the existing value first (default: False)

    Returns:
        JSON outcome.
    """
    return await get_toolkit().call_json(
        "linkedin_type", {"selector": selector, "text": text, "clear_first": clear_first}
    )


@mcp.tool()
async def linkedin_screenshot(full_page: bool = False, element: str | None = None) -> str:
    """
    Take a screenshot of the current page.

    Args:
        full_page: Capture the full scrollable page (default: False)
        element: Optional CSS selector to capture a single element

    Returns:
        JSON outcome; on success data has screenshot_path and current_url.
    """
    return await get_toolkit().call_json(
        "linkedin_screenshot", {"full_page": full_page, "element": element}
    )


@mcp.tool()
async def linkedin_debug_dom(url: str | None = None, selector: str | None = None) -> str:
    """
    Diagnose selectors on the current (or given) page.

    Args:
        url: Optional LinkedIn URL to open first
        selector: Optional CSS selector to analyze in detail

    Returns:
        JSON outcome; on success data reports matches per selector role and session stats.
    """
    return await get_toolkit().call_json("linkedin_debug_dom", {"url": url, "selector": selector})


def setup_logging(level: str = "INFO") -> None:
    """日志只写 stderr，stdout 留给 MCP stdio 协议"""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _terminate(signum, frame) -> None:
    raise KeyboardInterrupt


def main() -> None:
    setup_logging(settings.log_level)
    signal.signal(signal.SIGTERM, _terminate)
    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("[Server] Interrupted, shutting down")


if __name__ == "__main__":
    main()
