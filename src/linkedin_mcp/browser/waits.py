"""
有界等待原语

每个等待都有明确的上限，返回 WaitResult 而不是吞掉异常；
只有 Playwright 的超时被视为“没等到”，其它错误照常抛出。
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

POLL_INTERVAL = 0.25


@dataclass
class WaitResult:
    ok: bool
    selector: str | None = None
    element: Any = None
    elapsed_ms: float = 0.0

    def __bool__(self) -> bool:
        return self.ok


async def first_visible(root: Any, selectors: Sequence[str]) -> tuple[str, Any] | None:
    """按顺序返回第一个可见匹配 (selector, element)，不等待。

    root 可以是 page，也可以是某个元素（在其子树内查找）。
    """
    for selector in selectors:
        element = await root.query_selector(selector)
        if element is not None and await element.is_visible():
            return selector, element
    return None


async def first_attached(root: Any, selectors: Sequence[str]) -> tuple[str, Any] | None:
    """同 first_visible，但只要求元素存在（空列表容器高度为 0，不算可见）"""
    for selector in selectors:
        element = await root.query_selector(selector)
        if element is not None:
            return selector, element
    return None


async def wait_for_any(
    page: Any,
    selectors: Sequence[str],
    timeout_ms: float = 10000,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> WaitResult:
    """轮询候选选择器直到任一可见或超时。"""
    elapsed = 0.0
    budget = timeout_ms / 1000
    while True:
        match = await first_visible(page, selectors)
        if match is not None:
            return WaitResult(True, match[0], match[1], elapsed * 1000)
        if elapsed >= budget:
            return WaitResult(False, elapsed_ms=elapsed * 1000)
        step = min(POLL_INTERVAL, budget - elapsed)
        await sleep(step)
        elapsed += step


async def wait_for_load(page: Any, state: str = "networkidle", timeout_ms: float = 15000) -> WaitResult:
    started = time.monotonic()
    try:
        await page.wait_for_load_state(state, timeout=timeout_ms)
    except PlaywrightTimeoutError:
        return WaitResult(False, elapsed_ms=(time.monotonic() - started) * 1000)
    return WaitResult(True, elapsed_ms=(time.monotonic() - started) * 1000)
