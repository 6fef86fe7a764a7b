"""
ToolContext - 处理器与编排核心之间的唯一接口

处理器只通过这里导航、点击、输入、滚动和检测：
- 每个对外可见的动作都经过 SessionScheduler 包裹
- 导航和动作之后都可以调用 ensure_clear()，命中不利状态时抛出 ProblemDetectedError
"""

from __future__ import annotations

import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from pydantic import BaseModel

from ..browser.waits import first_attached, first_visible, wait_for_any, wait_for_load
from ..core.errors import NavigationFailedError, ProblemDetectedError

if TYPE_CHECKING:
    from ..browser.delays import DelayProfile, DelayRange
    from ..browser.humanize import Humanizer
    from ..browser.manager import BrowserHandle
    from ..browser.selectors import SelectorTable
    from ..browser.session import SessionScheduler
    from ..config import Settings
    from ..detector.detector import ProblemDetector
    from ..detector.types import ProblemReason
    from ..evidence import EvidenceStore

logger = logging.getLogger(__name__)

Handler = Callable[["ToolContext", Any], Awaitable[BaseModel | dict]]


@dataclass(frozen=True)
class ToolSpec:
    """一个对外暴露的工具：名称、描述、输入模型、处理函数"""
    name: str
    description: str
    input_model: type[BaseModel]
    handler: Handler


@dataclass
class ToolContext:
    handle: BrowserHandle
    settings: Settings
    scheduler: SessionScheduler
    humanizer: Humanizer
    detector: ProblemDetector
    selectors: SelectorTable
    evidence: EvidenceStore
    rng: random.Random
    sleep: Callable[[float], Awaitable[None]]

    @property
    def page(self) -> Any:
        return self.handle.page

    @property
    def current_url(self) -> str:
        return self.handle.url

    @property
    def profile(self) -> DelayProfile:
        return self.scheduler.profile

    # ── 节奏 ────────────────────────────────────────────

    async def pause(self, delay: DelayRange) -> None:
        await self.sleep(delay.draw_seconds(self.rng))

    async def pause_ms(self, low_ms: float, high_ms: float) -> None:
        await self.sleep(self.rng.uniform(low_ms, high_ms) / 1000)

    async def wait(self, ms: float) -> None:
        """固定的稳定等待（等页面渲染），不是节奏延迟"""
        await self.sleep(ms / 1000)

    # ── 导航与检测 ──────────────────────────────────────

    async def navigate(self, url: str, check: bool = True) -> None:
        async with self.scheduler.action("navigate"):
            logger.info(f"[Tool] Navigating to: {url}")
            try:
                await self.page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self.settings.navigation_timeout_ms,
                )
            except PlaywrightTimeoutError:
                raise
            except PlaywrightError as e:
                raise NavigationFailedError(url, str(e)) from e

        loaded = await wait_for_load(self.page, "networkidle", timeout_ms=15000)
        if not loaded:
            logger.debug(f"[Tool] Network did not go idle after {loaded.elapsed_ms:.0f}ms, continuing")

        if check:
            await self.ensure_clear()

    async def ensure_clear(self) -> None:
        """完整优先级检查，命中即短路当前操作"""
        problem = await self.detector.inspect(self.page)
        if problem:
            raise ProblemDetectedError(problem)

    async def ensure_no(self, reason: ProblemReason) -> None:
        """只检查一种问题"""
        problem = await self.detector.check(self.page, reason)
        if problem:
            raise ProblemDetectedError(problem)

    async def expect(self, role: str, timeout_ms: float = 10000, target: str = "") -> None:
        """期望元素没有出现时以 unexpected_ui 短路"""
        problem = await self.detector.detect_unexpected_ui(
            self.page, self.selectors[role], timeout_ms, target or role
        )
        if problem:
            raise ProblemDetectedError(problem)

    # ── 动作（全部经过调度器） ───────────────────────────

    async def click(self, role: str, timeout_ms: float = 10000) -> str:
        return await self._click(self.selectors[role], timeout_ms, role)

    async def click_selector(self, selector: str, timeout_ms: float = 10000) -> str:
        return await self._click([selector], timeout_ms, "")

    async def _click(self, candidates: Sequence[str], timeout_ms: float, role: str) -> str:
        async with self.scheduler.action("click"):
            return await self.humanizer.click(self.page, candidates, timeout_ms, role)

    async def type_into(self, role: str, text: str, clear_first: bool = False) -> str:
        async with self.scheduler.action("type"):
            return await self.humanizer.type(self.page, self.selectors[role], text, clear_first, role=role)

    async def type_selector(self, selector: str, text: str, clear_first: bool = False) -> str:
        async with self.scheduler.action("type"):
            return await self.humanizer.type(self.page, [selector], text, clear_first)

    async def scroll(self, direction: str = "down") -> int:
        async with self.scheduler.action("scroll"):
            return await self.humanizer.scroll(self.page, direction)

    # ── 查询 ────────────────────────────────────────────

    async def find(self, role: str, root: Any = None, visible: bool = True) -> Any | None:
        """按候选顺序返回第一个匹配元素；visible=False 时只要求存在"""
        root = root or self.page
        probe = first_visible if visible else first_attached
        match = await probe(root, self.selectors[role])
        return match[1] if match else None

    async def find_all(self, role: str, root: Any = None) -> list[Any]:
        """第一个有匹配的候选选择器的全部元素"""
        root = root or self.page
        for selector in self.selectors[role]:
            elements = await root.query_selector_all(selector)
            if elements:
                return elements
        return []

    async def text_of(self, role: str, root: Any = None) -> str:
        root = root or self.page
        for selector in self.selectors[role]:
            element = await root.query_selector(selector)
            if element is None:
                continue
            text = (await element.text_content() or "").strip()
            if text:
                return text
        return ""

    async def wait_for(self, roles: Sequence[str], timeout_ms: float):
        """等待若干角色中任一出现，返回 (role, WaitResult)"""
        candidates = [s for role in roles for s in self.selectors[role]]
        result = await wait_for_any(self.page, candidates, timeout_ms, sleep=self.sleep)
        if not result:
            return None, result
        for role in roles:
            if result.selector in self.selectors[role]:
                return role, result
        return None, result
