"""
拟人化动作执行器

指针移动、点击、输入、滚动四个原语，全部由延迟配置表参数化：
- 形状固定（贝塞尔路径、逐字符输入、分段滚动），参数随机
- 不做任何内部重试，重试策略属于调用方
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from ..core.errors import ElementNotFoundError
from .delays import DelayProfile
from .waits import wait_for_any

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]

# 固定的微观节奏（毫秒），不随会话速度系数缩放
MOVE_STEP_MS = (5, 20)
MOVE_STEPS = (15, 30)
POST_CLICK_MS = (100, 300)
THINKING_PAUSE_MS = (300, 700)
THINKING_PROBABILITY = 0.05
CLEAR_PAUSE_MS = ((50, 150), (100, 300))
SCROLL_DISTANCE_PX = (300, 700)
SCROLL_STEPS = (5, 10)
SCROLL_STEP_MS = (30, 100)
TARGET_JITTER_PX = (5, 3)
CLICK_INTERIOR = (0.3, 0.7)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


def cubic_bezier(t: float, p0: float, p1: float, p2: float, p3: float) -> float:
    u = 1 - t
    return u * u * u * p0 + 3 * u * u * t * p1 + 3 * u * t * t * p2 + t * t * t * p3


def bezier_path(start: Point, end: Point, steps: int, rng: random.Random) -> list[Point]:
    """从 start 到 end 的贝塞尔路径，不含起点，最后一个点恰好是 end。"""
    dx = end.x - start.x
    dy = end.y - start.y
    cp1 = Point(
        start.x + dx * 0.25 + rng.randint(-50, 50),
        start.y + dy * 0.25 + rng.randint(-30, 30),
    )
    cp2 = Point(
        start.x + dx * 0.75 + rng.randint(-50, 50),
        start.y + dy * 0.75 + rng.randint(-30, 30),
    )

    path = []
    for i in range(1, steps + 1):
        t = i / steps
        path.append(Point(
            cubic_bezier(t, start.x, cp1.x, cp2.x, end.x),
            cubic_bezier(t, start.y, cp1.y, cp2.y, end.y),
        ))
    # 浮点误差下仍保证终点精确
    path[-1] = end
    return path


class Humanizer:
    """
    拟人化动作执行器

    只负责“怎么动”，不负责节奏门控；对外可见的动作应通过 SessionScheduler 包裹后调用。
    """

    def __init__(
        self,
        profile: DelayProfile,
        rng: random.Random | None = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self._profile = profile
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._position: Point | None = None

    @property
    def position(self) -> Point | None:
        """上一次指针移动的终点"""
        return self._position

    async def pause(self, low_ms: float, high_ms: float) -> None:
        await self._sleep(self._rng.uniform(low_ms, high_ms) / 1000)

    async def move_to(self, page: Any, x: float, y: float) -> Point:
        """沿贝塞尔曲线移动到 (x, y) 附近的抖动点，返回实际终点。"""
        start = self._position or Point(
            self._rng.randint(100, 500),
            self._rng.randint(100, 300),
        )
        jx, jy = TARGET_JITTER_PX
        target = Point(
            x + self._rng.randint(-jx, jx),
            y + self._rng.randint(-jy, jy),
        )
        steps = self._rng.randint(*MOVE_STEPS)

        for point in bezier_path(start, target, steps, self._rng):
            await page.mouse.move(point.x, point.y)
            await self.pause(*MOVE_STEP_MS)

        self._position = target
        return target

    async def click(
        self,
        page: Any,
        selectors: str | Sequence[str],
        timeout_ms: float = 10000,
        role: str = "",
    ) -> str:
        """定位元素、移动、犹豫、点击，返回实际命中的选择器。"""
        candidates = [selectors] if isinstance(selectors, str) else list(selectors)
        found = await wait_for_any(page, candidates, timeout_ms, sleep=self._sleep)
        if not found:
            raise ElementNotFoundError(candidates, role)

        box = await found.element.bounding_box()
        if not box:
            raise ElementNotFoundError(candidates, role)

        low, high = CLICK_INTERIOR
        target_x = box["x"] + box["width"] * self._rng.uniform(low, high)
        target_y = box["y"] + box["height"] * self._rng.uniform(low, high)

        end = await self.move_to(page, target_x, target_y)
        await self._sleep(self._profile.before_click.draw_seconds(self._rng))
        await page.mouse.click(end.x, end.y)
        await self.pause(*POST_CLICK_MS)
        return found.selector

    async def type(
        self,
        page: Any,
        selectors: str | Sequence[str],
        text: str,
        clear_first: bool = False,
        timeout_ms: float = 10000,
        role: str = "",
    ) -> str:
        """点击输入框后逐字符输入。"""
        selector = await self.click(page, selectors, timeout_ms, role)

        if clear_first:
            await page.keyboard.press("ControlOrMeta+A")
            await self.pause(*CLEAR_PAUSE_MS[0])
            await page.keyboard.press("Backspace")
            await self.pause(*CLEAR_PAUSE_MS[1])

        for char in text:
            await page.keyboard.type(char)
            await self._sleep(self._profile.typing_speed.draw_seconds(self._rng))
            if self._rng.random() < THINKING_PROBABILITY:
                await self.pause(*THINKING_PAUSE_MS)

        return selector

    async def scroll(self, page: Any, direction: str = "down") -> int:
        """把一次逻辑滚动拆成若干小步，返回总距离（像素，带方向）。"""
        distance = self._rng.randint(*SCROLL_DISTANCE_PX)
        steps = self._rng.randint(*SCROLL_STEPS)
        step = distance / steps
        if direction == "up":
            step = -step

        for _ in range(steps):
            await page.mouse.wheel(0, step)
            await self.pause(*SCROLL_STEP_MS)

        await self._sleep(self._profile.between_scrolls.draw_seconds(self._rng))
        return distance if direction != "up" else -distance
