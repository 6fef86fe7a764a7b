"""
会话调度器

每个对外可见的动作（点击、输入、滚动、导航）都必须由 before_action / after_action 包裹：
- 保证两次动作之间不小于最小间隔
- 会话持续时间超过休息间隔后强制休息，并重置会话时钟
- 动作之后再随机停顿一段时间
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from .delays import DelayProfile

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class SessionState:
    """进程内唯一的会话状态（时间单位为秒，来自单调时钟）"""

    session_start_time: float
    last_action_time: float
    actions_count: int
    speed_factor: float


class SessionScheduler:
    """为每个动作施加节奏规则并统计会话数据"""

    def __init__(
        self,
        profile: DelayProfile,
        rng: random.Random | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ):
        self._profile = profile
        self._rng = rng or random.Random()
        self._clock = clock
        self._sleep = sleep

        now = clock()
        self.state = SessionState(
            session_start_time=now,
            last_action_time=now,
            actions_count=0,
            speed_factor=profile.speed_factor,
        )
        self._rest_after = profile.rest_interval.draw_seconds(self._rng)
        self._rests_taken = 0

    @property
    def profile(self) -> DelayProfile:
        return self._profile

    @property
    def min_gap(self) -> float:
        """两次动作之间的最小间隔（秒）"""
        return self._profile.between_actions.min_ms / 1000

    async def before_action(self) -> None:
        self.state.actions_count += 1
        now = self._clock()

        if now - self.state.session_start_time > self._rest_after:
            rest = self._profile.rest_duration.draw_seconds(self._rng)
            logger.info(f"[Session] Taking a break ({rest:.0f}s) after {self.state.actions_count - 1} actions")
            await self._sleep(rest)
            self._rests_taken += 1
            self.state.session_start_time = self._clock()
            self._rest_after = self._profile.rest_interval.draw_seconds(self._rng)
            logger.info("[Session] Break finished, resuming")
            now = self._clock()

        gap = now - self.state.last_action_time
        if gap < self.min_gap:
            await self._sleep(self.min_gap - gap)

        self.state.last_action_time = self._clock()

    async def after_action(self) -> None:
        await self._sleep(self._profile.between_actions.draw_seconds(self._rng))
        self.state.last_action_time = self._clock()

    @asynccontextmanager
    async def action(self, name: str = "") -> AsyncIterator[None]:
        """用法: ``async with scheduler.action("click"): ...``"""
        await self.before_action()
        if name:
            logger.debug(f"[Session] Action #{self.state.actions_count}: {name}")
        try:
            yield
        finally:
            await self.after_action()

    def get_stats(self) -> dict:
        now = self._clock()
        return {
            "actions_count": self.state.actions_count,
            "session_duration_s": round(now - self.state.session_start_time, 1),
            "since_last_action_s": round(now - self.state.last_action_time, 1),
            "speed_factor": round(self.state.speed_factor, 3),
            "rests_taken": self._rests_taken,
        }
