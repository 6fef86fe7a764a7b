"""
延迟配置表

把动作类别（点击、输入、滚动、阅读、动作间隔）映射为随机时长范围。
每个进程只抽取一次会话速度系数，所有范围在加载时按该系数缩放，之后不可变。
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from ..config import Settings

logger = logging.getLogger(__name__)

SPEED_FACTOR_RANGE = (0.7, 1.3)

_MINUTE_MS = 60 * 1000

# 未缩放的默认值（毫秒）
_BASE_DELAYS: dict[str, tuple[float, float]] = {
    "before_click": (300, 1200),
    "typing_speed": (60, 180),
    "reading_profile": (6000, 18000),
    "after_search": (2500, 6000),
    "between_scrolls": (800, 2500),
    "micro_pause": (500, 1500),
}


@dataclass(frozen=True)
class DelayRange:
    """[min_ms, max_ms] 闭区间"""

    min_ms: float
    max_ms: float

    def __post_init__(self) -> None:
        if self.min_ms < 0 or self.max_ms < self.min_ms:
            raise ValueError(f"Invalid delay range: [{self.min_ms}, {self.max_ms}]")

    def scaled(self, factor: float) -> DelayRange:
        return DelayRange(self.min_ms * factor, self.max_ms * factor)

    def draw(self, rng: random.Random) -> float:
        """抽取一个毫秒值"""
        return rng.uniform(self.min_ms, self.max_ms)

    def draw_seconds(self, rng: random.Random) -> float:
        return self.draw(rng) / 1000


@dataclass(frozen=True)
class DelayProfile:
    """一次会话的全部节奏参数"""

    speed_factor: float
    between_actions: DelayRange
    before_click: DelayRange
    typing_speed: DelayRange
    reading_profile: DelayRange
    after_search: DelayRange
    between_scrolls: DelayRange
    micro_pause: DelayRange
    rest_interval: DelayRange
    rest_duration: DelayRange

    @classmethod
    def from_settings(cls, settings: Settings, rng: random.Random) -> DelayProfile:
        """根据配置构建，速度系数未固定时从 rng 抽取。"""
        factor = settings.speed_factor
        if factor is None:
            factor = rng.uniform(*SPEED_FACTOR_RANGE)

        base = dict(_BASE_DELAYS)
        base["between_actions"] = (settings.min_action_delay, settings.max_action_delay)
        base.update(settings.delay_overrides)

        ranges = {name: DelayRange(*bounds).scaled(factor) for name, bounds in base.items()}

        if settings.session_pause_interval is not None:
            rest_interval = DelayRange(settings.session_pause_interval, settings.session_pause_interval)
        else:
            rest_interval = DelayRange(30 * _MINUTE_MS, 60 * _MINUTE_MS)

        if settings.session_pause_duration is not None:
            rest_duration = DelayRange(settings.session_pause_duration, settings.session_pause_duration)
        else:
            rest_duration = DelayRange(3 * _MINUTE_MS, 8 * _MINUTE_MS)

        logger.info(f"[Session] Speed factor for this run: {factor:.2f}")
        return cls(
            speed_factor=factor,
            rest_interval=rest_interval,
            rest_duration=rest_duration,
            **ranges,
        )
