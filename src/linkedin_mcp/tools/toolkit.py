"""
LinkedInToolkit - 工具调用边界

所有工具调用都经过 call()：
1. 校验输入（不触碰浏览器）
2. 持锁串行执行，获取存活的浏览器句柄
3. 处理器内部的异常在这里统一转换成 Success / NeedsHuman / Error，不会继续向外抛
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import random
import time
from collections.abc import Awaitable, Callable
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from pydantic import BaseModel, ValidationError

from ..browser.delays import DelayProfile
from ..browser.humanize import Humanizer
from ..browser.manager import BrowserHandle, BrowserManager, Launcher
from ..browser.selectors import SelectorTable
from ..browser.session import SessionScheduler
from ..config import Settings
from ..core.errors import (
    BrowserUnavailableError,
    ConfigurationError,
    ElementNotFoundError,
    NavigationFailedError,
    ProblemDetectedError,
)
from ..detector.detector import ProblemDetector
from ..detector.hints import render_hint
from ..detector.types import DetectedProblem, ProblemReason
from ..evidence import EvidenceStore
from .registry import TOOLS
from .context import ToolContext
from .response import Error, NeedsHuman, Success, to_json

logger = logging.getLogger(__name__)


def format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"])
        parts.append(f"{field}: {item['msg']}" if field else item["msg"])
    return "Invalid input: " + "; ".join(parts)


class LinkedInToolkit:
    """持有一次进程内共享的全部编排组件"""

    def __init__(
        self,
        settings: Settings,
        *,
        manager: BrowserManager | None = None,
        launcher: Launcher | None = None,
        selectors: SelectorTable | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings
        self._rng = rng or random.Random()
        self._sleep = sleep

        profile = DelayProfile.from_settings(settings, self._rng)
        self.scheduler = SessionScheduler(profile, rng=self._rng, clock=clock, sleep=sleep)
        self.humanizer = Humanizer(profile, rng=self._rng, sleep=sleep)
        self.detector = ProblemDetector(locale=settings.browser_locale, sleep=sleep)
        self._selectors = selectors
        self.evidence = EvidenceStore(settings.screenshots_dir)
        self.manager = manager or BrowserManager(settings, launcher=launcher)

        self._lock = asyncio.Lock()

    @property
    def selectors(self) -> SelectorTable:
        """首次使用时加载选择器表；文件有问题时抛 ConfigurationError，下次调用重新尝试"""
        if self._selectors is None:
            self._selectors = SelectorTable.load(self.settings.selectors_file)
        return self._selectors

    @property
    def tool_names(self) -> list[str]:
        return list(TOOLS)

    async def call(self, name: str, arguments: dict[str, Any] | None = None) -> Success | NeedsHuman | Error:
        spec = TOOLS.get(name)
        if spec is None:
            return Error(message=f"Unknown tool: {name}")

        try:
            params = spec.input_model.model_validate(arguments or {})
        except ValidationError as e:
            logger.info(f"[Tool] {name} rejected: {e.error_count()} validation error(s)")
            return Error(message=format_validation_error(e))

        try:
            selectors = self.selectors
        except ConfigurationError as e:
            logger.error(f"[Tool] {name} failed: {e}")
            return Error(message=str(e))

        async with self._lock:
            logger.info(f"[Tool] {name} called")
            try:
                handle = await self.manager.acquire()
            except BrowserUnavailableError as e:
                logger.error(f"[Tool] {name} failed: {e}")
                return Error(message=str(e))

            ctx = self._context(handle, selectors)
            try:
                data = await spec.handler(ctx, params)
            except Exception as e:
                return await self._outcome_for(name, handle, e)

        logger.info(f"[Tool] {name} completed")
        if isinstance(data, BaseModel):
            data = data.model_dump(mode="json")
        return Success(data=data)

    async def call_json(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        return to_json(await self.call(name, arguments))

    async def close(self) -> None:
        async with self._lock:
            await self.manager.close()

    # ── 内部 ────────────────────────────────────────────

    def _context(self, handle: BrowserHandle, selectors: SelectorTable) -> ToolContext:
        return ToolContext(
            handle=handle,
            settings=self.settings,
            scheduler=self.scheduler,
            humanizer=self.humanizer,
            detector=self.detector,
            selectors=selectors,
            evidence=self.evidence,
            rng=self._rng,
            sleep=self._sleep,
        )

    def _problem_for(self, error: Exception) -> DetectedProblem | None:
        """把处理器抛出的异常映射为需要人工介入的问题；无法映射返回 None"""
        locale = self.settings.browser_locale

        def problem(reason: ProblemReason, key: str, **values: str) -> DetectedProblem:
            return DetectedProblem(reason=reason, hint=render_hint(key, locale, **values))

        if isinstance(error, ProblemDetectedError):
            return error.problem
        if isinstance(error, ElementNotFoundError):
            target = error.role or ", ".join(error.selectors)
            return problem(ProblemReason.ELEMENT_NOT_FOUND, "element_not_found", target=target)
        if isinstance(error, NavigationFailedError):
            if error.is_network_error:
                return problem(ProblemReason.NETWORK_ERROR, "network_error", detail=_first_line(error.cause))
            return problem(ProblemReason.NAVIGATION_FAILED, "navigation_failed", detail=_first_line(error.cause))
        if isinstance(error, (PlaywrightTimeoutError, asyncio.TimeoutError)):
            return problem(ProblemReason.TIMEOUT, "timeout", detail=_first_line(str(error)) or "timed out")
        if isinstance(error, PlaywrightError):
            return problem(ProblemReason.UNEXPECTED_UI, "driver_error", detail=_first_line(error.message))
        return None

    async def _outcome_for(self, name: str, handle: BrowserHandle, error: Exception) -> NeedsHuman | Error:
        problem = self._problem_for(error)
        if problem is None:
            logger.error(f"[Tool] {name} failed: {type(error).__name__}: {error}", exc_info=True)
            return Error(message=f"{name} failed: {type(error).__name__}: {error}")

        problem = await self._attach_evidence(handle, problem)
        logger.warning(
            f"[Tool] {name} needs human: {problem.reason.value} "
            f"(screenshot={problem.evidence_path})"
        )
        return NeedsHuman.from_problem(problem, handle.url or None)

    async def _attach_evidence(self, handle: BrowserHandle, problem: DetectedProblem) -> DetectedProblem:
        """截图失败（浏览器已经没了等）时保留问题本身，路径留空"""
        try:
            path = await self.evidence.capture(handle.page, label=problem.reason.value)
        except Exception as e:
            logger.warning(f"[Evidence] Screenshot failed: {type(e).__name__}: {e}")
            return problem
        return dataclasses.replace(problem, evidence_path=path)


def _first_line(text: str) -> str:
    return text.strip().splitlines()[0] if text and text.strip() else ""
