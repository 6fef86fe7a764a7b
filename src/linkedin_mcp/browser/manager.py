"""
BrowserManager - 浏览器生命周期管理

进程内只持有一个浏览器上下文和一个活动页面，所有操作串行共享。
每次 acquire() 都重新做存活探测：探测失败就丢弃并重建，从不尝试原地修复。
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import Settings
from ..core.errors import BrowserUnavailableError

logger = logging.getLogger(__name__)

_LAUNCH_TIMEOUT = 30  # seconds

_COMMON_CHROMIUM_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--no-first-run",
]

_HIDE_WEBDRIVER_SCRIPT = "Object.defineProperty(navigator, 'webdriver', { get: () => false });"

# 返回 (context, page)
Launcher = Callable[[Settings], Awaitable[tuple[Any, Any]]]

_generation = itertools.count(1)


class BrowserState(Enum):
    IDLE = "idle"
    STARTING = "starting"
    READY = "ready"
    ERROR = "error"
    STOPPING = "stopping"


@dataclass(eq=False)
class BrowserHandle:
    """一个浏览器上下文 + 一个活动页面。存活性不缓存，由 BrowserManager 每次重新探测。"""

    context: Any
    page: Any
    generation: int = field(default_factory=lambda: next(_generation))
    created_at: float = field(default_factory=time.time)

    @property
    def url(self) -> str:
        try:
            return self.page.url
        except Exception:
            return ""


class BrowserManager:
    """浏览器生命周期管理（获取 / 探测 / 重建 / 关闭）"""

    def __init__(self, settings: Settings, launcher: Launcher | None = None):
        self._settings = settings
        self._launcher = launcher or self._launch_persistent
        self._playwright: Any | None = None
        self._handle: BrowserHandle | None = None
        self.state = BrowserState.IDLE
        self.recreations = 0

    # ── 公共属性 ────────────────────────────────────────

    @property
    def handle(self) -> BrowserHandle | None:
        return self._handle

    @property
    def current_url(self) -> str:
        return self._handle.url if self._handle else ""

    # ── 获取 / 探测 ─────────────────────────────────────

    async def acquire(self) -> BrowserHandle:
        """返回一个存活的句柄；没有或探测失败时新建。"""
        if self._handle is not None:
            if await self.is_alive(self._handle):
                return self._handle
            logger.warning(
                f"[Browser] Handle #{self._handle.generation} failed liveness probe, recreating"
            )
            await self._discard()
            self.recreations += 1

        self.state = BrowserState.STARTING
        try:
            context, page = await self._launcher(self._settings)
        except BrowserUnavailableError:
            self.state = BrowserState.ERROR
            raise
        except Exception as e:
            self.state = BrowserState.ERROR
            await self._cleanup_playwright()
            raise BrowserUnavailableError(self._describe_launch_failure(e)) from e

        self._handle = BrowserHandle(context=context, page=page)
        self.state = BrowserState.READY
        logger.info(f"[Browser] Handle #{self._handle.generation} ready")
        return self._handle

    async def is_alive(self, handle: BrowserHandle) -> bool:
        """对页面做一次空操作求值；任何失败都视为已死。"""
        try:
            await asyncio.wait_for(
                handle.page.evaluate("() => 1"),
                timeout=self._settings.probe_timeout_ms / 1000,
            )
            return True
        except Exception as e:
            logger.debug(f"[Browser] Liveness probe failed: {type(e).__name__}: {e}")
            return False

    # ── 关闭 ────────────────────────────────────────────

    async def close(self) -> None:
        """幂等关闭，容忍底层资源已经不存在。"""
        if self._handle is None and self._playwright is None:
            return
        prev = self.state
        self.state = BrowserState.STOPPING
        await self._discard()
        await self._cleanup_playwright()
        self.state = BrowserState.IDLE
        if prev == BrowserState.READY:
            logger.info("[Browser] Browser closed")

    async def _discard(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            await handle.context.close()
        except Exception as e:
            logger.debug(f"[Browser] Ignoring error while closing context: {e}")

    async def _cleanup_playwright(self) -> None:
        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.debug(f"[Browser] Ignoring error while stopping driver: {e}")
            self._playwright = None

    # ── 启动 ────────────────────────────────────────────

    async def _start_playwright_driver(self) -> Any:
        """启动 Playwright driver 进程（最多尝试 2 次）。"""
        from playwright.async_api import async_playwright

        max_attempts = 2
        last_err = ""

        for attempt in range(1, max_attempts + 1):
            try:
                return await asyncio.wait_for(async_playwright().start(), timeout=20)
            except asyncio.TimeoutError:
                last_err = f"Playwright driver start timed out (20s, attempt {attempt}/{max_attempts})"
            except Exception as e:
                last_err = f"Playwright driver start failed: {type(e).__name__}: {e}"
            logger.warning(f"[Browser] {last_err}")
            if attempt < max_attempts:
                await asyncio.sleep(1)

        raise BrowserUnavailableError(last_err)

    async def _launch_persistent(self, settings: Settings) -> tuple[Any, Any]:
        """用 launch_persistent_context 在 profile 目录上原子启动浏览器 + 页面。"""
        if self._playwright is None:
            self._playwright = await self._start_playwright_driver()

        settings.linkedin_user_data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            f"[Browser] Launching Chromium (headless={settings.headless}, "
            f"profile={settings.linkedin_user_data_dir})"
        )

        context = await asyncio.wait_for(
            self._playwright.chromium.launch_persistent_context(
                user_data_dir=str(settings.linkedin_user_data_dir),
                headless=settings.headless,
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
                user_agent=settings.user_agent,
                locale=settings.browser_locale,
                timezone_id=settings.browser_timezone,
                args=_COMMON_CHROMIUM_ARGS,
                timeout=_LAUNCH_TIMEOUT * 1000,
            ),
            timeout=_LAUNCH_TIMEOUT + 5,
        )

        pages = context.pages
        page = pages[0] if pages else await context.new_page()
        await page.add_init_script(_HIDE_WEBDRIVER_SCRIPT)
        page.set_default_timeout(settings.navigation_timeout_ms)
        return context, page

    def _describe_launch_failure(self, error: Exception) -> str:
        message = f"Browser launch failed: {type(error).__name__}: {error}"
        lock = self._settings.profile_lock_path
        if lock.is_symlink() or lock.exists():
            message += (
                f"\nThe profile at {self._settings.linkedin_user_data_dir} looks locked by another "
                "browser process. Close the other Chrome/Chromium window using it and retry."
            )
        return message
