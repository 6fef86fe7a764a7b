"""
截图证据存储

截图写到磁盘，响应里只返回路径，不内联图片数据。
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from .core.errors import ElementNotFoundError

logger = logging.getLogger(__name__)


class EvidenceStore:
    """把页面 / 元素截图保存为 PNG 并返回文件路径"""

    def __init__(self, directory: Path):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _next_path(self, label: str) -> Path:
        self._directory.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        return self._directory / f"{label}_{timestamp}.png"

    async def capture(
        self,
        page: Any,
        *,
        full_page: bool = False,
        selector: str | None = None,
        label: str = "screenshot",
    ) -> str:
        if selector:
            element = await page.query_selector(selector)
            if element is None:
                raise ElementNotFoundError([selector])
            data = await element.screenshot(type="png")
        else:
            data = await page.screenshot(full_page=full_page, type="png")

        path = self._next_path(label)
        path.write_bytes(data)
        logger.info(f"[Evidence] Screenshot saved to {path}")
        return str(path)
