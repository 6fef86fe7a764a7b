"""
问题检测 - 数据类型定义
"""

from dataclasses import dataclass
from enum import Enum


class ProblemReason(str, Enum):
    """需要人工介入的页面/站点状态"""
    LOGIN_REQUIRED = "login_required"
    CAPTCHA_DETECTED = "captcha_detected"
    RATE_LIMITED = "rate_limited"
    UNEXPECTED_UI = "unexpected_ui"
    ELEMENT_NOT_FOUND = "element_not_found"
    TIMEOUT = "timeout"
    NAVIGATION_FAILED = "navigation_failed"
    NETWORK_ERROR = "network_error"


@dataclass(frozen=True)
class DetectedProblem:
    """一次检测的结果，不持久化"""
    reason: ProblemReason
    hint: str
    evidence_path: str | None = None


@dataclass(frozen=True)
class PageSnapshot:
    """
    分类所需的页面状态快照

    Attributes:
        url: 当前地址
        text: 页面可见文本（小写）
        visible: 规则表中当前可见的选择器
        present: 规则表中存在于 DOM 的选择器（可见的也算）
    """
    url: str
    text: str
    visible: frozenset[str] = frozenset()
    present: frozenset[str] = frozenset()

    def has_visible(self, selectors: tuple[str, ...]) -> bool:
        return any(s in self.visible for s in selectors)

    def has_present(self, selectors: tuple[str, ...]) -> bool:
        return any(s in self.present or s in self.visible for s in selectors)
