"""
浏览器编排层

- BrowserManager: 进程内唯一的浏览器/页面资源
- SessionScheduler: 动作节奏门控
- Humanizer: 拟人化动作原语
"""

from .delays import DelayProfile, DelayRange
from .humanize import Humanizer
from .manager import BrowserHandle, BrowserManager, BrowserState
from .selectors import SelectorTable
from .session import SessionScheduler

__all__ = [
    "BrowserHandle",
    "BrowserManager",
    "BrowserState",
    "DelayProfile",
    "DelayRange",
    "Humanizer",
    "SelectorTable",
    "SessionScheduler",
]
