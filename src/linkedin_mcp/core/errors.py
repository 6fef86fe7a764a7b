"""
核心异常类

处理器内部通过异常短路，只在工具边界 (LinkedInToolkit.call) 转换为三态结果。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..detector.types import DetectedProblem


class LinkedInMCPError(Exception):
    """所有内部异常的基类"""


class ConfigurationError(LinkedInMCPError):
    """配置无法使用（选择器文件缺失、格式错误等）。"""


class BrowserUnavailableError(LinkedInMCPError):
    """浏览器无法启动（driver 启动失败、profile 被其它进程锁定等）。"""


class ElementNotFoundError(LinkedInMCPError):
    """有界等待结束时，候选选择器均未匹配到可见元素。

    Attributes:
        selectors: 按顺序尝试过的选择器
        role: 选择器表中的逻辑角色（直接传选择器时为空）
    """

    def __init__(self, selectors: list[str] | tuple[str, ...], role: str = ""):
        self.selectors = list(selectors)
        self.role = role
        target = role or ", ".join(self.selectors)
        super().__init__(f"Element not found: {target}")


class NavigationFailedError(LinkedInMCPError):
    """page.goto 失败。

    Attributes:
        url: 目标地址
        cause: 底层 driver 的错误信息
    """

    def __init__(self, url: str, cause: str = ""):
        self.url = url
        self.cause = cause
        super().__init__(f"Navigation to {url} failed: {cause}")

    @property
    def is_network_error(self) -> bool:
        return "net::" in self.cause


class ProblemDetectedError(LinkedInMCPError):
    """页面被判定为不利状态（登录墙、验证码、限流等），当前操作立即停止。"""

    def __init__(self, problem: DetectedProblem):
        self.problem = problem
        super().__init__(f"Problem detected: {problem.reason.value}")
