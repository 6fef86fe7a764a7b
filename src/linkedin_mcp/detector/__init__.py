"""
问题检测

- ProblemDetector: 页面分类器（登录墙 > 验证码 > 限流）
- RULES: 声明式规则表
"""

from .detector import ProblemDetector
from .rules import CAPTCHA_RULE, LOGIN_RULE, RATE_LIMIT_RULE, RULES, DetectionRule, HintRule
from .types import DetectedProblem, PageSnapshot, ProblemReason

__all__ = [
    "CAPTCHA_RULE",
    "DetectedProblem",
    "DetectionRule",
    "HintRule",
    "LOGIN_RULE",
    "PageSnapshot",
    "ProblemDetector",
    "ProblemReason",
    "RATE_LIMIT_RULE",
    "RULES",
]
