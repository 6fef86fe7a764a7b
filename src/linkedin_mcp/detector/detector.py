"""
ProblemDetector - 页面状态分类器

在每次导航或可能改变页面的动作之后调用：
先抓取 PageSnapshot（地址、可见文本、规则选择器的可见性），再按 RULES 的优先级纯函数分类。
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from ..browser.waits import wait_for_any
from .hints import render_hint
from .rules import CAPTCHA_RULE, LOGIN_RULE, RATE_LIMIT_RULE, RULES, DetectionRule
from .types import DetectedProblem, PageSnapshot, ProblemReason

logger = logging.getLogger(__name__)

BODY_TEXT_SCRIPT = "() => document.body ? document.body.innerText : ''"

_RULES_BY_REASON = {rule.reason: rule for rule in RULES}


class ProblemDetector:
    """登录墙 > 验证码 > 限流，命中即返回，不再检查后面的规则。"""

    def __init__(
        self,
        rules: Sequence[DetectionRule] = RULES,
        locale: str = "en",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._rules = tuple(rules)
        self._locale = locale
        self._sleep = sleep

    # ── 纯分类 ──────────────────────────────────────────

    def classify(self, snapshot: PageSnapshot) -> DetectedProblem | None:
        for rule in self._rules:
            problem = self.evaluate(rule, snapshot)
            if problem:
                return problem
        return None

    def evaluate(self, rule: DetectionRule, snapshot: PageSnapshot) -> DetectedProblem | None:
        if not rule.matches(snapshot):
            return None
        return DetectedProblem(
            reason=rule.reason,
            hint=render_hint(rule.hint_key(snapshot), self._locale),
        )

    def check_login(self, snapshot: PageSnapshot) -> DetectedProblem | None:
        return self.evaluate(LOGIN_RULE, snapshot)

    def check_captcha(self, snapshot: PageSnapshot) -> DetectedProblem | None:
        return self.evaluate(CAPTCHA_RULE, snapshot)

    def check_rate_limit(self, snapshot: PageSnapshot) -> DetectedProblem | None:
        return self.evaluate(RATE_LIMIT_RULE, snapshot)

    # ── 页面 ────────────────────────────────────────────

    async def snapshot(self, page: Any, rules: Sequence[DetectionRule] | None = None) -> PageSnapshot:
        selectors = dict.fromkeys(s for rule in (rules or self._rules) for s in rule.all_selectors)
        present, visible = set(), set()
        for selector in selectors:
            element = await page.query_selector(selector)
            if element is None:
                continue
            present.add(selector)
            if await element.is_visible():
                visible.add(selector)

        text = await page.evaluate(BODY_TEXT_SCRIPT) or ""
        return PageSnapshot(
            url=page.url,
            text=text.lower(),
            visible=frozenset(visible),
            present=frozenset(present),
        )

    async def inspect(self, page: Any) -> DetectedProblem | None:
        """按完整优先级检查当前页面"""
        problem = self.classify(await self.snapshot(page))
        if problem:
            logger.warning(f"[Detector] {problem.reason.value} at {page.url}")
        return problem

    async def check(self, page: Any, reason: ProblemReason) -> DetectedProblem | None:
        """只检查一种问题，不走完整优先级（例如发送邀请途中只关心限流）。"""
        rule = _RULES_BY_REASON[reason]
        problem = self.evaluate(rule, await self.snapshot(page, [rule]))
        if problem:
            logger.warning(f"[Detector] {problem.reason.value} at {page.url}")
        return problem

    async def detect_unexpected_ui(
        self,
        page: Any,
        expected: Sequence[str],
        timeout_ms: float = 10000,
        target: str = "",
    ) -> DetectedProblem | None:
        """期望的元素在时限内没有出现时返回 unexpected_ui。"""
        found = await wait_for_any(page, expected, timeout_ms, sleep=self._sleep)
        if found:
            return None
        return DetectedProblem(
            reason=ProblemReason.UNEXPECTED_UI,
            hint=render_hint("unexpected_ui", self._locale, target=target or ", ".join(expected)),
        )

    def hint_for(self, key: str, **values: str) -> str:
        return render_hint(key, self._locale, **values)
