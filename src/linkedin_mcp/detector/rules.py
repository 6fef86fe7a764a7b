"""
页面分类规则表

声明式的 模式 -> 分类 映射。短语、选择器、URL 片段都是可替换的配置，
不是固定契约；LinkedIn 改版时只需要改这里。
RULES 的顺序就是优先级：登录墙 > 验证码 > 限流。
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import PageSnapshot, ProblemReason


@dataclass(frozen=True)
class HintRule:
    """命中 selectors 或 phrases 任一项时使用 hint_key"""
    hint_key: str
    selectors: tuple[str, ...] = ()
    phrases: tuple[str, ...] = ()

    def matches(self, snapshot: PageSnapshot) -> bool:
        return snapshot.has_visible(self.selectors) or any(p in snapshot.text for p in self.phrases)


@dataclass(frozen=True)
class DetectionRule:
    """
    一条分类规则

    Attributes:
        url_patterns: 当前地址包含任一片段即命中
        selectors: 任一选择器可见即命中
        phrases: 页面文本（小写）包含任一短语即命中
        phrase_guard: 非空时，只要这些选择器有一个存在于 DOM，短语命中就不算数
        hint_rules: 按顺序匹配的提示，全部不命中时用 default_hint
    """
    reason: ProblemReason
    default_hint: str
    url_patterns: tuple[str, ...] = ()
    selectors: tuple[str, ...] = ()
    phrases: tuple[str, ...] = ()
    phrase_guard: tuple[str, ...] = ()
    hint_rules: tuple[HintRule, ...] = ()

    @property
    def all_selectors(self) -> tuple[str, ...]:
        extra = [s for hr in self.hint_rules for s in hr.selectors]
        return tuple(dict.fromkeys((*self.selectors, *self.phrase_guard, *extra)))

    def matches(self, snapshot: PageSnapshot) -> bool:
        if any(p in snapshot.url for p in self.url_patterns):
            return True
        if snapshot.has_visible(self.selectors):
            return True
        if any(p in snapshot.text for p in self.phrases):
            return not snapshot.has_present(self.phrase_guard)
        return False

    def hint_key(self, snapshot: PageSnapshot) -> str:
        for rule in self.hint_rules:
            if rule.matches(snapshot):
                return rule.hint_key
        return self.default_hint


LOGIN_RULE = DetectionRule(
    reason=ProblemReason.LOGIN_REQUIRED,
    default_hint="login",
    url_patterns=("/login", "/checkpoint", "/uas/login", "/authwall", "/signup"),
    selectors=(
        '[data-test-modal-id="join-now-modal"]',
        '[data-test-modal-id="sign-in-modal"]',
        ".authwall-join-form",
        ".sign-in-form",
        "#join-form",
        'form[action*="login"]',
        'form[action*="session"]',
    ),
    phrases=(
        "sign in to view",
        "join to view",
        "log in to continue",
        "sign up to view",
        "join linkedin",
        "create an account",
        "please sign in",
        "zaloguj się, aby zobaczyć",
        "dołącz do linkedin",
    ),
    # 已登录页面的导航栏存在时，“sign in” 之类的文案只是营销内容
    phrase_guard=(".global-nav",),
)

CAPTCHA_RULE = DetectionRule(
    reason=ProblemReason.CAPTCHA_DETECTED,
    default_hint="captcha.generic",
    selectors=(
        'iframe[src*="recaptcha"]',
        'iframe[src*="captcha"]',
        'iframe[src*="challenge"]',
        '[class*="captcha"]',
        '[id*="captcha"]',
        'img[src*="captcha"]',
        '[aria-label*="security verification"]',
        '[aria-label*="Verify"]',
        ".g-recaptcha",
        "#recaptcha",
        ".checkpoint-challenge",
    ),
    phrases=(
        "security verification",
        "verify you're a human",
        "complete the security check",
        "unusual activity",
        "confirm you're not a robot",
        "prove you're human",
        "weryfikacja bezpieczeństwa",
        "potwierdź, że nie jesteś robotem",
    ),
    hint_rules=(
        HintRule("captcha.recaptcha", selectors=('iframe[src*="recaptcha"]', ".g-recaptcha")),
        HintRule("captcha.challenge", selectors=('[class*="challenge"]',)),
    ),
)

RATE_LIMIT_RULE = DetectionRule(
    reason=ProblemReason.RATE_LIMITED,
    default_hint="rate_limit.generic",
    selectors=(
        ".ip-fuse-limit-alert",
        '[class*="limit-reached"]',
        ".commercial-use-limit",
        '[data-test-modal*="limit"]',
    ),
    phrases=(
        "you've reached the weekly invitation limit",
        "you've reached the commercial use limit",
        "you've reached your weekly limit",
        "too many requests",
        "slow down",
        "temporarily restricted",
        "you're temporarily restricted",
        "try again later",
        "limit reached",
        "search limit",
        "connection request limit",
        "osiągnięto tygodniowy limit",
        "spróbuj ponownie później",
    ),
    hint_rules=(
        HintRule(
            "rate_limit.invitation",
            selectors=(".ip-fuse-limit-alert",),
            phrases=("invitation limit", "weekly limit", "connection request limit", "limit zaproszeń"),
        ),
        HintRule("rate_limit.commercial", selectors=(".commercial-use-limit",), phrases=("commercial use limit",)),
        HintRule("rate_limit.search", phrases=("search limit",)),
    ),
)

RULES: tuple[DetectionRule, ...] = (LOGIN_RULE, CAPTCHA_RULE, RATE_LIMIT_RULE)
