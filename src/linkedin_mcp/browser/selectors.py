"""
LinkedIn 选择器表

逻辑角色 -> 按顺序尝试的候选选择器。LinkedIn 经常改版，改这里（或通过 selectors_file 覆盖）即可，
不需要动编排逻辑。
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path

import yaml

from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SELECTORS: dict[str, list[str]] = {
    # 搜索页
    "search.results_list": [
        ".reusable-search__entity-result-list",
        ".search-results-container ul",
    ],
    "search.result_item": [".entity-result", "li.reusable-search__result-container"],
    "search.result_name": [
        '.entity-result__title-text a span[aria-hidden="true"]',
        ".entity-result__title-text a",
    ],
    "search.result_link": [".entity-result__title-text a", 'a[href*="/in/"]'],
    "search.result_headline": [".entity-result__primary-subtitle"],
    "search.result_location": [".entity-result__secondary-subtitle"],
    "search.result_degree": [".entity-result__badge-text"],
    "search.result_image": [".entity-result__image img"],
    "search.load_more": ["button.scaffold-finite-scroll__load-button"],
    "search.no_results": [".search-reusable-search-no-results", ".search-no-results"],

    # 个人主页
    "profile.name": ["h1.text-heading-xlarge", ".pv-text-details__left-panel h1"],
    "profile.headline": [
        ".text-body-medium.break-words",
        ".pv-text-details__left-panel .text-body-medium",
    ],
    "profile.location": [
        ".text-body-small.inline.t-black--light.break-words",
        ".pv-text-details__left-panel span.text-body-small",
    ],
    "profile.about_see_more": ["#about ~ .display-flex button.inline-show-more-text__button"],
    "profile.about_content": [
        '#about ~ .display-flex .pv-shared-text-with-see-more span[aria-hidden="true"]',
    ],
    "profile.current_company_button": [
        'button[aria-label*="Current company"]',
        'button[aria-label*="Obecna firma"]',
    ],
    "profile.connection_degree": [".dist-value", ".pv-text-details__right-panel span.dist-value"],
    "profile.contact_info_button": ["#top-card-text-details-contact-info"],
    "profile.contact_info_modal": [".pv-contact-info"],
    "profile.contact_email": [".pv-contact-info__contact-type.ci-email a"],
    "profile.contact_phone": [".pv-contact-info__contact-type.ci-phone span"],

    # 建立联系
    "connection.connect_button": [
        'button[aria-label*="Invite"][aria-label*="to connect"]',
        '.pvs-profile-actions button:has-text("Connect")',
        'button:has-text("Connect")',
    ],
    "connection.more_button": ['button[aria-label="More actions"]'],
    "connection.connect_in_dropdown": ['div[aria-label*="Invite"][role="button"]'],
    "connection.add_note_button": ['button[aria-label="Add a note"]'],
    "connection.note_textarea": ['textarea[name="message"]', "#custom-message"],
    "connection.send_button": ['button[aria-label="Send invitation"]', 'button:has-text("Send")'],
    "connection.message_button": ['button[aria-label*="Message"]'],
    "connection.pending_button": ['button[aria-label*="Pending"]'],

    # 弹窗
    "modal.container": [".artdeco-modal"],
    "modal.close_button": ['button[aria-label="Dismiss"]', "button.artdeco-modal__dismiss"],

    # 通用
    "navigation.nav_bar": [".global-nav"],
    "general.error_message": [".artdeco-inline-feedback--error"],
}


class SelectorTable(Mapping[str, list[str]]):
    """只读的角色 -> 候选选择器映射"""

    def __init__(self, mapping: Mapping[str, list[str]] | None = None):
        self._table = {role: list(c) for role, c in (mapping or DEFAULT_SELECTORS).items()}

    def __getitem__(self, role: str) -> list[str]:
        return list(self._table[role])

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def merged(self, overrides: Mapping[str, list[str] | str]) -> SelectorTable:
        table = dict(self._table)
        for role, candidates in overrides.items():
            table[role] = [candidates] if isinstance(candidates, str) else list(candidates)
        return SelectorTable(table)

    @classmethod
    def load(cls, path: Path | None = None) -> SelectorTable:
        """加载默认表，并用 YAML/JSON 文件中的条目逐角色覆盖。"""
        table = cls()
        if path is None:
            return table

        try:
            text = Path(path).read_text(encoding="utf-8")
            if Path(path).suffix.lower() == ".json":
                overrides = json.loads(text)
            else:
                overrides = yaml.safe_load(text) or {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load selector file {path}: {e}") from e

        if not isinstance(overrides, dict):
            raise ConfigurationError(f"Selector file must contain a mapping: {path}")

        unknown = sorted(set(overrides) - set(DEFAULT_SELECTORS))
        if unknown:
            logger.warning(f"[Selectors] Unknown roles in {path}: {', '.join(unknown)}")
        logger.info(f"[Selectors] Loaded {len(overrides)} overrides from {path}")
        return table.merged(overrides)
