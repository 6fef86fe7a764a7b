"""
页面数据提取

选择器查找走 ToolContext（角色 -> 候选列表），
没有稳定选择器可用的部分（经历列表、地点）用页面内脚本启发式提取。
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from playwright.async_api import Error as PlaywrightError

from .types import Experience, SearchResult

if TYPE_CHECKING:
    from .context import ToolContext

logger = logging.getLogger(__name__)

LINKEDIN_ORIGIN = "https://www.linkedin.com"
ABOUT_MAX_CHARS = 500

_USERNAME_RE = re.compile(r"/in/([^/?#]+)")

# 经历区块：按 section 标题或 #experience 锚点定位，逐条读出 职位 / 公司 / 时长
EXPERIENCE_SCRIPT = """
() => {
  const headings = ['experience', 'doświadczenie'];
  let section = null;
  const anchor = document.querySelector('#experience');
  if (anchor) section = anchor.closest('section');
  if (!section) {
    for (const s of document.querySelectorAll('section')) {
      const h = s.querySelector('h2');
      if (h && headings.some(k => h.textContent.trim().toLowerCase().startsWith(k))) {
        section = s;
        break;
      }
    }
  }
  if (!section) return [];

  const durationRe = /(\\d{4}|present|obecnie|\\bmo\\b|\\byr|\\bmies|\\blat|\\brok)/i;
  const currentRe = /(present|obecnie)/i;
  const out = [];
  for (const item of section.querySelectorAll('li.artdeco-list__item, li.pvs-list__paged-list-item')) {
    const texts = [];
    for (const span of item.querySelectorAll('span[aria-hidden="true"]')) {
      const t = span.textContent.trim();
      if (t && !texts.includes(t)) texts.push(t);
    }
    if (texts.length < 2) continue;
    const duration = texts.find(t => durationRe.test(t)) || '';
    const rest = texts.filter(t => t !== duration);
    const title = rest[0] || '';
    const company = (rest[1] || '').split('·')[0].trim();
    if (!title || !company) continue;
    out.push({title, company, duration, is_current: currentRe.test(duration)});
    if (out.length >= 10) break;
  }
  return out;
}
"""

# 顶部卡片里第一个像“城市, 地区”的短文本
LOCATION_SCRIPT = """
() => {
  const card = document.querySelector('main section') || document.body;
  for (const span of card.querySelectorAll('span.text-body-small')) {
    const t = span.textContent.trim();
    if (t && t.length < 100 && t.includes(',') && !t.includes('·')) return t;
  }
  return '';
}
"""


def normalize_profile_url(href: str) -> str:
    """相对路径补全域名，并去掉查询参数"""
    href = href.split("?")[0].split("#")[0]
    if href.startswith("/in/"):
        return LINKEDIN_ORIGIN + href
    return href


def extract_username(url: str) -> str | None:
    match = _USERNAME_RE.search(url)
    return match.group(1) if match else None


def split_name(full_name: str) -> tuple[str, str]:
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def truncate(text: str, limit: int = ABOUT_MAX_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def company_from_headline(headline: str) -> tuple[str, str]:
    """'Engineer at Acme' -> ('Acme', 'Engineer')"""
    for sep in (" at ", " @ "):
        if sep in headline:
            position, company = headline.split(sep, 1)
            return company.strip(), position.strip()
    return "", ""


def parse_experience(raw: Any) -> list[Experience]:
    experience = []
    for entry in raw or []:
        try:
            experience.append(Experience.model_validate(entry))
        except ValueError as e:
            logger.debug(f"[Parse] Skipping experience entry {entry!r}: {e}")
    return experience


async def parse_result_item(ctx: ToolContext, item: Any) -> SearchResult | None:
    """解析一个搜索结果卡片；缺少姓名或链接时返回 None"""
    name = await ctx.text_of("search.result_name", root=item)
    link = await ctx.find("search.result_link", root=item, visible=False)
    href = await link.get_attribute("href") if link else None
    if not name or not href:
        return None

    image = await ctx.find("search.result_image", root=item, visible=False)
    return SearchResult(
        name=name,
        headline=await ctx.text_of("search.result_headline", root=item),
        location=await ctx.text_of("search.result_location", root=item),
        profile_url=normalize_profile_url(href),
        connection_degree=await ctx.text_of("search.result_degree", root=item),
        profile_image_url=await image.get_attribute("src") if image else None,
    )


async def parse_results(ctx: ToolContext, items: list[Any], limit: int | None = None) -> list[SearchResult]:
    results = []
    for index, item in enumerate(items):
        if limit is not None and len(results) >= limit:
            break
        try:
            result = await parse_result_item(ctx, item)
        except PlaywrightError as e:
            # 滚动或懒加载期间卡片可能已从 DOM 移除
            logger.debug(f"[Parse] Result item {index} detached: {e}")
            continue
        if result is None:
            logger.debug(f"[Parse] Result item {index} has no name or link, skipped")
            continue
        results.append(result)
    return results
