"""
linkedin_get_profile - 读取个人主页

先等姓名出现（否则 unexpected_ui），按 reading_profile 停留一段“阅读”时间，
再提取字段。联系方式弹窗打不开不算失败，email / phone 留空。
"""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError

from ..core.errors import ElementNotFoundError
from .context import ToolContext, ToolSpec
from .parsing import (
    EXPERIENCE_SCRIPT,
    LOCATION_SCRIPT,
    company_from_headline,
    parse_experience,
    split_name,
    truncate,
)
from .types import ProfileData, ProfileInput

logger = logging.getLogger(__name__)

NAME_TIMEOUT_MS = 11000
CONTACT_MODAL_TIMEOUT_MS = 3000


async def read_about(ctx: ToolContext) -> str | None:
    if await ctx.find("profile.about_see_more"):
        await ctx.click("profile.about_see_more")
        await ctx.pause(ctx.profile.micro_pause)
    about = await ctx.text_of("profile.about_content")
    return truncate(about) if about else None


async def read_contact_info(ctx: ToolContext) -> tuple[str | None, str | None]:
    """打开联系方式弹窗读取 email / phone，读完关闭"""
    if not await ctx.find("profile.contact_info_button"):
        return None, None

    try:
        await ctx.click("profile.contact_info_button")
        role, _ = await ctx.wait_for(["profile.contact_info_modal"], CONTACT_MODAL_TIMEOUT_MS)
        if role is None:
            logger.info("[Profile] Contact info modal did not open")
            return None, None

        await ctx.pause(ctx.profile.micro_pause)
        email = await ctx.text_of("profile.contact_email") or None
        phone = await ctx.text_of("profile.contact_phone") or None

        if await ctx.find("modal.close_button"):
            await ctx.click("modal.close_button")
        return email, phone
    except (ElementNotFoundError, PlaywrightError) as e:
        logger.info(f"[Profile] Contact info not accessible: {e}")
        return None, None


async def handle_profile(ctx: ToolContext, params: ProfileInput) -> ProfileData:
    await ctx.navigate(params.profile_url)
    await ctx.expect("profile.name", NAME_TIMEOUT_MS, target="profile name")

    await ctx.pause(ctx.profile.reading_profile)
    await ctx.ensure_clear()

    full_name = await ctx.text_of("profile.name")
    first_name, last_name = split_name(full_name)
    headline = await ctx.text_of("profile.headline")
    location = await ctx.text_of("profile.location") or await ctx.page.evaluate(LOCATION_SCRIPT) or ""

    about = await read_about(ctx)
    experience = parse_experience(await ctx.page.evaluate(EXPERIENCE_SCRIPT))

    current = next((exp for exp in experience if exp.is_current), None)
    if current:
        company, position = current.company, current.title
    else:
        company, position = company_from_headline(headline)
    if not company:
        company = await ctx.text_of("profile.current_company_button")

    email, phone = await read_contact_info(ctx)

    logger.info(f"[Profile] Read {full_name!r}: {len(experience)} experience entries")
    return ProfileData(
        first_name=first_name,
        last_name=last_name,
        full_name=full_name,
        headline=headline,
        location=location,
        current_company=company,
        current_position=position,
        email=email,
        phone=phone,
        about=about,
        experience=experience,
        connection_degree=await ctx.text_of("profile.connection_degree"),
        profile_url=ctx.current_url,
    )


TOOL = ToolSpec(
    name="linkedin_get_profile",
    description="Read a LinkedIn profile: name, headline, location, experience, about and contact info.",
    input_model=ProfileInput,
    handler=handle_profile,
)
