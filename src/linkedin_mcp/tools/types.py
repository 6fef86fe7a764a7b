"""
工具输入 / 输出数据类型

输入模型在触碰浏览器之前完成校验，校验失败一律返回 Error。
"""

from __future__ import annotations

from enum import Enum
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_NOTE_LENGTH = 300
MAX_SEARCH_LIMIT = 25


def _is_linkedin_url(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return host == "linkedin.com" or host.endswith(".linkedin.com")


class _Input(BaseModel):
    model_config = {"extra": "ignore", "str_strip_whitespace": True}


# ── 输入 ────────────────────────────────────────────


class SearchInput(_Input):
    query: str = Field(min_length=1)
    location: str | None = None
    limit: int = Field(default=10, ge=1, le=MAX_SEARCH_LIMIT)


class ProfileInput(_Input):
    profile_url: str

    @field_validator("profile_url")
    @classmethod
    def _check_profile_url(cls, value: str) -> str:
        if not _is_linkedin_url(value) or "/in/" not in value:
            raise ValueError("profile_url must be a LinkedIn profile URL (https://www.linkedin.com/in/...)")
        return value


class ScrollInput(_Input):
    direction: Literal["down", "up"] = "down"
    amount: int = Field(default=3, ge=1, le=10)


class ConnectionInput(ProfileInput):
    message: str | None = Field(default=None, max_length=MAX_NOTE_LENGTH)


class NavigateInput(_Input):
    url: str

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            value = "https://" + value
        if not _is_linkedin_url(value):
            raise ValueError("URL must be a LinkedIn URL")
        return value


class ClickInput(_Input):
    selector: str | None = None
    text: str | None = None

    @model_validator(mode="after")
    def _require_target(self) -> ClickInput:
        if not self.selector and not self.text:
            raise ValueError("Either selector or text must be provided")
        return self


class TypeInput(_Input):
    model_config = {"extra": "ignore", "str_strip_whitespace": False}

    selector: str = Field(min_length=1)
    text: str
    clear_first: bool = False


class ScreenshotInput(_Input):
    full_page: bool = False
    element: str | None = None


class DebugInput(_Input):
    url: str | None = None
    selector: str | None = None

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str | None) -> str | None:
        if value is not None and not _is_linkedin_url(value):
            raise ValueError("URL must be a LinkedIn URL")
        return value


# ── 输出 ────────────────────────────────────────────


class SearchResult(BaseModel):
    name: str
    headline: str = ""
    location: str = ""
    profile_url: str
    connection_degree: str = ""
    profile_image_url: str | None = None


class SearchOutput(BaseModel):
    results: list[SearchResult]
    total_results: int
    has_more: bool


class Experience(BaseModel):
    title: str
    company: str
    duration: str = ""
    is_current: bool = False


class ProfileData(BaseModel):
    first_name: str
    last_name: str
    full_name: str
    headline: str = ""
    location: str = ""
    current_company: str = ""
    current_position: str = ""
    email: str | None = None
    phone: str | None = None
    about: str | None = None
    experience: list[Experience] = Field(default_factory=list)
    connection_degree: str = ""
    profile_url: str


class ScrollOutput(BaseModel):
    new_results: list[SearchResult]
    total_loaded: int


class ConnectionStatus(str, Enum):
    SENT = "success"
    ALREADY_CONNECTED = "already_connected"
    PENDING = "pending"


class ConnectionOutput(BaseModel):
    status: ConnectionStatus
    message: str = ""


class ScreenshotOutput(BaseModel):
    screenshot_path: str
    current_url: str


class NavigateOutput(BaseModel):
    current_url: str


class ClickOutput(BaseModel):
    clicked: bool = True
    selector: str
    current_url: str


class TypeOutput(BaseModel):
    typed: bool = True
    characters: int
    current_url: str
