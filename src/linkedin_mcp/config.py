"""
linkedin-mcp 配置模块

所有选项都有默认值，环境变量或 .env 文件中的覆盖项缺失不会导致启动失败。
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DELAY_CLASSES = (
    "between_actions",
    "before_click",
    "typing_speed",
    "reading_profile",
    "after_search",
    "between_scrolls",
    "micro_pause",
)


class Settings(BaseSettings):
    """应用配置"""

    # 浏览器
    linkedin_user_data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".playwright-profiles" / "linkedin",
        description="持久化浏览器 profile 目录（保留登录态）",
    )
    headless: bool = Field(default=False, description="是否无头模式")
    browser_locale: str = Field(default="pl-PL", description="浏览器语言区域")
    browser_timezone: str = Field(default="Europe/Warsaw", description="浏览器时区")
    viewport_width: int = Field(default=1280, description="视口宽度")
    viewport_height: int = Field(default=800, description="视口高度")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="User-Agent",
    )
    navigation_timeout_ms: int = Field(default=30000, description="导航超时（毫秒）")
    probe_timeout_ms: int = Field(default=5000, description="存活探测超时（毫秒）")

    # 节奏（毫秒）
    min_action_delay: int = Field(default=1500, description="两次操作之间的最小间隔")
    max_action_delay: int = Field(default=4000, description="两次操作之间的最大间隔")
    delay_overrides: dict[str, tuple[float, float]] = Field(
        default_factory=dict,
        description='按动作类别覆盖延迟范围，例如 {"before_click": [200, 900]}',
    )
    speed_factor: float | None = Field(
        default=None, ge=0.7, le=1.3, description="固定会话速度系数（默认每个进程随机）"
    )

    # 会话休息（毫秒）
    session_pause_interval: int | None = Field(
        default=None, description="固定休息间隔（默认 30-60 分钟随机）"
    )
    session_pause_duration: int | None = Field(
        default=None, description="固定休息时长（默认 3-8 分钟随机）"
    )

    # 证据与选择器
    screenshots_dir: Path = Field(default=Path("data/screenshots"), description="截图保存目录")
    selectors_file: Path | None = Field(default=None, description="选择器覆盖文件（YAML/JSON）")

    # 日志
    log_level: str = Field(default="INFO", description="日志级别")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("delay_overrides")
    @classmethod
    def _check_delay_overrides(
        cls, value: dict[str, tuple[float, float]]
    ) -> dict[str, tuple[float, float]]:
        for name, (low, high) in value.items():
            if name not in DELAY_CLASSES:
                raise ValueError(f"Unknown delay class: {name}")
            if low < 0 or high < low:
                raise ValueError(f"Invalid delay range for {name}: [{low}, {high}]")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def profile_lock_path(self) -> Path:
        """Chromium 在 profile 目录中写入的单例锁"""
        return self.linkedin_user_data_dir / "SingletonLock"


# 全局配置实例
settings = Settings()
