"""
LinkedIn 工具

TOOLS 是对外暴露的全部工具；LinkedInToolkit 是唯一的调用入口。
"""

from .context import ToolContext, ToolSpec
from .registry import TOOLS
from .response import Error, NeedsHuman, Success, parse_outcome, to_json
from .toolkit import LinkedInToolkit

__all__ = [
    "TOOLS",
    "Error",
    "LinkedInToolkit",
    "NeedsHuman",
    "Success",
    "ToolContext",
    "ToolSpec",
    "parse_outcome",
    "to_json",
]
