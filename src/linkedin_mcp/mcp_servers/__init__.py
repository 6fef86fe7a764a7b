"""
linkedin-mcp MCP 服务器模块

- linkedin: LinkedIn 浏览器自动化（搜索、读取主页、发送邀请、人工介入原语）
"""

from .linkedin import mcp as linkedin_mcp

__all__ = ["linkedin_mcp"]
