"""
linkedin-mcp - LinkedIn 浏览器自动化 MCP 服务

以拟人化节奏驱动一个持久化的 Playwright 浏览器会话，
每个工具调用都返回 success / needs_human / error 三态结果。
"""


def _resolve_version() -> str:
    """
    解析版本号。
    优先级：
      1. pyproject.toml（editable 安装时始终最新）
      2. importlib.metadata（正式 pip install 后可用）
    """
    from pathlib import Path

    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        try:
            import tomllib
            with open(pyproject_path, "rb") as f:
                return tomllib.load(f)["project"]["version"]
        except (OSError, KeyError, ValueError):
            pass

    try:
        from importlib.metadata import PackageNotFoundError, version
        return version("linkedin-mcp")
    except PackageNotFoundError:
        pass

    return "0.0.0-dev"


__version__ = _resolve_version()
