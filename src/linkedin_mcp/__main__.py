"""
linkedin-mcp 包入口点 - 支持 `python -m linkedin_mcp` 调用
"""

from linkedin_mcp.mcp_servers.linkedin import main

if __name__ == "__main__":
    main()
