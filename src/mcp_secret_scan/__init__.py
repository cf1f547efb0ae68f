"""MCP Secret Scanner - find hardcoded credentials in MCP client configs."""

__version__ = "1.1.0"
