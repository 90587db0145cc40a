"""Calendar MCP gateway: calendar tools dispatched to external scripts."""

__version__ = "1.0.0"
