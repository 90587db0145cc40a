from calendar_mcp.cli import cli

cli()
