"""Server package: MCP protocol handling, context injection and transports."""
