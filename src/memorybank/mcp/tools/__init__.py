"""MCP tool handlers. Importing a module registers its tools."""
