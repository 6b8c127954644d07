"""MCP server exposing analysis and memory bank tools."""
