"""MCP tool definitions for source note editing.

This module imports all tool submodules to register them with the MCP server.
Each tool module uses the @mcp.tool() decorator to auto-register its tools.
"""

# Import all tool modules to register their @mcp.tool() decorated functions
from source_notes.tools import note_tools
from source_notes.tools import post_tools
from source_notes.tools import source_tools

__all__ = [
    "note_tools",
    "post_tools",
    "source_tools",
]
