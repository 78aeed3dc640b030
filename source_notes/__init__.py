"""Source Notes MCP Server

Note-block editing for a flat-file essay site's sources via Model Context Protocol.
"""

from source_notes.config import SITE_CONFIGURATION
from source_notes.data_models import CollectionMetadata, PersistenceSettings, SiteConfiguration
from source_notes.server import mcp, coordinator, run_server

# Import tools to register them with the MCP server
from source_notes import tools  # noqa: F401

__version__ = "0.3.0"
__all__ = [
    "SITE_CONFIGURATION",
    "CollectionMetadata",
    "PersistenceSettings",
    "SiteConfiguration",
    "mcp",
    "coordinator",
    "run_server",
]
