"""FastMCP server initialization and shared persistence coordinator."""

import logging
from mcp.server.fastmcp import FastMCP

from source_notes.config import SITE_CONFIGURATION
from source_notes.constants import LOG_LEVEL
from source_notes.core.persistence import PersistenceCoordinator

# Initialize logger
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("source_notes")

# One coordinator per server process; it owns the deferred write/commit timers
coordinator = PersistenceCoordinator(SITE_CONFIGURATION.persistence, SITE_CONFIGURATION.root)

# Tool modules are imported in __init__.py to register all @mcp.tool() decorators


def run_server():
    """Start the MCP server with stdio transport."""
    logger.info(
        "Starting source notes server (root=%s, policy=%s, dev_mode=%s)",
        SITE_CONFIGURATION.root,
        SITE_CONFIGURATION.persistence.policy,
        SITE_CONFIGURATION.dev_mode,
    )
    try:
        mcp.run(transport="stdio")
    finally:
        # Let scheduled writes land before the process exits
        coordinator.wait_for_pending(timeout=SITE_CONFIGURATION.persistence.write_delay + 1.0)


if __name__ == "__main__":
    run_server()
