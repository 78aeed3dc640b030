"""Module-level constants for the source notes server."""

import os
from pathlib import Path

# Configuration
CONFIG_PATH = Path(
    os.environ.get("SOURCE_NOTES_CONFIG", Path(__file__).parent.parent / "content.yaml")
)

# Frontmatter schemas (emission order)
SOURCE_FIELDS = ("title", "author", "type", "link", "date", "tags", "archived")
POST_FIELDS = ("title", "date", "description", "draft", "tags", "category", "featureImage")
SOURCE_TYPES = ("book", "article", "paper", "podcast")
POST_CATEGORIES = ("work", "not-work")

# Note blocks
DEFAULT_LINK_KEYS = ("spotify",)
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M"

# Persistence
DEFAULT_WRITE_DELAY = 0.2
DEFAULT_COMMIT_DELAY = 3.0

# Slugs
MAX_BOOKMARK_SLUG_LENGTH = 80

# Logging
LOG_LEVEL = "INFO"
