"""Data models for site metadata and configuration."""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from source_notes.constants import DEFAULT_COMMIT_DELAY, DEFAULT_LINK_KEYS, DEFAULT_WRITE_DELAY

WRITE_POLICIES = ("synchronous", "deferred")


@dataclass(frozen=True)
class CollectionMetadata:
    """Normalized metadata describing a content collection directory."""

    name: str
    path: Path
    exists: bool

    def as_payload(self) -> dict[str, Any]:
        """Return a serializable payload representation."""
        return {
            "name": self.name,
            "path": str(self.path),
            "exists": self.path.is_dir(),
        }


@dataclass(frozen=True)
class PersistenceSettings:
    """How and when edited documents reach the disk and version control."""

    policy: str = "deferred"
    write_delay: float = DEFAULT_WRITE_DELAY
    commit_delay: float = DEFAULT_COMMIT_DELAY
    auto_commit: bool = True

    @property
    def deferred(self) -> bool:
        return self.policy == "deferred"


@dataclass(frozen=True)
class SiteConfiguration:
    """Holds collection metadata and editing settings.

    Loaded once at module initialization from content.yaml.
    Provides collection lookup by name and payload serialization for MCP responses.
    """

    root: Path
    collections: dict[str, CollectionMetadata]
    dev_mode: bool = True
    link_keys: tuple[str, ...] = DEFAULT_LINK_KEYS
    persistence: PersistenceSettings = field(default_factory=PersistenceSettings)

    def get(self, name: str) -> CollectionMetadata:
        """Get collection metadata by name.

        Args:
            name: The name of the collection to retrieve.

        Returns:
            CollectionMetadata for the requested collection.

        Raises:
            ValueError: If the collection name is not found in configuration.
        """
        try:
            return self.collections[name]
        except KeyError as exc:
            raise ValueError(f"Unknown collection '{name}'") from exc

    def as_payload(self) -> dict[str, Any]:
        """Return serializable configuration payload."""
        return {
            "root": str(self.root),
            "dev_mode": self.dev_mode,
            "link_keys": list(self.link_keys),
            "persistence": self.persistence.policy,
            "collections": [collection.as_payload() for collection in self.collections.values()],
        }
