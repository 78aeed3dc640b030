"""Configuration loading and collection registry."""

import logging
from pathlib import Path
import yaml

from source_notes.constants import CONFIG_PATH, DEFAULT_LINK_KEYS
from source_notes.data_models import (
    WRITE_POLICIES,
    CollectionMetadata,
    PersistenceSettings,
    SiteConfiguration,
)

logger = logging.getLogger(__name__)

REQUIRED_COLLECTIONS = ("sources",)


def _resolve(base: Path, raw_path: str) -> Path:
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = base / path
    try:
        return path.resolve(strict=False)
    except RuntimeError:
        # resolve can raise if underlying filesystem is inaccessible; fall back to joined path
        return path


def _load_persistence(section: object) -> PersistenceSettings:
    if section is None:
        return PersistenceSettings()
    if not isinstance(section, dict):
        raise ValueError("'persistence' must map to a dictionary of settings")

    policy = section.get("policy", "deferred")
    if policy not in WRITE_POLICIES:
        raise ValueError(
            f"Persistence policy must be one of {', '.join(WRITE_POLICIES)}; got '{policy}'"
        )

    defaults = PersistenceSettings()
    delays = {}
    for key in ("write_delay", "commit_delay"):
        value = section.get(key, getattr(defaults, key))
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ValueError(f"Persistence '{key}' must be a non-negative number of seconds")
        delays[key] = float(value)

    return PersistenceSettings(
        policy=policy,
        write_delay=delays["write_delay"],
        commit_delay=delays["commit_delay"],
        auto_commit=bool(section.get("auto_commit", True)),
    )


def load_site_configuration(config_path: Path = CONFIG_PATH) -> SiteConfiguration:
    """Load and validate the site configuration file.

    Args:
        config_path: Path to the YAML configuration file. Defaults to ``content.yaml``
        at the repository root, or ``$SOURCE_NOTES_CONFIG`` when set.

    Returns:
        A fully populated :class:`SiteConfiguration`. Relative paths are resolved
        against the directory holding the configuration file.

    Raises:
        FileNotFoundError: If the configuration file is missing.
        ValueError: If the file exists but does not provide the expected structure
            (missing collections, invalid persistence policy, etc.).
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Site configuration file not found at {config_path}")

    raw_config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw_config, dict):
        raise ValueError("Site configuration must be a mapping")

    base = config_path.parent
    raw_root = raw_config.get("root", ".")
    if not isinstance(raw_root, str) or not raw_root.strip():
        raise ValueError("Site configuration 'root' must be a path string")
    root = _resolve(base, raw_root)

    collections_section = raw_config.get("collections")
    if not isinstance(collections_section, dict) or not collections_section:
        raise ValueError("Site configuration must include a non-empty 'collections' mapping")

    collections: dict[str, CollectionMetadata] = {}
    for name, raw_path in collections_section.items():
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ValueError(f"Collection '{name}' must map to a directory path string")
        resolved_path = _resolve(root, raw_path)
        collections[name] = CollectionMetadata(
            name=name,
            path=resolved_path,
            exists=resolved_path.is_dir(),
        )

    for name in REQUIRED_COLLECTIONS:
        if name not in collections:
            raise ValueError(f"Site configuration must define the '{name}' collection")

    notes_section = raw_config.get("notes") or {}
    if not isinstance(notes_section, dict):
        raise ValueError("'notes' must map to a dictionary of settings")
    link_keys = notes_section.get("link_keys", list(DEFAULT_LINK_KEYS))
    if not isinstance(link_keys, list) or not link_keys or not all(
        isinstance(key, str) and key.strip() for key in link_keys
    ):
        raise ValueError("'notes.link_keys' must be a non-empty list of non-empty strings")

    configuration = SiteConfiguration(
        root=root,
        collections=collections,
        dev_mode=bool(raw_config.get("dev_mode", False)),
        link_keys=tuple(key.strip() for key in link_keys),
        persistence=_load_persistence(raw_config.get("persistence")),
    )
    logger.debug(
        "Loaded site configuration from %s (%d collections, policy=%s)",
        config_path,
        len(collections),
        configuration.persistence.policy,
    )
    return configuration


# Module-level singleton - loaded once at import time
SITE_CONFIGURATION = load_site_configuration()
