"""Collection access, slug validation and document path resolution."""

from pathlib import Path

from source_notes.data_models import CollectionMetadata
from source_notes.errors import InvalidArgumentError


def ensure_collection_ready(collection: CollectionMetadata) -> None:
    """Ensure the collection directory is accessible before performing operations.

    Args:
        collection: Metadata describing the collection to use.

    Raises:
        FileNotFoundError: If the collection path does not exist or is not a directory.
    """
    if not collection.path.is_dir():
        raise FileNotFoundError(
            f"Collection '{collection.name}' is not accessible at {collection.path}"
        )


def validate_slug(slug: str) -> str:
    """Validate a document slug and return it without surrounding whitespace.

    Slugs name a single file inside a collection directory, so anything that
    could walk out of that directory is rejected.

    Args:
        slug: Slug supplied by the caller, optionally ending in ``.md``.

    Returns:
        The cleaned slug without the ``.md`` suffix.

    Raises:
        InvalidArgumentError: If the slug is empty or contains ``..``, ``/`` or ``\\``.

    Examples:
        >>> validate_slug("thinking-fast-and-slow-daniel-kahneman")
        'thinking-fast-and-slow-daniel-kahneman'
        >>> validate_slug("../secrets")
        Traceback (most recent call last):
        ...
        source_notes.errors.InvalidArgumentError: Invalid slug: path traversal not allowed
    """
    if not isinstance(slug, str):
        raise InvalidArgumentError("Invalid slug")

    cleaned = slug.strip()
    if not cleaned:
        raise InvalidArgumentError("Invalid slug")

    if ".." in cleaned or "/" in cleaned or "\\" in cleaned:
        raise InvalidArgumentError("Invalid slug: path traversal not allowed")

    if cleaned.lower().endswith(".md"):
        cleaned = cleaned[:-3]
    if not cleaned:
        raise InvalidArgumentError("Invalid slug")

    return cleaned


def resolve_document_path(collection: CollectionMetadata, slug: str) -> Path:
    """Resolve a slug to the absolute path of its markdown file.

    Args:
        collection: Collection metadata.
        slug: Document slug.

    Returns:
        The absolute :class:`Path` to ``<slug>.md`` inside ``collection``.

    Raises:
        InvalidArgumentError: If the slug fails validation or the resolved path
            escapes the collection root.
    """
    cleaned = validate_slug(slug)
    candidate = (collection.path / f"{cleaned}.md").resolve(strict=False)
    collection_root = collection.path.resolve(strict=False)

    # Filesystem-level check for symlinks pointing outside the collection
    if not candidate.is_relative_to(collection_root):
        raise InvalidArgumentError("Document path escapes the configured collection.")

    return candidate


def document_display_name(collection: CollectionMetadata, path: Path) -> str:
    """Return the slug of a document path inside ``collection``."""
    relative = path.relative_to(collection.path.resolve(strict=False))
    return str(relative.with_suffix("")).replace("\\", "/")
