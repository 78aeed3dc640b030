"""Error taxonomy for note and source editing.

Each error mixes in the builtin exception callers would otherwise expect, so
``except ValueError`` or ``except LookupError`` keep working. The ``status``
attribute is the code the request boundary reports for the failure.
"""


class SourceNotesError(Exception):
    """Base class for source notes errors."""

    status = 500


class MalformedDocumentError(SourceNotesError, ValueError):
    """Raised when a document has no parseable frontmatter block."""

    status = 500


class NotFoundError(SourceNotesError, LookupError):
    """Raised when a slug or note reference does not resolve."""

    status = 404


class DocumentNotFoundError(NotFoundError):
    """Raised when no document exists for a slug."""


class NoteNotFoundError(NotFoundError):
    """Raised when no note block matches a timestamp or index."""


class InvalidArgumentError(SourceNotesError, ValueError):
    """Raised when a payload violates a documented constraint."""

    status = 400


class DocumentExistsError(InvalidArgumentError):
    """Raised when creating a document whose file already exists."""


class PersistenceError(SourceNotesError, OSError):
    """Raised when writing a document to disk fails."""

    status = 500


class DevModeRequiredError(SourceNotesError, PermissionError):
    """Raised when an editing entry point is called outside dev mode."""

    status = 403
