"""Request boundary: dev-mode gate, validation and response envelopes.

Successful calls return ``{"success": True, "message": ..., ...}``. Failures
return ``{"success": False, "message": ..., "status": code}`` where ``status``
is the HTTP-style code a transport should use: 400 for invalid input, 403
outside dev mode, 404 for unknown sources or notes, 500 otherwise.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from source_notes.core.persistence import PersistenceCoordinator
from source_notes.core.source_operations import edit_source_note
from source_notes.data_models import SiteConfiguration
from source_notes.errors import DevModeRequiredError, SourceNotesError
from source_notes.models import NOTE_OPERATION_ADAPTER

logger = logging.getLogger(__name__)


def require_dev_mode(site: SiteConfiguration) -> None:
    """Raise unless editing is enabled for this site.

    Raises:
        DevModeRequiredError: If ``dev_mode`` is off.
    """
    if not site.dev_mode:
        raise DevModeRequiredError("API only available in development mode")


def _validation_message(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(messages)


def failure(message: str, status: int) -> dict[str, Any]:
    """Build a failure envelope."""
    return {"success": False, "message": message, "status": status}


def run_request(site: SiteConfiguration, operation: Callable[[], dict[str, Any]]) -> dict[str, Any]:
    """Run one editing operation and wrap its outcome in an envelope.

    Args:
        site: Site configuration (checked for dev mode first).
        operation: Callable performing the work and returning result fields.

    Returns:
        A success or failure envelope. Exceptions never escape.
    """
    try:
        require_dev_mode(site)
        result = operation()
    except ValidationError as exc:
        logger.info("Rejected request: %s", exc)
        return failure(_validation_message(exc), 400)
    except SourceNotesError as exc:
        if exc.status >= 500:
            logger.error("Request failed: %s", exc)
        else:
            logger.info("Request failed (%d): %s", exc.status, exc)
        return failure(str(exc), exc.status)
    except Exception as exc:
        logger.exception("Unexpected error while handling request")
        return failure(str(exc) or "Unknown error", 500)

    return {"success": True, **result}


def handle_note_request(
    site: SiteConfiguration,
    coordinator: PersistenceCoordinator,
    payload: Mapping[str, Any],
) -> dict[str, Any]:
    """Validate a raw note request and apply it.

    ``payload`` is the decoded request body, e.g.::

        {"slug": "deep-work-cal-newport", "operation": "update-tags",
         "timestamp": "2026-02-27T09:22", "noteIndex": 1, "tags": ["focus"]}

    Returns:
        A success envelope with the operation's fields, or a failure envelope.
    """

    def _apply() -> dict[str, Any]:
        operation = NOTE_OPERATION_ADAPTER.validate_python(dict(payload))
        return edit_source_note(site, coordinator, operation)

    return run_request(site, _apply)
