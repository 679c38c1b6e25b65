from __future__ import annotations

from typing import Dict, List, Optional


class RIDSError(Exception):
    """
    Base for every RIDS lifecycle failure.

    `detail` follows the workflow guard format: a list of
    {"field": ..., "reason": ...} items the UI can show next to the action.
    """

    code = "rids_error"
    status_code = 400

    def __init__(self, message: str, *, detail: Optional[List[Dict[str, str]]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or []

    def as_payload(self) -> dict:
        return {"error": self.code, "message": self.message, "detail": self.detail}


class ValidationError(RIDSError):
    """Malformed or missing input (empty reason, unknown status)."""

    code = "validation_error"


class InvalidTransition(RIDSError):
    """The current status forbids the requested transition."""

    code = "invalid_transition"


class NotFound(RIDSError):
    code = "not_found"
    status_code = 404


class NoOpError(RIDSError):
    """Target status equals the current status."""

    code = "no_op"


class Conflict(RIDSError):
    """The record already exists (one RIDS per reservist)."""

    code = "conflict"
    status_code = 409
