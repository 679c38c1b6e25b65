from .errors import Conflict, InvalidTransition, NoOpError, NotFound, RIDSError, ValidationError
from .lifecycle import approve, change_status, reject, submit

__all__ = [
    "Conflict",
    "InvalidTransition",
    "NoOpError",
    "NotFound",
    "RIDSError",
    "ValidationError",
    "approve",
    "change_status",
    "reject",
    "submit",
]
