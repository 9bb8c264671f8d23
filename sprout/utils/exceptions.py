"""Custom exception classes and error handling utilities."""
from typing import Any, Dict, Optional

from loguru import logger


class SproutError(Exception):
    """Base exception for the engine."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class PreconditionError(SproutError):
    """The caller asked for an operation the item's state does not allow.

    Typical causes are advancing a locked item, unlocking an item twice or
    referring to an id that is not part of the supplied collection. These are
    logic errors in the calling flow and must not be retried blindly.
    """


class CorruptRecordError(SproutError):
    """A stored item record is missing fields or carries an impossible stage."""


def handle_precondition_error(error: PreconditionError) -> Dict[str, Any]:
    """Log a precondition violation and return a payload for the UI layer."""
    logger.warning(f"Precondition violated: {error.message}")
    return {"error": "precondition", "message": error.message, "details": error.details}


def handle_corrupt_record_error(error: CorruptRecordError) -> Dict[str, Any]:
    """Log a corrupt record and return a payload for the UI layer."""
    logger.error(f"Corrupt item record: {error.message}")
    return {"error": "corrupt_record", "message": error.message, "details": error.details}


def handle_engine_error(error: SproutError) -> Dict[str, Any]:
    """Dispatch an engine error to the matching handler."""
    if isinstance(error, PreconditionError):
        return handle_precondition_error(error)
    if isinstance(error, CorruptRecordError):
        return handle_corrupt_record_error(error)
    logger.error(f"Engine error: {error.message}")
    return {"error": "engine", "message": error.message, "details": error.details}
