# safeguard/errors.py
# ------------------------------------------------------------
# Service errors and their HTTP mapping.
#
# Routes raise these; main.py registers one handler that renders
# {"success": false, "error": ..., "details": ...}.
# ------------------------------------------------------------

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional
import logging

import redis

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationFailed(ServiceError):
    """Missing or invalid caller input."""
    status_code = 400


class AlertNotFound(ServiceError):
    status_code = 404

    def __init__(self, message: str = "Alert not found"):
        super().__init__(message)


class StorageFailure(ServiceError):
    """Key-value store unreachable or erroring. Not retried here."""
    status_code = 500


@contextmanager
def storage_errors(message: str) -> Iterator[None]:
    """
    Turn Redis failures inside the block into a StorageFailure that
    carries `message` plus the underlying error text.
    """
    try:
        yield
    except redis.exceptions.RedisError as exc:
        logger.exception("%s", message)
        raise StorageFailure(message, details=str(exc)) from exc
