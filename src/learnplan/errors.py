"""Error taxonomy shared by the core, the clients and the Web API.

Each error carries the HTTP status the API maps it to. Upstream errors are
absorbed by the plan generator and the search client; only validation and
not-found errors are ever visible to API consumers as such.
"""

from __future__ import annotations


class LearnPlanError(Exception):
    """Base class for all application errors."""

    status_code: int = 500

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(LearnPlanError):
    """Request data is missing required fields or is malformed."""

    status_code = 400


class NotFoundError(LearnPlanError):
    """A referenced student profile (or sub-record) does not exist."""

    status_code = 404


class UpstreamError(LearnPlanError):
    """An external API answered with a non-success status or was unreachable."""

    status_code = 502


class UpstreamTimeoutError(UpstreamError, TimeoutError):
    """An external API did not answer within the configured timeout."""

    status_code = 504


class InternalError(LearnPlanError):
    """Unexpected failure inside the application."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
