"""
Exceptions raised by the JumpCloud bridge.

Network and API failures are wrapped with the operation and identifiers
involved and chained to the underlying error.
"""

from typing import Optional


class JumpCloudError(Exception):
    """Base error for all JumpCloud bridge failures."""


class JumpCloudTransportError(JumpCloudError):
    """The request never produced an HTTP response."""


class JumpCloudAPIError(JumpCloudError):
    """The JumpCloud API answered with a non-success status."""

    def __init__(self, message: str, status_code: int, body: Optional[str] = None):
        super().__init__(f"{message}: HTTP {status_code}; response = {body!r}")
        self.status_code = status_code
        self.body = body


class JumpCloudDecodeError(JumpCloudError):
    """A response body could not be decoded into the expected schema."""


class ResourceValidationError(JumpCloudError):
    """Input was rejected before any remote call was made."""


class UserGroupNotFoundError(JumpCloudError):
    """The requested user group does not exist."""


class ApplicationNotFoundError(JumpCloudError):
    """No application matched the lookup criteria."""
