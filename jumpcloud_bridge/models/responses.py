"""
Response Models

Bodies returned by the bridge HTTP API besides resource state.
"""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """
    Error body returned for every failed request.

    ``upstream_status`` carries the JumpCloud status code when the failure
    came from the JumpCloud API.
    """
    status: int  # HTTP status returned by the bridge
    detail: str
    upstream_status: Optional[int] = None


class ApplicationResponse(BaseModel):
    """Application found by a lookup"""
    id: str
    name: str
    display_label: str
