"""
Authentication and request handlers for the JumpCloud bridge.
"""

from .auth import verify_bearer_token

__all__ = ["verify_bearer_token"]
