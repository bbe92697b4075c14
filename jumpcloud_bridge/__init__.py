"""
JumpCloud Bridge

Manages JumpCloud user groups (name, POSIX attribute and member emails) and
looks up SSO applications through the JumpCloud v1 and v2 APIs.
"""

__version__ = "1.0.0"
