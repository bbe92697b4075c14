"""
JumpCloud Bridge Models Package

Pydantic models for JumpCloud API payloads and user group resource state.
"""

from .responses import ApplicationResponse, ErrorResponse
from .user_group import (
    POSIX_GROUPS_KEY,
    Application,
    ApplicationList,
    GraphConnection,
    GraphObject,
    PosixGroup,
    SystemUser,
    SystemUserList,
    UserGroup,
    UserGroupAttributes,
    UserGroupMembersReq,
    UserGroupPost,
    UserGroupSpec,
    UserGroupState,
)

__all__ = [
    "POSIX_GROUPS_KEY",
    "Application",
    "ApplicationResponse",
    "ApplicationList",
    "ErrorResponse",
    "GraphConnection",
    "GraphObject",
    "PosixGroup",
    "SystemUser",
    "SystemUserList",
    "UserGroup",
    "UserGroupAttributes",
    "UserGroupMembersReq",
    "UserGroupPost",
    "UserGroupSpec",
    "UserGroupState",
]
