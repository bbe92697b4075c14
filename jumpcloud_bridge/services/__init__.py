"""
JumpCloud Bridge Services

Business logic services for managing JumpCloud user groups and looking up
applications.
"""

from .application import ApplicationLookup
from .client import JumpCloudClient
from .membership import MembershipDiff, MembershipManager, diff_members
from .pagination import paginate
from .translator import UserTranslator
from .user_group import UserGroupResource

__all__ = [
    "ApplicationLookup",
    "JumpCloudClient",
    "MembershipDiff",
    "MembershipManager",
    "UserGroupResource",
    "UserTranslator",
    "diff_members",
    "paginate",
]
