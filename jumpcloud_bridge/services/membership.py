"""
Group Membership Service

Lists the members of a user group and reconciles them against a desired
set, one membership edge at a time.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Sequence

from ..models import UserGroupMembersReq
from .client import JumpCloudClient
from .pagination import PAGE_DELAY, PAGE_SIZE, paginate

logger = logging.getLogger(__name__)


@dataclass
class MembershipDiff:
    """Members to add and remove to reach a desired membership."""

    to_add: List[str] = field(default_factory=list)
    to_remove: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def diff_members(old_member_ids: Sequence[str], new_member_ids: Sequence[str]) -> MembershipDiff:
    """
    Compute which members to add and remove.

    ``to_add`` keeps the order of ``new_member_ids`` and ``to_remove`` the
    order of ``old_member_ids``; repeated IDs appear once.
    """
    old = set(old_member_ids)
    new = set(new_member_ids)
    return MembershipDiff(
        to_add=[m for m in dict.fromkeys(new_member_ids) if m not in old],
        to_remove=[m for m in dict.fromkeys(old_member_ids) if m not in new],
    )


class MembershipManager:
    """
    Reads and mutates the membership graph of user groups.

    Example usage:
        manager = MembershipManager(client)

        current = manager.get_member_ids(group_id)
        manager.reconcile(group_id, current, desired_ids)
    """

    def __init__(
        self,
        client: JumpCloudClient,
        page_size: int = PAGE_SIZE,
        page_delay: float = PAGE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.page_size = page_size
        self.page_delay = page_delay
        self.sleep = sleep

    def get_member_ids(self, group_id: str) -> List[str]:
        """Return the user IDs attached to a group, across all pages."""
        connections = paginate(
            lambda skip, limit: self.client.list_user_group_members(group_id, skip=skip, limit=limit),
            page_size=self.page_size,
            delay=self.page_delay,
            sleep=self.sleep,
        )
        return [connection.to.id for connection in connections]

    def add_member(self, group_id: str, user_id: str) -> None:
        self.client.manage_user_group_member(group_id, UserGroupMembersReq(op="add", id=user_id))
        logger.info("Added user %s to group %s", user_id, group_id)

    def remove_member(self, group_id: str, user_id: str) -> None:
        self.client.manage_user_group_member(group_id, UserGroupMembersReq(op="remove", id=user_id))
        logger.info("Removed user %s from group %s", user_id, group_id)

    def reconcile(
        self,
        group_id: str,
        old_member_ids: Sequence[str],
        new_member_ids: Sequence[str],
    ) -> MembershipDiff:
        """
        Bring a group's membership from ``old_member_ids`` to ``new_member_ids``.

        Additions run first, then removals, one call per member. The first
        failing call raises; mutations already made stay applied, and running
        the reconciliation again converges.

        Returns:
            The diff that was applied
        """
        diff = diff_members(old_member_ids, new_member_ids)
        if diff.is_empty():
            logger.debug("Group %s membership already up to date", group_id)
            return diff

        for user_id in diff.to_add:
            self.add_member(group_id, user_id)
        for user_id in diff.to_remove:
            self.remove_member(group_id, user_id)

        logger.info(
            "Reconciled group %s: %d added, %d removed",
            group_id, len(diff.to_add), len(diff.to_remove),
        )
        return diff
