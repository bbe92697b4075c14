"""
User Group Resource

Create, read, update, delete and import JumpCloud user groups, keeping a
local UserGroupState in step with the remote group.
"""

import logging
from typing import Dict, Optional

from ..config import BridgeSettings
from ..exceptions import ResourceValidationError, UserGroupNotFoundError
from ..models import UserGroupAttributes, UserGroupPost, UserGroupState
from .client import JumpCloudClient
from .membership import MembershipManager
from .translator import UserTranslator

logger = logging.getLogger(__name__)


def _expand_attributes(attributes: Optional[Dict[str, str]]) -> Optional[UserGroupAttributes]:
    try:
        return UserGroupAttributes.from_state(attributes)
    except ValueError as e:
        raise ResourceValidationError(str(e)) from e


class UserGroupResource:
    """
    Lifecycle controller for JumpCloud user groups.

    The remote group is the source of truth. Every mutating operation ends
    with a full read, so the returned state always reflects what JumpCloud
    holds: name, POSIX attribute and member emails.

    Example usage:
        resource = UserGroupResource(client)

        state = UserGroupState(
            name="engineering",
            attributes={"posix_groups": "1500:engineering"},
            members=["alice@example.com", "bob@example.com"],
        )
        resource.create(state)   # state.id is now set

        state.members = ["alice@example.com"]
        resource.update(state)   # bob is removed

        resource.delete(state)   # state.id is None again
    """

    def __init__(
        self,
        client: JumpCloudClient,
        translator: Optional[UserTranslator] = None,
        membership: Optional[MembershipManager] = None,
    ):
        self.client = client
        self.translator = translator or UserTranslator(client)
        self.membership = membership or MembershipManager(client)

    @classmethod
    def from_settings(
        cls,
        settings: BridgeSettings,
        client: Optional[JumpCloudClient] = None,
    ) -> "UserGroupResource":
        """Build a resource whose pagination and batching follow the settings."""
        client = client or JumpCloudClient.from_settings(settings)
        return cls(
            client,
            translator=UserTranslator(
                client,
                page_size=settings.page_size,
                page_delay=settings.page_delay,
                batch_size=settings.filter_batch_size,
            ),
            membership=MembershipManager(
                client,
                page_size=settings.page_size,
                page_delay=settings.page_delay,
            ),
        )

    def create(self, state: UserGroupState) -> UserGroupState:
        """
        Create the group, add its members, then read it back.

        If adding a member fails the group is left in place with
        ``state.id`` set, so a later update can finish the job.
        """
        body = UserGroupPost(name=state.name, attributes=_expand_attributes(state.attributes))
        group = self.client.create_user_group(body)
        state.id = group.id
        logger.info("Created user group %s (%s)", state.name, group.id)

        member_ids = self.translator.emails_to_ids(state.members)
        for member_id in member_ids:
            self.membership.add_member(group.id, member_id)

        return self.read(state)

    def read(self, state: UserGroupState) -> UserGroupState:
        """
        Refresh the state from JumpCloud.

        A group that no longer exists sets ``state.id`` to None instead of
        raising.
        """
        if not state.id:
            raise ResourceValidationError("cannot read a user group without an id")

        group = self.client.get_user_group(state.id)
        if group is None:
            logger.info("User group %s not found, marking it absent", state.id)
            state.id = None
            return state

        state.id = group.id or state.id
        state.name = group.name
        state.attributes = group.attributes.to_state() if group.attributes else {}

        member_ids = self.membership.get_member_ids(state.id)
        state.members = self.translator.ids_to_emails(member_ids)
        return state

    def update(self, state: UserGroupState) -> UserGroupState:
        """
        Replace name and attributes, reconcile members, then read back.

        The replace call needs the POSIX attribute even when it is unchanged,
        so a state without one is rejected before anything is sent.
        """
        if not state.id:
            raise ResourceValidationError("cannot update a user group without an id")

        attributes = _expand_attributes(state.attributes)
        if attributes is None:
            raise ResourceValidationError("unable to update, attributes not expandable")

        self.client.update_user_group(state.id, UserGroupPost(name=state.name, attributes=attributes))
        logger.info("Updated user group %s", state.id)

        old_member_ids = self.membership.get_member_ids(state.id)
        new_member_ids = self.translator.emails_to_ids(state.members)
        self.membership.reconcile(state.id, old_member_ids, new_member_ids)

        return self.read(state)

    def delete(self, state: UserGroupState) -> UserGroupState:
        """Delete the group and clear ``state.id``."""
        if not state.id:
            raise ResourceValidationError("cannot delete a user group without an id")

        self.client.delete_user_group(state.id)
        logger.info("Deleted user group %s", state.id)
        state.id = None
        return state

    def import_state(self, group_id: str) -> UserGroupState:
        """
        Build the state of an existing group from its ID.

        Raises:
            UserGroupNotFoundError: If no group has this ID
        """
        state = self.read(UserGroupState(id=group_id))
        if state.id is None:
            raise UserGroupNotFoundError(f"user group {group_id} not found")
        return state
