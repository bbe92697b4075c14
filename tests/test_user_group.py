"""
Test file for UserGroupResource

Tests the user group lifecycle (create, read, update, delete, import)
against the in-memory JumpCloud, including pagination of a 123 member group.
"""

import pytest
from unittest.mock import Mock

from jumpcloud_bridge.exceptions import (
    JumpCloudAPIError,
    ResourceValidationError,
    UserGroupNotFoundError,
)
from jumpcloud_bridge.models import (
    POSIX_GROUPS_KEY,
    UserGroup,
    UserGroupAttributes,
    UserGroupState,
)
from jumpcloud_bridge.services import UserGroupResource


GROUP_NAME = "tfgroup"
POSIX_SPEC = "742:tfposix"


@pytest.fixture
def emails(fake_jumpcloud):
    """123 users, enough to span two pages of group members"""
    addresses = [f"{GROUP_NAME}{i}@testorg.com" for i in range(123)]
    for address in addresses:
        fake_jumpcloud.add_user(address)
    return addresses


@pytest.fixture
def created(resource, emails):
    """A group created with all 123 users as members"""
    state = UserGroupState(
        name=GROUP_NAME,
        attributes={POSIX_GROUPS_KEY: POSIX_SPEC},
        members=list(emails),
    )
    return resource.create(state)


class TestUserGroupCreate:
    """Test cases for group creation"""

    def test_create_with_123_members(self, created, emails, fake_jumpcloud):
        expected = sorted(emails)

        assert created.id in fake_jumpcloud.groups
        assert created.name == GROUP_NAME
        assert created.attributes == {POSIX_GROUPS_KEY: POSIX_SPEC}
        assert len(created.members) == 123
        for index in (0, 60, 99, 100, 122):
            assert created.members[index] == expected[index]
        assert created.members == expected

    def test_create_sends_posix_attribute(self, created, fake_jumpcloud):
        (body,) = fake_jumpcloud.calls_to("create_user_group")[0]

        assert body.name == GROUP_NAME
        assert body.attributes.model_dump() == {"posixGroups": [{"id": 742, "name": "tfposix"}]}

    def test_create_reads_members_across_pages(self, created, fake_jumpcloud):
        pages = [(skip, limit) for _, skip, limit in fake_jumpcloud.calls_to("list_user_group_members")]

        assert pages == [(0, 100), (100, 100)]

    def test_create_adds_each_member_once(self, created, fake_jumpcloud):
        adds = fake_jumpcloud.calls_to("manage_user_group_member")

        assert len(adds) == 123
        assert all(op == "add" for _, op, _ in adds)

    def test_create_without_attributes_or_members(self, resource, fake_jumpcloud):
        state = resource.create(UserGroupState(name="plain"))

        (body,) = fake_jumpcloud.calls_to("create_user_group")[0]
        assert body.attributes is None
        assert state.attributes == {}
        assert state.members == []
        assert fake_jumpcloud.calls_to("list_system_users") == []

    def test_create_rejects_malformed_posix_spec(self, resource, fake_jumpcloud):
        state = UserGroupState(name="bad", attributes={POSIX_GROUPS_KEY: "not-a-gid"})

        with pytest.raises(ResourceValidationError):
            resource.create(state)

        assert fake_jumpcloud.calls_to("create_user_group") == []

    def test_failed_member_add_leaves_group_in_place(self, fake_jumpcloud, translator, emails):
        membership = Mock()
        membership.add_member.side_effect = JumpCloudAPIError("error managing group member", 500, "")
        resource = UserGroupResource(fake_jumpcloud, translator=translator, membership=membership)
        state = UserGroupState(name=GROUP_NAME, members=emails[:3])

        with pytest.raises(JumpCloudAPIError):
            resource.create(state)

        assert state.id in fake_jumpcloud.groups


class TestUserGroupRead:
    """Test cases for group reads"""

    def test_read_missing_group_marks_absent(self, resource):
        state = UserGroupState(id="does-not-exist", name="stale")

        result = resource.read(state)

        assert result.id is None

    def test_read_empty_document(self):
        client = Mock()
        client.get_user_group.return_value = UserGroup.model_validate({})
        client.list_user_group_members.return_value = []
        resource = UserGroupResource(client)

        state = resource.read(UserGroupState(id="g1"))

        assert state.id == "g1"
        assert state.name == ""
        assert state.attributes == {}
        assert state.members == []
        client.list_system_users.assert_not_called()

    def test_read_refreshes_drifted_state(self, resource, fake_jumpcloud):
        group_id = fake_jumpcloud.add_group(
            "renamed", UserGroupAttributes.from_state({POSIX_GROUPS_KEY: "10:ops"})
        )
        user_id = fake_jumpcloud.add_user("ops@example.com")
        fake_jumpcloud.members[group_id] = [user_id]

        state = resource.read(UserGroupState(id=group_id, name="old", members=["gone@example.com"]))

        assert state.name == "renamed"
        assert state.attributes == {POSIX_GROUPS_KEY: "10:ops"}
        assert state.members == ["ops@example.com"]

    def test_read_error_propagates(self):
        client = Mock()
        client.get_user_group.side_effect = JumpCloudAPIError("error reading user group g1", 500, "")
        resource = UserGroupResource(client)
        state = UserGroupState(id="g1")

        with pytest.raises(JumpCloudAPIError):
            resource.read(state)

        assert state.id == "g1"

    def test_read_requires_id(self, resource):
        with pytest.raises(ResourceValidationError):
            resource.read(UserGroupState(name="no-id"))


class TestUserGroupUpdate:
    """Test cases for group updates"""

    def test_shrink_to_two_members(self, resource, created, emails, fake_jumpcloud):
        fake_jumpcloud.calls.clear()
        created.members = [emails[2], emails[1]]

        state = resource.update(created)

        assert state.members == [f"{GROUP_NAME}1@testorg.com", f"{GROUP_NAME}2@testorg.com"]
        mutations = fake_jumpcloud.calls_to("manage_user_group_member")
        assert len(mutations) == 121
        assert all(op == "remove" for _, op, _ in mutations)
        removed = {user_id for _, _, user_id in mutations}
        assert fake_jumpcloud.id_of(emails[1]) not in removed
        assert fake_jumpcloud.id_of(emails[2]) not in removed

    def test_externally_added_member_is_removed(self, resource, created, emails, fake_jumpcloud):
        created.members = [emails[2], emails[1]]
        resource.update(created)
        intruder = fake_jumpcloud.add_user("intruder@testorg.com")
        fake_jumpcloud.members[created.id].append(intruder)
        fake_jumpcloud.calls.clear()

        state = resource.update(created)

        assert state.members == [f"{GROUP_NAME}1@testorg.com", f"{GROUP_NAME}2@testorg.com"]
        assert fake_jumpcloud.calls_to("manage_user_group_member") == [
            (created.id, "remove", intruder)
        ]

    def test_update_with_unchanged_members_makes_no_member_calls(self, resource, created, fake_jumpcloud):
        fake_jumpcloud.calls.clear()

        resource.update(created)

        assert fake_jumpcloud.calls_to("manage_user_group_member") == []

    def test_update_renames_and_resends_posix(self, resource, created, fake_jumpcloud):
        created.name = "renamed"

        state = resource.update(created)

        group_id, body = fake_jumpcloud.calls_to("update_user_group")[0]
        assert group_id == created.id
        assert body.name == "renamed"
        assert body.attributes.to_state() == {POSIX_GROUPS_KEY: POSIX_SPEC}
        assert state.name == "renamed"

    def test_update_without_attributes_is_rejected(self, resource, fake_jumpcloud):
        group_id = fake_jumpcloud.add_group("plain")

        with pytest.raises(ResourceValidationError, match="attributes not expandable"):
            resource.update(UserGroupState(id=group_id, name="plain"))

        assert fake_jumpcloud.calls_to("update_user_group") == []

    def test_update_requires_id(self, resource):
        state = UserGroupState(name="x", attributes={POSIX_GROUPS_KEY: POSIX_SPEC})

        with pytest.raises(ResourceValidationError):
            resource.update(state)


class TestUserGroupDeleteAndImport:
    """Test cases for group deletion and import"""

    def test_delete_clears_id(self, resource, created, fake_jumpcloud):
        group_id = created.id

        state = resource.delete(created)

        assert state.id is None
        assert group_id not in fake_jumpcloud.groups

    def test_delete_error_keeps_id(self, resource, fake_jumpcloud):
        state = UserGroupState(id="missing")

        with pytest.raises(JumpCloudAPIError):
            resource.delete(state)

        assert state.id == "missing"

    def test_import_existing_group(self, resource, created):
        state = resource.import_state(created.id)

        assert state.id == created.id
        assert state.name == GROUP_NAME
        assert state.attributes == {POSIX_GROUPS_KEY: POSIX_SPEC}
        assert state.members == created.members

    def test_import_missing_group(self, resource):
        with pytest.raises(UserGroupNotFoundError):
            resource.import_state("missing")
