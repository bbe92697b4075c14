"""
Shared fixtures for JumpCloud bridge tests.

FakeJumpCloud stands in for JumpCloudClient with an in-memory directory of
users, groups and applications, and records every call it receives.
"""

import pytest
from unittest.mock import Mock

from jumpcloud_bridge.exceptions import JumpCloudAPIError
from jumpcloud_bridge.models import (
    Application,
    ApplicationList,
    GraphConnection,
    GraphObject,
    SystemUser,
    SystemUserList,
    UserGroup,
    UserGroupMembersReq,
    UserGroupPost,
)
from jumpcloud_bridge.services import (
    ApplicationLookup,
    MembershipManager,
    UserGroupResource,
    UserTranslator,
)


class FakeJumpCloud:
    """In-memory JumpCloud exposing the JumpCloudClient interface"""

    def __init__(self):
        self.users = {}  # user ID -> email
        self.groups = {}  # group ID -> UserGroup
        self.members = {}  # group ID -> list of user IDs
        self.applications = []
        self.calls = []
        self._next_id = 0

    def _new_id(self):
        self._next_id += 1
        return f"{self._next_id:024x}"

    def calls_to(self, method):
        return [args for name, args in self.calls if name == method]

    # -- Test setup helpers

    def add_user(self, email):
        user_id = self._new_id()
        self.users[user_id] = email
        return user_id

    def add_group(self, name, attributes=None):
        group_id = self._new_id()
        self.groups[group_id] = UserGroup(id=group_id, name=name, type="user_group", attributes=attributes)
        self.members[group_id] = []
        return group_id

    def id_of(self, email):
        return next(uid for uid, e in self.users.items() if e == email)

    # -- JumpCloudClient interface

    def create_user_group(self, body: UserGroupPost):
        self.calls.append(("create_user_group", (body,)))
        group_id = self.add_group(body.name, body.attributes)
        return self.groups[group_id]

    def get_user_group(self, group_id):
        self.calls.append(("get_user_group", (group_id,)))
        return self.groups.get(group_id)

    def update_user_group(self, group_id, body: UserGroupPost):
        self.calls.append(("update_user_group", (group_id, body)))
        self._require_group(group_id)
        if body.attributes is None or not body.attributes.posixGroups:
            raise JumpCloudAPIError("error updating user group", 400, "posixGroups required")
        group = self.groups[group_id].model_copy(update={"name": body.name, "attributes": body.attributes})
        self.groups[group_id] = group
        return group

    def delete_user_group(self, group_id):
        self.calls.append(("delete_user_group", (group_id,)))
        self._require_group(group_id)
        del self.groups[group_id]
        del self.members[group_id]

    def list_user_group_members(self, group_id, skip, limit):
        self.calls.append(("list_user_group_members", (group_id, skip, limit)))
        self._require_group(group_id)
        page = self.members[group_id][skip:skip + limit]
        return [GraphConnection(to=GraphObject(id=uid, type="user")) for uid in page]

    def manage_user_group_member(self, group_id, req: UserGroupMembersReq):
        self.calls.append(("manage_user_group_member", (group_id, req.op, req.id)))
        self._require_group(group_id)
        current = self.members[group_id]
        if req.op == "add":
            if req.id in current:
                raise JumpCloudAPIError("error managing group member", 409, "Already exists")
            current.append(req.id)
        else:
            current.remove(req.id)

    def list_system_users(self, query_filter, skip, limit, fields=None, sort=None):
        self.calls.append(("list_system_users", (query_filter, skip, limit, fields, sort)))
        field, _, values = query_filter.partition(":$in:")
        wanted = set(values.split("|"))
        users = [
            SystemUser(id=uid, email=email)
            for uid, email in self.users.items()
            if (uid if field == "_id" else email) in wanted
        ]
        if sort == "email":
            users.sort(key=lambda u: u.email)
        elif sort == "_id":
            users.sort(key=lambda u: u.id)
        return SystemUserList(totalCount=len(users), results=users[skip:skip + limit])

    def list_applications(self, skip, limit, fields=None):
        self.calls.append(("list_applications", (skip, limit, fields)))
        return ApplicationList(
            totalCount=len(self.applications), results=self.applications[skip:skip + limit]
        )

    def _require_group(self, group_id):
        if group_id not in self.groups:
            raise JumpCloudAPIError(f"user group {group_id}", 404, "Not Found")


@pytest.fixture
def fake_jumpcloud():
    """Empty in-memory JumpCloud"""
    return FakeJumpCloud()


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays"""
    return Mock()


@pytest.fixture
def translator(fake_jumpcloud, no_sleep):
    return UserTranslator(fake_jumpcloud, sleep=no_sleep)


@pytest.fixture
def membership(fake_jumpcloud, no_sleep):
    return MembershipManager(fake_jumpcloud, sleep=no_sleep)


@pytest.fixture
def resource(fake_jumpcloud, translator, membership):
    """UserGroupResource wired to the in-memory JumpCloud"""
    return UserGroupResource(fake_jumpcloud, translator=translator, membership=membership)


@pytest.fixture
def application_lookup(fake_jumpcloud, no_sleep):
    fake_jumpcloud.applications = [
        Application(id="app-1", displayName="Slack", displayLabel="Slack Workspace"),
        Application(id="app-2", displayName="AWS", displayLabel="AWS Production"),
        Application(id="app-3", displayName="AWS", displayLabel="AWS Staging"),
    ]
    return ApplicationLookup(fake_jumpcloud, sleep=no_sleep)
