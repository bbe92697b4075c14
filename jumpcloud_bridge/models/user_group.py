"""
JumpCloud Resource Models

Pydantic models for the JumpCloud v1 and v2 payloads used by the bridge,
plus the resource state mirrored for each managed user group.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# Key of the POSIX group spec inside a group's state attribute map
POSIX_GROUPS_KEY = "posix_groups"


class PosixGroup(BaseModel):
    """POSIX group attached to a user group"""
    id: int  # Numeric group ID (gid)
    name: str  # POSIX group name


class UserGroupAttributes(BaseModel):
    """
    Attributes of a v2 user group.

    Only POSIX groups are managed; other attributes returned by the API are
    ignored.
    """
    posixGroups: List[PosixGroup] = Field(default_factory=list)

    @classmethod
    def from_state(cls, attributes: Optional[Dict[str, str]]) -> Optional["UserGroupAttributes"]:
        """
        Build request attributes from a state attribute map.

        The POSIX spec is a single "<gid>:<name>" string; the API only
        considers the first POSIX group.

        Returns:
            UserGroupAttributes, or None if the map carries no POSIX spec

        Raises:
            ValueError: If the POSIX spec is malformed
        """
        spec = (attributes or {}).get(POSIX_GROUPS_KEY)
        if not spec:
            return None
        gid, sep, name = spec.partition(":")
        if not sep or not name:
            raise ValueError(f"{POSIX_GROUPS_KEY} must look like '<gid>:<name>', got {spec!r}")
        try:
            posix = PosixGroup(id=int(gid), name=name)
        except ValueError:
            raise ValueError(f"{POSIX_GROUPS_KEY} gid must be an integer, got {gid!r}") from None
        return cls(posixGroups=[posix])

    def to_state(self) -> Dict[str, str]:
        """Flatten to the state attribute map."""
        if not self.posixGroups:
            return {}
        first = self.posixGroups[0]
        return {POSIX_GROUPS_KEY: f"{first.id}:{first.name}"}


class UserGroupPost(BaseModel):
    """
    Body of a user group create (POST) or full-replace (PATCH) request.

    PATCH behaves like PUT: attributes.posixGroups must be re-sent even when
    unchanged.
    """
    name: str
    attributes: Optional[UserGroupAttributes] = None


class UserGroup(BaseModel):
    """
    v2 user group as returned by GET /v2/usergroups/{id}.

    Every field has a default so that an empty object decodes.
    """
    id: str = ""
    name: str = ""
    type: Optional[str] = None
    attributes: Optional[UserGroupAttributes] = None


class UserGroupMembersReq(BaseModel):
    """Single membership edge mutation"""
    op: Literal["add", "remove"]
    type: str = "user"
    id: str  # User ID


class GraphObject(BaseModel):
    """Endpoint of a graph connection"""
    id: str
    type: Optional[str] = None


class GraphConnection(BaseModel):
    """Entry of the group membership graph"""
    to: GraphObject
    attributes: Optional[dict] = None


class SystemUser(BaseModel):
    """v1 system user, projected down to the fields the bridge asks for"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", alias="_id")
    email: str = ""


class SystemUserList(BaseModel):
    """v1 list response for /systemusers"""
    totalCount: int = 0
    results: List[SystemUser] = Field(default_factory=list)


class Application(BaseModel):
    """v1 SSO application"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", alias="_id")
    displayName: str = ""
    displayLabel: str = ""


class ApplicationList(BaseModel):
    """v1 list response for /applications"""
    totalCount: int = 0
    results: List[Application] = Field(default_factory=list)


class UserGroupState(BaseModel):
    """
    Local mirror of a managed user group.

    ``id`` is None while the group is absent. ``attributes`` holds the
    flattened POSIX spec and ``members`` the member emails.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "5f0c1b2e3a4d5e6f7a8b9c0d",
                "name": "engineering",
                "attributes": {POSIX_GROUPS_KEY: "1500:engineering"},
                "members": [
                    "alice@example.com",
                    "bob@example.com"
                ]
            }
        }
    )

    id: Optional[str] = None
    name: str = ""
    attributes: Dict[str, str] = Field(default_factory=dict)
    members: List[str] = Field(default_factory=list)


class UserGroupSpec(BaseModel):
    """
    Desired configuration of a user group, as accepted by the HTTP API.

    ``attributes`` may be omitted on update, in which case the group's
    current attributes are re-sent.
    """
    name: str = Field(..., min_length=1)
    attributes: Optional[Dict[str, str]] = None
    members: List[str] = Field(default_factory=list)
