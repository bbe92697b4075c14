"""
JumpCloud API Client

Single client for the JumpCloud v1 and v2 REST APIs. Each remote operation
the bridge needs has one typed method; callers never see which API version
serves it.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, TypeAdapter

from ..config import DEFAULT_BASE_URL, BridgeSettings
from ..exceptions import (
    JumpCloudAPIError,
    JumpCloudDecodeError,
    JumpCloudTransportError,
)
from ..models import (
    ApplicationList,
    GraphConnection,
    SystemUserList,
    UserGroup,
    UserGroupMembersReq,
    UserGroupPost,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_REDACTED_HEADERS = {"x-api-key"}
_graph_connections = TypeAdapter(List[GraphConnection])


class JumpCloudClient:
    """
    REST API client for JumpCloud.

    Authenticates every request with the ``x-api-key`` header and, for
    multi-tenant administrators, scopes it with ``x-org-id``. No retries are
    attempted and no timeout is applied unless one is configured.

    Example usage:
        client = JumpCloudClient(api_key="...", org_id="...")

        group = client.create_user_group(UserGroupPost(name="engineering"))
        client.manage_user_group_member(
            group.id, UserGroupMembersReq(op="add", id="5f0c...")
        )
    """

    def __init__(
        self,
        api_key: str,
        org_id: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: JumpCloud administrator API key
            org_id: Organization ID sent as x-org-id, if any
            base_url: API root; v1 endpoints hang off it directly, v2 under /v2
            timeout: Request timeout in seconds, None to wait indefinitely
            session: Preconfigured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "x-api-key": api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if org_id:
            self.session.headers["x-org-id"] = org_id

    @classmethod
    def from_settings(cls, settings: BridgeSettings) -> "JumpCloudClient":
        """Build a client from bridge settings."""
        return cls(
            api_key=settings.jumpcloud_api_key,
            org_id=settings.jumpcloud_org_id,
            base_url=settings.jumpcloud_base_url,
            timeout=settings.request_timeout,
        )

    # -- User groups (v2) ---------------------------------------------------

    def create_user_group(self, body: UserGroupPost) -> UserGroup:
        """Create a user group and return it."""
        operation = f"error creating user group {body.name}"
        resp = self._request(
            "POST", "/v2/usergroups", operation, json_body=body.model_dump(exclude_none=True)
        )
        return self._decode(resp, UserGroup, operation)

    def get_user_group(self, group_id: str) -> Optional[UserGroup]:
        """
        Read a user group with a plain GET.

        The response status is checked before the body is decoded.

        Returns:
            The group, or None if JumpCloud answers 404

        Raises:
            JumpCloudAPIError: For any other error status
            JumpCloudDecodeError: If the body is not a valid group document
        """
        operation = f"error reading user group {group_id}"
        resp = self._request("GET", f"/v2/usergroups/{group_id}", operation, check=False)
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp, operation)
        return self._decode(resp, UserGroup, operation)

    def update_user_group(self, group_id: str, body: UserGroupPost) -> UserGroup:
        """Replace a user group's name and attributes."""
        operation = f"error updating user group {group_id}"
        resp = self._request(
            "PATCH",
            f"/v2/usergroups/{group_id}",
            operation,
            json_body=body.model_dump(exclude_none=True),
        )
        return self._decode(resp, UserGroup, operation)

    def delete_user_group(self, group_id: str) -> None:
        """Delete a user group."""
        self._request("DELETE", f"/v2/usergroups/{group_id}", f"error deleting user group {group_id}")

    def list_user_group_members(self, group_id: str, skip: int, limit: int) -> List[GraphConnection]:
        """Return one page of a group's membership graph."""
        operation = f"error listing members of user group {group_id}"
        resp = self._request(
            "GET",
            f"/v2/usergroups/{group_id}/members",
            operation,
            params={"limit": limit, "skip": skip},
        )
        try:
            return _graph_connections.validate_python(resp.json())
        except ValueError as e:
            raise JumpCloudDecodeError(f"{operation}: {e}") from e

    def manage_user_group_member(self, group_id: str, req: UserGroupMembersReq) -> None:
        """Add or remove a single member of a user group."""
        self._request(
            "POST",
            f"/v2/usergroups/{group_id}/members",
            f"error managing group member, action: {req.op}, member id: {req.id}",
            json_body=req.model_dump(),
        )

    # -- System users (v1) --------------------------------------------------

    def list_system_users(
        self,
        query_filter: str,
        skip: int,
        limit: int,
        fields: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> SystemUserList:
        """Return one page of system users matching a filter expression."""
        params: Dict[str, Any] = {"filter": query_filter, "limit": limit, "skip": skip}
        if fields:
            params["fields"] = fields
        if sort:
            params["sort"] = sort
        operation = "error listing system users"
        resp = self._request("GET", "/systemusers", operation, params=params)
        return self._decode(resp, SystemUserList, operation)

    # -- Applications (v1) --------------------------------------------------

    def list_applications(self, skip: int, limit: int, fields: Optional[str] = None) -> ApplicationList:
        """Return one page of SSO applications."""
        params: Dict[str, Any] = {"limit": limit, "skip": skip}
        if fields:
            params["fields"] = fields
        operation = "error listing applications"
        resp = self._request("GET", "/applications", operation, params=params)
        return self._decode(resp, ApplicationList, operation)

    # -- Internals ----------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        check: bool = True,
    ) -> requests.Response:
        """
        Send a request, wrapping transport failures.

        Args:
            method: HTTP method
            path: Path below the API root
            operation: Context prefixed to any error message
            params: Query parameters
            json_body: JSON request body
            check: Raise JumpCloudAPIError on error statuses

        Returns:
            The response
        """
        url = self._url(path)
        safe_headers = {
            k: ("***REDACTED***" if k.lower() in _REDACTED_HEADERS else v)
            for k, v in self.session.headers.items()
        }
        logger.debug("API %s %s params=%s headers=%s", method, url, params, safe_headers)

        try:
            resp = self.session.request(
                method, url, params=params, json=json_body, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise JumpCloudTransportError(f"{operation}: {e}") from e

        logger.debug("API %s %s -> %d", method, url, resp.status_code)
        if check:
            self._raise_for_status(resp, operation)
        return resp

    @staticmethod
    def _raise_for_status(resp: requests.Response, operation: str) -> None:
        if resp.status_code >= 400:
            raise JumpCloudAPIError(operation, resp.status_code, resp.text[:500])

    @staticmethod
    def _decode(resp: requests.Response, model: Type[M], operation: str) -> M:
        try:
            return model.model_validate(resp.json())
        except ValueError as e:
            raise JumpCloudDecodeError(f"{operation}: invalid response body: {e}") from e
