"""
JumpCloud Bridge - Main FastAPI Application

This FastAPI application manages JumpCloud user groups and looks up SSO
applications on behalf of an infrastructure orchestrator. Each group request
is translated into JumpCloud API calls, and the response always reflects the
group as JumpCloud holds it after the operation.

Endpoints:
- GET /health - Health check
- POST /usergroups - Create a user group with members
- GET /usergroups/{group_id} - Read (import) a user group
- PUT /usergroups/{group_id} - Update name and reconcile members
- DELETE /usergroups/{group_id} - Delete a user group
- GET /applications - Look up an application by name or display label
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.responses import JSONResponse, Response

from . import __version__
from .config import get_settings
from .exceptions import (
    ApplicationNotFoundError,
    JumpCloudAPIError,
    JumpCloudError,
    ResourceValidationError,
    UserGroupNotFoundError,
)
from .handlers import verify_bearer_token
from .models import (
    POSIX_GROUPS_KEY,
    ApplicationResponse,
    ErrorResponse,
    UserGroupSpec,
    UserGroupState,
)
from .services import ApplicationLookup, JumpCloudClient, UserGroupResource


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Global service instances (initialized on startup)
user_group_resource: Optional[UserGroupResource] = None
application_lookup: Optional[ApplicationLookup] = None


def startup_event():
    """
    Initialize services on application startup.

    Reads settings from the environment and creates service instances.
    """
    global user_group_resource, application_lookup

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)
    logger.info("Starting JumpCloud Bridge against %s", settings.jumpcloud_base_url)

    client = JumpCloudClient.from_settings(settings)
    user_group_resource = UserGroupResource.from_settings(settings, client=client)
    application_lookup = ApplicationLookup(
        client, page_size=settings.page_size, page_delay=settings.page_delay
    )

    if not settings.bridge_bearer_token:
        logger.warning("BRIDGE_BEARER_TOKEN is not set; authenticated routes will answer 500")

    logger.info("JumpCloud Bridge services initialized successfully")


@asynccontextmanager
async def lifespan(app: FastAPI):
    startup_event()
    yield


# FastAPI app initialization
app = FastAPI(
    title="JumpCloud Bridge",
    description="Manage JumpCloud user groups and look up applications",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


def _error(status_code: int, detail: str, upstream_status: Optional[int] = None) -> JSONResponse:
    body = ErrorResponse(status=status_code, detail=detail, upstream_status=upstream_status)
    return JSONResponse(content=body.model_dump(exclude_none=True), status_code=status_code)


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Health status and service availability
    """
    services_status = {
        "user_group_resource": user_group_resource is not None,
        "application_lookup": application_lookup is not None,
    }

    all_services_ready = all(services_status.values())

    health_response = {
        "status": "healthy" if all_services_ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": services_status,
        "version": __version__
    }

    if not all_services_ready:
        logger.warning(f"Health check failed - services status: {services_status}")

    return JSONResponse(content=health_response, status_code=200 if all_services_ready else 503)


@app.post(
    "/usergroups",
    status_code=status.HTTP_201_CREATED,
    response_model=UserGroupState,
    dependencies=[Depends(verify_bearer_token)],
)
def create_user_group(spec: UserGroupSpec):
    """
    Create a user group.

    The group is created with its name and POSIX attribute, each member email
    is resolved and added, and the group is read back.

    Args:
        spec: Desired group configuration

    Returns:
        UserGroupState: The group as stored in JumpCloud
    """
    logger.info(f"Creating user group: {spec.name}")
    state = UserGroupState(name=spec.name, attributes=spec.attributes or {}, members=spec.members)
    return user_group_resource.create(state)


@app.get(
    "/usergroups/{group_id}",
    response_model=UserGroupState,
    dependencies=[Depends(verify_bearer_token)],
)
def read_user_group(group_id: str):
    """
    Read a user group, including member emails.

    Returns 404 if the group does not exist.
    """
    return user_group_resource.import_state(group_id)


@app.put(
    "/usergroups/{group_id}",
    response_model=UserGroupState,
    dependencies=[Depends(verify_bearer_token)],
)
def update_user_group(group_id: str, spec: UserGroupSpec):
    """
    Update a user group's name and reconcile its members.

    The POSIX attribute cannot change after creation. When ``attributes`` is
    omitted the current ones are re-sent, since JumpCloud requires them on
    every update.

    Args:
        group_id: JumpCloud user group ID
        spec: Desired group configuration

    Returns:
        UserGroupState: The group as stored in JumpCloud
    """
    logger.info(f"Updating user group: {group_id}")
    current = user_group_resource.import_state(group_id)

    attributes = current.attributes if spec.attributes is None else spec.attributes
    if attributes.get(POSIX_GROUPS_KEY) != current.attributes.get(POSIX_GROUPS_KEY):
        raise ResourceValidationError(f"{POSIX_GROUPS_KEY} cannot be changed after group creation")

    state = UserGroupState(id=group_id, name=spec.name, attributes=attributes, members=spec.members)
    state = user_group_resource.update(state)
    if state.id is None:
        raise UserGroupNotFoundError(f"user group {group_id} disappeared during update")
    return state


@app.delete(
    "/usergroups/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(verify_bearer_token)],
)
def delete_user_group(group_id: str):
    """
    Delete a user group.

    Returns 404 if the group does not exist, like GET and PUT.
    """
    logger.info(f"Deleting user group: {group_id}")
    try:
        user_group_resource.delete(UserGroupState(id=group_id))
    except JumpCloudAPIError as e:
        if e.status_code == status.HTTP_404_NOT_FOUND:
            raise UserGroupNotFoundError(f"user group {group_id} not found") from e
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get(
    "/applications",
    response_model=ApplicationResponse,
    dependencies=[Depends(verify_bearer_token)],
)
def lookup_application(
    name: Optional[str] = Query(None),
    display_label: Optional[str] = Query(None),
):
    """
    Look up an application by display name or display label.

    Returns 400 when neither is given and 404 when nothing matches.
    """
    application = application_lookup.lookup(name=name, display_label=display_label)
    return ApplicationResponse(
        id=application.id,
        name=application.displayName,
        display_label=application.displayLabel,
    )


# Exception handlers
@app.exception_handler(ResourceValidationError)
async def validation_exception_handler(request, exc):
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(UserGroupNotFoundError)
@app.exception_handler(ApplicationNotFoundError)
async def not_found_exception_handler(request, exc):
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(JumpCloudAPIError)
async def api_exception_handler(request, exc):
    logger.error(f"JumpCloud API error: {exc}")
    return _error(status.HTTP_502_BAD_GATEWAY, str(exc), upstream_status=exc.status_code)


@app.exception_handler(JumpCloudError)
async def jumpcloud_exception_handler(request, exc):
    logger.error(f"JumpCloud request failed: {exc}")
    return _error(status.HTTP_502_BAD_GATEWAY, str(exc))


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Convert FastAPI HTTPExceptions to the bridge error format."""
    response = _error(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Convert unhandled exceptions to the bridge error format."""
    logger.error(f"Unhandled exception: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def run():
    """Serve the bridge with uvicorn."""
    import uvicorn

    uvicorn.run("jumpcloud_bridge.main:app", host="0.0.0.0", port=8080)


if __name__ == "__main__":
    run()
