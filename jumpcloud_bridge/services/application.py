"""
Application Lookup Service

Finds the ID of a JumpCloud SSO application by display name or label.
"""

import logging
import time
from typing import Callable, Optional

from ..exceptions import ApplicationNotFoundError, ResourceValidationError
from ..models import Application
from .client import JumpCloudClient
from .pagination import PAGE_DELAY, PAGE_SIZE, paginate

logger = logging.getLogger(__name__)

APPLICATION_FIELDS = "_id displayName displayLabel"


class ApplicationLookup:
    """
    Looks up SSO applications.

    Example usage:
        lookup = ApplicationLookup(client)
        app = lookup.lookup(display_label="AWS Production")
        print(app.id)
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

    def lookup(self, name: Optional[str] = None, display_label: Optional[str] = None) -> Application:
        """
        Return the first application matching either criterion.

        Args:
            name: Exact application display name
            display_label: Exact application display label

        Raises:
            ResourceValidationError: If neither criterion is given
            ApplicationNotFoundError: If no application matches
        """
        if not name and not display_label:
            raise ResourceValidationError("either name or display_label must be provided")

        applications = paginate(
            lambda skip, limit: self.client.list_applications(
                skip=skip, limit=limit, fields=APPLICATION_FIELDS
            ).results,
            page_size=self.page_size,
            delay=self.page_delay,
            sleep=self.sleep,
        )

        for application in applications:
            logger.debug(
                "Checking application with DisplayName: %s, DisplayLabel: %s",
                application.displayName, application.displayLabel,
            )
            if (name and application.displayName == name) or (
                display_label and application.displayLabel == display_label
            ):
                return application

        raise ApplicationNotFoundError("no application found with the provided filters")
