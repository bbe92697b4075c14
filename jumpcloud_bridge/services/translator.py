"""
User ID / Email Translator

Converts between JumpCloud user IDs and email addresses through the system
user search endpoint, using ``$in`` filters.
"""

import logging
import time
from functools import partial
from typing import Callable, List, Sequence

from ..exceptions import JumpCloudError
from .client import JumpCloudClient
from .pagination import PAGE_DELAY, PAGE_SIZE, paginate

logger = logging.getLogger(__name__)

FILTER_BATCH_SIZE = 100


def in_filter(field: str, values: Sequence[str]) -> str:
    """Build a ``field:$in:v1|v2|...`` filter expression."""
    return f"{field}:$in:" + "|".join(values)


class UserTranslator:
    """
    Translates user IDs to emails and back.

    Each lookup packs at most ``batch_size`` values into one filter
    expression; longer inputs are split into several queries, each paginated
    on its own. Results from a single query keep the API's sort order, and
    results from several queries are merged and sorted.

    Example usage:
        translator = UserTranslator(client)

        ids = translator.emails_to_ids(["alice@example.com", "bob@example.com"])
        emails = translator.ids_to_emails(ids)
    """

    def __init__(
        self,
        client: JumpCloudClient,
        page_size: int = PAGE_SIZE,
        page_delay: float = PAGE_DELAY,
        batch_size: int = FILTER_BATCH_SIZE,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.client = client
        self.page_size = page_size
        self.page_delay = page_delay
        self.batch_size = batch_size
        self.sleep = sleep

    def ids_to_emails(self, user_ids: Sequence[str]) -> List[str]:
        """
        Look up the emails of the given user IDs, sorted by email.

        Returns an empty list without calling the API when ``user_ids`` is
        empty.

        Raises:
            JumpCloudError: Naming the ID batch that failed
        """
        return self._translate(
            user_ids, match_field="_id", result_field="email", description="user emails from IDs"
        )

    def emails_to_ids(self, emails: Sequence[str]) -> List[str]:
        """
        Look up the user IDs of the given emails, sorted by ID.

        Emails with no matching user are dropped. Returns an empty list
        without calling the API when ``emails`` is empty.

        Raises:
            JumpCloudError: Naming the email batch that failed
        """
        ids = self._translate(
            emails, match_field="email", result_field="_id", description="user IDs from emails"
        )
        unique = len(set(emails))
        if len(ids) < unique:
            logger.warning("%d of %d emails did not match any user", unique - len(ids), unique)
        return ids

    def _translate(
        self,
        values: Sequence[str],
        match_field: str,
        result_field: str,
        description: str,
    ) -> List[str]:
        values = list(dict.fromkeys(values))
        if not values:
            return []

        batches = [
            values[i:i + self.batch_size] for i in range(0, len(values), self.batch_size)
        ]
        results: List[str] = []
        for batch in batches:
            fetch = partial(self._fetch_page, in_filter(match_field, batch), result_field)
            try:
                results.extend(
                    paginate(fetch, page_size=self.page_size, delay=self.page_delay, sleep=self.sleep)
                )
            except JumpCloudError as e:
                raise JumpCloudError(f"error loading {description}: {batch}: {e}") from e

        if len(batches) > 1:
            results.sort()
        logger.debug("Translated %d values into %d %s", len(values), len(results), description)
        return results

    def _fetch_page(self, query: str, result_field: str, skip: int, limit: int) -> List[str]:
        page = self.client.list_system_users(
            query, skip=skip, limit=limit, fields=result_field, sort=result_field
        )
        if result_field == "email":
            return [user.email for user in page.results]
        return [user.id for user in page.results]
