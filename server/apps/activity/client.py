"""Client for the external activity log function."""

import logging
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Final, final

import httpx
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

_ENDPOINT_PATH: Final = '/api/logActivity'


@final
class ActivityLogClient:
    """Records user activity locally and in the remote activity log.

    Remote delivery runs on a background worker so a slow or broken log
    function never delays the operation being recorded. Every remote
    failure is logged and dropped.
    """

    def __init__(  # noqa: WPS211
        self,
        function_url: str,
        function_key: str,
        timeout: float = 5.0,
        enabled: bool = True,
        http_client: httpx.Client | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        """Initialize client.

        Args:
            function_url: Base URL of the log function, empty to disable.
            function_key: Function access key sent as ``code``.
            timeout: Request timeout in seconds.
            enabled: Whether remote delivery is enabled at all.
            http_client: HTTP client to reuse (tests inject a mock one).
            executor: Worker pool for remote delivery.
        """
        self.function_url = function_url.rstrip('/')
        self.function_key = function_key
        self.enabled = enabled
        self._http_client = http_client or httpx.Client(timeout=timeout)
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix='activity-log',
        )

    @classmethod
    def from_settings(cls) -> 'ActivityLogClient':
        """Build a client from the ACTIVITY_LOG_* settings."""
        return cls(
            function_url=settings.ACTIVITY_LOG_FUNCTION_URL,
            function_key=settings.ACTIVITY_LOG_FUNCTION_KEY,
            timeout=settings.ACTIVITY_LOG_TIMEOUT,
            enabled=settings.ACTIVITY_LOG_ENABLED,
        )

    @property
    def remote_enabled(self) -> bool:
        """Whether records are sent to the remote log."""
        return self.enabled and bool(self.function_url)

    def record(
        self,
        action: str,
        attributes: Mapping[str, Any] | None = None,
    ) -> Future[None] | None:
        """Record one activity.

        Args:
            action: Activity name, e.g. 'upload' or 'folder_moved'.
            attributes: Extra fields (fileId, fileName, details, ...).

        Returns:
            Future of the remote delivery, or None when it is disabled.
        """
        attributes = dict(attributes or {})
        logger.info(
            'Activity %s - %s',
            action,
            attributes.get('fileName') or attributes.get('fileId') or 'N/A',
        )

        if not self.remote_enabled:
            return None

        payload = {
            **attributes,
            'action': action,
            'timestamp': timezone.now().isoformat(),
        }
        return self._executor.submit(self._send, payload)

    def close(self) -> None:
        """Wait for pending deliveries and release the HTTP client."""
        self._executor.shutdown(wait=True)
        self._http_client.close()

    def _send(self, payload: dict[str, Any]) -> None:
        """POST one record, logging instead of raising on failure."""
        try:
            response = self._http_client.post(
                f'{self.function_url}{_ENDPOINT_PATH}',
                params={'code': self.function_key},
                json=payload,
            )
        except httpx.HTTPError as error:
            logger.warning('Error sending activity log: %s', error)
            return

        if response.is_error:
            logger.warning(
                'Activity log function rejected record: %s',
                response.status_code,
            )
