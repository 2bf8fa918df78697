"""HTTP client that sends one bulk item per request."""

from __future__ import annotations

from typing import Any

import requests
import structlog

from src.models.bulk_operation import BulkOperationType

logger = structlog.get_logger(__name__)

_METHODS: dict[BulkOperationType, str] = {
    BulkOperationType.CREATE: "POST",
    BulkOperationType.UPDATE: "PATCH",
    BulkOperationType.DELETE: "DELETE",
    BulkOperationType.UPSERT: "PUT",
}


class HttpItemClient:
    """Sends items as JSON bodies to an HTTP endpoint.

    The HTTP method follows the operation type: create is POST, update is
    PATCH, delete is DELETE and upsert is PUT.
    """

    def __init__(
        self,
        url: str,
        operation_type: BulkOperationType = BulkOperationType.CREATE,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.url = url
        self.method = _METHODS[operation_type]
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if headers:
            self.session.headers.update(headers)

    def send(self, item: Any) -> dict[str, Any]:
        """Send a single item.

        Returns dict with: status_code, body. Raises requests.HTTPError on
        a 4xx/5xx response so the bulk processor records the item as failed.
        """
        response = self.session.request(
            self.method,
            self.url,
            json=item,
            timeout=self.timeout,
        )
        response.raise_for_status()

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        logger.debug(
            "bulk_item_sent",
            method=self.method,
            status_code=response.status_code,
        )
        return {"status_code": response.status_code, "body": body}

    def close(self) -> None:
        self.session.close()
