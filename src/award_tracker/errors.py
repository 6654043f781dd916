from __future__ import annotations

import json
from typing import Any


class ServiceError(Exception):
    """Base error; `status_code` is the HTTP status reported to the caller."""

    status_code: int = 500


class ConfigurationError(ServiceError):
    """A required environment value is absent. Raised before any network call."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is not set in Vercel environment variables.")
        self.name = name


class InvalidRequestError(ServiceError):
    status_code = 400


class UpstreamStatusError(ServiceError):
    """The completion endpoint answered with a non-2xx status."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Inference API returned {status}: {body}")
        self.status = status
        self.body = body


class EmptyCompletionError(ServiceError):
    """The completion endpoint answered 2xx but carried no message content."""

    def __init__(self, raw: Any) -> None:
        super().__init__(
            f"Inference API returned empty content. Full response: {json.dumps(raw, ensure_ascii=False, default=str)}"
        )
        self.raw = raw


class StoreError(ServiceError):
    """An Airtable call failed with a non-2xx status."""

    def __init__(self, method: str, table: str, status: int, message: str) -> None:
        super().__init__(f"Airtable {method} {table} returned {status}: {message}")
        self.method = method
        self.table = table
        self.status = status
