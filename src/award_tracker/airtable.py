"""
Minimal async Airtable REST client.

Constructed per request from an explicit `StoreConfig` (no module-level client),
used as an async context manager so the underlying `httpx.AsyncClient` is closed
when the request ends.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import StoreConfig
from .errors import StoreError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def _error_message(response: httpx.Response) -> str:
    """Airtable errors look like `{"error": {"type": ..., "message": ...}}`; fall back to raw text."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or "(empty body)"
    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict):
        message = err.get("message") or err.get("type")
        if message:
            return str(message)
    if isinstance(err, str) and err:
        return err
    return response.text or "(empty body)"


class AirtableClient:
    def __init__(self, config: StoreConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=f"{config.api_url}/{config.base_id}",
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            timeout=config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "AirtableClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def _path(table: str, record_id: Optional[str] = None) -> str:
        path = "/" + quote(table, safe="")
        if record_id:
            path += "/" + quote(record_id, safe="")
        return path

    async def _request(self, method: str, table: str, record_id: Optional[str] = None, **kwargs: Any) -> Any:
        response = await self._http.request(method, self._path(table, record_id), **kwargs)
        if response.is_error:
            raise StoreError(method, table, response.status_code, _error_message(response))
        return response.json()

    async def list_records(self, table: str) -> List[Record]:
        """All records of `table` in store order, following the `offset` cursor."""
        records: List[Record] = []
        params: Dict[str, str] = {}
        while True:
            page = await self._request("GET", table, params=params)
            records.extend(page.get("records") or [])
            offset = page.get("offset")
            if not offset:
                break
            params = {"offset": str(offset)}
        logger.debug("listed %d records from %s", len(records), table)
        return records

    async def create_record(self, table: str, fields: Dict[str, Any]) -> Record:
        return await self._request("POST", table, json={"fields": fields})

    async def update_record(self, table: str, record_id: str, fields: Dict[str, Any]) -> Record:
        # PATCH leaves columns not named in `fields` untouched (PUT would clear them).
        return await self._request("PATCH", table, record_id, json={"fields": fields})

    async def delete_record(self, table: str, record_id: str) -> Record:
        return await self._request("DELETE", table, record_id)
