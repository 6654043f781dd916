from __future__ import annotations

import itertools
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import unquote

import httpx
import pytest


_REPO_ROOT = Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if _SRC.exists():
    sys.path.insert(0, str(_SRC))


AIRTABLE_HOST = "api.airtable.com"
COMPLETIONS_HOST = "llm.test"
COMPLETIONS_URL = f"https://{COMPLETIONS_HOST}/v1/chat/completions"


class FakeAirtable:
    """
    In-memory Airtable base behind the REST shapes the client uses.

    Like the real service, empty strings and `False` are not echoed back in
    `fields`, and list responses are paginated with an `offset` cursor.
    """

    def __init__(self, page_size: int = 100) -> None:
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.page_size = page_size
        self.requests: List[httpx.Request] = []
        self.fail_with: Optional[httpx.Response] = None
        self._ids = itertools.count(1)

    def seed(self, table: str, fields: Dict[str, Any], record_id: Optional[str] = None) -> str:
        rid = record_id or f"rec{next(self._ids):05d}"
        self.tables.setdefault(table, {})[rid] = dict(fields)
        return rid

    def _record(self, rid: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        visible = {k: v for k, v in fields.items() if v not in ("", False, None)}
        return {"id": rid, "createdTime": "2025-01-01T00:00:00.000Z", "fields": visible}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return self.fail_with
        parts = [unquote(p) for p in request.url.path.split("/") if p]
        # /v0/{base}/{table}[/{id}]
        table = parts[2]
        rid = parts[3] if len(parts) > 3 else None
        rows = self.tables.setdefault(table, {})
        body = json.loads(request.content) if request.content else {}

        if request.method == "GET":
            ids = list(rows)
            start = int(request.url.params.get("offset") or 0)
            page = ids[start : start + self.page_size]
            out: Dict[str, Any] = {"records": [self._record(i, rows[i]) for i in page]}
            if start + self.page_size < len(ids):
                out["offset"] = str(start + self.page_size)
            return httpx.Response(200, json=out)
        if request.method == "POST":
            new_id = self.seed(table, body["fields"])
            return httpx.Response(200, json=self._record(new_id, rows[new_id]))
        if rid not in rows:
            return httpx.Response(
                404, json={"error": {"type": "MODEL_ID_NOT_FOUND", "message": "Could not find a record with that id"}}
            )
        if request.method == "PATCH":
            rows[rid].update(body["fields"])
            return httpx.Response(200, json=self._record(rid, rows[rid]))
        if request.method == "DELETE":
            del rows[rid]
            return httpx.Response(200, json={"id": rid, "deleted": True})
        return httpx.Response(405)


class FakeCompletions:
    """Scripted OpenAI-style completions endpoint; records every request payload."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.headers: List[httpx.Headers] = []
        self.respond: Callable[[Dict[str, Any]], httpx.Response] = lambda payload: httpx.Response(
            200, json={"choices": [{"message": {"role": "assistant", "content": '[{"name":"Nebula Award"}]'}}]}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.calls.append(payload)
        self.headers.append(request.headers)
        return self.respond(payload)


@pytest.fixture
def fake_airtable() -> FakeAirtable:
    return FakeAirtable()


@pytest.fixture
def fake_completions() -> FakeCompletions:
    return FakeCompletions()


@pytest.fixture
def transport(fake_airtable: FakeAirtable, fake_completions: FakeCompletions) -> httpx.MockTransport:
    def route(request: httpx.Request) -> httpx.Response:
        if request.url.host == AIRTABLE_HOST:
            return fake_airtable.handler(request)
        if request.url.host == COMPLETIONS_HOST:
            return fake_completions.handler(request)
        return httpx.Response(599, text=f"unexpected host {request.url.host}")

    return httpx.MockTransport(route)


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.setenv("AI_COMPLETIONS_URL", COMPLETIONS_URL)
    monkeypatch.setenv("AIRTABLE_API_KEY", "pat-test")
    monkeypatch.setenv("AIRTABLE_BASE_ID", "appTEST")
    for name in (
        "AI_MODEL",
        "AI_MAX_TOKENS",
        "AIRTABLE_API_URL",
        "AIRTABLE_AWARDS_TABLE",
        "AIRTABLE_REQUIREMENTS_TABLE",
        "AIRTABLE_AWARD_COLUMNS",
        "AIRTABLE_REQUIREMENT_COLUMNS",
        "HTTP_TIMEOUT_SECONDS",
        "PUBLISHER_NAME",
        "PUBLICATION_TITLE",
        "PUBLICATION_DESCRIPTION",
        "AWARDS_HTTP_LOG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client(env: None, transport: httpx.MockTransport):
    from fastapi.testclient import TestClient

    from award_tracker.api.deps import get_http_transport
    from award_tracker.api.main import create_app

    app = create_app()
    app.dependency_overrides[get_http_transport] = lambda: transport
    with TestClient(app) as c:
        yield c
