import asyncio
import json

import httpx
import pytest

from award_tracker.airtable import AirtableClient
from award_tracker.config import StoreConfig
from award_tracker.errors import StoreError


CONFIG = StoreConfig(api_key="pat-test", base_id="appTEST")


def _run(handler, fn):
    async def go():
        async with AirtableClient(CONFIG, transport=httpx.MockTransport(handler)) as client:
            return await fn(client)

    return asyncio.run(go())


def test_list_follows_offset_cursor(fake_airtable):
    fake_airtable.page_size = 2
    for i in range(5):
        fake_airtable.seed("Awards", {"name": f"Award {i}"})

    records = _run(fake_airtable.handler, lambda c: c.list_records("Awards"))

    assert [r["fields"]["name"] for r in records] == [f"Award {i}" for i in range(5)]
    assert len(fake_airtable.requests) == 3
    assert "offset" not in fake_airtable.requests[0].url.params
    assert fake_airtable.requests[1].url.params["offset"] == "2"


def test_requests_are_authenticated_and_scoped_to_base(fake_airtable):
    _run(fake_airtable.handler, lambda c: c.create_record("Awards", {"name": "Hugo Award"}))
    request = fake_airtable.requests[0]
    assert request.headers["authorization"] == "Bearer pat-test"
    assert request.url.path == "/v0/appTEST/Awards"
    assert json.loads(request.content) == {"fields": {"name": "Hugo Award"}}


def test_table_names_are_url_quoted(fake_airtable):
    _run(fake_airtable.handler, lambda c: c.list_records("Award Entries"))
    assert fake_airtable.requests[0].url.raw_path.startswith(b"/v0/appTEST/Award%20Entries")


def test_update_sends_patch_with_only_given_fields(fake_airtable):
    rid = fake_airtable.seed("Awards", {"name": "Hugo Award", "status": "researching"})
    record = _run(fake_airtable.handler, lambda c: c.update_record("Awards", rid, {"status": "submitted"}))
    assert fake_airtable.requests[0].method == "PATCH"
    assert record["fields"] == {"name": "Hugo Award", "status": "submitted"}


def test_error_status_raises_store_error_with_airtable_message(fake_airtable):
    with pytest.raises(StoreError) as exc:
        _run(fake_airtable.handler, lambda c: c.delete_record("Awards", "recMissing"))
    assert exc.value.status == 404
    assert "Could not find a record with that id" in str(exc.value)
    assert "DELETE Awards" in str(exc.value)


def test_error_without_json_body_uses_text():
    handler = lambda request: httpx.Response(503, text="upstream down")
    with pytest.raises(StoreError) as exc:
        _run(handler, lambda c: c.list_records("Awards"))
    assert "503" in str(exc.value)
    assert "upstream down" in str(exc.value)
