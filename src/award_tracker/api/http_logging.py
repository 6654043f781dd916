from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from award_tracker.config import http_log_settings

logger = logging.getLogger("api.http")


_SENSITIVE_KEYS = {
    "authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "api_key",
    "apikey",
    "token",
    "secret",
    "password",
    "anthropic_api_key",
    "airtable_api_key",
}

# Document payloads are megabytes of base64; log their size, not their content.
_BULKY_KEYS = {"manuscriptbase64"}


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        out: Dict[str, Any] = {}
        for k, v in value.items():
            key = str(k).lower()
            if key in _SENSITIVE_KEYS:
                out[k] = "***"
            elif key in _BULKY_KEYS and isinstance(v, str):
                out[k] = f"<{len(v)} chars>"
            else:
                out[k] = _redact(v)
        return out
    if isinstance(value, list):
        return [_redact(v) for v in value]
    return value


def _header(headers: Iterable[Tuple[bytes, bytes]], name: bytes) -> str:
    for k, v in headers:
        if k.lower() == name:
            return v.decode("latin-1", errors="replace")
    return ""


def _decode_headers(headers: Iterable[Tuple[bytes, bytes]]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for k, v in headers:
        ks = k.decode("latin-1", errors="replace").lower()
        out[ks] = "***" if ks in _SENSITIVE_KEYS else v.decode("latin-1", errors="replace")
    return out


def _is_json(content_type: str) -> bool:
    return "application/json" in (content_type or "").lower()


def _render_body(content_type: str, body: bytes, limit: int) -> Tuple[Any, bool]:
    """Redact first, then cap the rendered body at `limit` characters."""
    ct = (content_type or "").lower()
    if not body or limit <= 0:
        return "", False
    if "application/json" in ct:
        try:
            parsed = _redact(json.loads(body.decode("utf-8", errors="replace")))
        except ValueError:
            return f"<invalid json, {len(body)} bytes>", False
        text = json.dumps(parsed, ensure_ascii=False, separators=(",", ":"), default=str)
        if len(text) <= limit:
            return parsed, False
        return text[:limit], True
    if ct.startswith("text/"):
        text = body.decode("utf-8", errors="replace")
        return text[:limit], len(text) > limit
    return "<binary>", False


class _Capture:
    """Collects a body stream. JSON bodies are kept whole so they can be redacted before capping."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.keep_all = False
        self.buf = bytearray()

    def feed(self, chunk: bytes) -> None:
        if not chunk or self.limit <= 0:
            return
        if self.keep_all:
            self.buf.extend(chunk)
            return
        remaining = self.limit + 1 - len(self.buf)
        if remaining > 0:
            self.buf.extend(chunk[:remaining])


class HttpLoggingMiddleware:
    """One JSON line per request: method, path, status, duration, redacted bodies."""

    def __init__(self, app: ASGIApp, *, log_headers: bool, max_body_bytes: int) -> None:
        self.app = app
        self.log_headers = log_headers
        self.max_body_bytes = max(0, max_body_bytes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        started_at = time.perf_counter()
        req_headers: List[Tuple[bytes, bytes]] = list(scope.get("headers") or [])
        request_id = _header(req_headers, b"x-request-id") or uuid.uuid4().hex[:12]
        req_body = _Capture(self.max_body_bytes)
        res_body = _Capture(self.max_body_bytes)
        req_body.keep_all = _is_json(_header(req_headers, b"content-type"))
        res_headers: List[Tuple[bytes, bytes]] = []
        res_status: Optional[int] = None

        async def receive_wrapped() -> Message:
            message = await receive()
            if message.get("type") == "http.request":
                req_body.feed(message.get("body") or b"")
            return message

        async def send_wrapped(message: Message) -> None:
            nonlocal res_status, res_headers
            if message.get("type") == "http.response.start":
                res_status = int(message.get("status") or 0)
                res_headers = list(message.get("headers") or [])
                res_body.keep_all = _is_json(_header(res_headers, b"content-type"))
            elif message.get("type") == "http.response.body":
                res_body.feed(message.get("body") or b"")
            await send(message)

        err: Optional[BaseException] = None
        try:
            await self.app(scope, receive_wrapped, send_wrapped)
        except BaseException as e:  # noqa: BLE001 - log then re-raise
            err = e
            raise
        finally:
            req_rendered, req_truncated = _render_body(
                _header(req_headers, b"content-type"), bytes(req_body.buf), self.max_body_bytes
            )
            res_rendered, res_truncated = _render_body(
                _header(res_headers, b"content-type"), bytes(res_body.buf), self.max_body_bytes
            )
            record: Dict[str, Any] = {
                "id": request_id,
                "method": str(scope.get("method") or "").upper(),
                "path": str(scope.get("path") or ""),
                "query": (scope.get("query_string") or b"").decode("latin-1", errors="ignore"),
                "status": res_status,
                "dur_ms": int((time.perf_counter() - started_at) * 1000),
                "request": {
                    "headers": _decode_headers(req_headers) if self.log_headers else {},
                    "body": req_rendered,
                    "body_truncated": req_truncated,
                },
                "response": {
                    "headers": _decode_headers(res_headers) if self.log_headers else {},
                    "body": res_rendered,
                    "body_truncated": res_truncated,
                },
            }
            if err is not None:
                record["error"] = {"type": type(err).__name__, "message": str(err)}
            logger.info(json.dumps(record, ensure_ascii=False, separators=(",", ":"), default=str))


def install_http_logging(app: Any) -> bool:
    """Add the middleware when `AWARDS_HTTP_LOG` is enabled. Returns whether it was installed."""
    settings = http_log_settings()
    if settings is None:
        return False
    app.add_middleware(
        HttpLoggingMiddleware,
        log_headers=bool(settings["log_headers"]),
        max_body_bytes=int(settings["max_body_bytes"]),
    )
    return True
