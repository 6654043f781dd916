"""
OpenAI-style chat-completions client.

Every upstream failure is raised where it happens: a non-2xx status becomes
`UpstreamStatusError` (status + body) and a 2xx without message content becomes
`EmptyCompletionError` (full raw response). Neither is ever coerced to an empty
string for a downstream JSON parse to trip over.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import InferenceConfig, PublisherContext
from .errors import EmptyCompletionError, UpstreamStatusError
from .prompts import Message, build_messages

logger = logging.getLogger(__name__)


def extract_text(data: Any) -> Optional[str]:
    """`choices[0].message.content`, or None when any link in that chain is absent."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0] if isinstance(choices[0], dict) else {}
    message = first.get("message") if isinstance(first.get("message"), dict) else {}
    content = message.get("content")
    if isinstance(content, list):
        # Some proxies return content parts instead of a plain string.
        content = "".join(str(p.get("text") or "") for p in content if isinstance(p, dict))
    if not isinstance(content, str):
        return None
    return content


class CompletionClient:
    def __init__(self, config: InferenceConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.config = config
        self.transport = transport

    def payload(self, messages: List[Message]) -> Dict[str, Any]:
        return {"model": self.config.model, "max_tokens": self.config.max_tokens, "messages": messages}

    async def complete(self, messages: List[Message]) -> str:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }
        async with httpx.AsyncClient(timeout=self.config.timeout, transport=self.transport) as http:
            response = await http.post(self.config.completions_url, json=self.payload(messages), headers=headers)
            if not response.is_success:
                try:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                except httpx.HTTPError:
                    body = "(unreadable)"
                raise UpstreamStatusError(response.status_code, body)
            try:
                data = response.json()
            except ValueError:
                # 2xx without a JSON body carries no content either.
                raise EmptyCompletionError(response.text) from None

        text = extract_text(data)
        if not text:
            raise EmptyCompletionError(data)
        logger.debug("completion ok model=%s chars=%d", self.config.model, len(text))
        return text


async def run_request(
    req: Any,
    config: InferenceConfig,
    context: PublisherContext,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Build the prompt for one gateway request and return the raw model text."""
    return await CompletionClient(config, transport=transport).complete(build_messages(req, context))
