"""
Request-scoped dependencies.

Configuration is read per request, so a missing credential fails before the
handler body (and any network call) runs. Tests override `get_http_transport`
to route outbound calls to an `httpx.MockTransport`.
"""

from __future__ import annotations

from typing import Optional

import httpx

from award_tracker.config import InferenceConfig, PublisherContext, StoreConfig


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    return None


def get_inference_config() -> InferenceConfig:
    return InferenceConfig.from_env()


def get_store_config() -> StoreConfig:
    return StoreConfig.from_env()


def get_publisher_context() -> PublisherContext:
    return PublisherContext.from_env()
