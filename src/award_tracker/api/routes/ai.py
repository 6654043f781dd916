from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from award_tracker.api.deps import get_http_transport, get_inference_config, get_publisher_context
from award_tracker.config import InferenceConfig, PublisherContext
from award_tracker.errors import InvalidRequestError
from award_tracker.inference import run_request
from award_tracker.schemas import AI_REQUEST_TYPES, AIResponse, TextContent, ai_request_adapter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ai"])


def parse_ai_request(payload: Any) -> Any:
    """Validate the body into one of the known request variants, or raise a 400."""
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object.")
    kind = payload.get("type")
    if kind not in AI_REQUEST_TYPES:
        raise InvalidRequestError(f'Unknown type: "{kind if kind is not None else ""}"')
    try:
        return ai_request_adapter.validate_python(payload)
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid request: {e}") from None


@router.post("/ai")
async def ai(
    payload: Any = Body(default=None),
    config: InferenceConfig = Depends(get_inference_config),
    context: PublisherContext = Depends(get_publisher_context),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> JSONResponse:
    """
    Award discovery, requirements analysis and manuscript summaries.

    Responds with `{content: [{type: "text", text}]}` where `text` is the raw model
    output (JSON as text; not parsed here).
    """
    req = parse_ai_request(payload)
    try:
        text = await run_request(req, config, context, transport=transport)
    except Exception as e:
        logger.error('[api/ai] type="%s" error: %s', req.type, e)
        return JSONResponse({"error": str(e)}, status_code=500)
    return JSONResponse(AIResponse(content=[TextContent(text=text)]).model_dump())
