from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

import httpx
from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from award_tracker.airtable import AirtableClient
from award_tracker.api.deps import get_http_transport, get_store_config
from award_tracker.config import StoreConfig
from award_tracker.errors import InvalidRequestError
from award_tracker.records import RecordStore
from award_tracker.schemas import (
    AwardCreate,
    AwardUpdate,
    DeleteRequest,
    RequirementCreate,
    RequirementUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["data"])

COLLECTIONS = ("awards", "requirements")

Operation = Callable[[RecordStore], Awaitable[Any]]

_CREATE: Dict[str, Tuple[Type[BaseModel], Callable[..., Awaitable[Any]]]] = {
    "awards": (AwardCreate, RecordStore.create_award),
    "requirements": (RequirementCreate, RecordStore.create_requirement),
}
_UPDATE: Dict[str, Tuple[Type[BaseModel], Callable[..., Awaitable[Any]]]] = {
    "awards": (AwardUpdate, RecordStore.update_award),
    "requirements": (RequirementUpdate, RecordStore.update_requirement),
}
_DELETE: Dict[str, Callable[..., Awaitable[Any]]] = {
    "awards": RecordStore.delete_award,
    "requirements": RecordStore.delete_requirement,
}


def _collection(kind: Optional[str]) -> str:
    if kind not in COLLECTIONS:
        raise InvalidRequestError(f'Unknown type: "{kind or ""}"')
    return kind


def _parse(model: Type[BaseModel], payload: Any) -> Any:
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object.")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid request: {e}") from None


def _dump(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(by_alias=True)
    if isinstance(result, list):
        return [_dump(r) for r in result]
    return result


async def _run(
    kind: str,
    method: str,
    config: StoreConfig,
    transport: Optional[httpx.AsyncBaseTransport],
    op: Operation,
    status_code: int = 200,
) -> JSONResponse:
    try:
        async with AirtableClient(config, transport=transport) as client:
            result = await op(RecordStore(client, config))
    except Exception as e:
        logger.error('[api/data] type="%s" method="%s" error: %s', kind, method, e)
        return JSONResponse({"error": str(e)}, status_code=500)
    return JSONResponse(_dump(result), status_code=status_code)


@router.get("/data")
async def list_records(
    type: Optional[str] = Query(default=None),
    award_id: Optional[str] = Query(default=None, alias="awardId"),
    include_requirements: bool = Query(default=False, alias="includeRequirements"),
    config: StoreConfig = Depends(get_store_config),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> JSONResponse:
    kind = _collection(type)
    if kind == "awards":
        op: Operation = lambda store: store.list_awards(include_requirements=include_requirements)
    else:
        op = lambda store: store.list_requirements(award_id=award_id)
    return await _run(kind, "GET", config, transport, op)


@router.post("/data")
async def create_record(
    type: Optional[str] = Query(default=None),
    payload: Any = Body(default=None),
    config: StoreConfig = Depends(get_store_config),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> JSONResponse:
    kind = _collection(type)
    model, create = _CREATE[kind]
    body = _parse(model, payload)
    return await _run(kind, "POST", config, transport, lambda store: create(store, body), status_code=201)


@router.patch("/data")
async def update_record(
    type: Optional[str] = Query(default=None),
    payload: Any = Body(default=None),
    config: StoreConfig = Depends(get_store_config),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> JSONResponse:
    kind = _collection(type)
    model, update = _UPDATE[kind]
    body = _parse(model, payload)
    return await _run(kind, "PATCH", config, transport, lambda store: update(store, body))


@router.delete("/data")
async def delete_record(
    type: Optional[str] = Query(default=None),
    payload: Any = Body(default=None),
    config: StoreConfig = Depends(get_store_config),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> JSONResponse:
    kind = _collection(type)
    body = _parse(DeleteRequest, payload)
    delete = _DELETE[kind]
    return await _run(kind, "DELETE", config, transport, lambda store: delete(store, body.id))
