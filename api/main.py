import asyncio
import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import BaseModel

from config.settings import DEFAULT_FUZZY, DEFAULT_WILDCARD, LOG_LEVEL
from engine.search_service import build_default_orchestrator
from metadata.errors import MalformedUpstreamResponse, NotRegistered, UpstreamError

app = FastAPI(title="Tiersearch API")

# Query parameters owned by the endpoint; everything else is a serialized filter.
_RESERVED_SEARCH_PARAMS = {"category", "type", "page", "fuzzy", "wildcard", "service"}


class SearchResponse(BaseModel):
    results: list[dict[str, Any]]
    page: int
    total_pages: int
    total_count: int
    is_server_sorted: bool | None = None


def _setup_logging(level=LOG_LEVEL):
    root = logging.getLogger("")
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    for handler in root.handlers:
        if getattr(handler, "_tiersearch", False):
            return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    handler._tiersearch = True
    root.addHandler(handler)


def _filter_params(request: Request) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for key in request.query_params.keys():
        if key in _RESERVED_SEARCH_PARAMS or key in params:
            continue
        values = [value for value in request.query_params.getlist(key) if value != ""]
        if not values:
            continue
        params[key] = values if len(values) > 1 else values[0]
    return params


def _check_category(service, media_type: str, category: str | None):
    try:
        definition = service.registry.get(media_type)
    except NotRegistered as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if category and definition.category != category:
        raise HTTPException(
            status_code=400,
            detail=f'type "{media_type}" does not belong to category "{category}"',
        )
    return definition


@app.on_event("startup")
async def startup():
    _setup_logging()
    app.state.search_service = build_default_orchestrator()
    logging.info("Search service ready: %s", ", ".join(app.state.search_service.registry.all_types()))


@app.on_event("shutdown")
async def shutdown():
    service = getattr(app.state, "search_service", None)
    if service is not None:
        service.item_cache.flush()


@app.get("/api/search", response_model=SearchResponse, response_model_exclude_none=True)
async def api_search(
    request: Request,
    type: str | None = Query(None),
    category: str | None = Query(None),
    page: int = Query(1, ge=1),
    fuzzy: bool = Query(DEFAULT_FUZZY),
    wildcard: bool = Query(DEFAULT_WILDCARD),
    service: str | None = Query(None),
):
    if not type:
        raise HTTPException(status_code=400, detail="type is required")
    search_service = app.state.search_service
    _check_category(search_service, type, category)
    try:
        result = await asyncio.to_thread(
            search_service.search_params,
            type,
            _filter_params(request),
            page=page,
            service_id=service,
            fuzzy=fuzzy,
            wildcard=wildcard,
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (UpstreamError, MalformedUpstreamResponse) as exc:
        logging.warning("Search failed type=%s service=%s error=%s", type, service, exc)
        raise HTTPException(status_code=502, detail="Upstream service unavailable") from exc
    return SearchResponse(**result.to_dict())


@app.get("/api/details")
async def api_details(
    id: str | None = Query(None),
    type: str | None = Query(None),
    category: str | None = Query(None),
    service: str | None = Query(None),
):
    if not id or not type:
        raise HTTPException(status_code=400, detail="id and type are required")
    search_service = app.state.search_service
    _check_category(search_service, type, category)
    try:
        return await search_service.aget_details(id, type, service_id=service)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
