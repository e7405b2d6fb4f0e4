"""
Catalog Routes - query state and market analysis endpoints

This module contains:
- /api/sessions/* endpoints for the per-item query state
- /api/sessions/{id}/analyze for market snapshots
- /api/cache/* for snapshot cache inspection
"""

import json
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from agents.base import TermKind
from pipeline.models import CandidateTerm
from pipeline.session import ItemAttributes
from services.app_state import get_app_state_from_request
from services.exceptions import InvalidRequestError, ResolutionFailed

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])

_KINDS = {k.value: k for k in TermKind}


# ============================================================
# Request helpers
# ============================================================

async def _read_body(request: Request, required: bool = True) -> Dict[str, Any]:
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        if await request.body():
            raise InvalidRequestError("Request body is not valid JSON")
        if required:
            raise InvalidRequestError("Request body is required")
        return {}
    if not isinstance(data, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    return data


def _term_text(data: Dict[str, Any]) -> str:
    text = str(data.get("term") or data.get("text") or "").strip()
    if not text:
        raise InvalidRequestError("Missing term", field="term")
    return text


def _candidates(data: Dict[str, Any]) -> List[CandidateTerm]:
    raw = data.get("candidates") or []
    if not isinstance(raw, list):
        raise InvalidRequestError("candidates must be a list", field="candidates")
    candidates = []
    for entry in raw:
        if isinstance(entry, str):
            candidates.append(CandidateTerm(text=entry))
        elif isinstance(entry, dict):
            candidates.append(CandidateTerm.from_dict(entry))
        else:
            raise InvalidRequestError("candidate must be a string or object", field="candidates")
    return candidates


def _query_response(session, **extra) -> JSONResponse:
    payload = {
        "sessionId": session.session_id,
        "query": session.state.get_current_query(),
        "state": session.state.to_dict(),
    }
    payload.update(extra)
    return JSONResponse(content=payload)


# ============================================================
# SESSION ENDPOINTS
# ============================================================

@router.post("/api/sessions")
async def create_session(request: Request):
    """Open a new cataloging session, optionally seeded from item attributes."""
    app_state = get_app_state_from_request(request)
    app_state.increment_stat("total_requests")
    data = await _read_body(request, required=False)

    full_control = data.get("fullControl")
    session = app_state.open_session(full_control=None if full_control is None else bool(full_control))

    item_data = data.get("item")
    if item_data:
        if not isinstance(item_data, dict):
            raise InvalidRequestError("item must be an object", field="item")
        item = ItemAttributes.from_dict(item_data)
        if not item.is_empty:
            await app_state.orchestrator.prepare(session, item, use_oracle=data.get("useOracle", True))

    return JSONResponse(status_code=201, content=session.to_dict())


@router.get("/api/sessions/{session_id}")
async def get_session(request: Request, session_id: str):
    app_state = get_app_state_from_request(request)
    return JSONResponse(content=app_state.get_session(session_id).to_dict())


@router.delete("/api/sessions/{session_id}")
async def delete_session(request: Request, session_id: str):
    app_state = get_app_state_from_request(request)
    app_state.close_session(session_id)
    return JSONResponse(content={"sessionId": session_id, "closed": True})


@router.post("/api/sessions/{session_id}/initialize")
async def initialize_session(request: Request, session_id: str):
    """
    Seed the query state.

    Body: {"query": "...", "candidates": [...], "source": "user"}
    or {"item": {...}} to run the classifier (and oracle) first.
    """
    app_state = get_app_state_from_request(request)
    app_state.increment_stat("total_requests")
    session = app_state.get_session(session_id)
    data = await _read_body(request)

    if data.get("item"):
        item_data = data["item"]
        if not isinstance(item_data, dict):
            raise InvalidRequestError("item must be an object", field="item")
        await app_state.orchestrator.prepare(
            session, ItemAttributes.from_dict(item_data), use_oracle=data.get("useOracle", True)
        )
        return _query_response(session)

    if "query" not in data and "candidates" not in data:
        raise InvalidRequestError("Provide query, candidates or item", field="query")
    session.state.initialize(
        str(data.get("query") or ""),
        _candidates(data),
        str(data.get("source") or "user"),
    )
    return _query_response(session)


@router.post("/api/sessions/{session_id}/select")
async def select_term(request: Request, session_id: str):
    app_state = get_app_state_from_request(request)
    session = app_state.get_session(session_id)
    data = await _read_body(request)

    kind = data.get("kind")
    if kind is not None and kind not in _KINDS:
        raise InvalidRequestError(f"Unknown term kind: {kind}", field="kind")
    selected = session.state.select_term(
        _term_text(data),
        source=str(data.get("source") or "user"),
        kind=_KINDS.get(kind),
    )
    return _query_response(session, selected=selected)


@router.post("/api/sessions/{session_id}/deselect")
async def deselect_term(request: Request, session_id: str):
    """A refused core-term deselection is a normal 200 with deselected=false."""
    app_state = get_app_state_from_request(request)
    session = app_state.get_session(session_id)
    data = await _read_body(request)

    deselected = session.state.deselect_term(
        _term_text(data),
        source=str(data.get("source") or "user"),
    )
    return _query_response(session, deselected=deselected)


@router.get("/api/sessions/{session_id}/query")
async def get_query(request: Request, session_id: str):
    app_state = get_app_state_from_request(request)
    session = app_state.get_session(session_id)
    return _query_response(session)


@router.post("/api/sessions/{session_id}/full-control")
async def set_full_control(request: Request, session_id: str):
    app_state = get_app_state_from_request(request)
    session = app_state.get_session(session_id)
    data = await _read_body(request)

    if not isinstance(data.get("enabled"), bool):
        raise InvalidRequestError("enabled must be true or false", field="enabled")
    session.state.set_full_control(data["enabled"], source=str(data.get("source") or "user"))
    return _query_response(session)


@router.post("/api/sessions/{session_id}/reset")
async def reset_session(request: Request, session_id: str):
    app_state = get_app_state_from_request(request)
    session = app_state.get_session(session_id)
    session.state.reset(source="user")
    return _query_response(session)


# ============================================================
# ANALYSIS
# ============================================================

@router.post("/api/sessions/{session_id}/analyze")
async def analyze(request: Request, session_id: str):
    """
    Market snapshot for the session's current query.

    Body (optional): {"item": {...}, "valuation": 12000}
    A result superseded by a newer request returns {"stale": true}.
    """
    app_state = get_app_state_from_request(request)
    app_state.increment_stat("total_requests")
    session = app_state.get_session(session_id)
    data = await _read_body(request, required=False)

    item = None
    if data.get("item"):
        if not isinstance(data["item"], dict):
            raise InvalidRequestError("item must be an object", field="item")
        item = ItemAttributes.from_dict(data["item"])

    valuation = data.get("valuation")
    if valuation is not None:
        try:
            valuation = float(valuation)
        except (TypeError, ValueError):
            raise InvalidRequestError("valuation must be a number", field="valuation")

    if item is None and session.item is None and not session.state.get_current_query():
        raise InvalidRequestError("Session has no query; initialize it or send an item", field="item")

    app_state.increment_stat("analyses")
    try:
        outcome = await app_state.orchestrator.analyze(session, item=item, valuation=valuation)
    except ResolutionFailed:
        app_state.increment_stat("resolution_failures")
        raise

    if outcome.stale:
        app_state.increment_stat("stale_results")
    return JSONResponse(content=outcome.to_dict())


# ============================================================
# CACHE
# ============================================================

@router.get("/api/cache/stats")
async def cache_stats(request: Request):
    app_state = get_app_state_from_request(request)
    cache = app_state.orchestrator.cache
    return JSONResponse(content={
        "cache": cache.get_stats(),
        "entries": cache.get_entries(),
        "orchestrator": app_state.orchestrator.get_stats(),
    })


@router.post("/api/cache/clear")
async def cache_clear(request: Request):
    app_state = get_app_state_from_request(request)
    cleared = app_state.orchestrator.cache.clear()
    logger.info(f"[CACHE] Cleared {cleared} snapshots")
    return JSONResponse(content={"cleared": cleared})
