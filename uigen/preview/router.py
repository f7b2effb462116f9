# FILE: uigen/preview/router.py
"""Preview Router: generate and render previews over HTTP.

Endpoints:
- POST /preview/generate - classify, generate, normalize and render a request
- GET /preview/sessions/{session_id} - current unit/scope/outcome of a session
- POST /preview/render - normalize + render caller-supplied code
- GET /preview/scopes - scope names and their symbols
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from uigen.generation.errors import GatewayError, InputError
from uigen.generation.gateway import ModelGateway
from uigen.generation.pipeline import (
    SessionRegistry,
    get_gateway,
    get_session_registry,
    render_code,
)
from uigen.preview.scope import EXPANDED, get_scope_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/preview", tags=["preview"])


# =============================================================================
# Request Models
# =============================================================================

class GenerateRequest(BaseModel):
    """A natural-language UI request."""
    prompt: Any = None  # validated by the pipeline so errors carry its wording
    scope: Optional[str] = None  # "restricted" / "expanded"; None = category default
    session_id: Optional[str] = None


class RenderRequest(BaseModel):
    """Ad-hoc render of caller-supplied code."""
    code: str = ""
    scope: str = EXPANDED


class CapabilityOut(BaseModel):
    name: str
    kind: str
    description: str = ""


class ScopeOut(BaseModel):
    name: str
    symbols: List[CapabilityOut] = Field(default_factory=list)


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/generate")
async def generate_preview(
    request: GenerateRequest,
    sessions: SessionRegistry = Depends(get_session_registry),
    gateway: ModelGateway = Depends(get_gateway),
) -> Dict[str, Any]:
    session = sessions.get_or_create(request.session_id, gateway)
    if session.busy:
        raise HTTPException(status_code=409, detail="A generation is already in progress for this session")

    try:
        outcome = await session.submit(request.prompt, scope_override=request.scope)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GatewayError as e:
        raise HTTPException(status_code=502, detail={"kind": e.kind.value, "message": e.user_message})

    return {"session_id": session.session_id, **outcome.to_dict()}


@router.get("/sessions/{session_id}")
def get_session_state(
    session_id: str,
    sessions: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session.snapshot()


@router.post("/render")
def render_preview(request: RenderRequest) -> Dict[str, Any]:
    try:
        return render_code(request.code, request.scope)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/scopes", response_model=List[ScopeOut])
def list_scopes():
    registry = get_scope_registry()
    scopes = []
    for name in registry.names():
        scope = registry.get(name)
        scopes.append(ScopeOut(
            name=scope.name,
            symbols=[
                CapabilityOut(name=cap.name, kind=cap.kind.value, description=cap.description)
                for cap in scope.symbols.values()
            ],
        ))
    return scopes
