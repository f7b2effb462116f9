# FILE: uigen/generation/pipeline.py
"""
Preview pipeline: request → classify → prompt → gateway → normalize → render.

PreviewSession owns the "current" result for one preview surface. Every
submit() takes the next sequence number; when the gateway resolves, the
response is dropped (SubmitOutcome.superseded=True, no state change) if a
newer submission or load_unit() has happened in the meantime. Only the
latest request can ever become current.

The gateway call and the evaluation both run off the event loop; a
submission superseded while its unit was rendering is dropped too.

Sessions live in an in-process SessionRegistry keyed by session id, capped
at UIGEN_MAX_SESSIONS.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from config.generation_profiles import MAX_SESSIONS
from uigen.preview.renderer import RenderOutcome, SandboxRenderer
from uigen.preview.scope import EXPANDED, ScopeDefinition, ScopeRegistry, get_scope_registry

from .classifier import build_request
from .errors import GatewayError, InputError
from .gateway import GroqGateway, ModelGateway
from .normalizer import normalize_output
from .prompts import build_prompts
from .schemas import Category, GenerationResult, Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitOutcome:
    """What one submission ended up doing."""
    sequence: int
    category: Category
    scope_name: str
    superseded: bool = False
    result: Optional[GenerationResult] = None
    render: Optional[RenderOutcome] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "sequence": self.sequence,
            "category": self.category.value,
            "scope": self.scope_name,
            "superseded": self.superseded,
        }
        if self.result is not None:
            data["unit"] = self.result.unit
            data["entry"] = self.result.entry
            data["model"] = self.result.model
            data["stages_applied"] = list(self.result.stages_applied)
        if self.render is not None:
            data["render"] = self.render.to_dict()
        return data


class PreviewSession:
    def __init__(
        self,
        gateway: ModelGateway,
        session_id: Optional[str] = None,
        scopes: Optional[ScopeRegistry] = None,
        renderer: Optional[SandboxRenderer] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.gateway = gateway
        self.scopes = scopes or get_scope_registry()
        self.renderer = renderer or SandboxRenderer()
        self.current_request: Optional[Request] = None
        self.current_result: Optional[GenerationResult] = None
        self.current_scope: Optional[ScopeDefinition] = None
        self._sequence = 0
        self._in_flight = 0

    # -------------------------------------------------------------------------
    # state
    # -------------------------------------------------------------------------

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def busy(self) -> bool:
        return self._in_flight > 0

    @property
    def current_unit(self) -> Optional[str]:
        return self.current_result.unit if self.current_result else None

    @property
    def current_outcome(self) -> Optional[RenderOutcome]:
        return self.renderer.outcome

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def _is_stale(self, sequence: int) -> bool:
        return sequence != self._sequence

    def snapshot(self) -> Dict[str, Any]:
        outcome = self.current_outcome
        return {
            "session_id": self.session_id,
            "sequence": self._sequence,
            "busy": self.busy,
            "request": self.current_request.text if self.current_request else None,
            "category": self.current_request.category.value if self.current_request else None,
            "scope": self.current_scope.name if self.current_scope else None,
            "unit": self.current_unit,
            "entry": self.current_result.entry if self.current_result else None,
            "render_state": self.renderer.state.value,
            "render": outcome.to_dict() if outcome else None,
        }

    # -------------------------------------------------------------------------
    # operations
    # -------------------------------------------------------------------------

    async def submit(self, text, scope_override: Optional[str] = None) -> SubmitOutcome:
        """Generate, normalize and render one request.

        Raises InputError (before any external call) and GatewayError (for
        the latest request only; failures of superseded requests are dropped).
        """
        request = build_request(text)
        scope = self.scopes.select(request.category, scope_override)
        bundle = build_prompts(request, scope)

        sequence = self._next_sequence()
        request = Request(text=request.text, category=request.category, sequence=sequence)
        logger.info(
            "[pipeline] session=%s seq=%d category=%s scope=%s",
            self.session_id, sequence, request.category.value, scope.name,
        )

        self._in_flight += 1
        try:
            try:
                response = await self.gateway.generate(bundle.system_prompt, bundle.user_prompt, bundle.params)
            except GatewayError:
                if self._is_stale(sequence):
                    logger.info("[pipeline] dropping gateway failure of superseded seq=%d", sequence)
                    return SubmitOutcome(sequence, request.category, scope.name, superseded=True)
                raise

            if self._is_stale(sequence):
                return self._discard(sequence, request, scope)

            unit = normalize_output(response.text)
            outcome = await self.renderer.evaluate_async(unit.code, scope)
            if self._is_stale(sequence):
                return self._discard(sequence, request, scope)
        finally:
            self._in_flight -= 1

        result = GenerationResult(
            raw_text=response.text,
            unit=unit.code,
            entry=unit.entry,
            sequence=sequence,
            model=response.model,
            stages_applied=unit.stages_applied,
        )
        self.current_request = request
        self.current_result = result
        self.current_scope = scope
        self.renderer.commit(result.unit, scope, outcome)
        return SubmitOutcome(sequence, request.category, scope.name, result=result, render=outcome)

    def _discard(self, sequence: int, request: Request, scope: ScopeDefinition) -> SubmitOutcome:
        logger.info(
            "[pipeline] discarding stale response seq=%d (latest=%d)",
            sequence, self._sequence,
        )
        return SubmitOutcome(sequence, request.category, scope.name, superseded=True)

    def load_unit(self, unit: str, category, scope_override: Optional[str] = None,
                  text: str = "") -> SubmitOutcome:
        """Make a stored unit current (e.g. a saved project) and render it.

        Invalidates any in-flight submission.
        """
        try:
            category = Category(category)
        except ValueError:
            raise InputError(f"Unknown category: {category!r}")
        scope = self.scopes.select(category, scope_override)
        normalized = normalize_output(unit)
        sequence = self._next_sequence()
        result = GenerationResult(
            raw_text=unit,
            unit=normalized.code,
            entry=normalized.entry,
            sequence=sequence,
            stages_applied=normalized.stages_applied,
        )
        self.current_request = Request(text=text, category=category, sequence=sequence)
        self.current_result = result
        self.current_scope = scope
        outcome = self.renderer.render(result.unit, scope)
        logger.info("[pipeline] session=%s loaded unit seq=%d scope=%s", self.session_id, sequence, scope.name)
        return SubmitOutcome(sequence, category, scope.name, result=result, render=outcome)


def render_code(code: str, scope_name: str = EXPANDED,
                scopes: Optional[ScopeRegistry] = None) -> Dict[str, Any]:
    """Normalize + render arbitrary code without touching any session."""
    registry = scopes or get_scope_registry()
    scope = registry.get(scope_name.strip().lower())
    unit = normalize_output(code)
    outcome = SandboxRenderer().render(unit.code, scope)
    return {
        "unit": unit.code,
        "entry": unit.entry,
        "stages_applied": list(unit.stages_applied),
        "render": outcome.to_dict(),
    }


# =============================================================================
# SESSION REGISTRY
# =============================================================================

class SessionRegistry:
    """
    In-memory sessions, most recently used last. Past max_sessions the least
    recently used idle sessions are dropped; busy ones are never evicted.
    """

    def __init__(self, max_sessions: int = MAX_SESSIONS):
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, PreviewSession]" = OrderedDict()

    def get(self, session_id: str) -> Optional[PreviewSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def get_or_create(self, session_id: Optional[str], gateway: ModelGateway) -> PreviewSession:
        if session_id and session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return self._sessions[session_id]
        session = PreviewSession(gateway=gateway, session_id=session_id)
        self._sessions[session.session_id] = session
        logger.debug("[pipeline] created session %s", session.session_id)
        self._evict()
        return session

    def _evict(self) -> None:
        excess = len(self._sessions) - self.max_sessions
        if excess <= 0:
            return
        for session_id in list(self._sessions):
            if excess <= 0:
                break
            if self._sessions[session_id].busy:
                continue
            del self._sessions[session_id]
            excess -= 1
            logger.info("[pipeline] evicted idle session %s", session_id)

    def ids(self) -> List[str]:
        return list(self._sessions.keys())

    def clear(self) -> None:
        self._sessions.clear()


_session_registry = SessionRegistry()
_gateway: Optional[ModelGateway] = None


def get_session_registry() -> SessionRegistry:
    return _session_registry


def get_gateway() -> ModelGateway:
    global _gateway
    if _gateway is None:
        _gateway = GroqGateway()
    return _gateway


__all__ = [
    "SubmitOutcome",
    "PreviewSession",
    "SessionRegistry",
    "render_code",
    "get_session_registry",
    "get_gateway",
]
