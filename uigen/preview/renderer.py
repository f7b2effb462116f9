# FILE: uigen/preview/renderer.py
"""
Sandbox renderer: evaluates a normalized unit against a capability scope.

FLOW:
1. compile_unit()   JSX → ES5 via the embedded Babel (dukpy.jsx_compile)
2. build_program()  wrap the compiled unit in a function whose parameters are
                    exactly the scope symbols + `render`, shadow the
                    interpreter's own globals and scrub them from the global
                    object
3. RenderWorker     run runtime + program in a separate process under a
                    wall-clock bound; __preview.finish() returns
                    {output, renders, passes, logs}

The unit must call render() exactly once. Any failure (syntax, unresolved
symbol, runtime throw, wrong render count, timeout) becomes a RenderOutcome
with success=False. Nothing propagates to the caller.

The previous outcome stays visible while a new evaluation is running, and a
repeat render with the same unit and scope returns the cached outcome.
"""

from __future__ import annotations

import asyncio
import json
import logging
import multiprocessing
import re
import threading
import time
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import dukpy

from config.generation_profiles import MAX_RENDER_PASSES, RENDER_TIMEOUT_SECONDS
from uigen.generation.errors import RenderError

from .scope import ScopeDefinition

logger = logging.getLogger(__name__)

RUNTIME_PATH = Path(__file__).parent / "runtime" / "preview_runtime.js"

RENDER_HELPER = "render"

# Properties the interpreter puts on the global object. Removed before the unit runs.
INTERPRETER_GLOBALS: Tuple[str, ...] = (
    "__previewRuntime",
    "dukpy",
    "call_python",
    "require",
    "module",
    "exports",
    "Duktape",
    "print",
    "alert",
    "process",
)

# Names that must not resolve inside a unit: wrapper locals plus the globals above.
SHADOWED_GLOBALS: Tuple[str, ...] = ("__preview", "__previewArgs", "__previewGlobal") + INTERPRETER_GLOBALS

_REFERENCE_ERROR_RE = re.compile(r"ReferenceError: identifier '([\w$]+)' undefined")


class RenderState(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    RENDERED = "rendered"
    ERRORED = "errored"


@dataclass(frozen=True)
class RenderOutcome:
    """Result of one evaluation. output is static HTML of the rendered tree."""
    success: bool
    output: str = ""
    error: Optional[str] = None
    logs: Tuple[str, ...] = ()
    renders: int = 0
    passes: int = 0
    scope_name: str = ""
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "output": self.output,
            "error": self.error,
            "logs": list(self.logs),
            "renders": self.renders,
            "passes": self.passes,
            "scope": self.scope_name,
            "duration_ms": self.duration_ms,
        }


# =============================================================================
# PROGRAM ASSEMBLY
# =============================================================================

@lru_cache(maxsize=1)
def load_runtime() -> str:
    return RUNTIME_PATH.read_text(encoding="utf-8")


@lru_cache(maxsize=64)
def compile_unit(unit: str) -> str:
    """JSX → ES5. Raises dukpy.JSRuntimeError on syntax errors."""
    return dukpy.jsx_compile(unit)


def unit_parameters(scope: ScopeDefinition) -> List[str]:
    """Parameter names of the function the unit runs in."""
    shadows = [n for n in SHADOWED_GLOBALS if n not in scope]
    return scope.names() + [RENDER_HELPER] + shadows


def build_program(compiled: str, scope: ScopeDefinition, max_passes: int = MAX_RENDER_PASSES) -> str:
    """Wrap a compiled unit so that only scope symbols (and render) resolve."""
    names = scope.names()
    params = unit_parameters(scope)
    args = [scope.get(n).source for n in names] + ["__preview.render"]
    options = json.dumps({"maxPasses": max_passes})
    scrubbed = json.dumps(list(INTERPRETER_GLOBALS))
    return (
        "(function (__previewGlobal) {\n"
        f"var __preview = __previewRuntime({options});\n"
        f"var __previewArgs = [\n  {', '.join(args)}\n];\n"
        f"{scrubbed}.forEach(function (name) {{\n"
        "  if (!delete __previewGlobal[name]) { __previewGlobal[name] = undefined; }\n"
        "});\n"
        f"(function ({', '.join(params)}) {{\n{compiled}\n}}).apply(undefined, __previewArgs);\n"
        "return __preview.finish();\n"
        "})(this);\n"
    )


def _clean_js_error(text: str, scope: ScopeDefinition) -> str:
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    message = lines[0] if lines else "JSRuntimeError"
    match = _REFERENCE_ERROR_RE.search(message)
    if match and match.group(1) not in scope:
        message = f"{message} ({match.group(1)} is not available in the {scope.name} scope)"
    return message


# =============================================================================
# WORKER PROCESS
# =============================================================================

def _run_program(program: str) -> Tuple[bool, Any]:
    """Runs in the worker process. Interpreter errors come back as text."""
    try:
        return True, dukpy.evaljs(program)
    except dukpy.JSRuntimeError as e:
        return False, str(e)


class RenderWorker:
    """
    One long-lived interpreter process. A program that outlives the timeout
    gets the process terminated; the next call starts a fresh one.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pool = None

    def _ensure_pool(self):
        if self._pool is None:
            self._pool = multiprocessing.get_context("spawn").Pool(processes=1)
            logger.debug("[renderer] worker process started")
        return self._pool

    def run(self, program: str, timeout: float) -> Tuple[bool, Any]:
        with self._lock:
            pool = self._ensure_pool()
            pending = pool.apply_async(_run_program, (program,))
            try:
                return pending.get(timeout)
            except multiprocessing.TimeoutError:
                logger.warning("[renderer] evaluation exceeded %.1fs; restarting worker", timeout)
                self._discard()
                raise RenderError(f"Evaluation did not finish within {timeout:g}s")

    def _discard(self):
        if self._pool is not None:
            self._pool.terminate()
            self._pool.join()
            self._pool = None

    def shutdown(self):
        with self._lock:
            self._discard()


_worker: Optional[RenderWorker] = None
_worker_lock = threading.Lock()


def get_render_worker() -> RenderWorker:
    global _worker
    with _worker_lock:
        if _worker is None:
            _worker = RenderWorker()
        return _worker


def shutdown_render_worker() -> None:
    if _worker is not None:
        _worker.shutdown()


def evaluate_unit(
    unit: str,
    scope: ScopeDefinition,
    max_passes: int = MAX_RENDER_PASSES,
    timeout: float = RENDER_TIMEOUT_SECONDS,
) -> Dict[str, Any]:
    """Compile + run one unit. Raises RenderError / dukpy.JSRuntimeError."""
    compiled = compile_unit(unit)
    program = load_runtime() + "\n" + build_program(compiled, scope, max_passes)
    ok, result = get_render_worker().run(program, timeout)
    if not ok:
        raise RenderError(_clean_js_error(result, scope))
    if not isinstance(result, dict):
        raise RenderError(f"Evaluation produced no result (got {type(result).__name__})")

    renders = int(result.get("renders") or 0)
    if renders == 0:
        raise RenderError("The unit never called render()")
    if renders > 1:
        raise RenderError(f"render() was called {renders} times; expected exactly once")
    return result


# =============================================================================
# RENDERER
# =============================================================================

class SandboxRenderer:
    """Stateful renderer for one preview surface."""

    def __init__(self, max_passes: int = MAX_RENDER_PASSES, timeout_seconds: float = RENDER_TIMEOUT_SECONDS):
        self.max_passes = max_passes
        self.timeout_seconds = timeout_seconds
        self.outcome: Optional[RenderOutcome] = None
        self._unit: Optional[str] = None
        self._scope: Optional[ScopeDefinition] = None
        self._evaluating = 0

    @property
    def state(self) -> RenderState:
        if self._evaluating:
            return RenderState.EVALUATING
        if self.outcome is None:
            return RenderState.IDLE
        return RenderState.RENDERED if self.outcome.success else RenderState.ERRORED

    def cached(self, unit: str, scope: ScopeDefinition) -> Optional[RenderOutcome]:
        if self.outcome is not None and unit == self._unit and scope is self._scope:
            return self.outcome
        return None

    def commit(self, unit: str, scope: ScopeDefinition, outcome: RenderOutcome) -> RenderOutcome:
        self._unit, self._scope = unit, scope
        self.outcome = outcome
        return outcome

    def render(self, unit: str, scope: ScopeDefinition) -> RenderOutcome:
        hit = self.cached(unit, scope)
        if hit is not None:
            return hit
        self._evaluating += 1
        try:
            outcome = self._evaluate(unit, scope)
        finally:
            self._evaluating -= 1
        return self.commit(unit, scope, outcome)

    async def evaluate_async(self, unit: str, scope: ScopeDefinition) -> RenderOutcome:
        """Evaluate off the event loop. The caller decides whether to commit."""
        hit = self.cached(unit, scope)
        if hit is not None:
            return hit
        self._evaluating += 1
        try:
            return await asyncio.to_thread(self._evaluate, unit, scope)
        finally:
            self._evaluating -= 1

    def _evaluate(self, unit: str, scope: ScopeDefinition) -> RenderOutcome:
        started = time.monotonic()

        def failed(message: str) -> RenderOutcome:
            logger.info("[renderer] evaluation failed (scope=%s): %s", scope.name, message)
            return RenderOutcome(
                success=False,
                error=message,
                scope_name=scope.name,
                duration_ms=int((time.monotonic() - started) * 1000),
            )

        try:
            result = evaluate_unit(unit, scope, self.max_passes, self.timeout_seconds)
        except RenderError as e:
            return failed(str(e))
        except dukpy.JSRuntimeError as e:
            return failed(_clean_js_error(str(e), scope))
        except Exception as e:
            logger.exception("[renderer] unexpected evaluation failure")
            return failed(f"{type(e).__name__}: {e}")

        outcome = RenderOutcome(
            success=True,
            output=result.get("output") or "",
            logs=tuple(result.get("logs") or ()),
            renders=int(result.get("renders") or 0),
            passes=int(result.get("passes") or 0),
            scope_name=scope.name,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        logger.debug(
            "[renderer] rendered %d chars in %d pass(es) (scope=%s)",
            len(outcome.output), outcome.passes, scope.name,
        )
        return outcome


__all__ = [
    "RenderState",
    "RenderOutcome",
    "RenderWorker",
    "SandboxRenderer",
    "build_program",
    "compile_unit",
    "evaluate_unit",
    "get_render_worker",
    "load_runtime",
    "shutdown_render_worker",
    "unit_parameters",
]
