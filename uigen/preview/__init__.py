# FILE: uigen/preview/__init__.py
"""Capability scopes and the sandbox renderer."""

from uigen.preview.scope import (
    RESTRICTED,
    EXPANDED,
    Capability,
    CapabilityKind,
    ScopeDefinition,
    ScopeRegistry,
    get_scope_registry,
)
from uigen.preview.renderer import RenderOutcome, RenderState, SandboxRenderer

__all__ = [
    "RESTRICTED",
    "EXPANDED",
    "Capability",
    "CapabilityKind",
    "ScopeDefinition",
    "ScopeRegistry",
    "get_scope_registry",
    "RenderOutcome",
    "RenderState",
    "SandboxRenderer",
]
