# FILE: uigen/generation/schemas.py
"""
Generation schemas: request categories, prompt bundles and generation results.

CATEGORIES:
- SIMPLE: single focused component → restricted scope, small model
- COMPLEX: multi-component application → expanded scope, large model

Request and GenerationResult are frozen: a request is immutable once
classified, and a result is replaced wholesale, never edited in place.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


# =============================================================================
# CATEGORY
# =============================================================================

class Category(str, Enum):
    """Request complexity category."""
    SIMPLE = "simple"
    COMPLEX = "complex"


# =============================================================================
# REQUEST
# =============================================================================

@dataclass(frozen=True)
class Request:
    """A user submission after classification."""
    text: str
    category: Category
    sequence: int = 0


# =============================================================================
# PROMPTS
# =============================================================================

@dataclass(frozen=True)
class GenerationParams:
    """Parameters handed to the model gateway alongside the prompts."""
    model: str
    temperature: float
    max_output_units: int
    stop_sequences: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PromptBundle:
    """System + user instruction pair and the params to send them with."""
    system_prompt: str
    user_prompt: str
    params: GenerationParams
    category: Category
    scope_name: str


# =============================================================================
# NORMALIZATION / RESULT
# =============================================================================

@dataclass(frozen=True)
class NormalizedUnit:
    """Guaranteed-renderable code plus how it was obtained."""
    code: str
    entry: str
    stages_applied: Tuple[str, ...] = ()

    @property
    def used_fallback(self) -> bool:
        return "fallback_unit" in self.stages_applied


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one successful gateway call.

    raw_text is kept for diagnostics even after normalization.
    """
    raw_text: str
    unit: str
    entry: str
    sequence: int
    model: Optional[str] = None
    stages_applied: Tuple[str, ...] = field(default_factory=tuple)


__all__ = [
    "Category",
    "Request",
    "GenerationParams",
    "PromptBundle",
    "NormalizedUnit",
    "GenerationResult",
]
