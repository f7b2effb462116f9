# FILE: uigen/generation/__init__.py
"""
Generation module exports.

Only the leaf modules are re-exported here; prompts, gateway and pipeline
import uigen.preview and are imported directly where needed.
"""

# ============== SCHEMA EXPORTS ==============

from uigen.generation.schemas import (
    Category,
    Request,
    GenerationParams,
    PromptBundle,
    NormalizedUnit,
    GenerationResult,
)

# ============== ERROR EXPORTS ==============

from uigen.generation.errors import (
    PreviewError,
    InputError,
    GatewayFailure,
    GatewayError,
    RenderError,
)

# ============== CLASSIFIER / NORMALIZER EXPORTS ==============

from uigen.generation.classifier import classify, build_request
from uigen.generation.normalizer import normalize, normalize_output

__all__ = [
    "Category",
    "Request",
    "GenerationParams",
    "PromptBundle",
    "NormalizedUnit",
    "GenerationResult",
    "PreviewError",
    "InputError",
    "GatewayFailure",
    "GatewayError",
    "RenderError",
    "classify",
    "build_request",
    "normalize",
    "normalize_output",
]
