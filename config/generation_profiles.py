# FILE: config/generation_profiles.py
"""Generation profiles - single source of truth for per-category model settings.

Each request category (simple/complex) maps to one profile:
  - simple: small fast model, low temperature, short token budget
  - complex: large model, slightly higher temperature, long token budget

Model ids can be overridden via environment (UIGEN_SIMPLE_MODEL,
UIGEN_COMPLEX_MODEL). The stop list cuts generation at the first markdown
fence; the normalizer copes with whatever arrives anyway.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class GenerationProfile:
    model: str
    temperature: float
    max_output_units: int
    stop_sequences: Tuple[str, ...]


# =============================================================================
# Profiles (Authoritative Source)
# =============================================================================

DEFAULT_SIMPLE_MODEL = "llama3-8b-8192"
DEFAULT_COMPLEX_MODEL = "llama3-70b-8192"

STOP_SEQUENCES: Tuple[str, ...] = ("```",)

GENERATION_PROFILES: Dict[str, GenerationProfile] = {
    "simple": GenerationProfile(
        model=os.getenv("UIGEN_SIMPLE_MODEL", DEFAULT_SIMPLE_MODEL),
        temperature=0.1,
        max_output_units=1500,
        stop_sequences=STOP_SEQUENCES,
    ),
    "complex": GenerationProfile(
        model=os.getenv("UIGEN_COMPLEX_MODEL", DEFAULT_COMPLEX_MODEL),
        temperature=0.3,
        max_output_units=4000,
        stop_sequences=STOP_SEQUENCES,
    ),
}


def get_generation_profile(category: str) -> GenerationProfile:
    """Profile for a category value ("simple" / "complex").

    Unknown categories get the complex profile; it has the larger budget.
    """
    return GENERATION_PROFILES.get(category, GENERATION_PROFILES["complex"])


# =============================================================================
# Gateway / runtime settings
# =============================================================================

GROQ_BASE_URL = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
GATEWAY_TIMEOUT_SECONDS = float(os.getenv("UIGEN_GATEWAY_TIMEOUT", "60"))
MAX_RENDER_PASSES = int(os.getenv("UIGEN_MAX_RENDER_PASSES", "5"))
# Wall-clock bound on one evaluation; the worker process is killed past it.
RENDER_TIMEOUT_SECONDS = float(os.getenv("UIGEN_RENDER_TIMEOUT", "5"))
# Preview sessions kept in memory; least recently used idle sessions go first.
MAX_SESSIONS = int(os.getenv("UIGEN_MAX_SESSIONS", "256"))
