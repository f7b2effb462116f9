# FILE: config/__init__.py
"""Configuration package for uigen.

Contains:
- generation_profiles.py: per-category model settings and runtime limits
"""

from config.generation_profiles import (
    GenerationProfile,
    GENERATION_PROFILES,
    STOP_SEQUENCES,
    GROQ_BASE_URL,
    GATEWAY_TIMEOUT_SECONDS,
    MAX_RENDER_PASSES,
    RENDER_TIMEOUT_SECONDS,
    MAX_SESSIONS,
    get_generation_profile,
)

__all__ = [
    "GenerationProfile",
    "GENERATION_PROFILES",
    "STOP_SEQUENCES",
    "GROQ_BASE_URL",
    "GATEWAY_TIMEOUT_SECONDS",
    "MAX_RENDER_PASSES",
    "RENDER_TIMEOUT_SECONDS",
    "MAX_SESSIONS",
    "get_generation_profile",
]
