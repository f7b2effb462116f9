# FILE: uigen/generation/errors.py
"""
Error taxonomy for the preview pipeline.

- InputError: bad request text / unknown scope override (before any external call)
- GatewayError: model service failure (auth, quota, network, malformed)
- RenderError: evaluation failure; raised inside the renderer only and always
  converted to a failed RenderOutcome there

Normalization has no error type: degenerate input gets the fixed fallback unit.
"""
from __future__ import annotations

from enum import Enum


class PreviewError(Exception):
    """Base class for all pipeline errors."""


class InputError(PreviewError):
    """Request rejected before any external call."""


class GatewayFailure(str, Enum):
    AUTH = "auth"
    QUOTA = "quota"
    NETWORK = "network"
    MALFORMED = "malformed"


_GATEWAY_MESSAGES = {
    GatewayFailure.AUTH: "The model service rejected our credentials.",
    GatewayFailure.QUOTA: "The model service quota is exhausted. Try again shortly.",
    GatewayFailure.NETWORK: "Could not reach the model service.",
    GatewayFailure.MALFORMED: "The model service returned an unusable response.",
}


class GatewayError(PreviewError):
    """Typed failure from the model gateway."""

    def __init__(self, kind: GatewayFailure, detail: str = ""):
        self.kind = GatewayFailure(kind)
        self.detail = detail
        super().__init__(f"{self.kind.value}: {detail}" if detail else self.kind.value)

    @property
    def user_message(self) -> str:
        return _GATEWAY_MESSAGES[self.kind]


class RenderError(PreviewError):
    """Compile or run-time failure while evaluating a normalized unit."""


__all__ = [
    "PreviewError",
    "InputError",
    "GatewayFailure",
    "GatewayError",
    "RenderError",
]
