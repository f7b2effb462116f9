# FILE: uigen/generation/gateway.py
"""
Model gateway: the single remote call in the pipeline.

- ModelGateway: abstract async entrypoint
  generate(system_prompt, user_prompt, params) -> GatewayResponse
- GroqGateway: OpenAI-compatible chat completions against Groq (AsyncOpenAI
  with base_url pointed at GROQ_BASE_URL)

Failures never escape as SDK exceptions. Everything maps onto GatewayError
with one of four kinds:
- auth: missing key, 401/403
- quota: 429
- network: connection failure / timeout
- malformed: any other status error, or a response without choices

Empty content is NOT an error here: it is handed on as "" and the normalizer
turns it into the fallback unit.
"""

from __future__ import annotations

import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

import openai
from openai import AsyncOpenAI

from config.generation_profiles import GATEWAY_TIMEOUT_SECONDS, GROQ_BASE_URL

from .errors import GatewayError, GatewayFailure
from .schemas import GenerationParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayResponse:
    text: str
    model: str
    duration_ms: int = 0
    finish_reason: Optional[str] = None


class ModelGateway(ABC):
    """Anything that can turn a system + user instruction pair into raw model text."""

    @abstractmethod
    async def generate(
        self, system_prompt: str, user_prompt: str, params: GenerationParams
    ) -> GatewayResponse:
        raise NotImplementedError


def _messages(system_prompt: str, user_prompt: str) -> List[dict]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def _classify_sdk_error(exc: Exception) -> GatewayError:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return GatewayError(GatewayFailure.AUTH, str(exc))
    if isinstance(exc, openai.RateLimitError):
        return GatewayError(GatewayFailure.QUOTA, str(exc))
    if isinstance(exc, (openai.APITimeoutError, openai.APIConnectionError)):
        return GatewayError(GatewayFailure.NETWORK, str(exc))
    return GatewayError(GatewayFailure.MALFORMED, str(exc))


class GroqGateway(ModelGateway):
    """Groq chat completions through the OpenAI SDK."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = GROQ_BASE_URL,
        timeout_seconds: float = GATEWAY_TIMEOUT_SECONDS,
        client: Optional[Any] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("GROQ_API_KEY", "")
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_seconds,
            )
        return self._client

    async def generate(
        self, system_prompt: str, user_prompt: str, params: GenerationParams
    ) -> GatewayResponse:
        if not self.api_key and self._client is None:
            raise GatewayError(GatewayFailure.AUTH, "GROQ_API_KEY is not set")

        kwargs = dict(
            model=params.model,
            messages=_messages(system_prompt, user_prompt),
            temperature=params.temperature,
            max_tokens=int(params.max_output_units),
        )
        if params.stop_sequences:
            kwargs["stop"] = list(params.stop_sequences)

        started = time.monotonic()
        try:
            resp = await self._get_client().chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            err = _classify_sdk_error(exc)
            logger.warning("[gateway] %s failure (model=%s): %s", err.kind.value, params.model, exc)
            raise err from exc
        duration_ms = int((time.monotonic() - started) * 1000)

        choices = getattr(resp, "choices", None) or []
        if not choices:
            logger.warning("[gateway] response without choices (model=%s)", params.model)
            raise GatewayError(GatewayFailure.MALFORMED, "response contained no choices")

        choice = choices[0]
        message = getattr(choice, "message", None)
        text = getattr(message, "content", None) or ""

        logger.info(
            "[gateway] model=%s chars=%d duration_ms=%d",
            params.model, len(text), duration_ms,
        )
        return GatewayResponse(
            text=text,
            model=getattr(resp, "model", None) or params.model,
            duration_ms=duration_ms,
            finish_reason=getattr(choice, "finish_reason", None),
        )


__all__ = [
    "GatewayResponse",
    "ModelGateway",
    "GroqGateway",
]
