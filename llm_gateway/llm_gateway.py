from __future__ import annotations  # LLM request gateway module

import asyncio
import json
import logging
import os
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import LlmRoute

from .limits import RateLimiter


logger = logging.getLogger(__name__)  # Module logger setup

Sleep = Callable[[float], Awaitable[None]]


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class LlmConfigError(LlmGatewayError):  # Missing credentials or unusable route
    pass


class RateLimitedError(LlmGatewayError):  # Client-side cap reached; no request was sent
    def __init__(self, message: str = "Too many requests. Please wait a moment before trying again."):
        super().__init__(message)


class LlmTransportError(LlmGatewayError):  # Network failure after retries
    pass


class LlmStatusError(LlmGatewayError):  # Non-success HTTP status
    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(message or f"Request failed with status {status_code}")
        self.status_code = status_code


class LlmAuthError(LlmStatusError):  # Credentials rejected by the service
    pass


class ServiceBusyError(LlmStatusError):  # 429 persisted through every retry
    def __init__(self, status_code: int = 429):
        super().__init__(status_code, "Service is busy. Please try again in a few moments.")


class LlmValidationError(LlmGatewayError):  # Reply was not the JSON we asked for
    pass


T = TypeVar("T", bound=BaseModel)


class LlmGateway:
    """Async chat-completions client with retry, backoff and a shared rate limiter."""

    def __init__(
        self,
        *,
        limiter: Optional[RateLimiter] = None,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Sleep] = None,
        api_key: Optional[str] = None,
    ):
        self.limiter = limiter or RateLimiter()
        self._client = client
        self._sleep = sleep or asyncio.sleep
        self._api_key = api_key

    def api_key_for(self, cfg: LlmRoute) -> Optional[str]:
        if self._api_key:
            return self._api_key
        if cfg.api_key_env:
            return os.getenv(cfg.api_key_env) or None
        return None

    def is_configured(self, cfg: LlmRoute) -> bool:
        return self.api_key_for(cfg) is not None

    async def call(
        self,
        task: str,
        schema: Type[T],
        *,
        cfg: LlmRoute,
        system: Optional[str] = None,
    ) -> T:  # Invoke configured LLM route and validate output
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": task})
        return await self.chat(messages, schema, cfg=cfg)

    async def chat(self, messages: Sequence[Dict[str, str]], schema: Type[T], *, cfg: LlmRoute) -> T:
        api_key = self.api_key_for(cfg)
        if not api_key:
            logger.error("LLM route %s has no API key (env %s)", cfg.name, cfg.api_key_env)
            raise LlmConfigError(f"API key not configured for route '{cfg.name}'")

        payload: Dict[str, Any] = {
            "model": cfg.model,
            "messages": _normalize_messages(messages),
            "temperature": cfg.temperature,
            "max_tokens": cfg.max_tokens,
        }
        if cfg.response_format:
            payload["response_format"] = {"type": cfg.response_format}
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"}
        headers.update(cfg.extra_headers)
        url = f"{cfg.base_url}{cfg.endpoint}"

        policy = cfg.retry
        attempts = policy.max_retries + 1
        preview = _preview(payload["messages"])
        if len(preview) > 120:
            preview = preview[:117] + "..."
        logger.info(
            "LLM request start route=%s model=%s attempts=%d preview=%s",
            cfg.name,
            cfg.model,
            attempts,
            preview,
        )
        for attempt in range(attempts):
            if not self.limiter.try_acquire():
                logger.warning("LLM request rate limited route=%s", cfg.name)
                raise RateLimitedError()
            logger.info(
                "LLM request send route=%s model=%s attempt=%d/%d",
                cfg.name,
                cfg.model,
                attempt + 1,
                attempts,
            )
            try:
                response = await self._post(url, payload, headers, cfg.timeout_s)
            except httpx.HTTPError as exc:
                logger.error("LLM transport failure: %s", exc)
                if attempt + 1 >= attempts:
                    raise LlmTransportError("LLM transport failed") from exc
                await self._sleep(policy.delay(attempt))
                continue

            status = response.status_code
            if 200 <= status < 300:
                parsed = _parse(schema, response)
                logger.info("LLM request done route=%s model=%s attempt=%d", cfg.name, cfg.model, attempt + 1)
                return parsed
            if status == 429:
                logger.warning("LLM busy route=%s attempt=%d", cfg.name, attempt + 1)
                if attempt + 1 >= attempts:
                    raise ServiceBusyError(status)
                await self._sleep(policy.delay(attempt, rate_limited=True))
                continue
            if status in (401, 403):
                logger.error("LLM authentication failed route=%s status=%s", cfg.name, status)
                raise LlmAuthError(status, "API authentication failed. Please check configuration.")
            if status >= 500:
                logger.error("LLM error status: %s", status)
                if attempt + 1 >= attempts:
                    raise LlmStatusError(status)
                await self._sleep(policy.delay(attempt))
                continue
            logger.error("LLM client error status: %s", status)
            raise LlmStatusError(status)
        raise LlmGatewayError("Maximum retry attempts exceeded")  # pragma: no cover - loop always returns or raises

    async def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=payload, headers=headers, timeout=timeout)
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.post(url, json=payload, headers=headers)


def _parse(schema: Type[T], response: httpx.Response) -> T:
    try:
        data = response.json()
    except ValueError as exc:
        logger.error("Invalid JSON payload from LLM: %s", exc)
        raise LlmValidationError("LLM payload was not JSON") from exc
    content = _extract_content(data)
    try:
        return _validate(schema, content)
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("LLM output validation failed: %s", exc)
        raise LlmValidationError("LLM output validation failed") from exc


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        content = str(item.get("content", ""))
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": content})
    return normalized


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # Build preview string for logging
    for message in messages:
        if message.get("role") == "system":
            continue
        text = message.get("content", "").strip()
        if text:
            return text.splitlines()[0]
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmValidationError("LLM response missing content")


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema
    return schema.model_validate_json(_strip_code_fences(content))


def _strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines:
            lines = lines[1:]
            while lines and lines[0].strip() == "":
                lines = lines[1:]
            while lines and lines[-1].strip() == "":
                lines = lines[:-1]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text
