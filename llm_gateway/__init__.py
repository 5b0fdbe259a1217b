from __future__ import annotations  # Re-export llm_gateway public API

from .limits import RateLimiter, ResponseCache
from .llm_gateway import (
    LlmAuthError,
    LlmConfigError,
    LlmGateway,
    LlmGatewayError,
    LlmStatusError,
    LlmTransportError,
    LlmValidationError,
    RateLimitedError,
    ServiceBusyError,
)

__all__ = [
    "LlmAuthError",
    "LlmConfigError",
    "LlmGateway",
    "LlmGatewayError",
    "LlmStatusError",
    "LlmTransportError",
    "LlmValidationError",
    "RateLimitedError",
    "RateLimiter",
    "ResponseCache",
    "ServiceBusyError",
]
