from __future__ import annotations  # Configuration schema for LLM routing

from typing import Dict

from pydantic import BaseModel, Field

from .settings import Settings, settings as default_settings


class RetryPolicy(BaseModel):  # Backoff configuration for transient failures
    max_retries: int = Field(default=3, ge=0)
    base_delay_s: float = Field(default=1.0, ge=0.0)
    max_delay_s: float = Field(default=10.0, ge=0.0)

    def delay(self, attempt: int, *, rate_limited: bool = False) -> float:
        exponent = attempt + 1 if rate_limited else attempt
        return min(self.base_delay_s * (2 ** exponent), self.max_delay_s)


class LlmRoute(BaseModel):  # LLM endpoint configuration
    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(ge=0.1)
    api_key_env: str | None = None
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=300, ge=1)
    response_format: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)


EVALUATOR_ROUTE = "evaluate-answer"
QUESTION_ROUTE = "generate-question"
FOLLOWUP_ROUTE = "generate-followup"

_ROUTE_TUNING: Dict[str, Dict[str, float]] = {
    EVALUATOR_ROUTE: {"temperature": 0.1, "max_tokens": 300},
    QUESTION_ROUTE: {"temperature": 0.9, "max_tokens": 500},
    FOLLOWUP_ROUTE: {"temperature": 0.3, "max_tokens": 300},
}


def route_for(name: str, cfg: Settings | None = None) -> LlmRoute:  # Build a route from settings
    cfg = cfg or default_settings
    if name not in _ROUTE_TUNING:
        raise KeyError(f"Unknown LLM route '{name}'")
    tuning = _ROUTE_TUNING[name]
    return LlmRoute(
        name=name,
        base_url=cfg.LLM_BASE_URL.rstrip("/"),
        endpoint=cfg.LLM_ENDPOINT,
        model=cfg.LLM_MODEL,
        timeout_s=cfg.LLM_TIMEOUT_S,
        api_key_env=cfg.LLM_API_KEY_ENV,
        temperature=tuning["temperature"],
        max_tokens=int(tuning["max_tokens"]),
        response_format="json_object",
        retry=RetryPolicy(
            max_retries=cfg.RETRY_MAX,
            base_delay_s=cfg.RETRY_BASE_DELAY_S,
            max_delay_s=cfg.RETRY_MAX_DELAY_S,
        ),
    )
