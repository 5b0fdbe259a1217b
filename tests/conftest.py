import json
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import settings
from llm_gateway import LlmGateway, RateLimiter


@pytest.fixture(autouse=True)
def tmp_storage(monkeypatch, tmp_path):
    storage_dir = tmp_path / "sessions"
    monkeypatch.setattr(settings, "STORAGE_DIR", str(storage_dir), raising=False)
    monkeypatch.setattr(settings, "HEURISTICS_CONFIG", str(tmp_path / "missing.yaml"), raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("HEURISTICS_CONFIG", raising=False)
    return storage_dir


def chat_reply(payload, status_code: int = 200) -> httpx.Response:
    """Chat-completions shaped response whose message content is ``payload``."""

    content = payload if isinstance(payload, str) else json.dumps(payload)
    return httpx.Response(status_code, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


class FakeService:
    """Scripted chat endpoint: replies are consumed in order, the last one repeats."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return chat_reply(reply)

    @property
    def calls(self) -> int:
        return len(self.requests)


async def _no_sleep(_delay: float) -> None:
    return None


def make_gateway(service: FakeService, *, limiter: RateLimiter = None, api_key: str = "test-key") -> LlmGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(service))
    return LlmGateway(limiter=limiter or RateLimiter(max_calls=100), client=client, sleep=_no_sleep, api_key=api_key)


@pytest.fixture
def fake_service():
    def factory(*replies):
        service = FakeService(*replies)
        return service, make_gateway(service)

    return factory
