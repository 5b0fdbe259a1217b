import pytest

from config import EVALUATOR_ROUTE, FOLLOWUP_ROUTE, QUESTION_ROUTE, Settings, route_for


def test_settings_defaults():
    cfg = Settings(_env_file=None)
    assert cfg.DURATION_MINUTES == 20
    assert cfg.FOLLOW_UP_SECONDS == 180
    assert cfg.MAX_QUESTIONS == 5
    assert cfg.RATE_LIMIT_PER_MINUTE == 10
    assert cfg.STORAGE_KEY == "interview_session"
    assert cfg.BACKUP_KEY == "interview_backup"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DURATION_MINUTES", "30")
    monkeypatch.setenv("LLM_MODEL", "local-model")
    cfg = Settings(_env_file=None)
    assert cfg.DURATION_MINUTES == 30
    assert cfg.LLM_MODEL == "local-model"


def test_settings_validate_assignment():
    cfg = Settings(_env_file=None)
    with pytest.raises(ValueError):
        cfg.MAX_QUESTIONS = 0


def test_routes_are_tuned_per_task():
    cfg = Settings(_env_file=None, LLM_BASE_URL="http://localhost:8000/v1/", RETRY_MAX=1)
    evaluator = route_for(EVALUATOR_ROUTE, cfg)
    question = route_for(QUESTION_ROUTE, cfg)
    followup = route_for(FOLLOWUP_ROUTE, cfg)
    assert evaluator.base_url == "http://localhost:8000/v1"
    assert evaluator.retry.max_retries == 1
    assert (evaluator.temperature, question.temperature, followup.temperature) == (0.1, 0.9, 0.3)
    assert question.max_tokens == 500


def test_unknown_route():
    with pytest.raises(KeyError):
        route_for("translate")
