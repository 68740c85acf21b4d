from __future__ import annotations

from calc_app.core.config import AppSettings


def clear_env(monkeypatch) -> None:
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    monkeypatch.delenv("FRONTEND_ORIGIN", raising=False)
    monkeypatch.delenv("CALC_MAX_EXPRESSION_LENGTH", raising=False)


def test_resolved_cors_origins_appends_frontend_origin(monkeypatch) -> None:
    clear_env(monkeypatch)
    frontend_origin = "https://calculator.example.com"
    monkeypatch.setenv("FRONTEND_ORIGIN", frontend_origin)

    settings = AppSettings(_env_file=None)

    origins = settings.resolved_cors_origins
    assert "http://localhost:5173" in origins
    assert frontend_origin in origins


def test_resolved_cors_origins_deduplicates(monkeypatch) -> None:
    clear_env(monkeypatch)
    frontend_origin = "https://calculator.example.com"
    monkeypatch.setenv(
        "CORS_ORIGINS",
        '["http://localhost:5173", "https://calculator.example.com"]',
    )
    monkeypatch.setenv("FRONTEND_ORIGIN", f"{frontend_origin}/")

    settings = AppSettings(_env_file=None)

    origins = settings.resolved_cors_origins
    assert origins.count(frontend_origin) == 1


def test_max_expression_length_reads_environment(monkeypatch) -> None:
    clear_env(monkeypatch)
    monkeypatch.setenv("CALC_MAX_EXPRESSION_LENGTH", "42")

    settings = AppSettings(_env_file=None)

    assert settings.calc_max_expression_length == 42
