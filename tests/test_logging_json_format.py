import io
import json
import sys
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


def _fresh_modules(monkeypatch: pytest.MonkeyPatch, db_path: Path) -> None:
    monkeypatch.setenv("PHRASE_DB_PATH", str(db_path))
    monkeypatch.setenv("SEED_DEMO_PHRASES", "false")
    for name in list(sys.modules.keys()):
        if name == "phrase_coach" or name.startswith("phrase_coach."):
            sys.modules.pop(name)


def _json_lines(buf_out: io.StringIO, buf_err: io.StringIO) -> list[dict]:
    raw = buf_err.getvalue().strip() or buf_out.getvalue().strip()
    return [json.loads(ln) for ln in raw.splitlines() if ln.strip().startswith("{")]


def test_structlog_outputs_pure_json_without_stdlib_prefix(monkeypatch, tmp_path):
    buf_out = io.StringIO()
    buf_err = io.StringIO()
    _fresh_modules(monkeypatch, tmp_path / "log.sqlite3")

    with redirect_stdout(buf_out), redirect_stderr(buf_err):
        from phrase_coach.logging import configure_logging, logger

        configure_logging()
        logger.info("phrase_graded", phrase_id="abc", quality=5, interval=1)

    raw = buf_err.getvalue().strip() or buf_out.getvalue().strip()
    lines = [ln for ln in raw.splitlines() if ln.strip()]
    message_text = lines[-1] if lines else ""

    assert message_text, "no log output captured"
    assert not message_text.startswith("INFO:"), message_text

    data = json.loads(message_text)
    assert data.get("event") == "phrase_graded"
    assert data.get("level") in {"info", "INFO"}
    assert data.get("phrase_id") == "abc"
    assert data.get("quality") == 5
    assert data.get("environment") == "development"
    assert "timestamp" in data


def test_request_complete_log_contains_request_id_and_status(monkeypatch, tmp_path):
    buf_out = io.StringIO()
    buf_err = io.StringIO()
    _fresh_modules(monkeypatch, tmp_path / "access.sqlite3")

    with redirect_stdout(buf_out), redirect_stderr(buf_err):
        from phrase_coach.main import app

        with TestClient(app) as client:
            response = client.get("/healthz", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-123"

    request_lines = [d for d in _json_lines(buf_out, buf_err) if d.get("event") == "request_complete"]
    assert request_lines, "request_complete log line not found"
    data = request_lines[-1]
    assert data.get("request_id") == "req-123"
    assert data.get("status_code") == 200
    assert data.get("path") == "/healthz"
    assert "latency_ms" in data


def test_request_log_records_error_context(monkeypatch, tmp_path):
    """失敗リクエストでも構造化ログへエラー要約を残す。"""

    buf_out = io.StringIO()
    buf_err = io.StringIO()
    _fresh_modules(monkeypatch, tmp_path / "boom.sqlite3")

    with redirect_stdout(buf_out), redirect_stderr(buf_err):
        from phrase_coach.main import app

        @app.get("/boom")
        async def boom() -> None:  # pragma: no cover - 呼び出し側で検証
            raise RuntimeError("intentional failure")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/boom")

    assert response.status_code == 500

    request_lines = [d for d in _json_lines(buf_out, buf_err) if d.get("event") == "request_complete"]
    assert request_lines, "request_complete log line not found"
    data = request_lines[-1]
    assert data.get("status_code") == 500
    assert data.get("error_type") == "RuntimeError"
    assert "intentional failure" in data.get("error_message", "")
