"""Structured logging setup.

構造化ログの初期化をまとめる。stdlib logging の出力はメッセージのみとし、
structlog 側で ISO タイムスタンプ・レベル・contextvars を付与した JSON を描画する。
"""

from typing import Any

import logging
import structlog
from structlog import contextvars as structlog_contextvars

from .config import settings


def _resolve_level(raw: str | None) -> int:
    """Map a level name such as ``"debug"`` to the stdlib constant (INFO on unknown names)."""

    level = logging.getLevelName((raw or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _add_environment(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def configure_logging() -> None:
    """Configure structlog for application-wide logging.

    アプリ全体のロギング設定を行う。force=True で既存ハンドラ（uvicorn 等）を
    上書きし、"INFO:logger:" のようなプレフィックスが JSON に混ざらないようにする。
    """
    logging.basicConfig(
        level=_resolve_level(settings.log_level),
        format="%(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog_contextvars.merge_contextvars,
            _add_environment,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


logger = structlog.get_logger()
