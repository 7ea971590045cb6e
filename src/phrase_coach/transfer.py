"""JSON import/export of phrase records.

インポートは外部ファイル由来のため寛容に扱う:
- 配列以外はエラー、両面 (hr/en) が揃わないレコードは捨てる
- srs が欠けていれば初期状態、一部欠けていれば初期値で補完する
- 1 件も残らなければエラー
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import ValidationError

from .id_factory import generate_phrase_id
from .logging import logger
from .models.phrase import DEFAULT_CATEGORY, Phrase
from .srs import MemoryState, current_time_ms


class ImportFormatError(ValueError):
    """Raised when an import payload contains no usable phrase records."""


def _text(value: Any) -> str:
    return str(value).strip() if value else ""


def _memory_state(raw: Any) -> MemoryState:
    if not isinstance(raw, dict):
        return MemoryState.initial()
    fields = MemoryState.initial().model_dump()
    fields.update({k: v for k, v in raw.items() if k in fields and v is not None})
    # JS 側のエクスポートでは due が小数 (now + interval * DAY_MS * (1 + jitter)) になる。
    # 切り上げて整数ミリ秒にし、due > 採点時刻 を保つ。
    due = fields["due"]
    if isinstance(due, float) and math.isfinite(due):
        fields["due"] = math.ceil(due)
    # 3.0 のような整数値の float は int として受け入れる
    for key in ("interval", "reps", "lapses"):
        value = fields[key]
        if isinstance(value, float) and value.is_integer():
            fields[key] = int(value)
    return MemoryState.model_validate(fields)


def _created_at(raw: Any, fallback: int) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or raw <= 0:
        return fallback
    return int(raw)


def clean_import(payload: Any, *, now_ms: Optional[int] = None) -> list[Phrase]:
    """Validate and normalise an imported JSON array into phrase records.

    Raises ``ImportFormatError`` when the payload is not a list or when no
    record survives cleaning.
    """
    if not isinstance(payload, list):
        raise ImportFormatError("Invalid format: expected an array")

    now = current_time_ms() if now_ms is None else now_ms
    cleaned: list[Phrase] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            logger.warning("phrase_import_skipped", index=index, reason="not_an_object")
            continue
        hr = _text(item.get("hr"))
        en = _text(item.get("en"))
        if not hr or not en:
            logger.info("phrase_import_skipped", index=index, reason="missing_side")
            continue
        try:
            srs = _memory_state(item.get("srs"))
        except ValidationError as exc:
            logger.warning(
                "phrase_import_skipped",
                index=index,
                reason="invalid_srs",
                errors=exc.error_count(),
            )
            continue
        note = item.get("note")
        cleaned.append(
            Phrase(
                id=_text(item.get("id")) or generate_phrase_id(),
                hr=hr,
                en=en,
                category=_text(item.get("cat")) or DEFAULT_CATEGORY,
                note=str(note) if note else None,
                created_at=_created_at(item.get("createdAt"), now),
                srs=srs,
            )
        )

    if not cleaned:
        raise ImportFormatError("No valid cards found")
    return cleaned


def export_payload(phrases: list[Phrase]) -> list[dict[str, Any]]:
    """Serialise phrases into the JSON array accepted by ``clean_import``."""
    return [p.model_dump(by_alias=True, exclude_none=True) for p in phrases]
