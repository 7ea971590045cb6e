"""SM-2 lite scheduler.

フレーズごとの記憶状態 (ease/interval/due/reps/lapses) と直近の想起品質 (0..5)
から次の記憶状態を計算する純粋関数群。

- quality < 3 は失敗: reps=0, lapses+1, interval=1（ease は据え置き）
- quality >= 3 は成功: reps に応じて interval を 1 → 3 → round(interval * ease) と伸ばし、
  ease を SM-2 の式で更新して [1.3, 2.8] に丸める
- due は interval 日に 5〜15% のジッターを乗せて算出する（同時刻への集中を避ける）
"""

from __future__ import annotations

import math
import random
import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


EASE_MIN = 1.3
EASE_MAX = 2.8
INITIAL_EASE = 2.5
PASSING_QUALITY = 3
MAX_QUALITY = 5
DAY_MS = 24 * 60 * 60 * 1000
JITTER_MIN = 0.05
JITTER_SPAN = 0.10

# 本番用の乱数源。テストでは seed 済みの random.Random を review() に渡す。
_default_rng = random.Random()


class InvalidQualityError(ValueError):
    """Raised when a recall quality falls outside the 0..5 scale."""


class MemoryState(BaseModel):
    """Scheduling state owned by exactly one phrase record.

    immutable。更新は review() が返す新しいインスタンスで置き換える。
    """

    model_config = ConfigDict(frozen=True)

    ease: float = Field(default=INITIAL_EASE, ge=EASE_MIN, le=EASE_MAX)
    interval: int = Field(default=0, ge=0)
    due: int = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)
    lapses: int = Field(default=0, ge=0)

    @classmethod
    def initial(cls) -> "MemoryState":
        """Fresh state for a new or history-less phrase; due=0 makes it due immediately."""
        return cls()


def current_time_ms() -> int:
    """Current wall clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def is_due(state: MemoryState, now_ms: Optional[int] = None) -> bool:
    return state.due <= (current_time_ms() if now_ms is None else now_ms)


def clamp(x: float, lo: float, hi: float) -> float:
    return min(max(x, lo), hi)


def _round_half_up(x: float) -> int:
    # 組み込み round() は偶数丸めのため 6.5 -> 6 になる。interval は四捨五入で伸ばす。
    return int(math.floor(x + 0.5))


def _validate_quality(quality: object) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(f"quality must be an integer in 0..{MAX_QUALITY}, got {quality!r}")
    if not 0 <= quality <= MAX_QUALITY:
        raise InvalidQualityError(f"quality must be within 0..{MAX_QUALITY}, got {quality}")
    return quality


def next_ease(ease: float, quality: int) -> float:
    """SM-2 ease update, clamped into [EASE_MIN, EASE_MAX]."""
    miss = MAX_QUALITY - quality
    return clamp(ease + (0.1 - miss * (0.08 + miss * 0.02)), EASE_MIN, EASE_MAX)


def draw_jitter(rng: Optional[random.Random] = None) -> float:
    """Uniform jitter fraction in [0.05, 0.15), drawn fresh on every call."""
    source = rng if rng is not None else _default_rng
    return JITTER_MIN + source.random() * JITTER_SPAN


def review(
    state: MemoryState,
    quality: int,
    *,
    now_ms: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> MemoryState:
    """Return the memory state after one review of quality ``quality`` (0..5).

    The input ``state`` is never modified. Raises ``InvalidQualityError`` when
    ``quality`` is not an integer between 0 and 5.

    - now_ms: 評価時刻（省略時は壁時計）
    - rng: ジッター用の乱数源（省略時はモジュール共通の random.Random）
    """
    q = _validate_quality(quality)
    ease = state.ease
    interval = state.interval
    reps = state.reps
    lapses = state.lapses

    if q < PASSING_QUALITY:
        reps = 0
        lapses += 1
        interval = 1
    else:
        # interval は更新前の reps と ease から決める
        if reps == 0:
            interval = 1
        elif reps == 1:
            interval = 3
        else:
            interval = max(1, _round_half_up(interval * ease))
        ease = next_ease(ease, q)
        reps += 1

    current = current_time_ms() if now_ms is None else now_ms
    jitter = draw_jitter(rng)
    due = current + int(interval * DAY_MS * (1 + jitter))
    return state.model_copy(
        update={
            "ease": ease,
            "interval": interval,
            "due": due,
            "reps": reps,
            "lapses": lapses,
        }
    )
