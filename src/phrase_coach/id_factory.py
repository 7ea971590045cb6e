"""ID 生成ユーティリティ。

フレーズ ID は JSON エクスポートに載るため短く保ち、UUID4 の先頭 8 桁 (hex) を使う。
"""

from __future__ import annotations

import uuid


def generate_phrase_id() -> str:
    """Return a new 8-character phrase id."""

    return uuid.uuid4().hex[:8]
