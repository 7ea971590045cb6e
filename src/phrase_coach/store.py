from __future__ import annotations

import random
import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional

from .config import settings
from .id_factory import generate_phrase_id
from .logging import logger
from .models.phrase import ALL_CATEGORIES, DEFAULT_CATEGORY, Phrase
from .seed import SEED_PHRASES
from .srs import MemoryState, current_time_ms, review


_PHRASE_COLUMNS = "id, hr, en, category, note, created_at, ease, interval_days, due_ms, reps, lapses"


class PhraseSQLiteStore:
    """SQLite-backed phrase store that owns every phrase's memory state.

    - 記憶状態は phrases テーブルの列として 1:1 で保持する
    - grade() は BEGIN IMMEDIATE で読み取り→review()→書き戻しを直列化し、
      同一フレーズへの同時採点で reps/lapses が失われないようにする
    - 空のストアには初期フレーズを投入する（seed=False で無効化）
    """

    def __init__(self, db_path: str, *, seed: bool = True) -> None:
        self.db_path = db_path
        self._ensure_dirs()
        self._init_db()
        if seed:
            self._seed_if_empty()

    # --- low-level helpers ---
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        with conn:  # autocommit on PRAGMA
            conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    def _ensure_dirs(self) -> None:
        p = Path(self.db_path)
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS phrases (
                        id TEXT PRIMARY KEY,
                        hr TEXT NOT NULL,
                        en TEXT NOT NULL,
                        category TEXT NOT NULL,
                        note TEXT,
                        created_at INTEGER NOT NULL,
                        ease REAL NOT NULL DEFAULT 2.5,
                        interval_days INTEGER NOT NULL DEFAULT 0,
                        due_ms INTEGER NOT NULL DEFAULT 0,
                        reps INTEGER NOT NULL DEFAULT 0,
                        lapses INTEGER NOT NULL DEFAULT 0
                    );
                    """
                )
                conn.execute("CREATE INDEX IF NOT EXISTS idx_phrases_due_ms ON phrases(due_ms);")
                conn.execute("CREATE INDEX IF NOT EXISTS idx_phrases_category ON phrases(category);")
        finally:
            conn.close()

    def _seed_if_empty(self) -> None:
        conn = self._connect()
        try:
            row = conn.execute("SELECT COUNT(1) AS c FROM phrases;").fetchone()
            if row and int(row["c"]) > 0:
                return
            now = current_time_ms()
            seeds = [
                Phrase(id=generate_phrase_id(), hr=hr, en=en, category=cat, created_at=now)
                for hr, en, cat in SEED_PHRASES
            ]
            self._write(conn, seeds)
            logger.info("phrase_store_seeded", count=len(seeds), db_path=self.db_path)
        finally:
            conn.close()

    @staticmethod
    def _row_to_phrase(row: sqlite3.Row) -> Phrase:
        return Phrase(
            id=row["id"],
            hr=row["hr"],
            en=row["en"],
            category=row["category"],
            note=row["note"],
            created_at=int(row["created_at"]),
            srs=MemoryState(
                ease=float(row["ease"]),
                interval=int(row["interval_days"]),
                due=int(row["due_ms"]),
                reps=int(row["reps"]),
                lapses=int(row["lapses"]),
            ),
        )

    @staticmethod
    def _write(conn: sqlite3.Connection, phrases: Iterable[Phrase]) -> None:
        """Insert or replace all phrases in one transaction (all or nothing).

        autocommit 接続では `with conn:` がトランザクションを開始しないため、
        BEGIN IMMEDIATE / COMMIT を明示し、途中で失敗したら ROLLBACK して再送出する。
        """
        rows = [
            (
                p.id,
                p.hr,
                p.en,
                p.category,
                p.note,
                p.created_at,
                p.srs.ease,
                p.srs.interval,
                p.srs.due,
                p.srs.reps,
                p.srs.lapses,
            )
            for p in phrases
        ]
        conn.execute("BEGIN IMMEDIATE;")
        try:
            conn.executemany(
                f"INSERT OR REPLACE INTO phrases({_PHRASE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);",
                rows,
            )
            conn.execute("COMMIT;")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK;")
            raise

    # --- phrase management ---
    def add_phrase(self, hr: str, en: str, category: str = DEFAULT_CATEGORY, note: Optional[str] = None) -> Phrase:
        """Create a phrase with a fresh id and the initial memory state."""
        hr = (hr or "").strip()
        en = (en or "").strip()
        if not hr or not en:
            raise ValueError("both phrase sides are required")
        phrase = Phrase(
            id=generate_phrase_id(),
            hr=hr,
            en=en,
            category=(category or "").strip() or DEFAULT_CATEGORY,
            note=(note or "").strip() or None,
            created_at=current_time_ms(),
        )
        conn = self._connect()
        try:
            self._write(conn, [phrase])
        finally:
            conn.close()
        return phrase

    def get_phrase(self, phrase_id: str) -> Optional[Phrase]:
        conn = self._connect()
        try:
            row = conn.execute(f"SELECT {_PHRASE_COLUMNS} FROM phrases WHERE id = ?;", (phrase_id,)).fetchone()
            return self._row_to_phrase(row) if row is not None else None
        finally:
            conn.close()

    def list_phrases(self, category: Optional[str] = None, query: Optional[str] = None) -> List[Phrase]:
        """Return phrases newest first, optionally filtered.

        - category: None / "All" は全件
        - query: "hr en" に対する大文字小文字を無視した部分一致（空白のみは無視）
        """
        sql = f"SELECT {_PHRASE_COLUMNS} FROM phrases"
        params: tuple = ()
        if category and category != ALL_CATEGORIES:
            sql += " WHERE category = ?"
            params = (category,)
        sql += " ORDER BY created_at DESC, rowid ASC;"
        conn = self._connect()
        try:
            items = [self._row_to_phrase(row) for row in conn.execute(sql, params).fetchall()]
        finally:
            conn.close()
        # SQLite の lower() は ASCII のみのため、č/ž を含む検索は Python 側で行う
        needle = (query or "").strip().lower()
        if needle:
            items = [p for p in items if needle in f"{p.hr} {p.en}".lower()]
        return items

    def delete_phrase(self, phrase_id: str) -> bool:
        conn = self._connect()
        try:
            with conn:
                cur = conn.execute("DELETE FROM phrases WHERE id = ?;", (phrase_id,))
                return cur.rowcount > 0
        finally:
            conn.close()

    def categories(self) -> List[str]:
        """Distinct categories in list order (first occurrence wins)."""
        seen: dict[str, None] = {}
        for phrase in self.list_phrases():
            seen.setdefault(phrase.category, None)
        return list(seen)

    # --- review ---
    def next_due(
        self,
        category: Optional[str] = None,
        query: Optional[str] = None,
        now_ms: Optional[int] = None,
    ) -> Optional[Phrase]:
        """Pick the card to show next.

        フィルタ後の due 済みカードのうち due が最も早いもの。due 済みが無ければ
        先頭のカード（前倒し学習）を返す。フィルタに一致しなければ None。

        Among due cards this picks the smallest ``due``, not the first card in
        list (newest-first) order.
        """
        items = self.list_phrases(category=category, query=query)
        if not items:
            return None
        now = current_time_ms() if now_ms is None else now_ms
        due = [p for p in items if p.srs.due <= now]
        if due:
            return min(due, key=lambda p: p.srs.due)
        return items[0]

    def due_count(self, now_ms: Optional[int] = None) -> int:
        now = current_time_ms() if now_ms is None else now_ms
        conn = self._connect()
        try:
            row = conn.execute("SELECT COUNT(1) AS c FROM phrases WHERE due_ms <= ?;", (now,)).fetchone()
            return int(row["c"])
        finally:
            conn.close()

    def count(self) -> int:
        conn = self._connect()
        try:
            return int(conn.execute("SELECT COUNT(1) AS c FROM phrases;").fetchone()["c"])
        finally:
            conn.close()

    def grade(
        self,
        phrase_id: str,
        quality: int,
        *,
        rng: Optional[random.Random] = None,
        now_ms: Optional[int] = None,
    ) -> Optional[Phrase]:
        """Apply one review to a phrase and persist the new memory state.

        Returns None when the phrase does not exist. Invalid quality values
        propagate ``InvalidQualityError`` after rolling back.
        """
        conn = self._connect()
        try:
            # BEGIN IMMEDIATE to avoid concurrent writers on the same row
            conn.execute("BEGIN IMMEDIATE;")
            row = conn.execute(f"SELECT {_PHRASE_COLUMNS} FROM phrases WHERE id = ?;", (phrase_id,)).fetchone()
            if row is None:
                conn.execute("ROLLBACK;")
                return None

            phrase = self._row_to_phrase(row)
            updated = phrase.model_copy(update={"srs": review(phrase.srs, quality, now_ms=now_ms, rng=rng)})
            conn.execute(
                """
                UPDATE phrases
                SET ease = ?, interval_days = ?, due_ms = ?, reps = ?, lapses = ?
                WHERE id = ?;
                """,
                (
                    updated.srs.ease,
                    updated.srs.interval,
                    updated.srs.due,
                    updated.srs.reps,
                    updated.srs.lapses,
                    phrase_id,
                ),
            )
            conn.execute("COMMIT;")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK;")
            raise
        finally:
            conn.close()

        logger.info(
            "phrase_graded",
            phrase_id=phrase_id,
            quality=quality,
            ease=updated.srs.ease,
            interval=updated.srs.interval,
            reps=updated.srs.reps,
            lapses=updated.srs.lapses,
            due=updated.srs.due,
        )
        return updated

    # --- import / export ---
    def upsert_phrases(self, phrases: Iterable[Phrase]) -> int:
        """Insert or replace phrases by id. Returns the number written."""
        items = list(phrases)
        conn = self._connect()
        try:
            self._write(conn, items)
        finally:
            conn.close()
        return len(items)

    def export_phrases(self) -> List[Phrase]:
        return self.list_phrases()


# module-level singleton store (wired to settings)
store = PhraseSQLiteStore(db_path=settings.phrase_db_path, seed=settings.seed_demo_phrases)
