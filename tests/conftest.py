"""Pytest configuration: isolate the module-level store from the working tree."""

import os
import tempfile
from pathlib import Path

# phrase_coach.store はインポート時にシングルトンを生成するため、
# 作業ツリーの .data/ を汚さないよう一時ディレクトリを既定値にする。
os.environ.setdefault("PHRASE_DB_PATH", str(Path(tempfile.mkdtemp(prefix="phrase-coach-")) / "phrases.sqlite3"))
os.environ.setdefault("SEED_DEMO_PHRASES", "false")
