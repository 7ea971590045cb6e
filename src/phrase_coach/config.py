from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources.types import NoDecode


DEFAULT_DB_PATH = ".data/phrases.sqlite3"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数から読み込まれるアプリ設定クラス。
    - environment: 実行環境（development/staging/production など）
    - phrase_db_path: フレーズと記憶状態を保存する SQLite ファイル
    - correct_quality / incorrect_quality: 四択の正誤をスケジューラの quality へ写像する値
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level / ルートロガーのレベル",
    )

    # --- 永続化 ---
    phrase_db_path: str = Field(
        default=DEFAULT_DB_PATH,
        description="Path to phrase SQLite database / フレーズ用SQLite DBパス",
    )
    seed_demo_phrases: bool = Field(
        default=True,
        description="Seed the starter deck into an empty store / 空のストアに初期フレーズを投入",
    )

    # --- 出題 ---
    quiz_choice_count: int = Field(
        default=4,
        ge=2,
        description="Number of choices per question including the answer / 正解を含む選択肢数",
    )
    correct_quality: int = Field(
        default=5,
        ge=0,
        le=5,
        description="Quality recorded for a correct pick / 正解時の quality",
    )
    incorrect_quality: int = Field(
        default=1,
        ge=0,
        le=5,
        description="Quality recorded for a wrong pick / 不正解時の quality",
    )

    allowed_origins: Annotated[List[str], NoDecode] = Field(
        default=["*"],
        description="CORS allowed origins (comma separated) / CORS 許可オリジン",
    )

    # Pydantic v2 settings config
    # - extra: .env に存在する未使用キーを無視
    # - case_sensitive: 環境変数キーの大小文字を区別しない
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


settings = Settings()
