from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..srs import MAX_QUALITY, MemoryState


DEFAULT_CATEGORY = "Custom"
ALL_CATEGORIES = "All"

Side = Literal["hr", "en"]


class Phrase(BaseModel):
    """A bilingual phrase record with its embedded memory state.

    JSON 表現（エクスポート/インポート）は `cat` / `createdAt` のキー名を使う。
    Python 側からは category / created_at で扱えるよう populate_by_name を有効化。
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    hr: str
    en: str
    category: str = Field(default=DEFAULT_CATEGORY, alias="cat")
    note: Optional[str] = None
    created_at: int = Field(default=0, ge=0, alias="createdAt")
    srs: MemoryState = Field(default_factory=MemoryState.initial)

    def side(self, name: Side) -> str:
        return self.hr if name == "hr" else self.en


class PhraseCreateRequest(BaseModel):
    """Request model for adding a phrase from the manage screen.

    両面 (hr/en) は空白のみを許容しない。カテゴリ未指定時は "Custom"。
    """

    hr: str = Field(min_length=1, max_length=200)
    en: str = Field(min_length=1, max_length=200)
    cat: str = Field(default=DEFAULT_CATEGORY, max_length=64)
    note: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("hr", "en")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("must not be blank")
        return cleaned


class ImportResponse(BaseModel):
    imported: int
    skipped: int


class QuizChoice(BaseModel):
    id: str
    text: str


class QuizQuestion(BaseModel):
    """One multiple-choice question: prompt side of the card plus shuffled answers."""

    phrase_id: str
    front: Side
    prompt: str
    category: str
    note: Optional[str] = None
    choices: list[QuizChoice]


class NextCardResponse(BaseModel):
    question: Optional[QuizQuestion] = None
    due_now: int


class AnswerRequest(BaseModel):
    phrase_id: str
    choice_id: str
    front: Side = "hr"


class AnswerResponse(BaseModel):
    correct: bool
    quality: int
    srs: MemoryState


class GradeRequest(BaseModel):
    """採点リクエスト。quality は 0..5（5=完全想起, 3=ぎりぎり合格, <3=失敗）。"""

    phrase_id: str
    quality: int = Field(ge=0, le=MAX_QUALITY)


class GradeResponse(BaseModel):
    ok: bool
    srs: MemoryState


class ReviewStatsResponse(BaseModel):
    due_now: int
    total: int
