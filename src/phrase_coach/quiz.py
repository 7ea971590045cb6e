"""Multiple-choice question construction.

四択の出題と正誤判定。正誤は quality (既定: 正解 5 / 不正解 1) に写像して
スケジューラへ渡す。
"""

from __future__ import annotations

import random
from typing import Optional

from .config import settings
from .models.phrase import Phrase, QuizChoice, QuizQuestion, Side


def answer_side(front: Side) -> Side:
    return "en" if front == "hr" else "hr"


def build_question(
    card: Phrase,
    pool: list[Phrase],
    front: Side = "hr",
    *,
    rng: Optional[random.Random] = None,
    choice_count: Optional[int] = None,
) -> QuizQuestion:
    """Build a question for ``card`` with distractors drawn from ``pool``.

    The card itself is always among the choices; distractors never repeat it.
    """
    source = rng if rng is not None else random.Random()
    count = choice_count if choice_count is not None else settings.quiz_choice_count
    others = [p for p in pool if p.id != card.id]
    distractors = source.sample(others, k=min(len(others), max(0, count - 1)))
    picked = distractors + [card]
    source.shuffle(picked)
    back = answer_side(front)
    return QuizQuestion(
        phrase_id=card.id,
        front=front,
        prompt=card.side(front),
        category=card.category,
        note=card.note,
        choices=[QuizChoice(id=p.id, text=p.side(back)) for p in picked],
    )


def is_correct(card: Phrase, choice: Phrase, front: Side) -> bool:
    """Compare answer-side text, so two phrases sharing a translation both count."""
    back = answer_side(front)
    return choice.side(back) == card.side(back)


def quality_for_answer(correct: bool) -> int:
    return settings.correct_quality if correct else settings.incorrect_quality
