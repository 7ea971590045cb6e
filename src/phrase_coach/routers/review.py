from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from ..models.phrase import (
    AnswerRequest,
    AnswerResponse,
    GradeRequest,
    GradeResponse,
    NextCardResponse,
    ReviewStatsResponse,
    Side,
)
from ..quiz import build_question, is_correct, quality_for_answer
from ..srs import InvalidQualityError
from ..store import store

router = APIRouter(tags=["review"])


@router.get("/next", response_model=NextCardResponse, summary="次に出題するカードを四択で取得")
async def review_next(
    front: Side = Query(default="hr", description="Side shown as the prompt"),
    category: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None),
) -> NextCardResponse:
    """Return the next due card as a multiple-choice question.

    due 済みカードが無い場合でもフィルタ先頭のカードを前倒しで出題する。
    フィルタに一致するカードが無ければ question は null。
    """
    card = store.next_due(category=category, query=q)
    due_now = store.due_count()
    if card is None:
        return NextCardResponse(question=None, due_now=due_now)
    pool = store.list_phrases(category=category, query=q)
    return NextCardResponse(question=build_question(card, pool, front), due_now=due_now)


@router.post("/answer", response_model=AnswerResponse, summary="四択の回答を採点して記憶状態を更新")
async def review_answer(req: AnswerRequest) -> AnswerResponse:
    card = store.get_phrase(req.phrase_id)
    if card is None:
        raise HTTPException(status_code=404, detail="phrase not found")
    choice = store.get_phrase(req.choice_id)
    if choice is None:
        raise HTTPException(status_code=404, detail="choice not found")

    correct = is_correct(card, choice, req.front)
    quality = quality_for_answer(correct)
    updated = store.grade(card.id, quality)
    if updated is None:
        # 回答の間に削除された
        raise HTTPException(status_code=404, detail="phrase not found")
    return AnswerResponse(correct=correct, quality=quality, srs=updated.srs)


@router.post("/grade", response_model=GradeResponse, summary="quality (0..5) を直接指定して採点")
async def review_grade(req: GradeRequest) -> GradeResponse:
    try:
        updated = store.grade(req.phrase_id, req.quality)
    except InvalidQualityError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if updated is None:
        raise HTTPException(status_code=404, detail="phrase not found")
    return GradeResponse(ok=True, srs=updated.srs)


@router.get("/stats", response_model=ReviewStatsResponse, summary="due 件数と総件数")
async def review_stats() -> ReviewStatsResponse:
    return ReviewStatsResponse(due_now=store.due_count(), total=store.count())
