from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Query

from ..logging import logger
from ..models.phrase import ALL_CATEGORIES, ImportResponse, Phrase, PhraseCreateRequest
from ..store import store
from ..transfer import ImportFormatError, clean_import, export_payload

router = APIRouter(tags=["phrases"])


@router.get("", response_model=list[Phrase], summary="フレーズ一覧（カテゴリ/検索で絞り込み）")
async def list_phrases(
    category: Optional[str] = Query(default=None, description="Category name or 'All'"),
    q: Optional[str] = Query(default=None, description="Case-insensitive search over both sides"),
) -> list[Phrase]:
    return store.list_phrases(category=category, query=q)


@router.post("", response_model=Phrase, status_code=201, summary="フレーズを追加")
async def add_phrase(req: PhraseCreateRequest) -> Phrase:
    """Add a phrase with the initial memory state (due immediately)."""
    phrase = store.add_phrase(hr=req.hr, en=req.en, category=req.cat, note=req.note)
    logger.info("phrase_added", phrase_id=phrase.id, category=phrase.category)
    return phrase


@router.get("/categories", summary="カテゴリ一覧（先頭は 'All'）")
async def list_categories() -> list[str]:
    return [ALL_CATEGORIES, *store.categories()]


@router.get("/export", summary="全フレーズを JSON 配列でエクスポート")
async def export_phrases() -> list[dict[str, Any]]:
    return export_payload(store.export_phrases())


@router.post("/import", response_model=ImportResponse, summary="JSON 配列からフレーズを取り込む")
async def import_phrases(payload: Any = Body(...)) -> ImportResponse:
    """Import an exported JSON array.

    - 配列でない / 有効なレコードが 0 件 → 400
    - 同じ id のフレーズは置き換える
    """
    try:
        phrases = clean_import(payload)
    except ImportFormatError as exc:
        logger.warning("phrase_import_failed", error=str(exc))
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    imported = store.upsert_phrases(phrases)
    skipped = len(payload) - imported
    logger.info("phrase_import_complete", imported=imported, skipped=skipped)
    return ImportResponse(imported=imported, skipped=skipped)


@router.get("/{phrase_id}", response_model=Phrase, summary="フレーズを取得")
async def get_phrase(phrase_id: str) -> Phrase:
    phrase = store.get_phrase(phrase_id)
    if phrase is None:
        raise HTTPException(status_code=404, detail="phrase not found")
    return phrase


@router.delete("/{phrase_id}", status_code=204, summary="フレーズを削除")
async def delete_phrase(phrase_id: str) -> None:
    if not store.delete_phrase(phrase_id):
        raise HTTPException(status_code=404, detail="phrase not found")
    logger.info("phrase_deleted", phrase_id=phrase_id)
