from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.database import get_db
from ekwento.dependencies import get_current_user
from ekwento.models.user import User
from ekwento.schemas.word_search import WordSearchCreate, WordSearchStatusUpdate
from ekwento.services.word_search_service import word_search_service

# Students play without signing in
public_router = APIRouter(prefix="/games", tags=["games"])

router = APIRouter(prefix="/word-searches", tags=["games"])

@public_router.get("/word-search")
async def list_active_word_searches(db: Session = Depends(get_db)):
    puzzles = raise_for_result(word_search_service.get_word_searches(db, active_only=True))
    return {"success": True, "word_searches": puzzles}

@public_router.get("/word-search/{word_search_id}")
async def get_active_word_search(word_search_id: int, db: Session = Depends(get_db)):
    puzzle = raise_for_result(
        word_search_service.get_word_search_by_id(db, word_search_id, active_only=True)
    )
    return {"success": True, "word_search": puzzle}

@router.get("")
async def get_word_searches(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "word_searches": raise_for_result(word_search_service.get_word_searches(db))}

@router.post("")
async def create_word_search(
    request: WordSearchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    puzzle = raise_for_result(word_search_service.create_word_search(db, request))
    return {"success": True, "word_search": puzzle}

@router.get("/{word_search_id}")
async def get_word_search(
    word_search_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    puzzle = raise_for_result(word_search_service.get_word_search_by_id(db, word_search_id))
    return {"success": True, "word_search": puzzle}

@router.patch("/{word_search_id}/status")
async def update_word_search_status(
    word_search_id: int,
    request: WordSearchStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    puzzle = raise_for_result(word_search_service.update_word_search_status(db, word_search_id, request.status))
    return {"success": True, "word_search": puzzle}

@router.delete("/{word_search_id}")
async def delete_word_search(
    word_search_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    raise_for_result(word_search_service.delete_word_search(db, word_search_id))
    return {"success": True, "message": "Word search deleted successfully"}
