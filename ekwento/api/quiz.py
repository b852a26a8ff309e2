from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.database import get_db
from ekwento.dependencies import get_current_user
from ekwento.models.user import User
from ekwento.schemas.quiz import QuizItemCreate, QuizItemUpdate
from ekwento.services.quiz_service import quiz_service

router = APIRouter(prefix="/quiz", tags=["quiz"])

@router.get("/story/{story_id}")
async def get_story_quiz(
    story_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    items = raise_for_result(quiz_service.get_quiz_items_by_story(db, story_id))
    return {"success": True, "story_id": story_id, "quiz_items": items}

@router.post("/story/{story_id}")
async def create_quiz_item(
    story_id: int,
    request: QuizItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    item = raise_for_result(quiz_service.create_quiz_item(db, story_id, request, current_user.id))
    return {"success": True, "quiz_item": item}

@router.get("/{quiz_item_id}")
async def get_quiz_item(
    quiz_item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "quiz_item": raise_for_result(quiz_service.get_quiz_item_by_id(db, quiz_item_id))}

@router.put("/{quiz_item_id}")
async def update_quiz_item(
    quiz_item_id: int,
    request: QuizItemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    item = raise_for_result(quiz_service.update_quiz_item(db, quiz_item_id, request, current_user.id))
    return {"success": True, "quiz_item": item}

@router.delete("/{quiz_item_id}")
async def delete_quiz_item(
    quiz_item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    raise_for_result(quiz_service.delete_quiz_item(db, quiz_item_id))
    return {"success": True, "message": "Quiz item deleted successfully"}
