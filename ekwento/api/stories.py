from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.database import get_db
from ekwento.dependencies import get_current_user
from ekwento.models.user import User
from ekwento.schemas.quiz import StoryWithQuizCreate, StoryQuizReplace
from ekwento.schemas.stories import StoryCreate, StoryUpdate
from ekwento.services.quiz_service import quiz_service
from ekwento.services.story_service import story_service
from ekwento.services.view_service import view_service

router = APIRouter(prefix="/stories", tags=["stories"])

@router.get("")
async def get_stories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Stories with their category and usage counts"""
    return {"success": True, "stories": raise_for_result(story_service.get_stories(db))}

@router.get("/with-quiz")
async def get_stories_with_quiz(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "stories": raise_for_result(story_service.get_stories_with_quiz(db))}

@router.post("")
async def create_story(
    request: StoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    story = raise_for_result(story_service.create_story(db, request, current_user.id))
    return {"success": True, "story": story}

@router.post("/with-quiz")
async def create_story_with_quiz(
    request: StoryWithQuizCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a story and its quiz in one transaction"""
    result = raise_for_result(quiz_service.create_story_with_quiz(db, request, current_user.id))
    return {"success": True, **result}

@router.get("/{story_id}")
async def get_story(
    story_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "story": raise_for_result(story_service.get_story_by_id(db, story_id))}

@router.put("/{story_id}")
async def update_story(
    story_id: int,
    request: StoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    story = raise_for_result(story_service.update_story(db, story_id, request, current_user.id))
    return {"success": True, "story": story}

@router.delete("/{story_id}")
async def delete_story(
    story_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    raise_for_result(story_service.delete_story(db, story_id, current_user.id))
    return {"success": True, "message": "Story deleted successfully"}

@router.post("/{story_id}/restore")
async def restore_story(
    story_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    story = raise_for_result(story_service.restore_story(db, story_id))
    return {"success": True, "story": story}

@router.put("/{story_id}/quiz")
async def replace_story_quiz(
    story_id: int,
    request: StoryQuizReplace,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Replace every quiz item of the story"""
    items = raise_for_result(
        quiz_service.update_story_quiz_items(db, story_id, request.quiz_items, current_user.id)
    )
    return {"success": True, "quiz_items": items}

@router.get("/{story_id}/views")
async def get_story_views(
    story_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stats = raise_for_result(view_service.get_story_view_stats(db, story_id))
    return {"success": True, **stats.model_dump()}
