from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.config import settings
from ekwento.database import get_db
from ekwento.dependencies import get_student_identity
from ekwento.schemas.codes import CodeEntryRequest, ResolvedCode
from ekwento.schemas.quiz import QuizSubmitRequest, QuizSubmission
from ekwento.schemas.student import StudentInfoRequest, StudentSessionResponse
from ekwento.services.code_service import code_service
from ekwento.services.result import ServiceError, UnauthorizedError
from ekwento.services.student_session import (
    StudentIdentity, student_session_service, STUDENT_INFO_COOKIE, PRIVACY_CONSENT_COOKIE
)
from ekwento.services.submission_service import submission_service
from ekwento.services.view_service import view_service
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/student", tags=["student"])

UNAUTHORIZED_COUNTDOWN_SECONDS = 5

def set_student_cookies(response: Response, token: str) -> None:
    for key, value in ((STUDENT_INFO_COOKIE, token), (PRIVACY_CONSENT_COOKIE, "true")):
        response.set_cookie(
            key=key,
            value=value,
            max_age=settings.student_cookie_max_age,
            httponly=True,
            samesite="strict",
            secure=settings.cookie_secure,
            path="/"
        )

def _session_payload(identity: StudentIdentity) -> StudentSessionResponse:
    return StudentSessionResponse(
        name=identity.name,
        section=identity.section,
        device_id=identity.device_id,
        authorized_code=identity.authorized_code
    )

def _deny(identity: StudentIdentity, message: str):
    redirect_to = (
        f"/student/story/{identity.authorized_code}" if identity.authorized_code else "/student/code"
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "message": message,
            "countdown": UNAUTHORIZED_COUNTDOWN_SECONDS,
            "redirect_to": redirect_to
        }
    )

def _has_viewed(db: Session, identity: StudentIdentity, code: str) -> bool:
    return raise_for_result(view_service.has_student_viewed_story(
        db, code, identity.name, identity.section, identity.device_id
    )).has_viewed

def _record_view(db: Session, identity: StudentIdentity, code: str) -> None:
    result = view_service.track_story_view(db, code, identity.name, identity.section, identity.device_id)
    if not result.success:
        logger.warning(f"View not recorded for {identity.name} ({identity.section}) on {code}: {result.error}")

def _require_quiz_access(db: Session, identity: StudentIdentity, code: str) -> ResolvedCode:
    resolved = raise_for_result(code_service.resolve_code(db, code, active_only=False))
    if not _has_viewed(db, identity, resolved.code):
        _deny(identity, "Please watch the story before taking its quiz.")
    if not resolved.is_active:
        _deny(identity, "This quiz is no longer available.")
    return resolved

@router.post("/code")
async def enter_code(request: CodeEntryRequest, db: Session = Depends(get_db)):
    """Student code-entry form"""
    data = raise_for_result(code_service.validate_code_entry(db, request.code))
    return {"success": True, **data}

@router.post("/info")
async def submit_student_info(
    request: StudentInfoRequest,
    http_request: Request,
    response: Response,
    db: Session = Depends(get_db)
):
    """Register name and section for a code and issue the signed session cookie"""
    resolved = raise_for_result(code_service.resolve_code(db, request.code))

    device_id = request.device_id
    if not device_id:
        # Keep the device id of an existing session for the same student
        try:
            previous = student_session_service.read_token(http_request.cookies.get(STUDENT_INFO_COOKIE))
            if previous.name == (request.name or "").strip() and previous.section == (request.section or "").strip():
                device_id = previous.device_id
        except UnauthorizedError:
            pass

    try:
        identity = student_session_service.register_student(
            request.name, request.section, resolved.code, device_id
        )
    except ServiceError as e:
        logger.warning(f"Student registration refused: {e.message}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    set_student_cookies(response, student_session_service.issue_token(identity))
    logger.info(f"Student session issued: {identity.name} ({identity.section}) for {resolved.code}")
    return {
        "success": True,
        "student": _session_payload(identity),
        "redirect_to": f"/student/story/{resolved.code}"
    }

@router.get("/session")
async def get_session(identity: StudentIdentity = Depends(get_student_identity)):
    return {"success": True, "student": _session_payload(identity)}

@router.get("/library")
async def get_library(
    db: Session = Depends(get_db),
    identity: StudentIdentity = Depends(get_student_identity)
):
    """Stories this student has already opened"""
    stories = raise_for_result(view_service.get_student_viewed_stories(db, identity))
    return {"success": True, "stories": stories}

@router.get("/story/{code}")
async def get_story(
    code: str,
    db: Session = Depends(get_db),
    identity: StudentIdentity = Depends(get_student_identity)
):
    resolved = raise_for_result(code_service.resolve_code(db, code, active_only=False))

    if _has_viewed(db, identity, resolved.code):
        _record_view(db, identity, resolved.code)
    elif identity.authorized_code == resolved.code and resolved.is_active:
        _record_view(db, identity, resolved.code)
    else:
        _deny(identity, "You are not authorized to view this story.")

    taken = raise_for_result(submission_service.has_student_taken_quiz(
        db, resolved.code, identity.name, identity.section
    ))
    return {
        "success": True,
        "code": resolved.code,
        "is_active": resolved.is_active,
        "story": resolved.story.model_dump(exclude={"quiz_items"}),
        "has_quiz": bool(resolved.story.quiz_items),
        "has_taken_quiz": taken.has_taken
    }

@router.get("/quiz/{code}")
async def get_quiz(
    code: str,
    db: Session = Depends(get_db),
    identity: StudentIdentity = Depends(get_student_identity)
):
    resolved = _require_quiz_access(db, identity, code)

    taken = raise_for_result(submission_service.has_student_taken_quiz(
        db, resolved.code, identity.name, identity.section
    ))
    if taken.has_taken:
        return {
            "success": True,
            "already_taken": True,
            "redirect_to": f"/student/quiz/{resolved.code}/results"
        }

    return {
        "success": True,
        "already_taken": False,
        "code": resolved.code,
        "code_id": resolved.code_id,
        "story_id": resolved.story.id,
        "story_title": resolved.story.title,
        "quiz_items": resolved.story.quiz_items
    }

@router.post("/quiz/{code}/submit")
async def submit_quiz(
    code: str,
    request: QuizSubmitRequest,
    db: Session = Depends(get_db),
    identity: StudentIdentity = Depends(get_student_identity)
):
    resolved = _require_quiz_access(db, identity, code)

    outcome = raise_for_result(submission_service.submit_quiz_answers(db, QuizSubmission(
        code_id=resolved.code_id,
        story_id=resolved.story.id,
        full_name=identity.name,
        section=identity.section,
        device_id=identity.device_id,
        answers=request.answers
    )))
    return {
        "success": True,
        **outcome.model_dump(),
        "redirect_to": f"/student/quiz/{resolved.code}/results"
    }

@router.get("/quiz/{code}/results")
async def get_quiz_results(
    code: str,
    db: Session = Depends(get_db),
    identity: StudentIdentity = Depends(get_student_identity)
):
    resolved = raise_for_result(code_service.resolve_code(db, code, active_only=False))
    if not _has_viewed(db, identity, resolved.code):
        _deny(identity, "Please watch the story before viewing its quiz results.")

    results = raise_for_result(submission_service.get_submission_results_by_code(
        db, resolved.code, identity.name, identity.section
    ))
    return {"success": True, "results": results}
