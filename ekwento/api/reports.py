from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.database import get_db
from ekwento.dependencies import get_current_user
from ekwento.models.user import User
from ekwento.services.report_service import report_service
from ekwento.services.submission_service import submission_service
from ekwento.services.view_service import view_service

router = APIRouter(prefix="/reports", tags=["reports"])

@router.get("/weekly-trends")
async def get_weekly_trends(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Dashboard deltas between this week and last week"""
    return {"success": True, "trends": raise_for_result(report_service.get_weekly_trends(db))}

@router.get("/codes")
async def get_codes_with_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "codes": raise_for_result(report_service.get_codes_with_stats(db))}

@router.get("/codes/{code_id}")
async def get_code_details(
    code_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    details = raise_for_result(report_service.get_code_details_with_student_data(db, code_id))
    return {"success": True, **details.model_dump()}

@router.get("/codes/{code_id}/submission")
async def get_student_submission(
    code_id: int,
    full_name: str = Query(...),
    section: str = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    submission = raise_for_result(
        report_service.get_student_submission_details(db, code_id, full_name, section)
    )
    return {"success": True, "submission": submission}

@router.get("/views")
async def get_view_stats(
    story_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stats = raise_for_result(view_service.get_story_view_stats(db, story_id))
    return {"success": True, **stats.model_dump()}

@router.get("/score-drift")
async def get_score_drift(
    story_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Submissions whose stored score disagrees with their answers"""
    drifted = raise_for_result(submission_service.find_score_drift(db, story_id))
    return {"success": True, "count": len(drifted), "submissions": drifted}

@router.get("/submissions/{submission_id}/verify")
async def verify_submission(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    report = raise_for_result(submission_service.verify_submission_score(db, submission_id))
    return {"success": True, "report": report}
