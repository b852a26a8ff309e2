from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.database import get_db
from ekwento.dependencies import get_current_user
from ekwento.models.user import User
from ekwento.services.notification_service import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])

@router.get("")
async def get_notifications(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Recent activity, newest first"""
    notifications = raise_for_result(notification_service.get_notifications(db, limit=limit))
    return {"success": True, "notifications": notifications}

@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification = raise_for_result(notification_service.mark_notification_read(db, notification_id))
    return {"success": True, "notification": notification}
