from typing import List, Optional
from sqlalchemy.orm import Session
from ekwento.models.system import Notification
from ekwento.schemas.system import NotificationResponse
from ekwento.services.result import NotFoundError, service_call
import logging

logger = logging.getLogger(__name__)

class NotificationService:

    @staticmethod
    @service_call("Failed to create notification")
    def create_notification(db: Session, type: str, message: str, user_id: Optional[int] = None) -> None:
        """Record an activity entry; failures are logged and never reach the caller"""
        db.add(Notification(user_id=user_id, type=type, message=message, is_read=False))
        db.commit()

    @staticmethod
    @service_call("Failed to fetch notifications")
    def get_notifications(db: Session, user_id: Optional[int] = None, limit: int = 50) -> List[NotificationResponse]:
        query = db.query(Notification)
        if user_id is not None:
            query = query.filter(Notification.user_id == user_id)

        notifications = query.order_by(
            Notification.created_at.desc(), Notification.id.desc()
        ).limit(limit).all()
        return [NotificationResponse.model_validate(n) for n in notifications]

    @staticmethod
    @service_call("Failed to update notification")
    def mark_notification_read(db: Session, notification_id: int) -> NotificationResponse:
        notification = db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            raise NotFoundError("Notification not found")

        notification.is_read = True
        db.commit()
        db.refresh(notification)
        return NotificationResponse.model_validate(notification)

notification_service = NotificationService()
