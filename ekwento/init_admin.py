from ekwento.config import settings
from ekwento.database import SessionLocal
from ekwento.models.user import User, UserRole, UserStatus
import logging

logger = logging.getLogger(__name__)

def create_admin():
    """Mirror the configured admin account if it doesn't exist"""
    if not settings.admin_email:
        return

    admin_email = settings.admin_email.strip().lower()
    db = SessionLocal()
    try:
        existing_admin = db.query(User).filter(User.email == admin_email).first()
        if existing_admin:
            return

        admin = User(
            email=admin_email,
            first_name="Admin",
            last_name="User",
            role=UserRole.admin,
            status=UserStatus.active
        )
        db.add(admin)
        db.commit()
        logger.info(f"Admin created: {admin_email}")
    finally:
        db.close()
