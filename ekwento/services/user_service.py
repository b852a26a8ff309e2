from typing import List, Optional
from sqlalchemy.orm import Session
from ekwento.models.user import User, UserStatus
from ekwento.schemas.users import UserCreate, UserInvite, UserUpdate, UserResponse
from ekwento.services.result import ConflictError, NotFoundError, ValidationError, service_call
from ekwento.utils.timeutils import utcnow
import logging

logger = logging.getLogger(__name__)

class UserService:

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(
            User.email == email.strip().lower(),
            User.deleted_at.is_(None)
        ).first()

    @staticmethod
    def _get_live(db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _ensure_email_free(db: Session, email: str, exclude_id: Optional[int] = None) -> None:
        query = db.query(User.id).filter(User.email == email)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ConflictError("A user with this email already exists")

    @staticmethod
    @service_call("Failed to update user status")
    def update_status_by_email(db: Session, email: Optional[str]) -> dict:
        """Called after a teacher accepts an invitation at the identity provider"""
        if not email or not email.strip():
            raise ValidationError("Email is required")

        user = UserService.get_user_by_email(db, email)
        if not user:
            raise NotFoundError("User not found")

        if user.status != UserStatus.invited:
            return {
                "updated": False,
                "message": "User status is already active or not invited",
                "status": user.status.value
            }

        user.status = UserStatus.active
        db.commit()
        logger.info(f"User {user.email} activated")
        return {
            "updated": True,
            "message": "User status updated to active",
            "status": user.status.value
        }

    @staticmethod
    @service_call("Failed to fetch users")
    def get_users(db: Session) -> List[UserResponse]:
        users = db.query(User).filter(User.deleted_at.is_(None)).order_by(User.created_at.desc(), User.id.desc()).all()
        return [UserResponse.model_validate(u) for u in users]

    @staticmethod
    @service_call("Failed to fetch user")
    def get_user_by_id(db: Session, user_id: int) -> UserResponse:
        return UserResponse.model_validate(UserService._get_live(db, user_id))

    @staticmethod
    def _add_user(db: Session, email: str, first_name: str, last_name: str, role, status) -> User:
        email = email.strip().lower()
        UserService._ensure_email_free(db, email)
        user = User(
            email=email,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=role,
            status=status
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    @service_call("Failed to create user")
    def create_user(db: Session, data: UserCreate) -> UserResponse:
        user = UserService._add_user(db, data.email, data.first_name, data.last_name, data.role, data.status)
        logger.info(f"User created: {user.email} ({user.role.value})")
        return UserResponse.model_validate(user)

    @staticmethod
    @service_call("Failed to invite user")
    def invite_user(db: Session, data: UserInvite) -> UserResponse:
        user = UserService._add_user(
            db, data.email, data.first_name, data.last_name, data.role, UserStatus.invited
        )
        logger.info(f"User invited: {user.email}")
        return UserResponse.model_validate(user)

    @staticmethod
    @service_call("Failed to update user")
    def update_user(db: Session, user_id: int, data: UserUpdate) -> UserResponse:
        user = UserService._get_live(db, user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            UserService._ensure_email_free(db, changes["email"], exclude_id=user.id)

        for field, value in changes.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
        return UserResponse.model_validate(user)

    @staticmethod
    @service_call("Failed to delete user")
    def delete_user(db: Session, user_id: int) -> UserResponse:
        user = UserService._get_live(db, user_id)
        user.deleted_at = utcnow()
        user.status = UserStatus.inactive
        db.commit()
        db.refresh(user)
        logger.info(f"User deleted: {user.email}")
        return UserResponse.model_validate(user)

user_service = UserService()
