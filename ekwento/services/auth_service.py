from datetime import timedelta
from typing import Optional
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from ekwento.config import settings
from ekwento.models.user import User
from ekwento.schemas.users import TokenData
from ekwento.utils.timeutils import utcnow

class AuthService:
    """Bearer tokens for teachers. Passwords live with the identity provider."""

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        if expires_delta:
            expire = utcnow() + expires_delta
        else:
            expire = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    @staticmethod
    def verify_token(token: str, credentials_exception) -> TokenData:
        try:
            payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
            email: str = payload.get("sub")
            if email is None:
                raise credentials_exception
            token_data = TokenData(email=email)
        except JWTError:
            raise credentials_exception
        return token_data

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(
            User.email == email.strip().lower(),
            User.deleted_at.is_(None)
        ).first()

auth_service = AuthService()
