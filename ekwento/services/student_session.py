"""
Student identity carried in a signed cookie.

Students have no accounts. Who they are is the (name, section, device id)
triple they entered, plus the code they were first admitted with, signed
with the server secret so the fields can be trusted once the signature
checks out.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from ekwento.config import settings
from ekwento.services.result import UnauthorizedError, ValidationError
from ekwento.utils.timeutils import utcnow

STUDENT_INFO_COOKIE = "student_info"
PRIVACY_CONSENT_COOKIE = "privacy_consent"
MIN_FIELD_LENGTH = 2


@dataclass(frozen=True)
class StudentIdentity:
    name: str
    section: str
    device_id: str
    authorized_code: Optional[str] = None
    issued_at: Optional[datetime] = None


class StudentSessionService:

    @staticmethod
    def issue_token(identity: StudentIdentity) -> str:
        now = utcnow()
        payload = {
            "name": identity.name,
            "section": identity.section,
            "device_id": identity.device_id,
            "authorized_code": identity.authorized_code,
            "iat": now,
            "exp": now + timedelta(seconds=settings.student_cookie_max_age),
        }
        return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)

    @staticmethod
    def read_token(token: Optional[str]) -> StudentIdentity:
        if not token:
            raise UnauthorizedError("No student session found")
        try:
            payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        except JWTError:
            raise UnauthorizedError("Invalid student session")

        name = payload.get("name")
        section = payload.get("section")
        if not name or not section:
            raise UnauthorizedError("Incomplete student information")

        issued_at = payload.get("iat")
        return StudentIdentity(
            name=name,
            section=section,
            device_id=payload.get("device_id") or "",
            authorized_code=payload.get("authorized_code"),
            issued_at=datetime.fromtimestamp(issued_at, timezone.utc).replace(tzinfo=None) if issued_at else None
        )

    @staticmethod
    def register_student(name: Optional[str], section: Optional[str], code: str,
                         device_id: Optional[str] = None) -> StudentIdentity:
        name = (name or "").strip()
        section = (section or "").strip()
        if not name or not section:
            raise ValidationError("Please fill in all required information.")
        if len(name) < MIN_FIELD_LENGTH or len(section) < MIN_FIELD_LENGTH:
            raise ValidationError("Name and section must be at least 2 characters long.")

        return StudentIdentity(
            name=name,
            section=section,
            device_id=device_id or str(uuid.uuid4()),
            authorized_code=code.strip().upper() if code else None
        )

    @staticmethod
    def with_authorized_code(identity: StudentIdentity, code: str) -> StudentIdentity:
        return replace(identity, authorized_code=code.strip().upper())

student_session_service = StudentSessionService()
