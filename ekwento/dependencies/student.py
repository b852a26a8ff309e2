from typing import Optional
from fastapi import HTTPException, Request, status
from ekwento.services.result import UnauthorizedError
from ekwento.services.student_session import (
    StudentIdentity, student_session_service, STUDENT_INFO_COOKIE, PRIVACY_CONSENT_COOKIE
)
import logging

logger = logging.getLogger(__name__)

def _info_redirect(code: Optional[str]) -> str:
    return f"/student/info?code={code.strip().upper()}" if code else "/student/info"

async def get_student_identity(request: Request) -> StudentIdentity:
    """Trusted student identity from the signed session cookie"""
    code = request.path_params.get("code") or request.query_params.get("code")

    token = request.cookies.get(STUDENT_INFO_COOKIE)
    if request.cookies.get(PRIVACY_CONSENT_COOKIE) != "true" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "message": "Please enter your information first",
                "redirect_to": _info_redirect(code)
            }
        )

    try:
        return student_session_service.read_token(token)
    except UnauthorizedError as e:
        logger.warning(f"Rejected student session: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "message": e.message,
                "redirect_to": _info_redirect(code)
            }
        )
