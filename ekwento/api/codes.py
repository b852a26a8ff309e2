from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.database import get_db
from ekwento.dependencies import get_current_user
from ekwento.models.user import User
from ekwento.schemas.codes import CodeGenerateRequest, CodeStatusUpdate
from ekwento.services.code_service import code_service

router = APIRouter(prefix="/codes", tags=["codes"])

@router.get("")
async def list_codes(
    story_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "codes": raise_for_result(code_service.list_codes(db, story_id))}

@router.post("")
async def generate_code(
    request: CodeGenerateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Generate a fresh access code for a story"""
    code = raise_for_result(code_service.generate_access_code(db, request.story_id, current_user.id))
    return {"success": True, "code": code}

@router.patch("/{code_id}/status")
async def update_code_status(
    code_id: int,
    request: CodeStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    code = raise_for_result(code_service.update_code_status(db, code_id, request.status))
    return {"success": True, "code": code}

@router.delete("/{code_id}")
async def delete_code(
    code_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    raise_for_result(code_service.delete_code(db, code_id))
    return {"success": True, "message": "Code deleted successfully"}
