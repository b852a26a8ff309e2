from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.database import get_db
from ekwento.dependencies import get_current_admin
from ekwento.models.user import User
from ekwento.schemas.users import UserStatusUpdateRequest, UserCreate, UserInvite, UserUpdate
from ekwento.services.user_service import user_service

# Called by the identity provider flow, which carries no bearer token
public_router = APIRouter(prefix="/api/user", tags=["users"])

router = APIRouter(prefix="/users", tags=["users"])

@public_router.post("/update-status")
async def update_user_status(request: UserStatusUpdateRequest, db: Session = Depends(get_db)):
    """Activate an invited user once they accept their invitation"""
    result = raise_for_result(user_service.update_status_by_email(db, request.email))
    return {"success": True, **result}

@router.get("")
async def get_users(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    return {"success": True, "users": raise_for_result(user_service.get_users(db))}

@router.post("")
async def create_user(
    request: UserCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    return {"success": True, "user": raise_for_result(user_service.create_user(db, request))}

@router.post("/invite")
async def invite_user(
    request: UserInvite,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    return {"success": True, "user": raise_for_result(user_service.invite_user(db, request))}

@router.get("/{user_id}")
async def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    return {"success": True, "user": raise_for_result(user_service.get_user_by_id(db, user_id))}

@router.put("/{user_id}")
async def update_user(
    user_id: int,
    request: UserUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    return {"success": True, "user": raise_for_result(user_service.update_user(db, user_id, request))}

@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    raise_for_result(user_service.delete_user(db, user_id))
    return {"success": True, "message": "User deleted successfully"}
