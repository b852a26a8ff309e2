from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.database import get_db
from ekwento.dependencies import get_current_user
from ekwento.models.user import User
from ekwento.schemas.system import SystemConfigUpdate
from ekwento.services.system_config_service import system_config_service

router = APIRouter(prefix="/settings", tags=["settings"])

@router.get("")
async def get_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "config": raise_for_result(system_config_service.get_system_config(db))}

@router.put("")
async def update_settings(
    request: SystemConfigUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Change the choice-count limits used when authoring quiz items"""
    config = raise_for_result(system_config_service.update_system_config(db, request, current_user.id))
    return {"success": True, "config": config}

@router.post("/reset")
async def reset_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    config = raise_for_result(system_config_service.reset_system_config(db, current_user.id))
    return {"success": True, "config": config}
