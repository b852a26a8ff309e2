from typing import Optional
from sqlalchemy.orm import Session
from ekwento.models.system import (
    SystemConfig, DEFAULT_CHOICES_COUNT, DEFAULT_MAX_CHOICES_COUNT, DEFAULT_MIN_CHOICES_COUNT
)
from ekwento.schemas.system import SystemConfigResponse, SystemConfigUpdate
from ekwento.services.notification_service import notification_service
from ekwento.services.result import ValidationError, service_call
import logging

logger = logging.getLogger(__name__)

# One choice per letter A-Z
ABSOLUTE_MAX_CHOICES = 26
ABSOLUTE_MIN_CHOICES = 2

class SystemConfigService:

    @staticmethod
    def load_config(db: Session) -> SystemConfig:
        """Return the single config row, creating the defaults on first use"""
        config = db.query(SystemConfig).order_by(SystemConfig.id).first()
        if not config:
            config = SystemConfig(
                default_choices_count=DEFAULT_CHOICES_COUNT,
                max_choices_count=DEFAULT_MAX_CHOICES_COUNT,
                min_choices_count=DEFAULT_MIN_CHOICES_COUNT
            )
            db.add(config)
            db.commit()
            db.refresh(config)
        return config

    @staticmethod
    def validate_limits(default_count: int, min_count: int, max_count: int) -> None:
        if min_count < ABSOLUTE_MIN_CHOICES:
            raise ValidationError("Minimum choices count cannot be less than 2")
        if max_count > ABSOLUTE_MAX_CHOICES:
            raise ValidationError("Maximum choices count cannot exceed 26 (A-Z)")
        if min_count > max_count:
            raise ValidationError("Minimum choices count cannot be greater than maximum choices count")
        if default_count < min_count:
            raise ValidationError("Default choices count cannot be less than minimum choices count")
        if default_count > max_count:
            raise ValidationError("Default choices count cannot be greater than maximum choices count")

    @staticmethod
    @service_call("Failed to fetch system configuration")
    def get_system_config(db: Session) -> SystemConfigResponse:
        return SystemConfigResponse.model_validate(SystemConfigService.load_config(db))

    @staticmethod
    @service_call("Failed to update system configuration")
    def update_system_config(db: Session, data: SystemConfigUpdate, user_id: Optional[int] = None) -> SystemConfigResponse:
        config = SystemConfigService.load_config(db)

        # Validate against the values the row will hold after the update
        merged = {
            "default_choices_count": config.default_choices_count,
            "min_choices_count": config.min_choices_count,
            "max_choices_count": config.max_choices_count,
            **data.model_dump(exclude_none=True)
        }
        SystemConfigService.validate_limits(
            merged["default_choices_count"], merged["min_choices_count"], merged["max_choices_count"]
        )

        config.default_choices_count = merged["default_choices_count"]
        config.min_choices_count = merged["min_choices_count"]
        config.max_choices_count = merged["max_choices_count"]
        db.commit()
        db.refresh(config)

        logger.info(
            f"System config updated: default={config.default_choices_count}, "
            f"min={config.min_choices_count}, max={config.max_choices_count}"
        )
        notification_service.create_notification(
            db, "system_config_updated", "System configuration updated", user_id
        )
        return SystemConfigResponse.model_validate(config)

    @staticmethod
    @service_call("Failed to reset system configuration")
    def reset_system_config(db: Session, user_id: Optional[int] = None) -> SystemConfigResponse:
        config = SystemConfigService.load_config(db)
        config.default_choices_count = DEFAULT_CHOICES_COUNT
        config.max_choices_count = DEFAULT_MAX_CHOICES_COUNT
        config.min_choices_count = DEFAULT_MIN_CHOICES_COUNT
        db.commit()
        db.refresh(config)

        notification_service.create_notification(
            db, "system_config_reset", "System configuration reset to defaults", user_id
        )
        return SystemConfigResponse.model_validate(config)

system_config_service = SystemConfigService()
