"""
Uniform service outcome.

Service entry points never raise to their callers. Bodies raise the
ServiceError subclasses below; the ``service_call`` decorator rolls the
session back, logs, and hands back a ``ServiceResult`` that callers branch
on via ``success``.
"""

import enum
import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from sqlalchemy.orm import Session

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    not_found = "not_found"
    validation = "validation"
    conflict = "conflict"
    unauthorized = "unauthorized"
    unknown = "unknown"


class ServiceError(Exception):
    kind = ErrorKind.unknown

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    kind = ErrorKind.not_found


class ValidationError(ServiceError):
    kind = ErrorKind.validation


class ConflictError(ServiceError):
    kind = ErrorKind.conflict


class UnauthorizedError(ServiceError):
    kind = ErrorKind.unauthorized


@dataclass
class ServiceResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}


def ok(data: Any = None) -> ServiceResult:
    return ServiceResult(success=True, data=data)


def err(kind: ErrorKind, message: str) -> ServiceResult:
    return ServiceResult(success=False, error=message, kind=kind)


def _find_session(args, kwargs) -> Optional[Session]:
    db = kwargs.get("db")
    if db is None and args and isinstance(args[0], Session):
        db = args[0]
    return db


def service_call(fallback_message: str) -> Callable:
    """Convert a service body's return value or exception into a ServiceResult.

    ``fallback_message`` is what callers see for unexpected failures; the
    underlying exception only goes to the log.
    """
    def decorator(func):
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> ServiceResult:
            try:
                value = func(*args, **kwargs)
            except ServiceError as e:
                db = _find_session(args, kwargs)
                if db is not None:
                    db.rollback()
                logger.warning(f"{func.__name__}: {e.message}")
                return err(e.kind, e.message)
            except Exception as e:
                db = _find_session(args, kwargs)
                if db is not None:
                    db.rollback()
                logger.error(f"{fallback_message}: {str(e)}")
                return err(ErrorKind.unknown, fallback_message)

            if isinstance(value, ServiceResult):
                return value
            return ok(value)

        return wrapper

    return decorator
