from .base import (
    AppError,
    DomainError,
    InfrastructureError,
    ServiceUnavailableError,
    ValidationError,
)
from .http import handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
    "ServiceUnavailableError",
    "ValidationError",
    "handle_app_error",
    "register_error_handler",
]
