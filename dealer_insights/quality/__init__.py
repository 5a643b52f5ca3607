"""
Data Quality Module
"""
from .validators import (
    RecordValidator,
    ValidationResult,
    create_displays_validator,
    create_orders_validator,
)

__all__ = [
    "RecordValidator",
    "ValidationResult",
    "create_displays_validator",
    "create_orders_validator",
]
