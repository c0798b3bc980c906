"""
Validation module for raw canvas data.
"""

from canvas_mermaid.validation.canvas_validator import (
    CanvasValidator,
    CanvasValidationResult,
    ValidationIssue,
    ValidationSeverity,
    raise_on_errors,
    sanitize_id,
    validate_canvas,
)

__all__ = [
    "CanvasValidator",
    "CanvasValidationResult",
    "ValidationIssue",
    "ValidationSeverity",
    "raise_on_errors",
    "sanitize_id",
    "validate_canvas",
]
