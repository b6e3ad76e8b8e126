"""Reference validation engine driving coverage instrumentation."""

from .validator import ValidationIssue, ValidationResult, Validator

__all__ = ["ValidationIssue", "ValidationResult", "Validator"]
