"""
Input validation for the level compiler.

Checks run at stage boundaries of the compile pipeline; each returns a
ValidationResult, and enforce_gate() turns FAIL issues into a
ValidationError.
"""

from .core import (
    Severity,
    ValidationStage,
    ValidationIssue,
    ValidationResult,
    ValidationError,
)
from .rules import ValidationRule, ALL_RULES, get_rule
from .gates import enforce_gate, ValidationGateContext
from .checks import validate_input, validate_partition, validate_export

__all__ = [
    'Severity',
    'ValidationStage',
    'ValidationIssue',
    'ValidationResult',
    'ValidationError',
    'ValidationRule',
    'ALL_RULES',
    'get_rule',
    'enforce_gate',
    'ValidationGateContext',
    'validate_input',
    'validate_partition',
    'validate_export',
]
