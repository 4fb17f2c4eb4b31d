"""
Validation gates for compile stage boundaries.

A gate logs every warning in a result and raises ValidationError when
the result holds any FAIL issue.
"""

import logging
from typing import Optional

from .core import ValidationResult, ValidationError

logger = logging.getLogger(__name__)


def enforce_gate(
    result: ValidationResult,
    fail_fast: bool = True,
    log_warnings: bool = True
) -> ValidationResult:
    """Apply a validation gate to a result.

    Args:
        result: Result of a stage's checks
        fail_fast: If True, raise ValidationError on FAIL issues
        log_warnings: If True, log WARN issues

    Returns:
        The result, for chaining

    Raises:
        ValidationError: If fail_fast=True and the result failed
    """
    if log_warnings:
        for issue in result.warnings:
            logger.warning(str(issue))

    if fail_fast and result.failed:
        logger.error("Validation failed at %s: %d errors", result.stage, len(result.errors))
        raise ValidationError(result)

    return result


class ValidationGateContext:
    """Context manager collecting several results behind one gate.

    Usage:
        with ValidationGateContext() as gate:
            gate.add(validate_input(surfaces))
            gate.add(validate_export(surfaces))
    """

    def __init__(self, fail_fast: bool = True, log_warnings: bool = True):
        self.fail_fast = fail_fast
        self.log_warnings = log_warnings
        self._result: Optional[ValidationResult] = None

    def __enter__(self) -> 'ValidationGateContext':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None and self._result is not None:
            enforce_gate(self._result, self.fail_fast, self.log_warnings)
        return False

    def add(self, result: ValidationResult) -> None:
        if self._result is None:
            self._result = ValidationResult(stage=result.stage)
        self._result.merge(result)

    @property
    def result(self) -> Optional[ValidationResult]:
        return self._result
