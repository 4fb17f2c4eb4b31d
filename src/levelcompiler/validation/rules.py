"""
Validation rule definitions.

Each rule has:
- Code: Unique identifier (e.g., "INPUT-001")
- Severity: FAIL, WARN, or INFO
- Rule reference: The constraint being enforced
- Message template: Human-readable description
- Remediation: Suggested fix

Rules are organized by category:
- INPUT: Source surfaces and seed points
- EXPORT: Level data constraints
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .core import Severity, ValidationIssue


@dataclass(frozen=True)
class ValidationRule:
    """Definition of a validation rule.

    Attributes:
        code: Unique rule code (e.g., "INPUT-001")
        severity: Default severity for this rule
        rule_reference: The constraint being enforced
        message_template: Template for error message (use {placeholders})
        remediation_template: Template for suggested fix
        description: Full description of the rule
    """
    code: str
    severity: Severity
    rule_reference: str
    message_template: str
    remediation_template: Optional[str] = None
    description: Optional[str] = None

    def format_message(self, **kwargs) -> str:
        return self.message_template.format(**kwargs)

    def format_remediation(self, **kwargs) -> Optional[str]:
        if self.remediation_template:
            return self.remediation_template.format(**kwargs)
        return None

    def issue(self, location: Optional[str] = None, **kwargs) -> ValidationIssue:
        """Build an issue for this rule from template values."""
        return ValidationIssue(
            severity=self.severity,
            code=self.code,
            message=self.format_message(**kwargs),
            rule_reference=self.rule_reference,
            remediation=self.format_remediation(**kwargs),
            location=location,
        )


# =============================================================================
# INPUT RULES (INPUT)
# =============================================================================

INPUT_001 = ValidationRule(
    code="INPUT-001",
    severity=Severity.FAIL,
    rule_reference="Every wall surface names the room it bounds",
    message_template="Wall surface has no room: {points}",
    remediation_template="Add a 'room' entry to the surface metadata or mark it as a passage",
    description="Leaves are assigned the room of their walls; a wall without one cannot be placed"
)

INPUT_002 = ValidationRule(
    code="INPUT-002",
    severity=Severity.FAIL,
    rule_reference="Surfaces have non-zero length or area",
    message_template="Degenerate surface with measure {measure}: {points}",
    remediation_template="Remove the surface or move its vertices apart",
    description="Zero-measure surfaces cannot be classified against partition planes"
)

INPUT_003 = ValidationRule(
    code="INPUT-003",
    severity=Severity.FAIL,
    rule_reference="No surface appears twice",
    message_template="Surface {index} duplicates surface {first}",
    remediation_template="Remove one of the duplicated surfaces",
    description="Identical surfaces double-count in plane scoring and in the level data"
)

INPUT_004 = ValidationRule(
    code="INPUT-004",
    severity=Severity.WARN,
    rule_reference="Exhaustive plane selection is quadratic in the surface count",
    message_template="{count} surfaces exceeds the configured limit of {limit}",
    remediation_template="Use the axial strategy or raise the surface limit",
    description="Large inputs are slow to partition with the exhaustive strategy"
)

INPUT_005 = ValidationRule(
    code="INPUT-005",
    severity=Severity.WARN,
    rule_reference="Interior points lie in open space",
    message_template="Interior point ({point}) lies inside solid geometry",
    remediation_template="Move the point into a room or remove it",
    description="Points inside solid are ignored by the leak check"
)


# =============================================================================
# EXPORT RULES (EXPORT)
# =============================================================================

EXPORT_001 = ValidationRule(
    code="EXPORT-001",
    severity=Severity.FAIL,
    rule_reference="Room names are stored as ASCII",
    message_template="Room name is not ASCII: {room!r}",
    remediation_template="Rename the room using ASCII characters only",
    description="The level data format stores room names as length-prefixed ASCII"
)


ALL_RULES: Dict[str, ValidationRule] = {
    rule.code: rule
    for rule in (INPUT_001, INPUT_002, INPUT_003, INPUT_004, INPUT_005, EXPORT_001)
}


def get_rule(code: str) -> Optional[ValidationRule]:
    return ALL_RULES.get(code)
