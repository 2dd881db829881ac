"""Validation and integrity result models"""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class ErrorType(str, Enum):
    """Which rule family produced a validation error"""
    TEMPLATE = "template"
    TECHNICAL = "technical"
    ASSET = "asset"
    STRUCTURE = "structure"


class Severity(str, Enum):
    """Error severity levels for validation"""
    CRITICAL = "critical"  # Broken rendering or rejected by clients
    MAJOR = "major"        # Missing required content or limits exceeded
    MINOR = "minor"        # Cosmetic or manifest bookkeeping


class WarningType(str, Enum):
    """Warning categories - never affect validity"""
    PERFORMANCE = "performance"
    ACCESSIBILITY = "accessibility"
    COMPATIBILITY = "compatibility"
    RESPONSIVE = "responsive"


class ValidationError(BaseModel):
    """Single rule violation found in an HTML template"""
    type: ErrorType
    severity: Severity
    message: str
    location: Optional[str] = None
    suggestion: Optional[str] = None


class ValidationWarning(BaseModel):
    """Advisory finding (client compatibility, accessibility)"""
    type: WarningType
    message: str
    suggestion: Optional[str] = None


class ValidationResult(BaseModel):
    """Aggregate of the structural checks for one HTML string"""
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationWarning] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        # Warnings never affect validity
        return len(self.errors) == 0

    def count_by_severity(self) -> Dict[str, int]:
        counts = {severity.value: 0 for severity in Severity}
        for error in self.errors:
            counts[error.severity.value] += 1
        return counts

    def summary(self) -> Dict[str, int]:
        """Counts used by the validation report"""
        counts = self.count_by_severity()
        return {
            "total_errors": len(self.errors),
            "total_warnings": len(self.warnings),
            "critical_errors": counts[Severity.CRITICAL.value],
            "major_errors": counts[Severity.MAJOR.value],
            "minor_errors": counts[Severity.MINOR.value],
        }

    def to_report(self) -> Dict:
        return {
            "is_valid": self.is_valid,
            "errors": [error.model_dump(mode="json", exclude_none=True) for error in self.errors],
            "warnings": [warning.model_dump(mode="json", exclude_none=True) for warning in self.warnings],
        }


class IntegrityDetails(BaseModel):
    """One flag per integrity sub-check; False means that check added an issue"""
    title_match: bool = True
    main_text_match: bool = True
    image_count_match: bool = True
    link_count_match: bool = True
    cta_buttons_match: bool = True
    structure_valid: bool = True
    meta_tags_match: bool = True
    css_integrity_match: bool = True


class IntegrityCheckResult(BaseModel):
    """Outcome of comparing an original HTML document with a modified one"""
    issues: List[str] = Field(default_factory=list)
    details: IntegrityDetails = Field(default_factory=IntegrityDetails)

    @property
    def is_valid(self) -> bool:
        return len(self.issues) == 0

    def to_report(self) -> Dict:
        return {
            "is_valid": self.is_valid,
            "issues": list(self.issues),
            "details": self.details.model_dump(),
        }
