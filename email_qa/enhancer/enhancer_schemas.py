"""Enhancer agent result schemas"""
from pydantic import BaseModel, ConfigDict
from typing import List, Literal, Optional

from email_qa.models.schemas import IntegrityCheckResult

PreferredVersion = Literal["original", "optimized"]


class EnhancementVersions(BaseModel):
    """Both variants plus the choice made by the protection logic"""
    model_config = ConfigDict(frozen=True)

    original: str
    optimized: str
    preferred: PreferredVersion


class SizeAnalysis(BaseModel):
    original_length: int
    optimized_length: int
    change_percent: float
    change_bytes: int

    @classmethod
    def compare(cls, original: str, optimized: str) -> "SizeAnalysis":
        original_length = len(original)
        optimized_length = len(optimized)
        change_bytes = optimized_length - original_length
        change_percent = (change_bytes / original_length) * 100 if original_length else 0.0
        return cls(
            original_length=original_length,
            optimized_length=optimized_length,
            change_percent=change_percent,
            change_bytes=change_bytes,
        )


class EnhancementValidation(BaseModel):
    """Protection status; integrity_check is None when the model call failed"""
    has_warnings: bool
    warning_reasons: List[str] = []
    integrity_check: Optional[IntegrityCheckResult] = None


class ProtectionDecision(BaseModel):
    should_prefer_original: bool
    reasons: List[str] = []
    integrity_check: IntegrityCheckResult


class EnhancementResult(BaseModel):
    """Outcome of one enhancement call"""
    enhanced_html: str  # preferred variant
    enhancements_made: List[str]
    versions: EnhancementVersions
    size_analysis: SizeAnalysis
    validation: EnhancementValidation

    @property
    def protection_triggered(self) -> bool:
        return self.versions.preferred == "original"

    def to_report(self) -> dict:
        """Report form without the HTML bodies"""
        return {
            "preferred": self.versions.preferred,
            "enhancements_made": list(self.enhancements_made),
            "size_analysis": self.size_analysis.model_dump(),
            "has_warnings": self.validation.has_warnings,
            "warning_reasons": list(self.validation.warning_reasons),
            "integrity_check": (
                self.validation.integrity_check.to_report() if self.validation.integrity_check else None
            ),
        }
