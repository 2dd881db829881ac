"""JSON report builders and async file writers for the validation tools"""
import asyncio
import json
import os
import platform
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from email_qa.config.validator_config import (
    ERROR_NEXT_STEPS,
    ERROR_RECOVERY_ACTIONS,
    LATEST_ENHANCED_FILENAME,
    TEMPLATE_MJML_PATH,
)
from email_qa.enhancer.enhancer_schemas import EnhancementResult
from email_qa.models.schemas import ValidationResult

AI_AGENT_LABEL = "OpenAI Chat Completions - HTML Validation & Enhancement"
VALIDATION_STEPS = [
    "Basic HTML validation",
    "AI enhancement generation",
    "Size change analysis",
    "Content integrity validation",
    "Final validation check",
]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def filesystem_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO timestamp with ':' and '.' replaced so it is safe in filenames"""
    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def _write_text_sync(path: Path, text: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


async def write_text(path: Path, text: str):
    await asyncio.to_thread(_write_text_sync, Path(path), text)


async def write_json(path: Path, data: Dict[str, Any]):
    await write_text(path, json.dumps(data, indent=2, ensure_ascii=False))


def size_change_description(change_percent: float) -> str:
    if change_percent > 0:
        return f"Увеличился на {abs(change_percent):.1f}%"
    if change_percent < 0:
        return f"Уменьшился на {abs(change_percent):.1f}%"
    return "Без изменений размера"


# Builds the per-run comparison report written next to the template variants.
# files maps report keys to the variant filenames actually written in this run.
def build_comparison_report(
    timestamp: str,
    files: Dict[str, str],
    result: EnhancementResult,
    initial_validation: ValidationResult,
    final_validation: ValidationResult,
    main_template_updated: bool,
) -> Dict[str, Any]:
    """
    Build enhancement-comparison-<timestamp>.json

    Args:
        timestamp: Filesystem-safe run timestamp
        files: Variant files written in this run
        result: Enhancement outcome
        initial_validation: Validation of the template before enhancement
        final_validation: Validation of the preferred HTML
        main_template_updated: Whether email-template.html was overwritten

    Returns:
        Report dict with files, versions, enhancements, validation_status, technical and summary sections
    """
    size = result.size_analysis
    protected = result.protection_triggered
    improvement = len(initial_validation.errors) - len(final_validation.errors)
    integrity = result.validation.integrity_check

    return {
        "timestamp": utc_now_iso(),
        "files": dict(files),
        "versions": {
            "preferred": result.versions.preferred,
            "original_size": size.original_length,
            "optimized_size": size.optimized_length,
            "preferred_size": len(result.enhanced_html),
            "size_change": {
                "bytes": size.change_bytes,
                "percent": round(size.change_percent, 2),
            },
        },
        "enhancements": {
            "made": list(result.enhancements_made),
            "protection_triggered": protected,
            "warning_reasons": list(result.validation.warning_reasons),
            "has_warnings": result.validation.has_warnings,
        },
        "validation_status": {
            "original_errors": len(initial_validation.errors),
            "enhanced_errors": len(final_validation.errors),
            "improvement": improvement,
            "original_warnings": len(initial_validation.warnings),
            "enhanced_warnings": len(final_validation.warnings),
            "integrity_check": integrity.to_report() if integrity else None,
        },
        "technical": {
            "ai_agent_used": AI_AGENT_LABEL,
            "both_versions_saved": True,
            "main_template_updated": main_template_updated,
            "processing_timestamp": timestamp,
        },
        "summary": {
            "status": "PROTECTED" if protected else "ENHANCED",
            "preferred_version": result.versions.preferred,
            # Written variants plus this report; original_file is only referenced
            "total_files_saved": sum(1 for key in files if key != "original_file") + 1,
            "size_change_description": size_change_description(size.change_percent),
            "validation_improvement": improvement,
        },
    }


def build_validation_report(
    timestamp: str,
    current_html: str,
    result: EnhancementResult,
    initial_validation: ValidationResult,
    final_validation: ValidationResult,
    main_template_updated: bool,
    mjml_source: Optional[str] = None,
) -> Dict[str, Any]:
    """Build docs/html-validation-report.json. The MJML source is referenced, not validated."""
    protected = result.protection_triggered
    return {
        "timestamp": utc_now_iso(),
        "ai_agent_used": AI_AGENT_LABEL,
        "original_errors": len(initial_validation.errors),
        "final_errors": len(final_validation.errors),
        "warnings": len(final_validation.warnings),
        "summary": final_validation.summary(),
        "enhancements_made": list(result.enhancements_made),
        "validation_status": "VALID" if final_validation.is_valid else "INVALID",
        "protection_triggered": protected,
        "main_template_updated": main_template_updated,
        "processing_details": {
            "original_size": len(current_html),
            "enhanced_size": len(result.enhanced_html),
            "size_change_percent": round(result.size_analysis.change_percent, 2),
            "protection_reasons": list(result.validation.warning_reasons) if protected else [],
            "validation_steps": list(VALIDATION_STEPS),
        },
        "files": {
            "original": "templates/email-template.html",
            "enhanced_timestamped": f"templates/email-template-enhanced-{timestamp}.html",
            "enhanced_latest": f"templates/{LATEST_ENHANCED_FILENAME}",
            "comparison_report": f"templates/enhancement-comparison-{timestamp}.json",
            "mjml_source": "/".join(TEMPLATE_MJML_PATH) if mjml_source else None,
        },
        "file_sizes": {
            "original": len(current_html),
            "enhanced": len(result.enhanced_html),
            "difference": len(result.enhanced_html) - len(current_html),
            "mjml_source": len(mjml_source) if mjml_source else 0,
        },
        "final_validation": final_validation.to_report(),
    }


def build_error_report(error: BaseException, campaign_path: str, trace_id: Optional[str]) -> Dict[str, Any]:
    """Build docs/html-validation-error-report.json"""
    return {
        "timestamp": utc_now_iso(),
        "error_type": "HTML_VALIDATION_FAILURE",
        "error_message": str(error),
        "error_stack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
        "campaign_path": campaign_path,
        "trace_id": trace_id,
        "system_info": {
            "python_version": sys.version.split()[0],
            "platform": platform.platform(),
            "pid": os.getpid(),
        },
        "recovery_actions": list(ERROR_RECOVERY_ACTIONS),
        "next_steps": list(ERROR_NEXT_STEPS),
    }
