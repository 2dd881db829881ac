"""
Structural validator for email HTML.
Six independent substring/regex checks; matching is case-sensitive and not DOM-aware.
"""
import logging
import re
from typing import List

from email_qa.config.validator_config import LOCAL_PATH_PREFIXES
from email_qa.models.requirements import (
    AssetManifest,
    ContentContext,
    RequirementsBundle,
    TechnicalRequirements,
    TemplateRequirements,
)
from email_qa.models.schemas import (
    ErrorType,
    Severity,
    ValidationError,
    ValidationResult,
    ValidationWarning,
    WarningType,
)

logger = logging.getLogger(__name__)

WIDTH_PATTERN = re.compile(r"width[:\s]*(\d+)", re.IGNORECASE)
IMG_SRC_PATTERN = re.compile(r"<img[^>]+src=[\"']([^\"']*)[\"'][^>]*>", re.IGNORECASE)
IMG_TAG_PATTERN = re.compile(r"<img[^>]*>", re.IGNORECASE)

# Sources that are never looked up in the asset manifest
EXTERNAL_SRC_PREFIXES = ("http", "//", "data:", "cid:")

TABLE_LAYOUT_SUGGESTION = "Use table-based layout for better compatibility"


def validate_template_structure(html: str, requirements: TemplateRequirements) -> List[ValidationError]:
    """Check design brief elements, logo and list-shaped brand colors"""
    errors = []

    for element in requirements.expected_elements:
        selector_found = bool(element.selector) and element.selector in html
        content_found = bool(element.content) and element.content in html
        if not selector_found and not content_found:
            errors.append(ValidationError(
                type=ErrorType.TEMPLATE,
                severity=Severity.MAJOR,
                message=f"Missing required element: {element.name}",
                suggestion=f"Add {element.name} to the template",
            ))

    if requirements.requires_logo and "logo" not in html:
        errors.append(ValidationError(
            type=ErrorType.TEMPLATE,
            severity=Severity.MAJOR,
            message="Missing brand logo",
            suggestion="Add brand logo to the template",
        ))

    for color in requirements.brand_colors:
        if color.value not in html:
            errors.append(ValidationError(
                type=ErrorType.TEMPLATE,
                severity=Severity.MINOR,
                message=f"Missing brand color: {color.name}",
                suggestion=f"Use brand color {color.value} in the template",
            ))

    return errors


def validate_technical_requirements(html: str, requirements: TechnicalRequirements) -> List[ValidationError]:
    """Check DOCTYPE, size, width and meta tags"""
    errors = []

    if requirements.required_doctype and requirements.required_doctype not in html:
        errors.append(ValidationError(
            type=ErrorType.TECHNICAL,
            severity=Severity.CRITICAL,
            message="Missing or incorrect DOCTYPE",
            suggestion=f"Use DOCTYPE: {requirements.required_doctype}",
        ))

    if requirements.max_file_size and len(html) > requirements.max_file_size:
        errors.append(ValidationError(
            type=ErrorType.TECHNICAL,
            severity=Severity.MAJOR,
            message=f"HTML file size exceeds limit: {len(html)} > {requirements.max_file_size}",
            suggestion="Optimize HTML content to reduce file size",
        ))

    if requirements.max_width:
        widths = [int(value) for value in WIDTH_PATTERN.findall(html)]
        if widths and max(widths) > requirements.max_width:
            errors.append(ValidationError(
                type=ErrorType.TECHNICAL,
                severity=Severity.MAJOR,
                message=f"Template width exceeds limit: {max(widths)} > {requirements.max_width}",
                suggestion=f"Reduce template width to {requirements.max_width}px or less",
            ))

    for meta in requirements.required_meta:
        if meta not in html:
            errors.append(ValidationError(
                type=ErrorType.TECHNICAL,
                severity=Severity.MAJOR,
                message=f"Missing required meta tag: {meta}",
                suggestion=f"Add meta tag: {meta}",
            ))

    return errors


# Checks that hero/required assets are used and that local <img> sources exist in the manifest.
# Local absolute paths are accepted by convention. With no manifest images every local source is unmatched.
def validate_asset_usage(html: str, manifest: AssetManifest) -> List[ValidationError]:
    """Check expected assets and image references against the manifest"""
    errors = []

    for asset in manifest.expected_assets:
        if not asset.appears_in(html):
            errors.append(ValidationError(
                type=ErrorType.ASSET,
                severity=Severity.MAJOR,
                message=f"Expected asset not used: {asset.label}",
                suggestion=f"Include asset {asset.label} in the template",
            ))

    for match in IMG_SRC_PATTERN.finditer(html):
        src = match.group(1)
        if not src or src.startswith(EXTERNAL_SRC_PREFIXES) or src.startswith(LOCAL_PATH_PREFIXES):
            continue
        if not any(image.matches_src(src) for image in manifest.images):
            errors.append(ValidationError(
                type=ErrorType.ASSET,
                severity=Severity.MINOR,
                message=f"Referenced asset not found in manifest: {src}",
                location=match.group(0),
                suggestion=f"Add asset {src} to asset manifest or use correct path",
            ))

    return errors


def validate_content_alignment(html: str, content: ContentContext) -> List[ValidationError]:
    """Check generated subject, preheader and CTA copy appear verbatim"""
    errors = []
    generated = content.generated
    if generated is None:
        return errors

    if generated.subject and generated.subject not in html:
        errors.append(ValidationError(
            type=ErrorType.TEMPLATE,
            severity=Severity.MAJOR,
            message="Email subject not found in template",
            suggestion="Include email subject in the template",
        ))

    if generated.preheader and generated.preheader not in html:
        errors.append(ValidationError(
            type=ErrorType.TEMPLATE,
            severity=Severity.MINOR,
            message="Preheader text not found in template",
            suggestion="Include preheader text in the template",
        ))

    if generated.cta_text and generated.cta_text not in html:
        errors.append(ValidationError(
            type=ErrorType.TEMPLATE,
            severity=Severity.MAJOR,
            message="Call-to-action text not found in template",
            suggestion="Include CTA text in the template",
        ))

    return errors


def validate_email_client_compatibility(html: str) -> List[ValidationWarning]:
    warnings = []

    if "flexbox" in html or "display: flex" in html:
        warnings.append(ValidationWarning(
            type=WarningType.COMPATIBILITY,
            message="Flexbox detected - may not work in all email clients",
            suggestion=TABLE_LAYOUT_SUGGESTION,
        ))

    if "grid" in html or "display: grid" in html:
        warnings.append(ValidationWarning(
            type=WarningType.COMPATIBILITY,
            message="CSS Grid detected - may not work in all email clients",
            suggestion=TABLE_LAYOUT_SUGGESTION,
        ))

    if "<link" in html and "stylesheet" in html:
        warnings.append(ValidationWarning(
            type=WarningType.COMPATIBILITY,
            message="External stylesheets detected - may be blocked by email clients",
            suggestion="Use inline styles instead of external stylesheets",
        ))

    return warnings


def validate_accessibility(html: str) -> List[ValidationWarning]:
    warnings = []

    for img_tag in IMG_TAG_PATTERN.findall(html):
        if "alt=" not in img_tag:
            warnings.append(ValidationWarning(
                type=WarningType.ACCESSIBILITY,
                message="Image missing alt attribute",
                suggestion="Add alt attributes to all images for accessibility",
            ))

    if "<h1" not in html:
        warnings.append(ValidationWarning(
            type=WarningType.ACCESSIBILITY,
            message="No H1 heading found",
            suggestion="Add H1 heading for proper document structure",
        ))

    return warnings


# Runs all six checks independently and concatenates their findings.
# Pure: same html and bundle always give an equal result.
def validate_html(html: str, bundle: RequirementsBundle) -> ValidationResult:
    """
    Validate an email HTML string against campaign requirements

    Args:
        html: Complete HTML document
        bundle: Campaign requirements

    Returns:
        ValidationResult; is_valid is True iff there are no errors
    """
    errors = [
        *validate_template_structure(html, bundle.template),
        *validate_technical_requirements(html, bundle.technical),
        *validate_asset_usage(html, bundle.assets),
        *validate_content_alignment(html, bundle.content),
    ]
    warnings = [
        *validate_email_client_compatibility(html),
        *validate_accessibility(html),
    ]

    result = ValidationResult(errors=errors, warnings=warnings)
    logger.debug(
        f"[Validator] {'✓' if result.is_valid else '✗'} HTML validated | "
        f"size: {len(html)} | errors: {len(errors)} | warnings: {len(warnings)}"
    )
    return result
