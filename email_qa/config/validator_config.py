"""
Validator Configuration
Defines campaign file layout, email defaults, integrity tolerances and protection thresholds
"""

# Campaign-relative input files
TEMPLATE_HTML_PATH = ("templates", "email-template.html")
TEMPLATE_MJML_PATH = ("templates", "email-template.mjml")
DESIGN_BRIEF_PATH = ("content", "design-brief-from-context.json")
CONTENT_CONTEXT_PATH = ("content", "email-content.json")
TECHNICAL_SPEC_PATH = ("docs", "specifications", "technical-specification.json")
ASSET_MANIFEST_PATH = ("assets", "manifests", "asset-manifest.json")

# Campaign-relative output files
TEMPLATES_DIR = "templates"
VALIDATION_REPORT_PATH = ("docs", "html-validation-report.json")
ERROR_REPORT_PATH = ("docs", "html-validation-error-report.json")
LATEST_ENHANCED_FILENAME = "email-template-enhanced-latest.html"

# Email-safe technical defaults
DEFAULT_MAX_FILE_SIZE = 100000  # characters
DEFAULT_MAX_WIDTH = 640  # px
XHTML_TRANSITIONAL_DOCTYPE = (
    '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Transitional//EN" '
    '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-transitional.dtd">'
)
DEFAULT_REQUIRED_META = [
    '<meta http-equiv="Content-Type" content="text/html; charset=utf-8">',
    '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
]
DEFAULT_EMAIL_CLIENTS = ["gmail", "outlook", "apple_mail", "yahoo_mail"]
DEFAULT_ACCESSIBILITY_AREAS = ["alt_text", "heading_structure", "color_contrast"]

# Image srcs treated as present on the author's machine
LOCAL_PATH_PREFIXES = ("/Users/", "/home/", "C:\\")

# Asset purposes that must appear in the template
EXPECTED_ASSET_PURPOSES = ("hero", "required")

# Brand palette used when the design brief has none
DEFAULT_PRIMARY_COLOR = "#4BFF7E"
DEFAULT_ACCENT_COLOR = "#FF6240"
DEFAULT_BACKGROUND_COLOR = "#EDEFFF"

# Placeholders for missing campaign facts
PLACEHOLDER_SUBJECT = "Email Subject"
PLACEHOLDER_DESTINATION = "направление"
PLACEHOLDER_PRICE = "Цена по запросу"
DEFAULT_CURRENCY = "RUB"

# Content integrity tolerances
WORD_SIMILARITY_THRESHOLD = 0.75  # strictly greater than
KEY_PHRASE_THRESHOLD = 0.6  # strictly greater than
IMAGE_RETENTION_RATIO = 0.8
LINK_RETENTION_RATIO = 0.8
CSS_RETENTION_RATIO = 0.7
CRITICAL_META_MARKERS = ("charset", "viewport")

# Protection thresholds (percent size change of the LLM output)
TRUNCATION_THRESHOLD_PERCENT = -15.0
BLOAT_THRESHOLD_PERCENT = 200.0
BODY_PREFIX_LENGTH = 100
MAX_INTEGRITY_REASONS = 2

# Static guidance written into the failure report
ERROR_RECOVERY_ACTIONS = [
    "Check OpenAI API key availability and quota",
    "Verify campaign directory structure and permissions",
    "Check HTML template file existence and readability",
    "Verify network connectivity for AI services",
    "Check available disk space for file operations",
    "Validate JSON files in campaign directory",
]
ERROR_NEXT_STEPS = [
    "Review error details in this report",
    "Check system logs for additional information",
    "Verify all required files and directories exist",
    "Test with a minimal HTML template",
    "Retry operation after fixing identified issues",
    "Contact support if error persists",
]
