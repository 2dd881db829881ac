"""Error models for the validation tools"""

from enum import Enum
from typing import Optional
import uuid


class ErrorCode(str, Enum):
    """Error codes surfaced to tool callers"""
    CAMPAIGN_PATH_MISSING = "CAMPAIGN_PATH_MISSING"
    CAMPAIGN_NOT_FOUND = "CAMPAIGN_NOT_FOUND"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_EMPTY = "TEMPLATE_EMPTY"
    TEMPLATE_UNREADABLE = "TEMPLATE_UNREADABLE"
    PIPELINE_FAILED = "PIPELINE_FAILED"


class ValidationToolError(Exception):
    """Fatal error raised by a validation tool entry point"""
    def __init__(self, code: ErrorCode, message: str, hint: Optional[str] = None, trace_id: Optional[str] = None):
        self.error_id = str(uuid.uuid4())
        self.code = code
        self.message = message
        self.hint = hint
        self.trace_id = trace_id
        super().__init__(self.message)

    def model_dump(self):
        """Return dict representation for API responses"""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "message": self.message,
            "hint": self.hint,
            "trace_id": self.trace_id,
        }

    @property
    def http_status(self) -> int:
        """Map error code to HTTP status"""
        mapping = {
            ErrorCode.CAMPAIGN_PATH_MISSING: 400,
            ErrorCode.CAMPAIGN_NOT_FOUND: 404,
            ErrorCode.TEMPLATE_NOT_FOUND: 404,
            ErrorCode.TEMPLATE_EMPTY: 422,
            ErrorCode.TEMPLATE_UNREADABLE: 500,
            ErrorCode.PIPELINE_FAILED: 500,
        }
        return mapping.get(self.code, 500)
