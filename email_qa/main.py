"""Main entry point for the email QA tools service"""
import sys
import logging
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

# Load .env before settings are read
_env_path = Path(__file__).resolve().parent.parent / '.env'
load_dotenv(_env_path)

from email_qa.config.settings import settings  # noqa: E402
from email_qa.models.errors import ValidationToolError  # noqa: E402
from email_qa.tools.validation_tools import ValidationToolkit, create_toolkit  # noqa: E402

# Configure logging - console only
logging.basicConfig(
    level=logging.DEBUG if settings.agents_debug_files else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="HTML validation and enhancement tools for email campaigns"
)

# Process-wide toolkit; owns the validation and context caches
_toolkit: Optional[ValidationToolkit] = None


class ToolRequest(BaseModel):
    """Tool invocation payload from the agent runtime"""
    campaign_path: str
    trace_id: Optional[str] = None


class ToolResponse(BaseModel):
    status: str
    trace_id: Optional[str] = None


# Lazily creates the toolkit so the service can start (and report health) before a key is set.
# Tests replace this dependency through app.dependency_overrides.
def get_toolkit() -> ValidationToolkit:
    """Get or create the process-wide toolkit"""
    global _toolkit
    if _toolkit is None:
        try:
            _toolkit = create_toolkit()
        except ValueError as e:
            logger.error(f"[TOOLS] ✗ Toolkit unavailable: {e}")
            raise HTTPException(status_code=503, detail=str(e))
    return _toolkit


# Health check endpoint for monitoring and service discovery.
@app.get("/health")
async def health():
    """Health check"""
    return {"status": "healthy", "service": "email-qa-tools"}


@app.post("/tools/validate-and-correct-html", response_model=ToolResponse)
async def validate_and_correct_html(request: ToolRequest, toolkit: ValidationToolkit = Depends(get_toolkit)):
    """Validate, enhance and persist the campaign template"""
    logger.info(f"[TOOLS] validateAndCorrectHtml | campaign_path={request.campaign_path} | trace_id={request.trace_id}")
    try:
        status = await toolkit.validate_and_correct_html(request.campaign_path, request.trace_id)
    except ValidationToolError as e:
        raise HTTPException(status_code=e.http_status, detail=e.model_dump())
    return ToolResponse(status=status, trace_id=request.trace_id)


@app.post("/tools/enhance-email-design", response_model=ToolResponse)
async def enhance_email_design(request: ToolRequest, toolkit: ValidationToolkit = Depends(get_toolkit)):
    """Produce enhanced design variants without replacing the main template"""
    logger.info(f"[TOOLS] enhanceEmailDesign | campaign_path={request.campaign_path} | trace_id={request.trace_id}")
    try:
        status = await toolkit.enhance_email_design(request.campaign_path, request.trace_id)
    except ValidationToolError as e:
        raise HTTPException(status_code=e.http_status, detail=e.model_dump())
    return ToolResponse(status=status, trace_id=request.trace_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.service_host, port=settings.service_port)
