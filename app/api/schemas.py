
from pydantic import BaseModel, Field
from typing import Optional

from app.workflow.models import AutomationResponse

class AutomationRequest(BaseModel):
    prompt: str = Field(..., description="Free-text automation request, e.g. 'summarize my gmail every day at 9am'")

class HealthResponse(BaseModel):
    status: str
    env: str
    platform_configured: bool
    workspace: Optional[str] = None
    classifier: str

__all__ = ["AutomationRequest", "AutomationResponse", "HealthResponse"]
