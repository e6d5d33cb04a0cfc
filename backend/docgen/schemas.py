"""
Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any

DEFAULT_PROMPT = "No prompt provided"

# ===== Common Schemas =====

class HealthResponse(BaseModel):
    status: str
    service: str

# ===== Job Schemas =====

class GenerateRequest(BaseModel):
    """Generation request; unknown fields are forwarded to the generation service untouched."""
    model_config = ConfigDict(extra="allow")

    prompt: Optional[str] = None

    def effective_prompt(self) -> str:
        return self.prompt or DEFAULT_PROMPT

    def forward_payload(self) -> Dict[str, Any]:
        """The submitted body as received; the placeholder prompt stays local."""
        payload: Dict[str, Any] = {}
        if "prompt" in self.model_fields_set:
            payload["prompt"] = self.prompt
        payload.update(self.model_extra or {})
        return payload

class JobSubmitResponse(BaseModel):
    jobId: Optional[str] = None
    status: str
    message: Optional[str] = None
    error: Optional[str] = None
    html: str
    projectId: str

class JobStatusResponse(BaseModel):
    status: str
    message: Optional[str] = None
    error: Optional[str] = None
    result: Optional[Any] = None
    html: Optional[str] = None
    projectId: Optional[str] = None

# ===== Export Schemas =====

class PdfExportRequest(BaseModel):
    htmlContent: Optional[str] = None

class DocxExportRequest(BaseModel):
    html: Optional[str] = None
