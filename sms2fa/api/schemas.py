from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

Verdict = Literal["SKIP", "TRIGGER"]

class StartLoginRequest(BaseModel):
    userId: str

class MobileNumberSubmission(BaseModel):
    # Free text; normalization happens server-side
    mobile_number: Optional[str] = ""

class LoginSessionResponse(BaseModel):
    sessionId: str
    userId: str
    requiredActions: List[str] = Field(default_factory=list)
    activeAction: Optional[str] = None
    completedActions: List[str] = Field(default_factory=list)

class EvaluationResponse(BaseModel):
    sessionId: str
    verdict: Verdict
    reason: str
    configErrors: List[Dict[str, str]] = Field(default_factory=list)
    activeAction: Optional[str] = None

class ChallengeResponse(BaseModel):
    sessionId: str
    template: str
    action: str
    fields: List[Dict[str, Any]] = Field(default_factory=list)

class SubmissionResponse(BaseModel):
    status: Literal["success", "error"] = "success"
    sessionId: str
    nextAction: Optional[str] = None
    activeAction: Optional[str] = None
