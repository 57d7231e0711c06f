from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class InteractionSeverity(str, Enum):
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class InteractionDetail(BaseModel):
    med1: str
    med2: str
    severity: InteractionSeverity
    description: str


class InteractionResult(BaseModel):
    has_interaction: bool = False
    severity: InteractionSeverity = InteractionSeverity.NONE
    summary: str = ""
    recommendation: str = ""
    interactions: List[InteractionDetail] = Field(default_factory=list)


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


class ChatMessage(BaseModel):
    role: ChatRole
    text: str
    timestamp: Optional[datetime] = None
    is_error: bool = False


class ChatRequest(BaseModel):
    message: str
    history: List[ChatMessage] = Field(default_factory=list)
