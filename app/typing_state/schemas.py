from pydantic import BaseModel
from uuid import UUID
from typing import Optional


class SetTypingResponseModel(BaseModel):
    conversation_id: UUID
    expires_at: int


class TypingIndicatorResponseModel(BaseModel):
    indicator: Optional[str]
