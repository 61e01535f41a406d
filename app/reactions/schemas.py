from pydantic import BaseModel
from uuid import UUID
from typing import List, Optional


class ToggleReactionModel(BaseModel):
    message_id: UUID
    emoji: str


class ToggleReactionResponseModel(BaseModel):
    added: Optional[bool] = None
    removed: Optional[bool] = None


class ReactionData(BaseModel):
    id: UUID
    message_id: UUID
    user_id: UUID
    emoji: str
    created_at: int


class ReactionSummary(BaseModel):
    emoji: str
    count: int
    reacted_by_me: bool


class GetReactionsResponseModel(BaseModel):
    reactions: List[ReactionData]
    summary: List[ReactionSummary]
