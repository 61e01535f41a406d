from pydantic import BaseModel
from uuid import UUID
from typing import List


class UnreadData(BaseModel):
    user_id: UUID
    conversation_id: UUID
    count: int


class GetUnreadCountsResponseModel(BaseModel):
    unread: List[UnreadData]


class ResetUnreadResponseModel(BaseModel):
    conversation_id: UUID
    reset: bool
