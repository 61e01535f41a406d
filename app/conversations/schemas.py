from pydantic import BaseModel, model_validator
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from app.users.schemas import UserData


# Create or get
class CreateConversationModel(BaseModel):
    other_user_id: Optional[UUID] = None
    participant_ids: List[UUID] = []
    is_group: bool = False
    name: Optional[str] = None

    @model_validator(mode="after")
    def check_target(self):
        if not self.is_group and self.other_user_id is None:
            raise ValueError("other_user_id is required for a direct conversation.")
        return self


class CreateGroupConversationModel(BaseModel):
    participant_ids: List[UUID]
    name: str


# Conversation views
class LastMessageData(BaseModel):
    id: UUID
    sender_id: UUID
    content: str
    deleted: bool
    created_at: int


class ConversationData(BaseModel):
    id: UUID
    is_group: bool
    name: Optional[str] = None
    created_by: Optional[UUID] = None
    last_message_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    participant_ids: List[UUID]
    other_user: Optional[UserData] = None
    participants: Optional[List[UserData]] = None


class ConversationListItem(ConversationData):
    last_message: Optional[LastMessageData] = None
    unread_count: int = 0


class CreateConversationResponseModel(BaseModel):
    conversation_id: UUID
    is_new: bool
    conversation: Optional[ConversationData] = None


class GetConversationsResponseModel(BaseModel):
    conversations: List[ConversationListItem]
