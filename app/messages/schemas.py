from pydantic import BaseModel, field_validator
from uuid import UUID
from typing import List, Optional


# Send Messages
class SendMessageModel(BaseModel):
    conversation_id: UUID
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, content: str) -> str:
        if len(content) > 4000:
            raise ValueError("Message must be at most 4000 characters long.")
        return content


class SendMessageResponseModel(BaseModel):
    message_id: UUID


class MessageData(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    sender_name: Optional[str] = None
    content: str
    deleted: bool
    created_at: int


# Get messages
class GetMessagesResponseModel(BaseModel):
    messages: List[MessageData]


# Delete message
class DeleteMessageResponseModel(BaseModel):
    deleted: bool
