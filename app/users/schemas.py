from pydantic import BaseModel, field_validator
from typing import List, Optional
from uuid import UUID


# Sync user
class SyncUserModel(BaseModel):
    clerk_id: str
    name: str
    email: str
    image_url: str = ""

    @field_validator("clerk_id", "name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field must not be blank.")
        return value


class SyncUserResponseModel(BaseModel):
    user_id: UUID


# Presence
class UpdateStatusModel(BaseModel):
    online: bool


class UpdateStatusResponseModel(BaseModel):
    online: bool
    last_seen: int


# Users
class UserData(BaseModel):
    id: UUID
    clerk_id: str
    name: str
    email: str
    image_url: str
    online: bool
    last_seen: int


class DirectoryUserData(UserData):
    conversation_id: Optional[UUID] = None
    unread_count: int = 0


class GetUsersResponseModel(BaseModel):
    users: List[DirectoryUserData]


class GetMeResponseModel(BaseModel):
    user: Optional[UserData]
