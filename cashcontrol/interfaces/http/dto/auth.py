from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cashcontrol.domain.users.entities import LoginResult, User


class TelegramAuthRequestDTO(BaseModel):
    init_data: str = Field(min_length=1, max_length=8192)

    @field_validator("init_data")
    @classmethod
    def strip_init_data(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("init_data cannot be blank")
        return value


class UserDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    telegram_id: int | None = None
    telegram_chat_id: int | None = None
    email: str | None = None
    username: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, user: User) -> UserDTO:
        return cls.model_validate(user)


class LoginResponseDTO(BaseModel):
    token: str
    user: UserDTO

    @classmethod
    def from_result(cls, result: LoginResult) -> LoginResponseDTO:
        return cls(token=result.token, user=UserDTO.from_domain(result.user))
