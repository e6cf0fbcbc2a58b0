from pydantic import BaseModel, EmailStr, field_validator, ConfigDict
from typing import ClassVar
import uuid


# User summary embedded in other responses
class UserSummary(BaseModel):
    id: uuid.UUID
    username: str
    email: str

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)


# Register payload
class UserRegister(BaseModel):
    username: str
    email: EmailStr
    password: str

    @field_validator("username", mode="before")
    @classmethod
    def trim_and_check(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip()
        if not v:
            raise ValueError("username cannot be empty")
        return v

    @field_validator("password")
    @classmethod
    def min_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("password must be at least 6 characters")
        return v


# Login payload
class UserLogin(BaseModel):
    email: EmailStr
    password: str


# Login result
class TokenRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSummary
