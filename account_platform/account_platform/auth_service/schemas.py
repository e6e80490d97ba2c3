from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from typing import Optional


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Username, email or account id
    username: str = Field(validation_alias=AliasChoices("username", "identifier"))
    password: str


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    password: str
    token: str


class Token(BaseModel):
    token: str


class Message(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    message: str
    code: int


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    type: str
    is_email_verified: bool
    # User
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    # Organization
    preferred_name: Optional[str] = None
    is_verified: Optional[bool] = None
