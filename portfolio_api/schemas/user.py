# File: portfolio_api/schemas/user.py

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=6)


class RefreshRequest(BaseModel):
    refreshToken: str = Field(min_length=1)


class UserRead(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    username: str
    role: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class TokenUser(BaseModel):
    id: int
    username: Optional[str] = None
    role: Optional[str] = None


class LoginResponse(BaseModel):
    message: str
    user: UserRead
    accessToken: str
    refreshToken: str
    expiresIn: str


class RefreshResponse(BaseModel):
    message: str
    accessToken: str
    expiresIn: str


class MeResponse(BaseModel):
    user: UserRead


class VerifyResponse(BaseModel):
    valid: bool
    user: TokenUser
