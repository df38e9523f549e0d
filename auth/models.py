"""Request / response schemas for the auth routes (camelCase on the wire)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(WireModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = Field(default=None, max_length=128)


class LoginRequest(WireModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(WireModel):
    user_id: str
    name: Optional[str] = None
    token: str
    language: str = "en"


class SessionStatus(WireModel):
    valid: bool
    user_id: str


class UserProfile(WireModel):
    user_id: str
    email: str
    name: Optional[str] = None
    language: str = "en"
    created_at: Optional[str] = None
