"""Auth domain schemas - sign-up, sign-in and email confirmation"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email


class SignUpRequest(BaseModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: str
    password: str = Field(..., min_length=8)
    user_type: Literal["client", "expert"]
    agree_to_terms: bool

    @field_validator("first_name")
    @classmethod
    def check_first_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("First name is required")
        return v

    @field_validator("last_name")
    @classmethod
    def check_last_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Last name is required")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("agree_to_terms")
    @classmethod
    def check_terms(cls, v):
        if not v:
            raise ValueError("You must agree to the terms and conditions")
        return v


class SignInRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class EmailConfirmRequest(BaseModel):
    token_hash: str = Field(..., min_length=1)
    type: str = "email"


class SignUpResponse(BaseModel):
    success: bool
    user_id: str
    requires_email_confirmation: bool
    redirect_to: str
    message: str


class SignInResponse(BaseModel):
    success: bool
    user_id: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    requires_email_confirmation: bool = False
    redirect_to: str


class MessageResponse(BaseModel):
    success: bool
    message: str


class EmailConfirmResponse(BaseModel):
    success: bool
    message: str
    redirect_to: str


class ConfirmationStatusResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    user_type: str
    email_confirmed: bool
    needs_email_confirmation: bool
    onboarding_step: Optional[int] = None
    onboarding_completed: bool
    redirect_to: str
