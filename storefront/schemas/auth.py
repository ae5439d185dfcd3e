from datetime import datetime

from pydantic import ConfigDict, EmailStr, Field, model_validator

from storefront.models import User
from storefront.schemas.base import CamelModel

MIN_PASSWORD_LENGTH = 8


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    confirm_password: str = Field(alias="confirmPassword")
    display_name: str | None = Field(default=None, alias="displayName", max_length=255)

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Password confirmation does not match")
        return self


class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"examples": [{"email": "buyer@example.com", "password": "correct-horse"}]},
    )


class TokenResponse(CamelModel):
    access_token: str = Field(alias="accessToken")
    token_type: str = Field(default="bearer", alias="tokenType")
    expires_in: int = Field(alias="expiresIn", description="Seconds until the token expires")


class UserResponse(CamelModel):
    id: int
    email: str
    display_name: str | None = Field(default=None, alias="displayName")
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, email=user.email, displayName=user.display_name, createdAt=user.created_at)
