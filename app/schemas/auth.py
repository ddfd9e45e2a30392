"""
Pydantic schemas for the authentication endpoints.

Request rules live on the fields; ``app.schemas.messages`` turns the
resulting validation errors into the API's rule messages.
"""

import re
from typing import Annotated, Optional

from pydantic import EmailStr, Field, StringConstraints, field_validator, model_validator

from app.schemas.base import CamelModel

PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]

PASSWORD_RULES = [
    (r".{8,}", "Password must be at least 8 characters."),
    (r"[A-Z]", "Password must contain at least one uppercase letter."),
    (r"[a-z]", "Password must contain at least one lowercase letter."),
    (r"[0-9]", "Password must contain at least one number."),
    (r"[^a-zA-Z0-9]", "Password must contain at least one special character."),
]


class RegisterRequest(CamelModel):
    first_name: PersonName
    last_name: PersonName
    email: EmailStr
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        broken = [message for pattern, message in PASSWORD_RULES if not re.search(pattern, value, re.DOTALL)]
        if broken:
            # uma regra por linha; o handler devolve cada uma como um erro
            raise ValueError("\n".join(broken))
        return value

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match.")
        return self


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    remember: bool = False


class TwoFactorRequest(CamelModel):
    email: EmailStr
    two_factor_code: str = Field(..., min_length=6, max_length=6, pattern=r"^[0-9]*$")


class RefreshTokenRequest(CamelModel):
    token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    succeeded: bool = False
    message: Optional[str] = None
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    requires_two_factor: bool = False
