import re
from typing import Optional
from datetime import datetime

from pydantic import EmailStr, Field, field_validator, model_validator

from .common import APIModel

# At least one lowercase, one uppercase, one digit and one special; nothing else allowed
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")
PASSWORD_RULES = (
    "Password must contain at least one uppercase letter, one lowercase letter, "
    "one number, and one special character"
)


def check_password_policy(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(PASSWORD_RULES)
    return value


class UserRegister(APIModel):
    email: EmailStr
    password: str
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    bio: Optional[str] = Field(default="", max_length=500)

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v):
        return check_password_policy(v)


class UserLogin(APIModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(APIModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=500)


class PasswordChange(APIModel):
    current_password: str = Field(min_length=1)
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def new_password_complexity(cls, v):
        return check_password_policy(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Password confirmation does not match")
        return self


class AccountDelete(APIModel):
    password: str = Field(min_length=1)


class UserBasic(APIModel):
    id: int
    email: str
    first_name: str
    last_name: str


class UserOut(APIModel):
    id: int
    email: str
    first_name: str
    last_name: str
    bio: Optional[str] = None
    created_at: Optional[datetime] = None


class UserInfo(UserBasic):
    full_name: str


class AuthSession(APIModel):
    """Returned by register/login/refresh: the user plus a bearer token for later requests"""
    user: UserOut
    access_token: str
    token_type: str = "bearer"
