from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr


def check_password(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    return value


def check_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name must not be empty")
    if len(value) > 100:
        raise ValueError("Name must be less than 100 characters")
    return value


Password = Annotated[str, AfterValidator(check_password)]
Name = Annotated[str, AfterValidator(check_name)]


class AdministratorCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: Password
    first_name: Name
    last_name: Name


class AdministratorUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: Optional[EmailStr] = None
    password: Optional[Password] = None
    first_name: Optional[Name] = None
    last_name: Optional[Name] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str
