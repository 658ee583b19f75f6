from typing import Annotated
from pydantic import AfterValidator, BaseModel, EmailStr


def check_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Field must not be empty")
    return value


def check_single_line(value: str) -> str:
    # Names end up in mail headers
    if "\r" in value or "\n" in value:
        raise ValueError("Field must not contain line breaks")
    return value


Required = Annotated[str, AfterValidator(check_required)]
Name = Annotated[str, AfterValidator(check_required), AfterValidator(check_single_line)]


class ContactRequest(BaseModel):
    first_name: Name
    last_name: Name
    email: EmailStr
    message: Required
