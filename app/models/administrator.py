import uuid
from typing import Optional
from datetime import datetime
from enum import Enum
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from app.core.dates import utc_now

class AdministratorStatus(str, Enum):
    ACTIVE = "active"
    DEACTIVATED = "deactivated"  # soft deleted

class Administrator(SQLModel, table=True):
    __tablename__ = "administrators"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)

    # Credentials
    email: str = Field(unique=True, index=True, max_length=255)
    password: str  # argon2 hash, never returned

    # Profile
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)

    # Status
    status: AdministratorStatus = Field(default=AdministratorStatus.ACTIVE, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utc_now},
    )

    @property
    def is_active(self) -> bool:
        return self.status == AdministratorStatus.ACTIVE

    def to_response(self) -> dict:
        """Public shape, password is never included"""
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_author(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
        }

    def to_claims(self) -> dict:
        return {
            "sub": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }
