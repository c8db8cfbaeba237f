from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime

from storefront.utils.dates import utcnow


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, unique=True)
    first_name: str
    last_name: str
    phone: Optional[str] = Field(default=None, max_length=32)
    role: str = Field(default="user")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
