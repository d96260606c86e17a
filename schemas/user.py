from datetime import datetime
from pydantic import EmailStr

from .base import CamelModel


class UserCreate(CamelModel):
    email: EmailStr


class UserResponse(CamelModel):
    id: str
    email: str
    created_at: datetime
