from pydantic import Field

from .base import CamelModel


class AdminCreate(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class Admin(AdminCreate):
    """A stored admin. `password` holds the bcrypt hash."""

    id: int


class AdminSummary(CamelModel):
    id: int
    username: str
