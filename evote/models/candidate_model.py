from typing import Optional
from pydantic import Field, field_validator

from .base import CamelModel


class CandidateCreate(CamelModel):
    name: str = Field(..., min_length=1, examples=["Amit Sharma"])
    party_name: str = Field(..., min_length=1, examples=["Party A"])
    party_logo: str = Field(..., min_length=1)  # base64 data URL or image URL
    constituency: str = Field(..., min_length=1, examples=["Bangalore Urban"])


class CandidateUpdate(CamelModel):
    # votes is not editable; it only moves through a cast vote
    name: Optional[str] = Field(None, min_length=1)
    party_name: Optional[str] = Field(None, min_length=1)
    party_logo: Optional[str] = Field(None, min_length=1)
    constituency: Optional[str] = Field(None, min_length=1)

    @field_validator("name", "party_name", "party_logo", "constituency")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value


class Candidate(CandidateCreate):
    id: int
    votes: int = 0


class CandidateResult(Candidate):
    percentage: float = 0.0
