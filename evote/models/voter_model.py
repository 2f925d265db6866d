from typing import Optional
from pydantic import EmailStr, Field, field_validator

from .base import CamelModel


class VoterBase(CamelModel):
    voter_id: str = Field(..., min_length=1, examples=["ABCD1234567"])
    aadhaar_number: str = Field(..., min_length=1, examples=["1234-5678-9012"])
    name: str = Field(..., min_length=1)
    dob: str = Field(..., min_length=1, examples=["15/08/1985"])
    age: int = Field(..., ge=0)
    email: EmailStr
    gender: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1, examples=["Karnataka"])
    district: str = Field(..., min_length=1, examples=["Bangalore Urban"])
    pincode: str = Field(..., min_length=1, examples=["560001"])
    marital_status: str = Field(..., min_length=1)
    profile_image: Optional[str] = None  # base64 data URL


class VoterCreate(VoterBase):
    password: str = Field(..., min_length=1)


class VoterUpdate(CamelModel):
    # hasVoted / votedFor are deliberately absent: only a cast vote sets them
    voter_id: Optional[str] = Field(None, min_length=1)
    aadhaar_number: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = Field(None, min_length=1)
    dob: Optional[str] = Field(None, min_length=1)
    age: Optional[int] = Field(None, ge=0)
    email: Optional[EmailStr] = None
    gender: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    state: Optional[str] = Field(None, min_length=1)
    district: Optional[str] = Field(None, min_length=1)
    pincode: Optional[str] = Field(None, min_length=1)
    marital_status: Optional[str] = Field(None, min_length=1)
    profile_image: Optional[str] = None

    @field_validator(
        "voter_id", "aadhaar_number", "name", "password", "dob", "age", "email",
        "gender", "address", "state", "district", "pincode", "marital_status",
    )
    @classmethod
    def not_null(cls, value):
        # only profileImage may be cleared
        if value is None:
            raise ValueError("Field may not be null")
        return value


class Voter(VoterBase):
    """A stored voter. `password` holds the bcrypt hash."""

    id: int
    password: str
    has_voted: bool = False
    voted_for: Optional[int] = None


class VoterOut(VoterBase):
    id: int
    has_voted: bool = False
    voted_for: Optional[int] = None


class VoterSummary(CamelModel):
    id: int
    voter_id: str
    name: str
