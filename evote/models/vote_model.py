from typing import Optional
from pydantic import Field

from .base import CamelModel


class Vote(CamelModel):
    voter_id: str = Field(..., min_length=1, description="Voter ID is required")
    candidate_id: int = Field(..., ge=1, description="Candidate ID is required")


class VoteReceipt(CamelModel):
    message: str
    candidate_id: int
    audit_ref: Optional[str] = None  # None when no ledger recorded the vote
