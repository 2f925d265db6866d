from typing import List, Optional, Union
from pydantic import Field

from .models.base import CamelModel
from .models.voter_model import VoterSummary
from .models.admin_model import AdminSummary
from .models.candidate_model import CandidateResult


class LoginVoter(CamelModel):
    voter_id: str = Field(..., min_length=1, description="Voter ID is required")
    password: str = Field(..., min_length=1, description="Password is required")


class LoginAdmin(CamelModel):
    username: str = Field(..., min_length=1, description="Username is required")
    password: str = Field(..., min_length=1, description="Password is required")


class VoterLoginResponse(CamelModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    voter: VoterSummary


class AdminLoginResponse(CamelModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    admin: AdminSummary


class SessionInfo(CamelModel):
    type: str
    user: Union[VoterSummary, AdminSummary]


class Message(CamelModel):
    message: str


class BiometricVerification(CamelModel):
    voter_id: str = Field(..., min_length=1, description="Voter ID is required")
    face_image: str = Field(..., min_length=1, description="Face image is required")
    fingerprint: str = Field(..., min_length=1, description="Fingerprint is required")


class BiometricResult(CamelModel):
    message: str
    verified: bool
    face_confidence: float
    fingerprint_confidence: float


class ElectionResults(CamelModel):
    total_votes: int
    total_voters: int
    turnout: float
    winner: Optional[CandidateResult] = None
    candidates: List[CandidateResult]


class LedgerCandidate(CamelModel):
    id: int
    name: str
    party_name: str
    vote_count: int


class VoterLedgerStatus(CamelModel):
    voter_id: str
    has_voted: bool


class LedgerTotal(CamelModel):
    total_votes: int


class LedgerAction(CamelModel):
    success: bool = True
    message: str
