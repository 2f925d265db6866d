import logging
from fastapi import APIRouter, Depends

from ..auth import Principal, ensure_owner, get_current_principal, get_ledger, get_storage, require_admin, require_voter
from ..biometrics import verify_face, verify_fingerprint
from ..errors import LedgerError, NotFoundError
from ..ledger import Ledger, hash_voter_id
from ..models.candidate_model import CandidateResult
from ..models.vote_model import Vote, VoteReceipt
from ..schemas import BiometricResult, BiometricVerification, ElectionResults
from ..storage import Storage

logger = logging.getLogger(__name__)

vote_router = APIRouter(tags=["Vote"])


# ------------------------------
# CAST VOTE
# ------------------------------
@vote_router.post("/vote", response_model=VoteReceipt)
async def cast_vote(
    vote: Vote,
    principal: Principal = Depends(get_current_principal),
    storage: Storage = Depends(get_storage),
    ledger: Ledger = Depends(get_ledger),
):
    """
    Casts a vote, then hands it to the ledger for auditing.
    The stored vote is final once cast_vote returns; a ledger failure only
    means the receipt has no audit reference.
    """
    await ensure_owner(principal, storage, vote.voter_id)
    await storage.cast_vote(vote.voter_id, vote.candidate_id)

    audit_ref = None
    try:
        audit_ref = await ledger.record_vote(hash_voter_id(vote.voter_id), vote.candidate_id)
    except LedgerError as e:
        logger.warning(f"Vote by {vote.voter_id} committed but not recorded on ledger: {e.message}")

    return VoteReceipt(message="Vote cast successfully", candidate_id=vote.candidate_id, audit_ref=audit_ref)


# ------------------------------
# BIOMETRIC VERIFICATION (simulated)
# ------------------------------
@vote_router.post("/verify-biometrics", response_model=BiometricResult)
async def verify_biometrics(
    data: BiometricVerification,
    principal: Principal = Depends(require_voter),
    storage: Storage = Depends(get_storage),
):
    await ensure_owner(principal, storage, data.voter_id)
    voter = await storage.get_voter_by_voter_id(data.voter_id)
    if not voter:
        raise NotFoundError("Voter not found")

    face_match, face_confidence = await verify_face(data.face_image, voter.profile_image)
    finger_match, finger_confidence = await verify_fingerprint(data.fingerprint)
    verified = face_match and finger_match

    return BiometricResult(
        message="Biometric verification successful" if verified else "Biometric verification failed",
        verified=verified,
        face_confidence=face_confidence,
        fingerprint_confidence=finger_confidence,
    )


# ------------------------------
# RESULTS
# ------------------------------
@vote_router.get("/results", response_model=ElectionResults, dependencies=[Depends(require_admin)])
async def get_results(storage: Storage = Depends(get_storage)):
    candidates = await storage.list_candidates()
    voters = await storage.list_voters()

    total_votes = sum(c.votes for c in candidates)
    voted = sum(1 for v in voters if v.has_voted)

    results = [
        CandidateResult(
            **c.model_dump(),
            percentage=round(c.votes / total_votes * 100, 1) if total_votes else 0.0,
        )
        for c in sorted(candidates, key=lambda c: c.votes, reverse=True)
    ]

    return ElectionResults(
        total_votes=total_votes,
        total_voters=len(voters),
        turnout=round(voted / len(voters) * 100, 1) if voters else 0.0,
        winner=results[0] if total_votes else None,
        candidates=results,
    )
