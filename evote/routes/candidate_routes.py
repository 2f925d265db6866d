import logging
from typing import List
from fastapi import APIRouter, Depends

from ..auth import get_ledger, get_storage, require_admin
from ..errors import LedgerError, NotFoundError
from ..ledger import Ledger
from ..models.candidate_model import Candidate, CandidateCreate, CandidateUpdate
from ..schemas import Message
from ..storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/candidates", tags=["Candidates"])


@router.get("", response_model=List[Candidate])
async def list_candidates(storage: Storage = Depends(get_storage)):
    """All candidates with their current tallies."""
    return await storage.list_candidates()


@router.get("/{id}", response_model=Candidate)
async def get_candidate(id: int, storage: Storage = Depends(get_storage)):
    candidate = await storage.get_candidate_by_id(id)
    if not candidate:
        raise NotFoundError("Candidate not found")
    return candidate


@router.post("", response_model=Candidate, status_code=201, dependencies=[Depends(require_admin)])
async def create_candidate(
    data: CandidateCreate,
    storage: Storage = Depends(get_storage),
    ledger: Ledger = Depends(get_ledger),
):
    candidate = await storage.create_candidate(data)
    try:
        await ledger.add_candidate(candidate.id, candidate.name, candidate.party_name, candidate.party_logo)
    except LedgerError as e:
        logger.warning(f"Candidate {candidate.id} not registered on ledger: {e.message}")
    return candidate


@router.put("/{id}", response_model=Candidate, dependencies=[Depends(require_admin)])
async def update_candidate(
    id: int,
    data: CandidateUpdate,
    storage: Storage = Depends(get_storage),
    ledger: Ledger = Depends(get_ledger),
):
    candidate = await storage.update_candidate(id, data.model_dump(exclude_unset=True))
    if not candidate:
        raise NotFoundError("Candidate not found")
    try:
        await ledger.update_candidate(candidate.id, candidate.name, candidate.party_name, candidate.party_logo)
    except LedgerError as e:
        logger.warning(f"Candidate {candidate.id} not updated on ledger: {e.message}")
    return candidate


@router.delete("/{id}", response_model=Message, dependencies=[Depends(require_admin)])
async def delete_candidate(
    id: int,
    storage: Storage = Depends(get_storage),
    ledger: Ledger = Depends(get_ledger),
):
    if not await storage.delete_candidate(id):
        raise NotFoundError("Candidate not found")
    try:
        await ledger.remove_candidate(id)
    except LedgerError as e:
        logger.warning(f"Candidate {id} not removed from ledger: {e.message}")
    return Message(message="Candidate deleted successfully")
