from typing import List
from fastapi import APIRouter, Depends

from ..auth import get_ledger, require_admin
from ..ledger import Ledger
from ..schemas import LedgerAction, LedgerCandidate, LedgerTotal, VoterLedgerStatus

router = APIRouter(prefix="/blockchain", tags=["Ledger"])


@router.post("/start", response_model=LedgerAction, dependencies=[Depends(require_admin)])
async def start_voting(ledger: Ledger = Depends(get_ledger)):
    await ledger.start_voting()
    return LedgerAction(message="Voting has been started")


@router.post("/end", response_model=LedgerAction, dependencies=[Depends(require_admin)])
async def end_voting(ledger: Ledger = Depends(get_ledger)):
    await ledger.end_voting()
    return LedgerAction(message="Voting has been ended")


@router.post("/release", response_model=LedgerAction, dependencies=[Depends(require_admin)])
async def release_results(ledger: Ledger = Depends(get_ledger)):
    await ledger.release_results()
    return LedgerAction(message="Results have been released")


@router.get("/candidates", response_model=List[LedgerCandidate])
async def ledger_candidates(ledger: Ledger = Depends(get_ledger)):
    """Candidates as the ledger sees them; counts read 0 until results are released."""
    return [LedgerCandidate(**c) for c in await ledger.get_candidates()]


@router.get("/total-votes", response_model=LedgerTotal)
async def total_votes(ledger: Ledger = Depends(get_ledger)):
    return LedgerTotal(total_votes=await ledger.get_total_votes())


@router.get("/voter-status/{voter_id}", response_model=VoterLedgerStatus)
async def voter_status(voter_id: str, ledger: Ledger = Depends(get_ledger)):
    return VoterLedgerStatus(voter_id=voter_id, has_voted=await ledger.check_voter_status(voter_id))
