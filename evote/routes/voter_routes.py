from typing import List
from fastapi import APIRouter, Depends, Path

from ..auth import Principal, ensure_owner, get_current_principal, get_storage, require_admin
from ..errors import NotFoundError, ValidationError
from ..models.voter_model import VoterCreate, VoterOut, VoterUpdate
from ..schemas import Message
from ..storage import Storage

router = APIRouter(prefix="/voters", tags=["Voters"])


@router.get("", response_model=List[VoterOut], dependencies=[Depends(require_admin)])
async def list_voters(storage: Storage = Depends(get_storage)):
    return await storage.list_voters()


@router.get("/{voter_id}", response_model=VoterOut)
async def get_voter(
    voter_id: str = Path(..., description="The voter's natural voter ID"),
    principal: Principal = Depends(get_current_principal),
    storage: Storage = Depends(get_storage),
):
    """
    Personal details for one voter.
    A voter may only read their own record; an admin may read any.
    """
    await ensure_owner(principal, storage, voter_id)
    voter = await storage.get_voter_by_voter_id(voter_id)
    if not voter:
        raise NotFoundError("Voter not found")
    return voter


@router.post("", response_model=VoterOut, status_code=201, dependencies=[Depends(require_admin)])
async def create_voter(data: VoterCreate, storage: Storage = Depends(get_storage)):
    if await storage.get_voter_by_voter_id(data.voter_id):
        raise ValidationError("Voter with this ID already exists")
    if await storage.get_voter_by_aadhaar(data.aadhaar_number):
        raise ValidationError("Voter with this Aadhaar number already exists")
    return await storage.create_voter(data)


@router.put("/{id}", response_model=VoterOut, dependencies=[Depends(require_admin)])
async def update_voter(id: int, data: VoterUpdate, storage: Storage = Depends(get_storage)):
    changes = data.model_dump(exclude_unset=True)
    voter = await storage.update_voter(id, changes)
    if not voter:
        raise NotFoundError("Voter not found")
    return voter


@router.delete("/{id}", response_model=Message, dependencies=[Depends(require_admin)])
async def delete_voter(id: int, storage: Storage = Depends(get_storage)):
    if not await storage.delete_voter(id):
        raise NotFoundError("Voter not found")
    return Message(message="Voter deleted successfully")
