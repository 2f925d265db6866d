# evote/storage.py
import asyncio
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from .config import SEED_DEMO_DATA
from .errors import AlreadyVotedError, NotFoundError, ValidationError
from .models.admin_model import Admin, AdminCreate
from .models.candidate_model import Candidate, CandidateCreate
from .models.voter_model import Voter, VoterCreate
from .security import hash_password
from .seed import seed_demo_data

logger = logging.getLogger(__name__)

# fields an update may never touch
PROTECTED_VOTER_FIELDS = {"id", "has_voted", "voted_for"}
PROTECTED_CANDIDATE_FIELDS = {"id", "votes"}


def check_voter_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Reject protected fields and hash a new password, if any."""
    blocked = PROTECTED_VOTER_FIELDS.intersection(changes)
    if blocked:
        raise ValidationError(f"Cannot update {', '.join(sorted(blocked))}")
    changes = dict(changes)
    if changes.get("password"):
        changes["password"] = hash_password(changes["password"])
    return changes


def check_candidate_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    blocked = PROTECTED_CANDIDATE_FIELDS.intersection(changes)
    if blocked:
        raise ValidationError(f"Cannot update {', '.join(sorted(blocked))}")
    return dict(changes)


class Storage(ABC):
    """
    Interface shared by every entity store.

    Lookups return None when nothing matches. Natural keys (voter_id,
    aadhaar_number, username) are unique; breaking that raises ValidationError.
    """

    def __init__(self, seed: bool = SEED_DEMO_DATA):
        self.seed = seed

    async def initialize(self) -> None:
        if self.seed:
            await seed_demo_data(self)

    async def close(self) -> None:
        pass

    # --- Voter operations ---
    @abstractmethod
    async def get_voter_by_id(self, id: int) -> Optional[Voter]: ...

    @abstractmethod
    async def get_voter_by_voter_id(self, voter_id: str) -> Optional[Voter]: ...

    @abstractmethod
    async def get_voter_by_aadhaar(self, aadhaar_number: str) -> Optional[Voter]: ...

    @abstractmethod
    async def create_voter(self, voter: VoterCreate) -> Voter: ...

    @abstractmethod
    async def update_voter(self, id: int, changes: Dict[str, Any]) -> Optional[Voter]: ...

    @abstractmethod
    async def delete_voter(self, id: int) -> bool: ...

    @abstractmethod
    async def list_voters(self) -> List[Voter]: ...

    # --- Candidate operations ---
    @abstractmethod
    async def get_candidate_by_id(self, id: int) -> Optional[Candidate]: ...

    @abstractmethod
    async def create_candidate(self, candidate: CandidateCreate) -> Candidate: ...

    @abstractmethod
    async def update_candidate(self, id: int, changes: Dict[str, Any]) -> Optional[Candidate]: ...

    @abstractmethod
    async def delete_candidate(self, id: int) -> bool: ...

    @abstractmethod
    async def list_candidates(self) -> List[Candidate]: ...

    # --- Admin operations ---
    @abstractmethod
    async def get_admin_by_username(self, username: str) -> Optional[Admin]: ...

    @abstractmethod
    async def create_admin(self, admin: AdminCreate) -> Admin: ...

    @abstractmethod
    async def list_admins(self) -> List[Admin]: ...

    @abstractmethod
    async def update_password(self, kind: str, id: int, hashed_password: str) -> bool: ...

    # --- Voting ---
    @abstractmethod
    async def cast_vote(self, voter_id: str, candidate_id: int) -> Tuple[Voter, Candidate]:
        """
        Record one vote atomically.

        Marks the voter (looked up by natural key) as having voted for
        candidate_id and increments that candidate's tally, or changes nothing.

        Raises:
            NotFoundError: voter or candidate does not exist
            AlreadyVotedError: the voter has already voted
        """


class MemoryStorage(Storage):
    """In-process store for demos and tests. Every write runs under one asyncio lock."""

    def __init__(self, seed: bool = SEED_DEMO_DATA):
        super().__init__(seed)
        self._voters: Dict[int, Voter] = {}
        self._candidates: Dict[int, Candidate] = {}
        self._admins: Dict[int, Admin] = {}
        self._voter_ids = itertools.count(1)
        self._candidate_ids = itertools.count(1)
        self._admin_ids = itertools.count(1)
        self._lock = asyncio.Lock()

    def _find_voter(self, **match) -> Optional[Voter]:
        for voter in self._voters.values():
            if all(getattr(voter, k) == v for k, v in match.items()):
                return voter
        return None

    def _check_voter_keys(self, voter_id: Optional[str], aadhaar_number: Optional[str], skip_id: Optional[int] = None):
        if voter_id is not None:
            existing = self._find_voter(voter_id=voter_id)
            if existing and existing.id != skip_id:
                raise ValidationError("Voter with this ID already exists")
        if aadhaar_number is not None:
            existing = self._find_voter(aadhaar_number=aadhaar_number)
            if existing and existing.id != skip_id:
                raise ValidationError("Voter with this Aadhaar number already exists")

    # --- Voter operations ---
    async def get_voter_by_id(self, id: int) -> Optional[Voter]:
        voter = self._voters.get(id)
        return voter.model_copy() if voter else None

    async def get_voter_by_voter_id(self, voter_id: str) -> Optional[Voter]:
        voter = self._find_voter(voter_id=voter_id)
        return voter.model_copy() if voter else None

    async def get_voter_by_aadhaar(self, aadhaar_number: str) -> Optional[Voter]:
        voter = self._find_voter(aadhaar_number=aadhaar_number)
        return voter.model_copy() if voter else None

    async def create_voter(self, voter: VoterCreate) -> Voter:
        data = voter.model_dump()
        data["password"] = hash_password(data["password"])
        async with self._lock:
            self._check_voter_keys(voter.voter_id, voter.aadhaar_number)
            new_voter = Voter(**data, id=next(self._voter_ids), has_voted=False, voted_for=None)
            self._voters[new_voter.id] = new_voter
        logger.info(f"Voter {new_voter.voter_id} created with id {new_voter.id}")
        return new_voter.model_copy()

    async def update_voter(self, id: int, changes: Dict[str, Any]) -> Optional[Voter]:
        changes = check_voter_changes(changes)
        async with self._lock:
            existing = self._voters.get(id)
            if existing is None:
                return None
            self._check_voter_keys(changes.get("voter_id"), changes.get("aadhaar_number"), skip_id=id)
            updated = existing.model_copy(update=changes)
            self._voters[id] = updated
        logger.info(f"Voter {id} updated")
        return updated.model_copy()

    async def delete_voter(self, id: int) -> bool:
        async with self._lock:
            voter = self._voters.get(id)
            if voter is None:
                return False
            if voter.has_voted:
                raise ValidationError("Cannot delete a voter who has already voted")
            del self._voters[id]
        logger.info(f"Voter {id} deleted")
        return True

    async def list_voters(self) -> List[Voter]:
        return [v.model_copy() for v in self._voters.values()]

    # --- Candidate operations ---
    async def get_candidate_by_id(self, id: int) -> Optional[Candidate]:
        candidate = self._candidates.get(id)
        return candidate.model_copy() if candidate else None

    async def create_candidate(self, candidate: CandidateCreate) -> Candidate:
        async with self._lock:
            new_candidate = Candidate(**candidate.model_dump(), id=next(self._candidate_ids), votes=0)
            self._candidates[new_candidate.id] = new_candidate
        logger.info(f"Candidate {new_candidate.name} created with id {new_candidate.id}")
        return new_candidate.model_copy()

    async def update_candidate(self, id: int, changes: Dict[str, Any]) -> Optional[Candidate]:
        changes = check_candidate_changes(changes)
        async with self._lock:
            existing = self._candidates.get(id)
            if existing is None:
                return None
            updated = existing.model_copy(update=changes)
            self._candidates[id] = updated
        return updated.model_copy()

    async def delete_candidate(self, id: int) -> bool:
        async with self._lock:
            candidate = self._candidates.get(id)
            if candidate is None:
                return False
            if candidate.votes > 0:
                raise ValidationError("Cannot delete a candidate who has received votes")
            del self._candidates[id]
        logger.info(f"Candidate {id} deleted")
        return True

    async def list_candidates(self) -> List[Candidate]:
        return [c.model_copy() for c in sorted(self._candidates.values(), key=lambda c: c.id)]

    # --- Admin operations ---
    async def get_admin_by_username(self, username: str) -> Optional[Admin]:
        for admin in self._admins.values():
            if admin.username == username:
                return admin.model_copy()
        return None

    async def create_admin(self, admin: AdminCreate) -> Admin:
        hashed = hash_password(admin.password)
        async with self._lock:
            if any(a.username == admin.username for a in self._admins.values()):
                raise ValidationError("Admin with this username already exists")
            new_admin = Admin(id=next(self._admin_ids), username=admin.username, password=hashed)
            self._admins[new_admin.id] = new_admin
        logger.info(f"Admin {new_admin.username} created")
        return new_admin.model_copy()

    async def list_admins(self) -> List[Admin]:
        return [a.model_copy() for a in self._admins.values()]

    async def update_password(self, kind: str, id: int, hashed_password: str) -> bool:
        table = {"voter": self._voters, "admin": self._admins}.get(kind)
        if table is None:
            raise ValueError(f"Unknown record kind: {kind}")
        async with self._lock:
            record = table.get(id)
            if record is None:
                return False
            table[id] = record.model_copy(update={"password": hashed_password})
        return True

    # --- Voting ---
    async def cast_vote(self, voter_id: str, candidate_id: int) -> Tuple[Voter, Candidate]:
        async with self._lock:
            voter = self._find_voter(voter_id=voter_id)
            if voter is None:
                raise NotFoundError("Voter not found")
            if voter.has_voted:
                raise AlreadyVotedError()
            candidate = self._candidates.get(candidate_id)
            if candidate is None:
                raise NotFoundError("Candidate not found")

            updated_voter = voter.model_copy(update={"has_voted": True, "voted_for": candidate_id})
            updated_candidate = candidate.model_copy(update={"votes": candidate.votes + 1})
            self._voters[voter.id] = updated_voter
            self._candidates[candidate.id] = updated_candidate

        logger.info(f"Vote recorded for voter {voter_id}")
        return updated_voter.model_copy(), updated_candidate.model_copy()
