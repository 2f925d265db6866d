# evote/ledger.py
"""
Simulated vote ledger.

The store is the source of truth for votes. A ledger is only an audit sink:
after a vote commits, the voter's hashed id and the candidate id are handed to
`record_vote`, which returns an audit reference (or None). Nothing here talks
to a real chain.
"""
import asyncio
import hashlib
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from cryptography.fernet import Fernet

from .config import LEDGER_BACKEND, LEDGER_KEY, LEDGER_DELAY, LEDGER_AUTO_START
from .errors import LedgerError

logger = logging.getLogger(__name__)


def sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def hash_voter_id(voter_id: str) -> str:
    """Voters are only ever known to the ledger by this digest."""
    return sha256_hex(voter_id)


class Ledger(ABC):
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def record_vote(self, voter_id_hash: str, candidate_id: int) -> Optional[str]: ...

    async def add_candidate(self, id: int, name: str, party_name: str, logo: str) -> None:
        pass

    async def update_candidate(self, id: int, name: str, party_name: str, logo: str) -> None:
        pass

    async def remove_candidate(self, id: int) -> None:
        pass

    async def start_voting(self) -> None:
        raise LedgerError("No ledger configured")

    async def end_voting(self) -> None:
        raise LedgerError("No ledger configured")

    async def release_results(self) -> None:
        raise LedgerError("No ledger configured")

    async def check_voter_status(self, voter_id: str) -> bool:
        raise LedgerError("No ledger configured")

    async def get_candidates(self) -> List[Dict[str, Any]]:
        raise LedgerError("No ledger configured")

    async def get_total_votes(self) -> int:
        raise LedgerError("No ledger configured")


class NullLedger(Ledger):
    """Discards everything."""

    async def record_vote(self, voter_id_hash: str, candidate_id: int) -> Optional[str]:
        return None


class HashLedger(Ledger):
    """
    In-memory stand-in for a voting contract.

    Keeps its own candidate tallies, a voted flag per voter hash and a Fernet
    encrypted payload per vote. Tallies stay hidden until results are released.
    """

    def __init__(self, key: Optional[str] = LEDGER_KEY, delay: float = LEDGER_DELAY,
                 auto_start: bool = LEDGER_AUTO_START):
        self.fernet = Fernet(key.encode() if key else Fernet.generate_key())
        self.delay = delay
        self.auto_start = auto_start
        self.candidates: Dict[int, Dict[str, Any]] = {}
        self.votes: Dict[str, bytes] = {}
        self.voter_status: Dict[str, bool] = {}
        self.voting_open = False
        self.results_released = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        if self.auto_start:
            await self.start_voting()
            logger.info("Voting has been started on the ledger")

    async def _round_trip(self) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)

    async def add_candidate(self, id: int, name: str, party_name: str, logo: str) -> None:
        await self._round_trip()
        self.candidates[id] = {
            "id": id,
            "name": name,
            "party_name": party_name,
            "party_logo": sha256_hex(logo),
            "vote_count": 0,
        }

    async def update_candidate(self, id: int, name: str, party_name: str, logo: str) -> None:
        """Refresh a candidate's details, keeping its tally."""
        existing = self.candidates.get(id)
        if existing is None:
            await self.add_candidate(id, name, party_name, logo)
            return
        await self._round_trip()
        existing.update(name=name, party_name=party_name, party_logo=sha256_hex(logo))

    async def remove_candidate(self, id: int) -> None:
        await self._round_trip()
        async with self._lock:
            candidate = self.candidates.get(id)
            if candidate and candidate["vote_count"]:
                raise LedgerError("Cannot remove a candidate who has received votes")
            self.candidates.pop(id, None)

    async def start_voting(self) -> None:
        await self._round_trip()
        self.voting_open = True

    async def end_voting(self) -> None:
        await self._round_trip()
        self.voting_open = False

    async def release_results(self) -> None:
        await self._round_trip()
        self.results_released = True

    async def record_vote(self, voter_id_hash: str, candidate_id: int) -> Optional[str]:
        await self._round_trip()
        async with self._lock:
            if self.voter_status.get(voter_id_hash):
                raise LedgerError("Voter has already cast a vote")
            if not self.voting_open:
                raise LedgerError("Voting is not open")
            if candidate_id not in self.candidates:
                raise LedgerError("Candidate does not exist")

            timestamp = int(time.time() * 1000)
            audit_ref = sha256_hex(f"{voter_id_hash}-{candidate_id}-{timestamp}")
            payload = json.dumps({"candidate_id": candidate_id, "timestamp": timestamp, "ref": audit_ref})

            self.candidates[candidate_id]["vote_count"] += 1
            self.voter_status[voter_id_hash] = True
            self.votes[voter_id_hash] = self.fernet.encrypt(payload.encode("utf-8"))
        return audit_ref

    def read_vote(self, voter_id_hash: str) -> Optional[Dict[str, Any]]:
        """Decrypt the stored payload for one voter hash."""
        token = self.votes.get(voter_id_hash)
        if token is None:
            return None
        return json.loads(self.fernet.decrypt(token))

    async def check_voter_status(self, voter_id: str) -> bool:
        await self._round_trip()
        return self.voter_status.get(hash_voter_id(voter_id), False)

    async def get_candidates(self) -> List[Dict[str, Any]]:
        await self._round_trip()
        return [
            {
                "id": c["id"],
                "name": c["name"],
                "party_name": c["party_name"],
                "vote_count": c["vote_count"] if self.results_released else 0,
            }
            for c in sorted(self.candidates.values(), key=lambda c: c["id"])
        ]

    async def get_total_votes(self) -> int:
        await self._round_trip()
        if not self.results_released:
            raise LedgerError("Results have not been released yet")
        return sum(c["vote_count"] for c in self.candidates.values())


def build_ledger(backend: str = LEDGER_BACKEND) -> Ledger:
    if backend == "hash":
        return HashLedger()
    if backend == "none":
        return NullLedger()
    raise ValueError(f"Unknown LEDGER_BACKEND: {backend}")
