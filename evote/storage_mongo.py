# evote/storage_mongo.py
import functools
import logging
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from .config import (
    MONGO_DB, SEED_DEMO_DATA, VOTERS_COLLECTION_NAME, CANDIDATES_COLLECTION_NAME,
    ADMINS_COLLECTION_NAME, COUNTERS_COLLECTION_NAME,
)
from .database.connection import get_client, get_database
from .errors import AlreadyVotedError, NotFoundError, StorageError, ValidationError
from .models.admin_model import Admin, AdminCreate
from .models.candidate_model import Candidate, CandidateCreate
from .models.voter_model import Voter, VoterCreate
from .security import hash_password
from .storage import Storage, check_candidate_changes, check_voter_changes

logger = logging.getLogger(__name__)

DUPLICATE_KEY_MESSAGES = {
    "voter_id": "Voter with this ID already exists",
    "aadhaar_number": "Voter with this Aadhaar number already exists",
    "username": "Admin with this username already exists",
}


def _duplicate_message(error: DuplicateKeyError) -> str:
    key_pattern = (error.details or {}).get("keyPattern") or {}
    for field in key_pattern:
        if field in DUPLICATE_KEY_MESSAGES:
            return DUPLICATE_KEY_MESSAGES[field]
    return "Record already exists"


def mongo_errors(fn):
    """Translate driver exceptions into the API's error types."""
    @functools.wraps(fn)
    async def wrapper(self, *args, **kwargs):
        try:
            return await fn(self, *args, **kwargs)
        except DuplicateKeyError as e:
            logger.warning(f"{fn.__name__}: duplicate key {e.details}")
            raise ValidationError(_duplicate_message(e)) from e
        except PyMongoError as e:
            logger.error(f"{fn.__name__} failed: {e}")
            raise StorageError(str(e)) from e
    return wrapper


def _from_doc(model, doc: Optional[Dict[str, Any]]):
    if doc is None:
        return None
    data = dict(doc)
    data["id"] = data.pop("_id")
    return model(**data)


def _to_doc(record) -> Dict[str, Any]:
    data = record.model_dump()
    data["_id"] = data.pop("id")
    return data


class MongoStorage(Storage):
    """
    Entity store backed by MongoDB through motor.

    Numeric ids come from the `counters` collection. cast_vote runs in a
    multi-document transaction, so the server must be a replica set (a
    single-node replica set is enough).
    """

    def __init__(self, client=None, db_name: str = MONGO_DB, seed: bool = SEED_DEMO_DATA):
        super().__init__(seed)
        self.client = client or get_client()
        self.db = get_database(self.client, db_name)
        self.voters = self.db[VOTERS_COLLECTION_NAME]
        self.candidates = self.db[CANDIDATES_COLLECTION_NAME]
        self.admins = self.db[ADMINS_COLLECTION_NAME]
        self.counters = self.db[COUNTERS_COLLECTION_NAME]

    async def initialize(self) -> None:
        """Create unique indexes, check the connection, then seed."""
        try:
            await self.voters.create_index("voter_id", unique=True)
            await self.voters.create_index("aadhaar_number", unique=True)
            await self.admins.create_index("username", unique=True)
            await self.client.server_info()
            logger.info(f"Connected to MongoDB, database: {self.db.name}")
        except PyMongoError as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise StorageError(str(e)) from e
        await super().initialize()

    async def close(self) -> None:
        self.client.close()
        logger.info("MongoDB connection closed")

    async def _next_id(self, name: str) -> int:
        counter = await self.counters.find_one_and_update(
            {"_id": name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    # --- Voter operations ---
    @mongo_errors
    async def get_voter_by_id(self, id: int) -> Optional[Voter]:
        return _from_doc(Voter, await self.voters.find_one({"_id": id}))

    @mongo_errors
    async def get_voter_by_voter_id(self, voter_id: str) -> Optional[Voter]:
        return _from_doc(Voter, await self.voters.find_one({"voter_id": voter_id}))

    @mongo_errors
    async def get_voter_by_aadhaar(self, aadhaar_number: str) -> Optional[Voter]:
        return _from_doc(Voter, await self.voters.find_one({"aadhaar_number": aadhaar_number}))

    @mongo_errors
    async def create_voter(self, voter: VoterCreate) -> Voter:
        data = voter.model_dump()
        data["password"] = hash_password(data["password"])
        new_voter = Voter(**data, id=await self._next_id("voters"), has_voted=False, voted_for=None)
        await self.voters.insert_one(_to_doc(new_voter))
        logger.info(f"Voter {new_voter.voter_id} created with id {new_voter.id}")
        return new_voter

    @mongo_errors
    async def update_voter(self, id: int, changes: Dict[str, Any]) -> Optional[Voter]:
        changes = check_voter_changes(changes)
        if not changes:
            return await self.get_voter_by_id(id)
        doc = await self.voters.find_one_and_update(
            {"_id": id}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        if doc:
            logger.info(f"Voter {id} updated")
        return _from_doc(Voter, doc)

    @mongo_errors
    async def delete_voter(self, id: int) -> bool:
        result = await self.voters.delete_one({"_id": id, "has_voted": False})
        if result.deleted_count:
            logger.info(f"Voter {id} deleted")
            return True
        if await self.voters.find_one({"_id": id}, {"_id": 1}):
            raise ValidationError("Cannot delete a voter who has already voted")
        return False

    @mongo_errors
    async def list_voters(self) -> List[Voter]:
        cursor = self.voters.find({}).sort("_id", ASCENDING)
        return [_from_doc(Voter, doc) async for doc in cursor]

    # --- Candidate operations ---
    @mongo_errors
    async def get_candidate_by_id(self, id: int) -> Optional[Candidate]:
        return _from_doc(Candidate, await self.candidates.find_one({"_id": id}))

    @mongo_errors
    async def create_candidate(self, candidate: CandidateCreate) -> Candidate:
        new_candidate = Candidate(**candidate.model_dump(), id=await self._next_id("candidates"), votes=0)
        await self.candidates.insert_one(_to_doc(new_candidate))
        logger.info(f"Candidate {new_candidate.name} created with id {new_candidate.id}")
        return new_candidate

    @mongo_errors
    async def update_candidate(self, id: int, changes: Dict[str, Any]) -> Optional[Candidate]:
        changes = check_candidate_changes(changes)
        if not changes:
            return await self.get_candidate_by_id(id)
        doc = await self.candidates.find_one_and_update(
            {"_id": id}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        return _from_doc(Candidate, doc)

    @mongo_errors
    async def delete_candidate(self, id: int) -> bool:
        result = await self.candidates.delete_one({"_id": id, "votes": 0})
        if result.deleted_count:
            logger.info(f"Candidate {id} deleted")
            return True
        if await self.candidates.find_one({"_id": id}, {"_id": 1}):
            raise ValidationError("Cannot delete a candidate who has received votes")
        return False

    @mongo_errors
    async def list_candidates(self) -> List[Candidate]:
        cursor = self.candidates.find({}).sort("_id", ASCENDING)
        return [_from_doc(Candidate, doc) async for doc in cursor]

    # --- Admin operations ---
    @mongo_errors
    async def get_admin_by_username(self, username: str) -> Optional[Admin]:
        return _from_doc(Admin, await self.admins.find_one({"username": username}))

    @mongo_errors
    async def create_admin(self, admin: AdminCreate) -> Admin:
        new_admin = Admin(
            id=await self._next_id("admins"),
            username=admin.username,
            password=hash_password(admin.password),
        )
        await self.admins.insert_one(_to_doc(new_admin))
        logger.info(f"Admin {new_admin.username} created")
        return new_admin

    @mongo_errors
    async def list_admins(self) -> List[Admin]:
        return [_from_doc(Admin, doc) async for doc in self.admins.find({})]

    @mongo_errors
    async def update_password(self, kind: str, id: int, hashed_password: str) -> bool:
        collection = {"voter": self.voters, "admin": self.admins}.get(kind)
        if collection is None:
            raise ValueError(f"Unknown record kind: {kind}")
        result = await collection.update_one({"_id": id}, {"$set": {"password": hashed_password}})
        return result.matched_count > 0

    # --- Voting ---
    @mongo_errors
    async def cast_vote(self, voter_id: str, candidate_id: int) -> Tuple[Voter, Candidate]:
        async def record(session):
            voter = await self.voters.find_one({"voter_id": voter_id}, session=session)
            if voter is None:
                raise NotFoundError("Voter not found")

            # the has_voted filter makes a concurrent cast conflict on this document
            marked = await self.voters.update_one(
                {"_id": voter["_id"], "has_voted": False},
                {"$set": {"has_voted": True, "voted_for": candidate_id}},
                session=session,
            )
            if marked.matched_count == 0:
                raise AlreadyVotedError()

            candidate = await self.candidates.find_one_and_update(
                {"_id": candidate_id},
                {"$inc": {"votes": 1}},
                session=session,
                return_document=ReturnDocument.AFTER,
            )
            if candidate is None:
                raise NotFoundError("Candidate not found")

            voter.update(has_voted=True, voted_for=candidate_id)
            return voter, candidate

        # with_transaction retries on transient write conflicts; a retry then
        # sees has_voted=True and fails with AlreadyVotedError
        async with await self.client.start_session() as session:
            voter_doc, candidate_doc = await session.with_transaction(record)

        logger.info(f"Vote recorded for voter {voter_id}")
        return _from_doc(Voter, voter_doc), _from_doc(Candidate, candidate_doc)
