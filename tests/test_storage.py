import asyncio

import pytest

from conftest import VOTER_ID, OTHER_VOTER_ID, assert_tallies_consistent
from evote.errors import AlreadyVotedError, NotFoundError, ValidationError
from evote.models.admin_model import AdminCreate
from evote.models.candidate_model import CandidateCreate
from evote.models.voter_model import VoterCreate
from evote.security import verify_password
from evote.storage import MemoryStorage


def make_voter(**overrides) -> VoterCreate:
    data = dict(
        voter_id="WXYZ0000001",
        aadhaar_number="9999-8888-7777",
        name="Anil Rao",
        password="01/01/1990",
        dob="01/01/1990",
        age=34,
        email="anil.rao@example.com",
        gender="Male",
        address="7 Lake Road",
        state="Karnataka",
        district="Mysore",
        pincode="570002",
        marital_status="Single",
    )
    data.update(overrides)
    return VoterCreate(**data)


# --- Seed data ---

async def test_seed_creates_demo_records(storage):
    assert len(await storage.list_candidates()) == 4
    assert len(await storage.list_voters()) == 2
    admin = await storage.get_admin_by_username("admin")
    assert admin is not None
    assert verify_password("admin123", admin.password)


async def test_seed_skips_non_empty_store(storage):
    await storage.initialize()
    assert len(await storage.list_candidates()) == 4
    assert len(await storage.list_admins()) == 1


async def test_unseeded_store_is_empty():
    store = MemoryStorage(seed=False)
    await store.initialize()
    assert await store.list_voters() == []
    assert await store.list_candidates() == []


# --- Voters ---

async def test_create_voter_starts_without_vote_and_hashes_password(storage):
    voter = await storage.create_voter(make_voter())
    assert voter.has_voted is False
    assert voter.voted_for is None
    assert voter.password != "01/01/1990"
    assert verify_password("01/01/1990", voter.password)


async def test_lookup_by_natural_keys(storage):
    created = await storage.create_voter(make_voter())
    assert (await storage.get_voter_by_id(created.id)).voter_id == "WXYZ0000001"
    assert (await storage.get_voter_by_voter_id("WXYZ0000001")).id == created.id
    assert (await storage.get_voter_by_aadhaar("9999-8888-7777")).id == created.id
    assert await storage.get_voter_by_voter_id("nonexistent") is None


async def test_duplicate_voter_id_rejected(storage):
    with pytest.raises(ValidationError, match="ID already exists"):
        await storage.create_voter(make_voter(voter_id=VOTER_ID))


async def test_duplicate_aadhaar_rejected(storage):
    with pytest.raises(ValidationError, match="Aadhaar"):
        await storage.create_voter(make_voter(aadhaar_number="1234-5678-9012"))


async def test_update_voter_profile(storage):
    voter = await storage.get_voter_by_voter_id(VOTER_ID)
    updated = await storage.update_voter(voter.id, {"address": "9 New Street", "password": "secret"})
    assert updated.address == "9 New Street"
    assert verify_password("secret", updated.password)


async def test_update_voter_cannot_touch_voting_state(storage):
    voter = await storage.get_voter_by_voter_id(VOTER_ID)
    with pytest.raises(ValidationError):
        await storage.update_voter(voter.id, {"has_voted": True})
    with pytest.raises(ValidationError):
        await storage.update_voter(voter.id, {"voted_for": 1})
    assert (await storage.get_voter_by_id(voter.id)).has_voted is False


async def test_update_voter_rejects_taken_voter_id(storage):
    voter = await storage.get_voter_by_voter_id(VOTER_ID)
    with pytest.raises(ValidationError):
        await storage.update_voter(voter.id, {"voter_id": OTHER_VOTER_ID})


async def test_update_missing_voter_returns_none(storage):
    assert await storage.update_voter(999, {"name": "Nobody"}) is None


async def test_delete_voter(storage):
    voter = await storage.create_voter(make_voter())
    assert await storage.delete_voter(voter.id) is True
    assert await storage.get_voter_by_id(voter.id) is None
    assert await storage.delete_voter(voter.id) is False


async def test_delete_voter_who_voted_is_rejected(storage):
    voter, _ = await storage.cast_vote(VOTER_ID, 1)
    with pytest.raises(ValidationError):
        await storage.delete_voter(voter.id)
    await assert_tallies_consistent(storage)


async def test_returned_records_are_copies(storage):
    voter = await storage.get_voter_by_voter_id(VOTER_ID)
    voter.has_voted = True
    assert (await storage.get_voter_by_voter_id(VOTER_ID)).has_voted is False


# --- Candidates ---

async def test_create_candidate_starts_at_zero_votes(storage):
    candidate = await storage.create_candidate(
        CandidateCreate(name="Meera Nair", party_name="Party E", party_logo="logo.png", constituency="Mysore")
    )
    assert candidate.votes == 0
    assert (await storage.get_candidate_by_id(candidate.id)).votes == 0


async def test_candidates_listed_by_id(storage):
    ids = [c.id for c in await storage.list_candidates()]
    assert ids == sorted(ids)


async def test_update_candidate_cannot_touch_votes(storage):
    with pytest.raises(ValidationError):
        await storage.update_candidate(1, {"votes": 100})
    updated = await storage.update_candidate(1, {"party_name": "Party Z"})
    assert updated.party_name == "Party Z"
    assert updated.votes == 0


async def test_delete_candidate(storage):
    assert await storage.delete_candidate(4) is True
    assert await storage.get_candidate_by_id(4) is None
    assert await storage.delete_candidate(4) is False


async def test_delete_candidate_with_votes_is_rejected(storage):
    await storage.cast_vote(VOTER_ID, 2)
    with pytest.raises(ValidationError):
        await storage.delete_candidate(2)
    assert await storage.get_candidate_by_id(2) is not None


# --- Admins ---

async def test_duplicate_admin_rejected(storage):
    with pytest.raises(ValidationError):
        await storage.create_admin(AdminCreate(username="admin", password="other"))


async def test_update_password(storage):
    admin = await storage.get_admin_by_username("admin")
    assert await storage.update_password("admin", admin.id, "replaced") is True
    assert (await storage.get_admin_by_username("admin")).password == "replaced"
    assert await storage.update_password("admin", 999, "x") is False
    with pytest.raises(ValueError):
        await storage.update_password("candidate", 1, "x")


# --- Casting votes ---

async def test_cast_vote_marks_voter_and_increments_tally(storage):
    voter, candidate = await storage.cast_vote(VOTER_ID, 1)
    assert voter.has_voted is True
    assert voter.voted_for == 1
    assert candidate.votes == 1

    stored = await storage.get_voter_by_voter_id(VOTER_ID)
    assert stored.has_voted is True
    assert stored.voted_for == 1
    assert (await storage.get_candidate_by_id(1)).votes == 1
    await assert_tallies_consistent(storage)


async def test_second_vote_fails_and_changes_nothing(storage):
    await storage.cast_vote(VOTER_ID, 1)
    with pytest.raises(AlreadyVotedError):
        await storage.cast_vote(VOTER_ID, 2)

    stored = await storage.get_voter_by_voter_id(VOTER_ID)
    assert stored.voted_for == 1
    assert (await storage.get_candidate_by_id(1)).votes == 1
    assert (await storage.get_candidate_by_id(2)).votes == 0
    await assert_tallies_consistent(storage)


async def test_same_candidate_twice_counts_once(storage):
    await storage.cast_vote(VOTER_ID, 3)
    with pytest.raises(AlreadyVotedError):
        await storage.cast_vote(VOTER_ID, 3)
    assert (await storage.get_candidate_by_id(3)).votes == 1


async def test_unknown_voter_fails_without_changes(storage):
    before_voters = await storage.list_voters()
    before_candidates = await storage.list_candidates()
    with pytest.raises(NotFoundError, match="Voter"):
        await storage.cast_vote("nonexistent", 1)
    assert await storage.list_voters() == before_voters
    assert await storage.list_candidates() == before_candidates


async def test_unknown_candidate_fails_without_changes(storage):
    before_candidates = await storage.list_candidates()
    with pytest.raises(NotFoundError, match="Candidate"):
        await storage.cast_vote(VOTER_ID, 999)

    voter = await storage.get_voter_by_voter_id(VOTER_ID)
    assert voter.has_voted is False
    assert voter.voted_for is None
    assert await storage.list_candidates() == before_candidates

    # the voter can still vote afterwards
    await storage.cast_vote(VOTER_ID, 1)


async def test_concurrent_casts_for_one_voter_succeed_once(storage):
    attempts = [storage.cast_vote(VOTER_ID, (i % 4) + 1) for i in range(20)]
    results = await asyncio.gather(*attempts, return_exceptions=True)

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 19
    assert all(isinstance(f, AlreadyVotedError) for f in failures)

    voter = await storage.get_voter_by_voter_id(VOTER_ID)
    assert sum(c.votes for c in await storage.list_candidates()) == 1
    assert (await storage.get_candidate_by_id(voter.voted_for)).votes == 1
    await assert_tallies_consistent(storage)


async def test_concurrent_casts_for_different_voters_all_count(storage):
    await asyncio.gather(storage.cast_vote(VOTER_ID, 1), storage.cast_vote(OTHER_VOTER_ID, 1))
    assert (await storage.get_candidate_by_id(1)).votes == 2
    await assert_tallies_consistent(storage)
