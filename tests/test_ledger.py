import pytest

from evote.errors import LedgerError
from evote.ledger import HashLedger, NullLedger, build_ledger, hash_voter_id, sha256_hex


@pytest.fixture
async def open_ledger():
    ledger = HashLedger(delay=0, auto_start=True)
    await ledger.initialize()
    await ledger.add_candidate(1, "Amit Sharma", "Party A", "https://via.placeholder.com/50?text=A")
    await ledger.add_candidate(2, "Priya Patel", "Party B", "https://via.placeholder.com/50?text=B")
    return ledger


async def test_record_vote_returns_digest_and_encrypts_payload(open_ledger):
    voter_hash = hash_voter_id("ABCD1234567")
    ref = await open_ledger.record_vote(voter_hash, 1)

    assert len(ref) == 64
    int(ref, 16)
    assert open_ledger.votes[voter_hash] != ref.encode()
    payload = open_ledger.read_vote(voter_hash)
    assert payload["candidate_id"] == 1
    assert payload["ref"] == ref


async def test_voter_hash_can_only_vote_once(open_ledger):
    voter_hash = hash_voter_id("ABCD1234567")
    await open_ledger.record_vote(voter_hash, 1)
    with pytest.raises(LedgerError, match="already"):
        await open_ledger.record_vote(voter_hash, 2)
    assert await open_ledger.check_voter_status("ABCD1234567") is True
    assert await open_ledger.check_voter_status("EFGH9876543") is False


async def test_vote_rejected_when_voting_closed(open_ledger):
    await open_ledger.end_voting()
    with pytest.raises(LedgerError, match="not open"):
        await open_ledger.record_vote(hash_voter_id("ABCD1234567"), 1)


async def test_vote_rejected_for_unknown_candidate(open_ledger):
    with pytest.raises(LedgerError, match="does not exist"):
        await open_ledger.record_vote(hash_voter_id("ABCD1234567"), 42)


async def test_counts_hidden_until_release(open_ledger):
    await open_ledger.record_vote(hash_voter_id("ABCD1234567"), 2)

    assert [c["vote_count"] for c in await open_ledger.get_candidates()] == [0, 0]
    with pytest.raises(LedgerError, match="not been released"):
        await open_ledger.get_total_votes()

    await open_ledger.release_results()
    assert [c["vote_count"] for c in await open_ledger.get_candidates()] == [0, 1]
    assert await open_ledger.get_total_votes() == 1


async def test_candidate_logo_is_hashed(open_ledger):
    assert open_ledger.candidates[1]["party_logo"] == sha256_hex("https://via.placeholder.com/50?text=A")


async def test_voting_closed_without_auto_start():
    ledger = HashLedger(delay=0, auto_start=False)
    await ledger.initialize()
    assert ledger.voting_open is False


async def test_null_ledger_records_nothing():
    ledger = NullLedger()
    assert await ledger.record_vote(hash_voter_id("ABCD1234567"), 1) is None
    with pytest.raises(LedgerError):
        await ledger.get_total_votes()


def test_build_ledger():
    assert isinstance(build_ledger("hash"), HashLedger)
    assert isinstance(build_ledger("none"), NullLedger)
    with pytest.raises(ValueError):
        build_ledger("ethereum")


async def test_update_candidate_keeps_tally(open_ledger):
    await open_ledger.record_vote(hash_voter_id("ABCD1234567"), 1)
    await open_ledger.update_candidate(1, "Amit S.", "Party Z", "logo-z")

    assert open_ledger.candidates[1]["name"] == "Amit S."
    assert open_ledger.candidates[1]["party_logo"] == sha256_hex("logo-z")
    assert open_ledger.candidates[1]["vote_count"] == 1


async def test_update_unknown_candidate_registers_it(open_ledger):
    await open_ledger.update_candidate(7, "New Name", "Party G", "logo-g")
    assert open_ledger.candidates[7]["vote_count"] == 0


async def test_remove_candidate(open_ledger):
    await open_ledger.remove_candidate(2)
    assert [c["id"] for c in await open_ledger.get_candidates()] == [1]
    # removing twice is harmless
    await open_ledger.remove_candidate(2)


async def test_remove_candidate_with_votes_rejected(open_ledger):
    await open_ledger.record_vote(hash_voter_id("ABCD1234567"), 1)
    with pytest.raises(LedgerError, match="received votes"):
        await open_ledger.remove_candidate(1)
    assert 1 in open_ledger.candidates


async def test_null_ledger_ignores_candidate_changes():
    ledger = NullLedger()
    await ledger.update_candidate(1, "A", "B", "C")
    await ledger.remove_candidate(1)
