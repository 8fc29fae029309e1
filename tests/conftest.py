"""Shared test helpers."""

import pytest

from ballotbox.machine import Election

ADMIN = "admin"


def make_election(voters=(), started: bool = False, candidates=()) -> Election:
    """Build an Election with registered voters and extra candidates.

    Args:
        voters: Identities registered as eligible voters
        started: Whether to start the election after registration
        candidates: Names registered after the two seeded candidates

    Returns:
        Election administered by ADMIN.
    """
    election = Election(ADMIN)
    for name in candidates:
        election.register_candidate(ADMIN, name)
    for voter in voters:
        election.register_voter(ADMIN, voter)
    if started:
        election.start_election(ADMIN)
    return election


def total_votes(election: Election) -> int:
    return sum(count for _, count in election.tallies())


@pytest.fixture
def election():
    """Fresh election: NOT_STARTED, seeded candidates only, no voters."""
    return Election(ADMIN)


@pytest.fixture
def open_election():
    """Election IN_PROGRESS with voters V1, V2 and the two seeded candidates."""
    return make_election(voters=["V1", "V2"], started=True)
