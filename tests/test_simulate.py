"""Tests for the election simulation script."""

from tests.conftest import ADMIN

from ballotbox.machine import Election
from ballotbox.models import Phase
from scripts.simulate_election import generate_voters, run_election


class TestSimulateElection:
    def test_generate_voters_is_deterministic(self):
        assert generate_voters(5, seed=7) == generate_voters(5, seed=7)

    def test_generate_voters_are_distinct(self):
        voters = generate_voters(40, seed=7)
        assert len(set(voters)) == 40

    def test_run_election(self):
        election = Election(ADMIN)
        voters = generate_voters(25, seed=3)
        tallies = run_election(election, voters, ["Carol"], seed=3)
        assert election.phase is Phase.ENDED
        assert [name for name, _ in tallies] == ["Candidate 1", "Candidate 2", "Carol"]
        assert sum(count for _, count in tallies) == 25
        assert all(election.has_voted(v) for v in voters)
