"""Run a complete demo election with fake voters.

Registers candidates and a batch of generated voter identities, opens the
election, has every voter cast one random vote, closes it and prints the
tallies. Useful for exercising notifiers against a live dashboard.

Usage:
    python scripts/simulate_election.py
    python scripts/simulate_election.py --voters 50 --candidates Alice Bob Carol
    python scripts/simulate_election.py --config election.yaml
"""

import argparse
import logging
import random
import sys
from pathlib import Path

from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent))

from ballotbox.config import ElectionConfig, build_election, configure_logging, load_config
from ballotbox.machine import Election

logger = logging.getLogger("simulate_election")

SEED = 20260201
ADMINISTRATOR = "admin"


def generate_voters(count: int, seed: int) -> list[str]:
    """Generate distinct fake voter identities (e-mail addresses)."""
    fake = Faker()
    Faker.seed(seed)
    return [fake.unique.email() for _ in range(count)]


def run_election(election: Election, voters: list[str], extra_candidates: list[str],
                 seed: int) -> list[tuple[str, int]]:
    """Drive an election through its whole lifecycle and return the tallies."""
    admin = election.administrator
    for name in extra_candidates:
        election.register_candidate(admin, name)
    for voter in voters:
        election.register_voter(admin, voter)

    election.start_election(admin)
    rng = random.Random(seed)
    for voter in voters:
        election.cast_vote(voter, rng.randrange(election.candidates_count))
    election.end_election(admin)

    return election.tallies()


def main():
    parser = argparse.ArgumentParser(
        description="Simulate an election with fake voters")
    parser.add_argument("--voters", type=int, default=20,
                        help="Number of generated voters (default: 20)")
    parser.add_argument("--candidates", nargs="*", default=[],
                        help="Extra candidate names registered after the seeded ones")
    parser.add_argument("--seed", type=int, default=SEED,
                        help=f"Random seed (default: {SEED})")
    parser.add_argument("--config", help="Election config YAML (optional)")
    args = parser.parse_args()

    if args.config:
        config = load_config(args.config)
    else:
        config = ElectionConfig(administrator=ADMINISTRATOR, notifiers=[{"type": "log"}])
    configure_logging(config.log_level)

    election = build_election(config)
    voters = generate_voters(args.voters, args.seed)
    logger.info("Generated %d voters", len(voters))

    tallies = run_election(election, voters, args.candidates, args.seed)

    print(f"Election {election.phase.value}: {sum(v for _, v in tallies)} votes cast")
    for candidate_id, (name, votes) in enumerate(tallies):
        print(f"  [{candidate_id}] {name}: {votes}")


if __name__ == "__main__":
    main()
