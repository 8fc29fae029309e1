"""The election state machine.

All mutations go through a single :class:`Election` instance guarded by its
own lock, so each operation observes a fully committed prior state. Caller
identity is passed explicitly to every administrative or participation call.
"""

import logging
import threading
from dataclasses import replace
from typing import Any, Callable

from ballotbox.errors import (
    AlreadyVotedError,
    CandidateRangeError,
    DuplicateRegistrationError,
    ElectionNotInProgressError,
    NotAdministratorError,
    NotEligibleError,
    PhaseError,
)
from ballotbox.models import Candidate, Phase, Role, VotedEvent

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATES = ("Candidate 1", "Candidate 2")

Subscriber = Callable[[VotedEvent], Any]


class Election:
    """A permissioned, single-administrator election.

    The administrator registers candidates and voters while the election is
    NOT_STARTED, opens it, and closes it. Each eligible voter may cast one
    vote while it is IN_PROGRESS. Tallies are readable by anyone at any time.

    Example:
        >>> election = Election("admin")
        >>> election.register_voter("admin", "alice")
        >>> election.start_election("admin")
        >>> election.cast_vote("alice", 0)
        >>> election.get_candidate(0)
        ('Candidate 1', 1)
    """

    def __init__(self, administrator: str, seed_candidates=DEFAULT_CANDIDATES):
        self._administrator = administrator
        self._phase = Phase.NOT_STARTED
        self._candidates: list[Candidate] = []
        self._eligible_voters: set[str] = set()
        self._cast_votes: set[str] = set()
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

        # Declared alongside eligible_voters but never incremented by
        # register_voter; use eligible_voters_count for the real number.
        self.voters_count = 0

        for name in seed_candidates:
            self._append_candidate(name)

    # --- read-only accessors ---

    @property
    def administrator(self) -> str:
        return self._administrator

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def candidates_count(self) -> int:
        return len(self._candidates)

    @property
    def eligible_voters_count(self) -> int:
        return len(self._eligible_voters)

    # --- phase transitions ---

    def start_election(self, caller: str) -> None:
        """Open the election for voting. Administrator only."""
        with self._lock:
            self._require_administrator(caller, "start the election")
            self._require_phase(Phase.NOT_STARTED, "start the election")
            self._phase = Phase.IN_PROGRESS
        logger.info("Election started by %s", caller)

    def end_election(self, caller: str) -> None:
        """Close the election. Administrator only; the election must be running."""
        with self._lock:
            self._require_administrator(caller, "end the election")
            self._require_phase(Phase.IN_PROGRESS, "end the election")
            self._phase = Phase.ENDED
        logger.info("Election ended by %s", caller)

    # --- registration ---

    def register_candidate(self, caller: str, name: str) -> Candidate:
        """Append a candidate and return a copy of it.

        The name is accepted as-is; empty and duplicate names are allowed.

        Raises:
            NotAdministratorError: If caller is not the administrator
            PhaseError: If the election has already started
        """
        with self._lock:
            self._require_administrator(caller, "register candidates")
            self._require_phase(Phase.NOT_STARTED, "register candidates")
            candidate = self._append_candidate(name)
        logger.info("Registered candidate %d (%r)", candidate.id, candidate.name)
        return replace(candidate)

    def register_voter(self, caller: str, identity: str) -> None:
        """Grant voting eligibility to an identity.

        Eligibility is permanent; there is no way to revoke it.

        Raises:
            NotAdministratorError: If caller is not the administrator
            DuplicateRegistrationError: If identity is already eligible, in any phase
            PhaseError: If the election has already started
        """
        with self._lock:
            self._require_administrator(caller, "register voters")
            if identity in self._eligible_voters:
                raise DuplicateRegistrationError(
                    f"Voter {identity!r} is already registered"
                )
            self._require_phase(Phase.NOT_STARTED, "register voters")
            self._eligible_voters.add(identity)
        logger.info("Registered voter %s", identity)

    # --- participation ---

    def cast_vote(self, caller: str, candidate_id: int) -> None:
        """Record the caller's vote for a candidate.

        Checks are made in a fixed order so diagnostics are deterministic:
        phase, eligibility, duplicate vote, candidate range. Once the vote is
        committed, a VotedEvent is published to every subscriber.

        Raises:
            ElectionNotInProgressError: If the election is not IN_PROGRESS
            NotEligibleError: If caller is not a registered voter
            AlreadyVotedError: If caller has already voted
            CandidateRangeError: If candidate_id is not a valid candidate id
        """
        with self._lock:
            if self._phase is not Phase.IN_PROGRESS:
                raise ElectionNotInProgressError(
                    f"Voting is only possible while the election is in progress "
                    f"(current phase: {self._phase.value})"
                )
            if caller not in self._eligible_voters:
                raise NotEligibleError(f"{caller!r} is not a registered voter")
            if caller in self._cast_votes:
                raise AlreadyVotedError(f"{caller!r} has already voted")
            candidate = self._candidate_at(candidate_id)

            candidate.vote_count += 1
            self._cast_votes.add(caller)
            subscribers = list(self._subscribers)

        logger.debug("Accepted vote for candidate %d", candidate_id)
        self._publish(VotedEvent(candidate_id=candidate_id), subscribers)

    # --- queries ---

    def resolve_role(self, identity: str) -> Role:
        """Classify an identity. Total over any identity value."""
        with self._lock:
            if identity == self._administrator:
                return Role.ADMINISTRATOR
            if identity in self._eligible_voters:
                return Role.AUTHORIZED_VOTER
            return Role.UNRECOGNIZED

    def get_candidate(self, candidate_id: int) -> tuple[str, int]:
        """Return (name, vote_count) for a candidate. Readable by anyone."""
        with self._lock:
            candidate = self._candidate_at(candidate_id)
            return candidate.name, candidate.vote_count

    def candidates(self) -> list[Candidate]:
        """Return copies of all candidates in id order."""
        with self._lock:
            return [replace(c) for c in self._candidates]

    def tallies(self) -> list[tuple[str, int]]:
        """Return (name, vote_count) for every candidate in id order."""
        with self._lock:
            return [(c.name, c.vote_count) for c in self._candidates]

    def is_eligible(self, identity: str) -> bool:
        with self._lock:
            return identity in self._eligible_voters

    def has_voted(self, identity: str) -> bool:
        with self._lock:
            return identity in self._cast_votes

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable snapshot.

        Voter identities are reported only as counts.
        """
        with self._lock:
            return {
                "administrator": self._administrator,
                "phase": self._phase.value,
                "candidates_count": len(self._candidates),
                "eligible_voters_count": len(self._eligible_voters),
                "votes_cast": len(self._cast_votes),
                "candidates": [c.to_dict() for c in self._candidates],
            }

    # --- notification ---

    def subscribe(self, subscriber: Subscriber) -> None:
        """Register a callable to receive a VotedEvent after each accepted vote.

        VoteNotifier instances are accepted directly.
        """
        callback = getattr(subscriber, "notify", subscriber)
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        callback = getattr(subscriber, "notify", subscriber)
        with self._lock:
            self._subscribers.remove(callback)

    def _publish(self, event: VotedEvent, subscribers: list[Subscriber]) -> None:
        # The vote is already committed; a failing subscriber is reported
        # without affecting the vote or the remaining subscribers.
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Vote notifier %r failed for candidate %d",
                    callback, event.candidate_id,
                )

    # --- internals (caller holds the lock) ---

    def _append_candidate(self, name: str) -> Candidate:
        candidate = Candidate(id=len(self._candidates), name=name)
        self._candidates.append(candidate)
        return candidate

    def _candidate_at(self, candidate_id: int) -> Candidate:
        # bool is an int subclass but never a valid id
        if (
            not isinstance(candidate_id, int)
            or isinstance(candidate_id, bool)
            or not 0 <= candidate_id < len(self._candidates)
        ):
            raise CandidateRangeError(
                f"Candidate id {candidate_id!r} is out of range "
                f"({len(self._candidates)} candidates registered)"
            )
        return self._candidates[candidate_id]

    def _require_administrator(self, caller: str, action: str) -> None:
        if caller != self._administrator:
            raise NotAdministratorError(
                f"Only the administrator can {action}"
            )

    def _require_phase(self, expected: Phase, action: str) -> None:
        if self._phase is not expected:
            raise PhaseError(
                f"Cannot {action} while the election is {self._phase.value} "
                f"(requires {expected.value})"
            )
