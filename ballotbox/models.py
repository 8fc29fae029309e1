"""Core data models for the election state machine."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Phase(Enum):
    """Lifecycle stage of an election.

    Phases only ever advance NOT_STARTED -> IN_PROGRESS -> ENDED.
    """
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


class Role(Enum):
    """Classification of an identity relative to an election."""
    ADMINISTRATOR = "administrator"
    AUTHORIZED_VOTER = "authorized_voter"
    UNRECOGNIZED = "unrecognized"


@dataclass
class Candidate:
    """A named option with an accumulating vote count.

    Attributes:
        id: Zero-based sequential identifier, equal to its registration position
        name: Human-readable label, accepted as given (may be empty or duplicated)
        vote_count: Number of accepted votes for this candidate

    Example:
        >>> Candidate(id=0, name="Candidate 1")
        Candidate(id=0, name='Candidate 1', vote_count=0)
    """
    id: int
    name: str
    vote_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "vote_count": self.vote_count}


@dataclass(frozen=True)
class VotedEvent:
    """Notification raised after a vote is committed.

    Only the candidate id is carried; the voter is never part of the event.
    """
    candidate_id: int

    def to_dict(self) -> dict[str, Any]:
        return {"event": "Voted", "candidate_id": self.candidate_id}
