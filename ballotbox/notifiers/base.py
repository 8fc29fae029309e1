"""Abstract base class for vote notifiers."""

from abc import ABC, abstractmethod

from ballotbox.models import VotedEvent


class VoteNotifier(ABC):
    """Abstract base class for observers of accepted votes.

    Each notifier delivers VotedEvents to some external observer (a log, an
    indexer, a dashboard). Notifiers are registered via the @register_notifier
    decorator in ballotbox/notifiers/__init__.py and looked up by KEY.
    """

    KEY: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this notifier."""
        pass

    @abstractmethod
    def notify(self, event: VotedEvent) -> None:
        """Deliver a single event.

        Called after the vote is committed. Raising does not undo the vote.

        Args:
            event: The committed vote notification
        """
        pass
