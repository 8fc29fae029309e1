"""Errors raised by the election state machine and its collaborators."""


class ElectionError(Exception):
    """Base class for rejected election operations.

    A rejected operation never changes election state.
    """
    pass


class AuthorizationError(ElectionError):
    """Caller does not hold the role the operation requires."""
    pass


class NotAdministratorError(AuthorizationError):
    """An administrator-only operation was attempted by someone else."""
    pass


class NotEligibleError(AuthorizationError):
    """A vote was attempted by an identity that is not a registered voter."""
    pass


class StateError(ElectionError):
    """Operation is incompatible with the current election state."""
    pass


class PhaseError(StateError):
    """Operation attempted in the wrong election phase."""
    pass


class ElectionNotInProgressError(PhaseError):
    """A vote was attempted before the election started or after it ended."""
    pass


class DuplicateRegistrationError(StateError):
    """The voter is already registered."""
    pass


class AlreadyVotedError(StateError):
    """The voter has already cast their vote."""
    pass


class CandidateRangeError(ElectionError, IndexError):
    """A candidate id is outside [0, candidates_count)."""
    pass


class NotificationError(Exception):
    """A vote notifier failed to deliver an event."""
    pass


class ConfigError(ValueError):
    """Election configuration is missing or malformed."""
    pass
