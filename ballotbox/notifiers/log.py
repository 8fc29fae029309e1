"""Notifier that records votes in the application log."""

import logging

from ballotbox.errors import ConfigError
from ballotbox.models import VotedEvent
from ballotbox.notifiers import register_notifier
from ballotbox.notifiers.base import VoteNotifier


def parse_level(value: str | int) -> int:
    """Resolve a level name ("info", "WARNING") or number to a logging level.

    Raises:
        ConfigError: If value is not a known level name or a non-negative int
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise ConfigError(f"Log level must not be negative: {value}")
        return value
    if isinstance(value, str):
        level = logging.getLevelNamesMapping().get(value.strip().upper())
        if level is not None:
            return level
    raise ConfigError(f"Unknown log level: {value!r}")


@register_notifier
class LogNotifier(VoteNotifier):
    """Writes one log record per accepted vote."""

    KEY = "log"

    def __init__(self, logger_name: str = "ballotbox.votes", level: str | int = "INFO"):
        self.logger = logging.getLogger(logger_name)
        self.level = parse_level(level)

    @property
    def name(self) -> str:
        return "Log"

    def notify(self, event: VotedEvent) -> None:
        self.logger.log(self.level, "Voted for candidate %d", event.candidate_id)
