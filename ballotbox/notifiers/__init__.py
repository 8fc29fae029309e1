"""Observers notified of accepted votes."""

from .base import VoteNotifier

# Notifier registry - import notifiers here to register them
_notifiers: dict[str, type[VoteNotifier]] = {}


def register_notifier(notifier_class: type[VoteNotifier]) -> type[VoteNotifier]:
    """Decorator to register a notifier class under its KEY."""
    _notifiers[notifier_class.KEY] = notifier_class
    return notifier_class


def get_all_notifier_classes() -> list[type[VoteNotifier]]:
    """Return all registered notifier classes."""
    return list(_notifiers.values())


def get_notifier_class(key: str) -> type[VoteNotifier] | None:
    """Return the notifier class registered under key, or None."""
    return _notifiers.get(key)
