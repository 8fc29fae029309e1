"""Notifier that POSTs votes to an HTTP endpoint."""

from urllib.parse import urlparse

import httpx

from ballotbox.errors import ConfigError, NotificationError
from ballotbox.models import VotedEvent
from ballotbox.notifiers import register_notifier
from ballotbox.notifiers.base import VoteNotifier


@register_notifier
class WebhookNotifier(VoteNotifier):
    """Delivers each VotedEvent as a JSON POST to a fixed URL.

    The request body is ``{"event": "Voted", "candidate_id": <id>}``; the
    voter identity is never sent. Intended for indexers and dashboards that
    react to new votes.

    Example config entry:
        notifiers:
          - type: webhook
            url: https://dashboard.example.com/hooks/voted
            timeout: 5
    """

    KEY = "webhook"

    def __init__(self, url: str, timeout: float = 10.0, headers: dict[str, str] | None = None):
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            raise ConfigError(f"Invalid webhook URL scheme: {parsed.scheme!r}")
        self.url = url
        self.timeout = timeout
        self.headers = headers or {}

    @property
    def name(self) -> str:
        return "Webhook"

    def notify(self, event: VotedEvent) -> None:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.url, json=event.to_dict(), headers=self.headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(
                f"Webhook {self.url} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise NotificationError(f"Error posting to webhook {self.url}: {e}") from e
