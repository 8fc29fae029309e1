"""Election configuration loaded from YAML.

A minimal config file:

    administrator: "0xA11CE"
    seed_candidates: ["Candidate 1", "Candidate 2"]
    log_level: INFO
    notifiers:
      - type: log
      - type: webhook
        url: https://dashboard.example.com/hooks/voted

The file path comes from the BALLOTBOX_CONFIG environment variable when not
given explicitly. BALLOTBOX_ADMINISTRATOR overrides the administrator.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

import yaml

from ballotbox.errors import ConfigError
from ballotbox.machine import DEFAULT_CANDIDATES, Election

# Import notifiers to register them
from ballotbox.notifiers import get_notifier_class
from ballotbox.notifiers import log  # noqa: F401
from ballotbox.notifiers import webhook  # noqa: F401
from ballotbox.notifiers.log import parse_level

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "BALLOTBOX_CONFIG"
ADMINISTRATOR_ENV_VAR = "BALLOTBOX_ADMINISTRATOR"


@dataclass
class ElectionConfig:
    """Settings needed to create the process-wide election.

    Attributes:
        administrator: Identity that owns the election
        seed_candidates: Names registered at creation, ids 0..n-1
        notifiers: Notifier entries, each a mapping with "type" plus constructor kwargs
        log_level: Root logging level, by name when the level has one
    """
    administrator: str
    seed_candidates: list[str] = field(default_factory=lambda: list(DEFAULT_CANDIDATES))
    notifiers: list[dict[str, Any]] = field(default_factory=list)
    log_level: str | int = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        administrator = os.getenv(ADMINISTRATOR_ENV_VAR) or data.get("administrator")
        if not administrator:
            raise ConfigError("Missing 'administrator' in election config")

        seed_candidates = data.get("seed_candidates", list(DEFAULT_CANDIDATES))
        if not isinstance(seed_candidates, list):
            raise ConfigError("'seed_candidates' must be a list of names")

        notifiers = data.get("notifiers") or []
        if not isinstance(notifiers, list) or not all(isinstance(n, dict) for n in notifiers):
            raise ConfigError("'notifiers' must be a list of mappings")

        level = parse_level(data.get("log_level", "INFO"))
        level_name = logging.getLevelName(level)

        return cls(
            administrator=str(administrator),
            seed_candidates=[str(name) for name in seed_candidates],
            notifiers=notifiers,
            log_level=level_name if level_name in logging.getLevelNamesMapping() else level,
        )


def load_config(path: str | Path | None = None) -> ElectionConfig:
    """Load election settings from a YAML file.

    Args:
        path: Config file path. Defaults to $BALLOTBOX_CONFIG. When neither
            is set, settings come from the environment alone.

    Raises:
        ConfigError: If the file is missing, unparseable, not a mapping, or
            lacks an administrator
    """
    path = path or os.getenv(CONFIG_ENV_VAR)
    if not path:
        return ElectionConfig.from_dict({})

    resolved = Path(path)
    if not resolved.is_file():
        raise ConfigError(f"Config file not found: {resolved}")

    try:
        data = yaml.safe_load(resolved.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {resolved}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {resolved}")

    logger.debug("Loaded election config from %s", resolved)
    return ElectionConfig.from_dict(data)


def configure_logging(level: str | int = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_notifier(entry: dict[str, Any]):
    """Instantiate a registered notifier from a config entry."""
    options = dict(entry)
    key = options.pop("type", None)
    notifier_class = get_notifier_class(key)
    if notifier_class is None:
        raise ConfigError(f"Unknown notifier type: {key!r}")
    try:
        return notifier_class(**options)
    except TypeError as e:
        raise ConfigError(f"Bad options for notifier {key!r}: {e}") from e


def build_election(config: ElectionConfig) -> Election:
    """Create an Election from config and subscribe its notifiers."""
    election = Election(config.administrator, seed_candidates=config.seed_candidates)
    for entry in config.notifiers:
        notifier = build_notifier(entry)
        election.subscribe(notifier)
        logger.info("Subscribed %s notifier", notifier.name)
    return election
