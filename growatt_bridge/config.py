"""Configuration loader for growatt-bridge."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class PortalConfig:
    server: str = constants.DEFAULT_SERVER_URL
    timeout_seconds: float = constants.DEFAULT_TIMEOUT_SECONDS
    verify_ssl: bool = True
    index_c_and_i: bool = False
    account: Optional[str] = None
    password: Optional[str] = None


@dataclass(slots=True)
class CommandConfig:
    max_retries: Optional[int] = None  # None keeps re-sending until the bridge answers
    retry_delay_seconds: float = 0.0


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class BridgeConfig:
    portal: PortalConfig
    commands: CommandConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def _parse_optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return max(0, int(value.strip()))
    except ValueError:
        return None


def load_config(path: Optional[Path] = None) -> BridgeConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "portal": {
                "server": constants.DEFAULT_SERVER_URL,
                "timeout_seconds": str(constants.DEFAULT_TIMEOUT_SECONDS),
                "verify_ssl": "true",
                "index_c_and_i": "false",
            },
            "commands": {
                "max_retries": "",
                "retry_delay_seconds": "0",
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    server = parser.get("portal", "server").strip() or constants.DEFAULT_SERVER_URL

    try:
        timeout_value = parser.getfloat(
            "portal", "timeout_seconds", fallback=constants.DEFAULT_TIMEOUT_SECONDS
        )
    except ValueError:
        timeout_value = constants.DEFAULT_TIMEOUT_SECONDS

    portal = PortalConfig(
        server=server,
        timeout_seconds=max(1.0, timeout_value),
        verify_ssl=parser.getboolean("portal", "verify_ssl", fallback=True),
        index_c_and_i=parser.getboolean("portal", "index_c_and_i", fallback=False),
        account=parser.get("portal", "account", fallback=None),
        password=parser.get("portal", "password", fallback=None),
    )

    try:
        retry_delay = parser.getfloat("commands", "retry_delay_seconds", fallback=0.0)
    except ValueError:
        retry_delay = 0.0

    commands = CommandConfig(
        max_retries=_parse_optional_int(
            parser.get("commands", "max_retries", fallback=None)
        ),
        retry_delay_seconds=max(0.0, retry_delay),
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    return BridgeConfig(
        portal=portal,
        commands=commands,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def save_config(config: BridgeConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
