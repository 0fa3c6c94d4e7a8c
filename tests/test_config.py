from pathlib import Path

from growatt_bridge import constants
from growatt_bridge.config import load_config, save_config


def test_load_config_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "growatt-bridge.cfg"
    config = load_config(config_path)

    assert config.portal.server == constants.DEFAULT_SERVER_URL
    assert config.portal.timeout_seconds == constants.DEFAULT_TIMEOUT_SECONDS
    assert config.portal.verify_ssl is True
    assert config.portal.index_c_and_i is False
    assert config.portal.account is None
    assert config.commands.max_retries is None
    assert config.commands.retry_delay_seconds == 0.0
    assert config.logging.level == "INFO"
    assert config.logging.path is None
    assert config.path == config_path


def test_load_config_overrides_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "growatt-bridge.cfg"
    config_file.write_text(
        """
[portal]
server = https://openapi.growatt.example
timeout_seconds = 20
verify_ssl = false
index_c_and_i = true
account = owner
password = secret

[commands]
max_retries = 30
retry_delay_seconds = 0.5

[logging]
level = DEBUG
path = ~/growatt.log
log_network = true
"""
    )

    config = load_config(config_file)

    assert config.portal.server == "https://openapi.growatt.example"
    assert config.portal.timeout_seconds == 20.0
    assert config.portal.verify_ssl is False
    assert config.portal.index_c_and_i is True
    assert config.portal.account == "owner"
    assert config.portal.password == "secret"
    assert config.commands.max_retries == 30
    assert config.commands.retry_delay_seconds == 0.5
    assert config.logging.level == "DEBUG"
    assert config.logging.path == Path("~/growatt.log").expanduser()
    assert config.logging.log_network is True


def test_load_config_tolerates_invalid_numbers(tmp_path: Path) -> None:
    config_file = tmp_path / "growatt-bridge.cfg"
    config_file.write_text(
        "[portal]\ntimeout_seconds = soon\n\n"
        "[commands]\nmax_retries = many\nretry_delay_seconds = -3\n",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.portal.timeout_seconds == constants.DEFAULT_TIMEOUT_SECONDS
    assert config.commands.max_retries is None
    assert config.commands.retry_delay_seconds == 0.0


def test_save_config_round_trips_raw_values(tmp_path: Path) -> None:
    config_file = tmp_path / "nested" / "growatt-bridge.cfg"
    config = load_config(config_file)
    config.raw.set("portal", "account", "owner")

    save_config(config)

    assert load_config(config_file).portal.account == "owner"
