import json
from pathlib import Path

import pytest

from growatt_bridge.cli import build_parser, main, parse_values, run_command
from growatt_bridge.config import load_config
from growatt_bridge.errors import ServerRejection


def test_parse_values():
    assert parse_values(["startHour=1", " mode = battery first"]) == {
        "startHour": "1",
        "mode": " battery first",
    }
    with pytest.raises(ValueError):
        parse_values(["startHour"])


def test_describe_prints_function_catalog(tmp_path: Path, capsys) -> None:
    code = main(["-c", str(tmp_path / "missing.cfg"), "describe", "tlx"])

    assert code == 0
    catalog = json.loads(capsys.readouterr().out)
    assert catalog["time_segment1"]["directions"] == ["write"]
    assert catalog["battery_settings"]["subRead"][0] == "charge_power"


def test_describe_unknown_device_type_fails(tmp_path: Path) -> None:
    assert main(["-c", str(tmp_path / "missing.cfg"), "describe", "toaster"]) == 1


def test_show_config_masks_password(tmp_path: Path, capsys) -> None:
    config_file = tmp_path / "growatt-bridge.cfg"
    config_file.write_text("[portal]\naccount = owner\npassword = hunter2\n")

    assert main(["-c", str(config_file), "show-config"]) == 0

    output = capsys.readouterr().out
    assert "account = owner" in output
    assert "hunter2" not in output
    assert "password = ********" in output


def test_read_without_credentials_fails(tmp_path: Path) -> None:
    code = main(["-c", str(tmp_path / "missing.cfg"), "read", "tlx", "ac_charge", "AB123"])

    assert code == 1


def _portal_config(tmp_path: Path, url: str):
    config_file = tmp_path / "growatt-bridge.cfg"
    config_file.write_text(
        f"[portal]\nserver = {url}\naccount = owner\npassword = secret\n"
    )
    return load_config(config_file)


@pytest.mark.asyncio
async def test_failed_logout_keeps_command_result(tmp_path: Path, portal_server) -> None:
    portal_server.logout_status = 500
    portal_server.command_responses = [{"success": True, "msg": "1"}]
    config = _portal_config(tmp_path, portal_server.url)
    args = build_parser().parse_args(["read", "tlx", "ac_charge", "AB123"])

    assert await run_command(config, args) is True
    assert portal_server.requests[-1]["path"] == "/logout"


@pytest.mark.asyncio
async def test_failed_logout_does_not_mask_rejection(tmp_path: Path, portal_server) -> None:
    portal_server.logout_status = 500
    portal_server.command_responses = [{"success": False, "msg": "device offline"}]
    config = _portal_config(tmp_path, portal_server.url)
    args = build_parser().parse_args(["read", "tlx", "ac_charge", "AB123"])

    with pytest.raises(ServerRejection, match="device offline"):
        await run_command(config, args)
