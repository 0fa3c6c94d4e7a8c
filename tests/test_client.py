"""Tests for the public command client."""

import asyncio

import pytest

from fakes import FakeTransport, scripted
from growatt_bridge.client import GrowattCommandClient
from growatt_bridge.config import CommandConfig
from growatt_bridge.errors import (
    AcknowledgmentLimitError,
    MissingParameterError,
    NotConnectedError,
    SchemaNotFoundError,
    ValidationError,
)

SEGMENT = {
    "mode": "battery first",
    "startHour": 1,
    "startMinute": 0,
    "endHour": 5,
    "endMinute": 0,
    "enabled": 1,
}


@pytest.mark.asyncio
async def test_numeric_read_returns_integer(transport):
    transport.responder = scripted({"success": True, "msg": "75"})
    client = GrowattCommandClient(transport)

    assert await client.read_setting("tlx", "pv_active_p_rate", "AB123") == 75
    assert client.pending_count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("device_type", "function"),
    [("fridge", "ac_charge"), ("tlx", "unknown_function")],
)
async def test_unknown_schema_fails_without_queueing(transport, device_type, function):
    client = GrowattCommandClient(transport)

    with pytest.raises(SchemaNotFoundError):
        await client.read_setting(device_type, function, "AB123")

    assert transport.calls == []
    assert client.pending_count == 0


@pytest.mark.asyncio
async def test_validation_error_never_holds_the_bridge(transport):
    client = GrowattCommandClient(transport)

    with pytest.raises(ValidationError) as excinfo:
        await client.write_setting(
            "tlx", "time_segment1", "AB123", dict(SEGMENT, endHour=30)
        )

    assert excinfo.value.field == "endHour"
    assert transport.calls == []
    assert await client.read_setting("tlx", "ac_charge", "AB123") is True


@pytest.mark.asyncio
async def test_huge_fixed_point_value_is_a_validation_error(transport):
    client = GrowattCommandClient(transport)

    with pytest.raises(ValidationError) as excinfo:
        await client.write_setting(
            "inverter", "pv_grid_voltage_high", "SN1", {"voltage": "1e30"}
        )

    assert excinfo.value.field == "voltage"
    assert excinfo.value.device_type == "inverter"
    assert transport.calls == []


@pytest.mark.asyncio
async def test_missing_parameter_is_reported(transport):
    client = GrowattCommandClient(transport)
    values = dict(SEGMENT)
    values.pop("mode")

    with pytest.raises(MissingParameterError) as excinfo:
        await client.write_setting("tlx", "time_segment1", "AB123", values)

    assert excinfo.value.field == "mode"
    assert transport.calls == []


@pytest.mark.asyncio
async def test_write_sends_positional_parameters(transport):
    transport.responder = scripted({"success": True, "msg": "set ok"})
    client = GrowattCommandClient(transport)

    result = await client.write_setting("tlx", "time_segment1", "AB123", SEGMENT)

    assert result == {"success": True, "msg": "set ok"}
    path, form = transport.calls[0]
    assert path == "/tcpSet.do"
    assert form == [
        ("action", "tlxSet"),
        ("serialNum", "AB123"),
        ("type", "time_segment1"),
        ("param1", "1"),
        ("param2", "1"),
        ("param3", "0"),
        ("param4", "5"),
        ("param5", "0"),
        ("param6", "1"),
    ]


@pytest.mark.asyncio
async def test_composite_read_collects_sub_reads_in_order():
    values = {
        "charge_power": "80",
        "charge_stop_soc": "95",
        "discharge_power": "100",
        "discharge_stop_soc": "10",
    }

    def responder(path, form):
        return {"success": True, "msg": values[dict(form)["paramId"]]}

    transport = FakeTransport(responder)
    client = GrowattCommandClient(transport)

    result = await client.read_setting("tlx", "battery_settings", "AB123")

    assert result == {
        "charge_power": 80,
        "charge_stop_soc": 95,
        "discharge_power": 100,
        "discharge_stop_soc": 10,
    }
    assert [dict(form)["paramId"] for _, form in transport.calls] == list(values)
    assert transport.max_in_flight == 1


@pytest.mark.asyncio
async def test_composite_read_raises_first_failure():
    def responder(path, form):
        if dict(form)["paramId"] == "charge_stop_soc":
            return {"success": False, "msg": "register busy"}
        return {"success": True, "msg": "1"}

    client = GrowattCommandClient(FakeTransport(responder))

    with pytest.raises(Exception, match="register busy"):
        await client.read_settings("tlx", "battery_settings", "AB123")

    assert client.pending_count == 0


def test_describe_communication_is_read_only(transport):
    client = GrowattCommandClient(transport)

    description = client.describe_communication("tlx")

    with pytest.raises(TypeError):
        description["time_segment1"] = None  # type: ignore[index]
    assert description["battery_settings"]["subRead"][0] == "charge_power"
    assert description["charge_stop_soc"]["isSubread"] is True


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_abort_command():
    release = asyncio.Event()

    async def slow(path, form):
        await release.wait()
        return {"success": True, "msg": "42"}

    transport = FakeTransport(slow)
    client = GrowattCommandClient(transport)

    waiter = asyncio.create_task(client.read_setting("tlx", "pv_active_p_rate", "AB123"))
    follower = asyncio.create_task(client.read_setting("tlx", "pv_active_p_rate", "CD456"))
    await asyncio.sleep(0.01)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    release.set()

    assert await follower == 42
    await client.drain()
    assert transport.serials() == ["AB123", "CD456"]
    assert client.pending_count == 0


@pytest.mark.asyncio
async def test_sub_address_is_sent_for_max_inverters(transport):
    client = GrowattCommandClient(transport)

    await client.write_setting("max", "max_cmd_active_p_rate", "MX001@2", {"value": 50})

    form = dict(transport.calls[0][1])
    assert form["serialNum"] == "MX001"
    assert form["addr"] == "2"
    assert form["action"] == "maxSet"


@pytest.mark.asyncio
async def test_disconnected_client_rejects_commands():
    client = GrowattCommandClient(FakeTransport(connected=False))

    assert client.is_connected() is False
    with pytest.raises(NotConnectedError):
        await client.read_setting("mix", "mix_ac_charge", "MX1")


@pytest.mark.asyncio
async def test_command_config_applies_retry_cap():
    transport = FakeTransport(scripted({"success": True, "msg": ""}))
    client = GrowattCommandClient(transport, config=CommandConfig(max_retries=1))

    with pytest.raises(AcknowledgmentLimitError):
        await client.read_setting("spa", "spa_charge_power", "SP1")

    assert len(transport.calls) == 2
