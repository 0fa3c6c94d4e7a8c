"""Built-in command schemas for the supported device types.

This module is data only: adding a device type or a function never requires
touching the executor.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from ..core.models import DeviceType, Direction
from .param_types import (
    DISABLED_ENABLED,
    ON_OFF,
    BoundedInt,
    DateTimeValue,
    EnumCode,
    FixedPoint,
)
from .parsers import ResultParser, parse_datetime, parse_number, parse_on_off
from .registry import DeviceTypeSchema, FunctionDescriptor, ParamSpec, SchemaRegistry

READ = frozenset({Direction.READ})
WRITE = frozenset({Direction.WRITE})
READ_WRITE = frozenset({Direction.READ, Direction.WRITE})

PERCENT = BoundedInt(0, 100)
HOUR = BoundedInt(0, 23)
MINUTE = BoundedInt(0, 59)

PRIORITY_MODE = EnumCode({"0": "load first", "1": "battery first", "2": "grid first"})


def _fn(
    name: str,
    label: str,
    directions=READ_WRITE,
    *,
    param_id: Optional[str] = None,
    params: Iterable[Tuple[str, ParamSpec]] = (),
    parser: Optional[ResultParser] = None,
    sub_reads: Tuple[str, ...] = (),
    is_sub_read: bool = False,
) -> FunctionDescriptor:
    return FunctionDescriptor(
        name=name,
        label=label,
        directions=directions,
        param_id=param_id if param_id is not None or sub_reads else name,
        params=dict(params),
        result_parser=parser,
        sub_reads=sub_reads,
        is_sub_read=is_sub_read,
    )


def _table(*descriptors: FunctionDescriptor) -> Dict[str, FunctionDescriptor]:
    return {descriptor.name: descriptor for descriptor in descriptors}


def _on_off(name: str, label: str) -> FunctionDescriptor:
    return _fn(
        name,
        label,
        params=[("value", ParamSpec(ON_OFF, label))],
        parser=parse_on_off,
    )


def _percent(name: str, label: str, **kwargs) -> FunctionDescriptor:
    return _fn(
        name,
        label,
        params=[("value", ParamSpec(PERCENT, f"{label} in percent"))],
        parser=parse_number,
        **kwargs,
    )


def _system_time() -> FunctionDescriptor:
    return _fn(
        "pf_sys_year",
        "Set inverter time",
        params=[("value", ParamSpec(DateTimeValue(), "Date and time"))],
        parser=parse_datetime,
    )


def _grid_voltage(name: str, label: str, low: str, high: str) -> FunctionDescriptor:
    return _fn(
        name,
        label,
        params=[
            ("voltage", ParamSpec(FixedPoint(Decimal(low), Decimal(high), 1), "Voltage in V"))
        ],
        parser=parse_number,
    )


def _time_segment(index: int) -> FunctionDescriptor:
    return _fn(
        f"time_segment{index}",
        f"Time segment {index}",
        WRITE,
        params=[
            ("mode", ParamSpec(PRIORITY_MODE, "Priority mode")),
            ("startHour", ParamSpec(HOUR, "Start hour")),
            ("startMinute", ParamSpec(MINUTE, "Start minute")),
            ("endHour", ParamSpec(HOUR, "End hour")),
            ("endMinute", ParamSpec(MINUTE, "End minute")),
            ("enabled", ParamSpec(DISABLED_ENABLED, "Segment enabled")),
        ],
    )


def _ac_period(name: str, label: str, power_label: str, soc_label: str) -> FunctionDescriptor:
    return _fn(
        name,
        label,
        WRITE,
        params=[
            ("power", ParamSpec(PERCENT, power_label)),
            ("stopSoc", ParamSpec(PERCENT, soc_label)),
            ("startHour", ParamSpec(HOUR, "Start hour")),
            ("startMinute", ParamSpec(MINUTE, "Start minute")),
            ("endHour", ParamSpec(HOUR, "End hour")),
            ("endMinute", ParamSpec(MINUTE, "End minute")),
            ("enabled", ParamSpec(DISABLED_ENABLED, "Period enabled")),
        ],
    )


INVERTER = DeviceTypeSchema(
    device_type=DeviceType.INVERTER,
    read_action="readInvParam",
    write_action="inverterSet",
    functions=_table(
        _on_off("pv_on_off", "Inverter on/off"),
        _percent("pv_active_p_rate", "Active power rate"),
        _percent("pv_reactive_p_rate", "Reactive power rate"),
        _fn(
            "pv_power_factor",
            "Power factor",
            params=[
                (
                    "value",
                    ParamSpec(FixedPoint(Decimal("-1.00"), Decimal("1.00"), 2), "Power factor"),
                )
            ],
            parser=parse_number,
        ),
        _grid_voltage("pv_grid_voltage_high", "Grid voltage upper limit", "200.0", "300.0"),
        _grid_voltage("pv_grid_voltage_low", "Grid voltage lower limit", "100.0", "250.0"),
        _system_time(),
    ),
)

STORAGE = DeviceTypeSchema(
    device_type=DeviceType.STORAGE,
    read_action="readStorageParam",
    write_action="storageSPF5000Set",
    functions=_table(
        _fn(
            "storage_spf5000_ac_output_source",
            "Output source priority",
            params=[
                (
                    "value",
                    ParamSpec(EnumCode({"0": "sbu", "1": "solar", "2": "utility"}), "Output source"),
                )
            ],
            parser=parse_number,
        ),
        _fn(
            "storage_spf5000_charge_source",
            "Charge source priority",
            params=[
                (
                    "value",
                    ParamSpec(
                        EnumCode({"0": "pv first", "1": "pv and utility", "2": "pv only"}),
                        "Charge source",
                    ),
                )
            ],
            parser=parse_number,
        ),
        _fn(
            "storage_spf5000_max_charge_current",
            "Maximum charge current",
            params=[("value", ParamSpec(BoundedInt(10, 120), "Current in A"))],
            parser=parse_number,
        ),
        _fn(
            "storage_spf5000_uti_charge_current",
            "Utility charge current",
            params=[("value", ParamSpec(BoundedInt(0, 80), "Current in A"))],
            parser=parse_number,
        ),
        _system_time(),
    ),
)

MAX = DeviceTypeSchema(
    device_type=DeviceType.MAX,
    read_action="readMaxParam",
    write_action="maxSet",
    address_field="addr",
    functions=_table(
        _on_off("max_cmd_on_off", "Inverter on/off"),
        _percent("max_cmd_active_p_rate", "Active power rate"),
        _percent("max_cmd_reactive_p_rate", "Reactive power rate"),
        _grid_voltage("max_cmd_grid_voltage_high", "Grid voltage upper limit", "200.0", "300.0"),
        _grid_voltage("max_cmd_grid_voltage_low", "Grid voltage lower limit", "100.0", "250.0"),
        _system_time(),
    ),
)

TLX = DeviceTypeSchema(
    device_type=DeviceType.TLX,
    read_action="readMinParam",
    write_action="tlxSet",
    functions=_table(
        _on_off("tlx_on_off", "Inverter on/off"),
        _percent("pv_active_p_rate", "Active power rate"),
        _on_off("ac_charge", "AC charge"),
        _percent("charge_power", "Charge power", is_sub_read=True),
        _percent("charge_stop_soc", "Charge stop SOC", is_sub_read=True),
        _percent("discharge_power", "Discharge power", is_sub_read=True),
        _percent("discharge_stop_soc", "Discharge stop SOC", is_sub_read=True),
        _fn(
            "battery_settings",
            "Battery charge and discharge settings",
            READ,
            sub_reads=("charge_power", "charge_stop_soc", "discharge_power", "discharge_stop_soc"),
        ),
        _fn(
            "backflow_setting",
            "Export limitation",
            WRITE,
            params=[
                ("enabled", ParamSpec(DISABLED_ENABLED, "Export limitation enabled")),
                ("rate", ParamSpec(PERCENT, "Export limit in percent")),
            ],
        ),
        *(_time_segment(index) for index in range(1, 10)),
        _system_time(),
    ),
)

MIX = DeviceTypeSchema(
    device_type=DeviceType.MIX,
    read_action="readMixParam",
    write_action="mixSet",
    functions=_table(
        _on_off("mix_off_grid_enable", "Off-grid enable"),
        _on_off("mix_ac_charge", "AC charge"),
        _ac_period(
            "mix_ac_discharge_time_period",
            "Battery discharge period",
            "Discharge power in percent",
            "Discharge stop SOC in percent",
        ),
        _ac_period(
            "mix_ac_charge_time_period",
            "Battery charge period",
            "Charge power in percent",
            "Charge stop SOC in percent",
        ),
        _grid_voltage("pv_grid_voltage_high", "Grid voltage upper limit", "200.0", "300.0"),
        _grid_voltage("pv_grid_voltage_low", "Grid voltage lower limit", "100.0", "250.0"),
        _system_time(),
    ),
)

SPA = DeviceTypeSchema(
    device_type=DeviceType.SPA,
    read_action="readSpaParam",
    write_action="spaSet",
    functions=_table(
        _on_off("spa_ac_charge", "AC charge"),
        _percent("spa_charge_power", "Charge power"),
        _percent("spa_charge_stop_soc", "Charge stop SOC"),
        _ac_period(
            "spa_ac_charge_time_period",
            "Battery charge period",
            "Charge power in percent",
            "Charge stop SOC in percent",
        ),
        _ac_period(
            "spa_ac_discharge_time_period",
            "Battery discharge period",
            "Discharge power in percent",
            "Discharge stop SOC in percent",
        ),
        _system_time(),
    ),
)

BUILTIN_SCHEMAS: Tuple[DeviceTypeSchema, ...] = (INVERTER, STORAGE, MAX, TLX, MIX, SPA)


def build_default_registry() -> SchemaRegistry:
    return SchemaRegistry(BUILTIN_SCHEMAS)


DEFAULT_REGISTRY = build_default_registry()
