"""Device command schemas."""

from .device_types import BUILTIN_SCHEMAS, DEFAULT_REGISTRY, build_default_registry
from .param_types import (
    BoundedInt,
    DateTimeValue,
    EnumCode,
    FixedPoint,
    ParamType,
    ParamValueError,
    RawString,
)
from .registry import (
    DeviceTypeSchema,
    FunctionDescriptor,
    ParamSpec,
    SchemaRegistry,
    resolve_device_type,
)

__all__ = [
    "BUILTIN_SCHEMAS",
    "BoundedInt",
    "DEFAULT_REGISTRY",
    "DateTimeValue",
    "DeviceTypeSchema",
    "EnumCode",
    "FixedPoint",
    "FunctionDescriptor",
    "ParamSpec",
    "ParamType",
    "ParamValueError",
    "RawString",
    "SchemaRegistry",
    "build_default_registry",
    "resolve_device_type",
]
