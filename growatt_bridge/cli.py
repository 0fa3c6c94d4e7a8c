"""Command-line interface for growatt-bridge."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from . import constants
from .adapters import PortalClient
from .client import GrowattCommandClient
from .config import BridgeConfig, load_config
from .errors import GrowattBridgeError
from .logging import configure_logging
from .schema.device_types import DEFAULT_REGISTRY

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="growatt-bridge",
        description="Read and write inverter settings through the Growatt portal",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    describe_parser = subparsers.add_parser(
        "describe", help="List the functions a device type accepts"
    )
    describe_parser.add_argument("device_type")

    read_parser = subparsers.add_parser("read", help="Read a device setting")
    read_parser.add_argument("device_type")
    read_parser.add_argument("function")
    read_parser.add_argument("serial")

    write_parser = subparsers.add_parser("write", help="Write a device setting")
    write_parser.add_argument("device_type")
    write_parser.add_argument("function")
    write_parser.add_argument("serial")
    write_parser.add_argument(
        "values", nargs="*", metavar="NAME=VALUE", help="Parameter values"
    )

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def parse_values(items: list[str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected NAME=VALUE, got {item!r}")
        values[name.strip()] = value
    return values


async def run_command(config: BridgeConfig, args: argparse.Namespace) -> Any:
    account = config.portal.account
    password = config.portal.password
    if not account or not password:
        raise GrowattBridgeError("portal account and password must be configured")

    async with PortalClient(config.portal) as portal:
        await portal.login(account, password)
        client = GrowattCommandClient(portal, config=config.commands)
        try:
            if args.command == "read":
                return await client.read_setting(args.device_type, args.function, args.serial)
            return await client.write_setting(
                args.device_type, args.function, args.serial, parse_values(args.values)
            )
        finally:
            try:
                await portal.logout()
            except GrowattBridgeError as exc:
                LOGGER.warning("Logout from %s failed: %s", config.portal.server, exc)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging(
        config.logging.level,
        log_path=config.logging.path,
        log_network=config.logging.log_network,
    )

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                if key == "password" and value:
                    value = "********"
                print(f"{key} = {value}")
            print()
        return 0

    try:
        if args.command == "describe":
            result: Any = dict(DEFAULT_REGISTRY.describe(args.device_type))
        else:
            result = asyncio.run(run_command(config, args))
    except (GrowattBridgeError, ValueError) as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
