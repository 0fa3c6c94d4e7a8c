"""Constants used across the growatt-bridge package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "growatt-bridge"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_SERVER_URL = "https://server.growatt.com"
DEFAULT_TIMEOUT_SECONDS = 50.0

INDEX_PAGE = "index"
INDEX_PAGE_C_AND_I = "indexbC"

LOGIN_PATH = "/login"
DEMO_LOGIN_PATH = "/login/toViewExamlePlant"
SHARE_PLANT_LOGIN_PATH = "/login/toSharePlant/"
LOGOUT_PATH = "/logout"
DEVICE_COMMAND_PATH = "/tcpSet.do"
DATALOGGER_COMMAND_PATH = "/ftp.do"

SESSION_COOKIE = "JSESSIONID"
ERROR_PAGE_MARKER = "errorMess"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/104.0.0.0 Safari/537.36"
)

SERIAL_ADDRESS_SEPARATOR = "@"
