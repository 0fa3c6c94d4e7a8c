"""Portal adapter: authenticated HTTP transport for the Growatt web portal."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Iterable, Optional
from urllib.parse import quote

import aiohttp

from .. import constants
from ..config import PortalConfig
from ..core.session import Session
from ..errors import ServerRejection, TransportError

LOGGER = logging.getLogger(__name__)

LifeSignCallback = Callable[[], None]


class PortalClient:
    """Non-blocking transport towards the portal.

    Owns the ``Session`` of one client instance. The session cookie is handled
    explicitly as an opaque token; the HTTP cookie jar is disabled so the token
    is only ever what the last login captured.
    """

    def __init__(
        self,
        config: Optional[PortalConfig] = None,
        *,
        http_session: Optional[aiohttp.ClientSession] = None,
        life_sign_callback: Optional[LifeSignCallback] = None,
    ) -> None:
        self.config = config or PortalConfig()
        self.session = Session()
        self.life_sign_callback = life_sign_callback

        self._base_url = self.config.server.rstrip("/")
        self._http: Optional[aiohttp.ClientSession] = http_session
        self._owns_http = http_session is None

    async def __aenter__(self) -> "PortalClient":
        await self._ensure_http()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def is_connected(self) -> bool:
        return self.session.connected

    @property
    def index_page(self) -> str:
        if self.config.index_c_and_i:
            return constants.INDEX_PAGE_C_AND_I
        return constants.INDEX_PAGE

    async def login(self, account: str, password: str) -> dict[str, Any]:
        """Log in with account credentials and capture the session token."""

        LOGGER.debug("Logging in to %s as %s", self._base_url, account)
        self.session.mark_disconnected()
        payload, token = await self._request(
            "POST",
            constants.LOGIN_PATH,
            data=[("account", account), ("password", password), ("validateCode", "")],
            login=True,
        )

        if isinstance(payload, dict) and payload.get("result") == 1:
            if not token:
                raise TransportError("Login succeeded but no session cookie was issued")
            self.session.establish(token)
            LOGGER.info("Logged in to %s", self._base_url)
            return payload

        if isinstance(payload, dict) and payload.get("result"):
            raise ServerRejection(json.dumps(payload, default=str), payload=payload)

        raise TransportError(
            "The server sent an unexpected response, a fatal error has occurred"
        )

    async def demo_login(self) -> dict[str, Any]:
        """Open a session on the portal's public demo plant."""

        self.session.mark_disconnected()
        _, token = await self._request(
            "GET", constants.DEMO_LOGIN_PATH, login=True, expect_json=False
        )
        if not token:
            raise TransportError(
                "The server sent an unexpected response, a fatal error has occurred"
            )
        self.session.establish(token)
        LOGGER.info("Opened demo session on %s", self._base_url)
        return {"result": 1, "msg": "OK"}

    async def share_plant_login(self, key: str) -> dict[str, Any]:
        """Open a session on a plant shared through a share key.

        The portal answers with a redirect that carries the session cookie, so
        redirects are not followed.
        """

        self.session.mark_disconnected()
        _, token = await self._request(
            "GET",
            f"{constants.SHARE_PLANT_LOGIN_PATH}{quote(key, safe='')}",
            login=True,
            expect_json=False,
            allow_redirects=False,
        )
        if not token:
            raise TransportError(
                "The server sent an unexpected response, a fatal error has occurred"
            )
        self.session.establish(token)
        LOGGER.info("Opened shared plant session on %s", self._base_url)
        return {"result": 1, "msg": "OK"}

    async def logout(self) -> dict[str, Any]:
        """End the session. The local session is reset even if the call fails."""

        try:
            await self._request("GET", constants.LOGOUT_PATH, expect_json=False)
        finally:
            self.session.reset()
        return {"result": 1, "msg": "OK"}

    # ------------------------------------------------------------------
    # Transport contract
    # ------------------------------------------------------------------
    async def send(self, path: str, fields: Iterable[tuple[str, str]]) -> dict[str, Any]:
        payload, _ = await self._request("POST", path, data=list(fields))
        if not isinstance(payload, dict):
            raise TransportError(
                f"The server sent an unexpected response for {path}: {payload!r}"
            )
        return payload

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _headers(self, login: bool) -> dict[str, str]:
        headers = {
            "User-Agent": constants.USER_AGENT,
            "Connection": "keep-alive",
        }
        if not login:
            token = self.session.token
            headers["Cookie"] = f"{constants.SESSION_COOKIE}={token}"
            headers["Referer"] = f"{self._base_url}/{self.index_page};jsessionid={token}"
        return headers

    async def _ensure_http(self) -> aiohttp.ClientSession:
        if self._http is None:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            connector = aiohttp.TCPConnector(ssl=self.config.verify_ssl)
            self._http = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector,
                cookie_jar=aiohttp.DummyCookieJar(),
            )
        return self._http

    async def _request(
        self,
        method: str,
        path: str,
        *,
        data: Optional[list[tuple[str, str]]] = None,
        login: bool = False,
        expect_json: bool = True,
        allow_redirects: bool = True,
    ) -> tuple[Any, str]:
        if self.life_sign_callback is not None:
            self.life_sign_callback()

        http = await self._ensure_http()
        url = f"{self._base_url}{path}"

        try:
            async with http.request(
                method,
                url,
                data=data,
                headers=self._headers(login),
                allow_redirects=allow_redirects,
            ) as response:
                location = response.headers.get("Location", "")
                if constants.ERROR_PAGE_MARKER in f"{response.url}{location}":
                    raise TransportError(
                        f"The server sent an unexpected response: {response.url.path_qs}"
                    )
                response.raise_for_status()
                token = _session_token(response)
                if not expect_json:
                    await response.read()
                    return None, token
                try:
                    payload = await response.json(content_type=None)
                except ValueError as exc:
                    raise TransportError(
                        f"The server sent a non-JSON response for {path}"
                    ) from exc
        except TransportError:
            raise
        except asyncio.TimeoutError as exc:
            LOGGER.warning(
                "Portal request timed out after %.1fs (url=%s)",
                self.config.timeout_seconds,
                url,
            )
            raise TransportError(f"Request to {path} timed out") from exc
        except aiohttp.ClientError as exc:
            LOGGER.warning("Portal request to %s failed: %s", url, exc)
            raise TransportError(f"Request to {path} failed: {exc}") from exc

        LOGGER.debug("Portal %s %s -> %s", method, path, payload)
        return payload, token


def _session_token(response: aiohttp.ClientResponse) -> str:
    token = ""
    for hop in (*response.history, response):
        morsel = hop.cookies.get(constants.SESSION_COOKIE)
        if morsel is not None and morsel.value:
            token = morsel.value
    return token
