"""Login and write-token handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from .client import AuthenticationError, WikibaseAPIError, expect_ok
from .schema import LoginResponse, TokensResponse

if TYPE_CHECKING:
    from .transport import WikibaseTransport

log = getLogger(__name__)

ANONYMOUS_CSRF_TOKEN = "+\\"


@dataclass(frozen=True, slots=True)
class Session:
    """An authenticated API session; owns the cookie jar."""

    username: str
    cookies: httpx.Cookies = field(repr=False, compare=False)
    login_token: str = field(repr=False)


class SessionManager:
    def __init__(self, transport: WikibaseTransport) -> None:
        self._transport = transport

    async def login(self, username: str, password: str) -> Session:
        cookies = httpx.Cookies()
        try:
            login_token = await self._fetch_token("login", cookies)
        except WikibaseAPIError as exc:
            raise AuthenticationError(f"Could not fetch login token: {exc}") from exc

        result = await self._transport.post(
            {
                "action": "login",
                "lgname": username,
                "lgpassword": password,
                "lgtoken": login_token,
            },
            cookies=cookies,
        )
        try:
            login = LoginResponse.model_validate(expect_ok(result, "login")).login
        except (WikibaseAPIError, ValidationError) as exc:
            raise AuthenticationError(f"Login for {username} failed: {exc}") from exc

        log.info("Login Result: %s", login.result)
        if login.result != "Success":
            reason = f" ({login.reason})" if login.reason else ""
            raise AuthenticationError(f"Login for {username} failed: {login.result}{reason}")

        return Session(username=username, cookies=cookies, login_token=login_token)

    async def fresh_write_token(self, session: Session) -> str:
        """Fetch a CSRF token for exactly one write."""

        token = await self._fetch_token("csrf", session.cookies)
        if token == ANONYMOUS_CSRF_TOKEN:
            raise AuthenticationError(f"Session for {session.username} is no longer logged in")
        return token

    async def _fetch_token(self, kind: str, cookies: httpx.Cookies) -> str:
        params = {"action": "query", "meta": "tokens", "type": kind}
        result = await self._transport.get(params, cookies=cookies)
        try:
            tokens = TokensResponse.model_validate(expect_ok(result, "tokens")).query.tokens
        except ValidationError as exc:
            raise WikibaseAPIError(f"Unexpected {kind} token payload") from exc
        token = tokens.logintoken if kind == "login" else tokens.csrftoken
        if not token:
            raise WikibaseAPIError(f"No {kind} token returned")
        return token
