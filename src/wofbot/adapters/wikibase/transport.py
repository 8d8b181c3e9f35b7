"""Retrying request/response cycle for the Wikibase action API.

Every call to the remote system goes through :class:`WikibaseTransport`:

* connection failures and HTTP 5xx wait ``2 ** attempt`` seconds and retry,
  without an upper bound on attempts or wait;
* a throttle error envelope waits a fixed 60 seconds and retries with the
  attempt counter reset;
* a permission-denial envelope and any other error envelope are logged and
  returned to the caller;
* HTTP 4xx responses are decoded and returned without retrying.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from wofbot.config.http_resilience import BackoffPolicy

from .schema import ApiResult, ErrorEnvelope, ErrorPayload, Ok

if TYPE_CHECKING:
    from collections.abc import Mapping

    from wofbot.adapters.http_resilience import ResilientClient

log = getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]

API_DEFAULT_PARAMS: dict[str, str] = {"format": "json", "formatversion": "2"}


class _TransientFailure(Exception):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class WikibaseTransport:
    """Issue requests against one endpoint with the shared retry policy."""

    def __init__(
        self,
        client: ResilientClient,
        *,
        url: str | None = None,
        default_params: Mapping[str, str] | None = None,
        backoff: BackoffPolicy | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        self._client = client
        self._url = url if url is not None else (client.config.base_url or "")
        self._default_params = dict(default_params or {})
        self._backoff = backoff or client.config.backoff
        self._sleep = sleep or asyncio.sleep

    async def get(
        self,
        params: Mapping[str, Any],
        *,
        cookies: httpx.Cookies | None = None,
    ) -> ApiResult:
        return await self.request("GET", params=params, cookies=cookies)

    async def post(
        self,
        data: Mapping[str, Any],
        *,
        cookies: httpx.Cookies | None = None,
    ) -> ApiResult:
        return await self.request("POST", data=data, cookies=cookies)

    async def request(
        self,
        method: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        cookies: httpx.Cookies | None = None,
    ) -> ApiResult:
        action = _describe_action(params, data)
        attempt = 0
        while True:
            try:
                result = await self._attempt(method, params=params, data=data, cookies=cookies)
            except _TransientFailure as failure:
                wait = self._backoff.transient_wait(attempt)
                log.warning(
                    "Request %s failed (%s), retrying in %s seconds",
                    action,
                    failure.reason,
                    wait,
                )
                await self._sleep(wait)
                attempt += 1
                continue

            if isinstance(result, Ok):
                return result

            if result.is_throttled:
                wait = self._backoff.throttle_wait_seconds
                log.warning("Request %s throttled, retrying in %s seconds", action, wait)
                await self._sleep(wait)
                attempt = 0
                continue

            if result.is_permission_denied:
                log.error("Request %s denied: %s", action, result.describe())
            else:
                log.error("Request %s failed: %s", action, result.describe())
            return result

    async def _attempt(
        self,
        method: str,
        *,
        params: Mapping[str, Any] | None,
        data: Mapping[str, Any] | None,
        cookies: httpx.Cookies | None,
    ) -> ApiResult:
        if method == "GET":
            merged_params = _merge(self._default_params, params)
            merged_data = None
        else:
            merged_params = dict(params) if params else None
            merged_data = _merge(self._default_params, data)

        request = self._client.build_request(
            method,
            self._url,
            params=merged_params,
            data=merged_data,
        )
        if cookies is not None:
            cookies.set_cookie_header(request)

        try:
            response = await self._client.send(request)
        except httpx.TransportError as exc:
            raise _TransientFailure(f"{type(exc).__name__}: {exc}") from exc

        # credentials live only in the caller's Session jar
        self._client.cookies.clear()
        if cookies is not None:
            cookies.extract_cookies(response)

        if response.status_code >= httpx.codes.INTERNAL_SERVER_ERROR:
            raise _TransientFailure(f"HTTP {response.status_code}")

        return decode_response(response)


def decode_response(response: httpx.Response) -> ApiResult:
    """Turn a response into a tagged result, validating the error envelope."""

    try:
        payload = response.json()
    except ValueError:
        if response.is_success:
            return ErrorEnvelope(code="invalid-json", status_code=response.status_code)
        return ErrorEnvelope(
            code=f"http-{response.status_code}",
            info=response.text[:200] or None,
            status_code=response.status_code,
        )

    if not isinstance(payload, dict):
        return ErrorEnvelope(code="unexpected-payload", status_code=response.status_code)

    if "error" in payload:
        try:
            return ErrorPayload.model_validate(payload).to_envelope(
                status_code=response.status_code
            )
        except ValidationError:
            return ErrorEnvelope(
                code="malformed-error",
                info=str(payload["error"])[:200],
                status_code=response.status_code,
            )

    if not response.is_success:
        return ErrorEnvelope(
            code=f"http-{response.status_code}",
            info=str(payload)[:200] or None,
            status_code=response.status_code,
        )

    return Ok(payload)


def _merge(defaults: Mapping[str, str], values: Mapping[str, Any] | None) -> dict[str, Any]:
    merged: dict[str, Any] = dict(defaults)
    if values:
        merged.update(values)
    return merged


def _describe_action(params: Mapping[str, Any] | None, data: Mapping[str, Any] | None) -> str:
    for source in (data, params):
        if source and "action" in source:
            return str(source["action"])
    return "request"
