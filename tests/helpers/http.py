from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs

import httpx

from wofbot.adapters.http_resilience import ResilientClient
from wofbot.adapters.wikibase import API_DEFAULT_PARAMS, WikibaseTransport
from wofbot.config import BackoffPolicy, ResilienceConfig

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

API_URL = "https://www.wikidata.test/w/api.php"


def make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(replace(resilience, cache=None, ratelimit=None))
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            transport=httpx.MockTransport(async_handler),
            base_url=resilience.base_url or "",
        )
        return client

    return factory


def make_transport(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    sleep: SleepRecorder | None = None,
    backoff: BackoffPolicy | None = None,
    url: str = API_URL,
) -> WikibaseTransport:
    factory = make_client_factory(handler)
    client = factory(ResilienceConfig(name="test", base_url=url))
    return WikibaseTransport(
        client,
        url=url,
        default_params=API_DEFAULT_PARAMS,
        backoff=backoff,
        sleep=sleep or SleepRecorder(),
    )


class SleepRecorder:
    """Stands in for ``asyncio.sleep`` and remembers every requested wait."""

    def __init__(self) -> None:
        self.waits: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)


def request_params(request: httpx.Request) -> dict[str, str]:
    """Return query and form parameters of ``request`` as one flat mapping."""

    params = dict(request.url.params)
    if request.method == "POST" and request.content:
        form = parse_qs(request.content.decode(), keep_blank_values=True)
        params.update({key: values[0] for key, values in form.items()})
    return params


def sequence_handler(
    responses: Sequence[httpx.Response | Exception],
    calls: list[httpx.Request] | None = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Serve ``responses`` in order, raising the ones that are exceptions."""

    pending = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        item = pending.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    return handler


def error_response(
    code: str,
    *,
    messages: Sequence[str] = (),
    info: str = "",
    status_code: int = 200,
) -> httpx.Response:
    payload: dict[str, Any] = {
        "error": {
            "code": code,
            "info": info,
            "messages": [{"name": name, "parameters": []} for name in messages],
        }
    }
    return httpx.Response(status_code, json=payload)


def throttle_response() -> httpx.Response:
    return error_response(
        "failed-save",
        messages=["actionthrottledtext"],
        info="As an anti-abuse measure, you are limited from performing this action too many times",
    )
