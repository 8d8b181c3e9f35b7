from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from tests.helpers.http import error_response, make_transport, sequence_handler
from tests.helpers.wikibase import FakeWikibase
from wofbot.adapters.wikibase import WikibaseAPIError, WikibaseClient, identifier_query
from wofbot.domain.ports import EntityNotFoundError


async def _collect(client: WikibaseClient, username: str) -> list[str]:
    return [title async for title in client.iter_contributions(username)]


def test_contributions_follow_continuation() -> None:
    fake = FakeWikibase(contributions=[["Q1", "Q2"], ["Q3"], ["Q2", "Q4"]])
    client = WikibaseClient(make_transport(fake))

    titles = asyncio.run(_collect(client, "Q23679"))

    assert titles == ["Q1", "Q2", "Q3", "Q2", "Q4"]
    calls = fake.actions("query")
    assert len(calls) == 3
    assert "uccontinue" not in calls[0]
    assert calls[1]["uccontinue"] == "1"
    assert calls[1]["continue"] == "-||"
    assert all(call["ucuser"] == "Q23679" for call in calls)


def test_contributions_with_empty_first_page() -> None:
    fake = FakeWikibase(contributions=[])
    client = WikibaseClient(make_transport(fake))

    assert asyncio.run(_collect(client, "Q23679")) == []
    assert len(fake.actions("query")) == 1


def test_identifier_query_excludes_target_property() -> None:
    assert identifier_query("P1566", "2643743", excluding="P6766") == (
        "haswbstatement:P1566=2643743 -haswbstatement:P6766"
    )
    assert identifier_query("P1566", "2643743") == "haswbstatement:P1566=2643743"


def test_find_by_identifier_uses_first_hit() -> None:
    query = "haswbstatement:P1566=2643743 -haswbstatement:P6766"
    fake = FakeWikibase(search_results={query: ["Q84", "Q999"]})
    client = WikibaseClient(make_transport(fake))

    entity = asyncio.run(client.find_by_identifier("P1566", "2643743", excluding="P6766"))

    assert entity == "Q84"
    search = fake.actions("query")[0]
    assert search["srsearch"] == query
    assert search["srlimit"] == "1"


def test_find_by_identifier_without_hits() -> None:
    client = WikibaseClient(make_transport(FakeWikibase()))

    assert asyncio.run(client.find_by_identifier("P1667", "7008136", excluding="P6766")) is None


def test_claim_values_returns_item_ids() -> None:
    fake = FakeWikibase(claims={"Q84": {"P31": ["Q515", "Q5119"]}})
    client = WikibaseClient(make_transport(fake))

    assert asyncio.run(client.claim_values("Q84", "P31")) == ("Q515", "Q5119")


def test_claim_values_without_claims() -> None:
    client = WikibaseClient(make_transport(FakeWikibase()))

    assert asyncio.run(client.claim_values("Q84", "P31")) == ()


def test_get_claims_accepts_empty_claims_list() -> None:
    handler = sequence_handler([httpx.Response(200, json={"claims": []})])
    client = WikibaseClient(make_transport(handler))

    assert asyncio.run(client.get_claims("Q84", "P6766")) == {}


def test_claim_values_without_claims_map() -> None:
    fake = FakeWikibase(entities_without_claims_map={"Q84"})
    client = WikibaseClient(make_transport(fake))

    assert asyncio.run(client.claim_values("Q84", "P31")) is None


def test_get_claims_raises_for_missing_entity() -> None:
    fake = FakeWikibase(missing_entities={"Q404"})
    client = WikibaseClient(make_transport(fake))

    with pytest.raises(EntityNotFoundError) as excinfo:
        asyncio.run(client.get_claims("Q404", "P6766"))

    assert excinfo.value.entity_id == "Q404"


def test_get_claims_raises_for_other_errors() -> None:
    client = WikibaseClient(make_transport(sequence_handler([error_response("badvalue")])))

    with pytest.raises(WikibaseAPIError):
        asyncio.run(client.get_claims("Q84", "P6766"))


def test_create_claim_sends_json_quoted_string_value() -> None:
    fake = FakeWikibase()
    client = WikibaseClient(make_transport(fake))

    asyncio.run(
        client.create_claim("Q84", "P6766", "101750367", token="csrf+\\", cookies=httpx.Cookies())
    )

    write = fake.actions("wbcreateclaim")[0]
    assert write["value"] == '"101750367"'
    assert json.loads(write["value"]) == "101750367"
    assert write["snaktype"] == "value"
    assert write["bot"] == "1"
    assert write["token"] == "csrf+\\"
