"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from wofbot.adapters.http_resilience import ResilientClient
from wofbot.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    is_started,
    startup,
)
from wofbot.adapters.whosonfirst import (
    InventoryFile,
    download_datasets,
    list_files,
    load_correspondences,
    locate_local_datasets,
)
from wofbot.adapters.wikibase import (
    API_DEFAULT_PARAMS,
    SessionManager,
    WikibaseClaimWriter,
    WikibaseClient,
    WikibaseTransport,
    build_acceptance_index,
)
from wofbot.config import get_storage_config, get_whosonfirst_config, get_wikidata_config
from wofbot.domain.model import ForeignSource
from wofbot.domain.ports.unit_of_work import ReconciliationUnitOfWork
from wofbot.domain.reconciliation import ReconciliationDriver

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from wofbot.config import ResilienceConfig, WikidataConfig
    from wofbot.domain.model import CorrespondenceRecord, ReconciliationResult
    from wofbot.domain.ports import AuthenticatedSession

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]
ClientFactory = Callable[["ResilienceConfig"], ResilientClient]


log = getLogger(__name__)


def list_inventory(*, client_factory: ClientFactory | None = None) -> list[InventoryFile]:
    """Return the latest Who's On First distribution per repo."""

    return list_files(get_whosonfirst_config(), client_factory=client_factory)


def download_distributions(*, client_factory: ClientFactory | None = None) -> list[Path]:
    """Fetch changed distributions into the downloads directory and decompress them."""

    return download_datasets(
        get_storage_config().downloads_dir(),
        get_whosonfirst_config(),
        client_factory=client_factory,
    )


def resolve_datasets(
    datasets: Sequence[Path] | None = None,
    *,
    download: bool = False,
    client_factory: ClientFactory | None = None,
) -> list[Path]:
    """Return explicit dataset paths, or the inventory files in the downloads directory.

    With ``download`` set, stale distributions are fetched first.
    """

    if datasets:
        return list(datasets)
    if download:
        return download_distributions(client_factory=client_factory)
    downloads = get_storage_config().downloads_dir()
    return locate_local_datasets(list_inventory(client_factory=client_factory), downloads)


def reconcile_wikidata(
    *,
    datasets: Sequence[Path] | None = None,
    sources: Sequence[ForeignSource] = (ForeignSource.WIKIDATA,),
    validate_types: bool = False,
    limit: int | None = None,
    dry_run: bool = False,
    download: bool = False,
    config: WikidataConfig | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    client_factory: ClientFactory | None = None,
) -> ReconciliationResult:
    """Link Who's On First records to Wikidata using the configured adapters."""

    if unit_of_work_factory is None and not is_started():
        startup()
    effective_config = config or get_wikidata_config(require_password=not dry_run)
    effective_uow = unit_of_work_factory or SqlAlchemyReconciliationUnitOfWork

    paths = resolve_datasets(datasets, download=download, client_factory=client_factory)
    records = load_correspondences(paths, sources=sources)
    log.info(
        "Starting reconciliation: datasets=%s, records=%s, sources=%s, dry_run=%s, limit=%s",
        len(paths),
        len(records),
        ",".join(sources),
        dry_run,
        limit,
    )

    result = asyncio.run(
        run_reconciliation(
            records,
            config=effective_config,
            unit_of_work_factory=effective_uow,
            validate_types=validate_types,
            limit=limit,
            dry_run=dry_run,
            client_factory=client_factory or ResilientClient,
        )
    )
    log.info("Finished reconciliation: %s", result.summary())
    return result


async def run_reconciliation(
    records: Sequence[CorrespondenceRecord],
    *,
    config: WikidataConfig,
    unit_of_work_factory: UnitOfWorkFactory,
    validate_types: bool = False,
    limit: int | None = None,
    dry_run: bool = False,
    client_factory: ClientFactory = ResilientClient,
) -> ReconciliationResult:
    """Log in, build the acceptance index if needed, and drive the reconciliation."""

    api_params = dict(API_DEFAULT_PARAMS)
    if config.maxlag is not None:
        api_params["maxlag"] = str(config.maxlag)

    async with client_factory(config.resilience) as api_client:
        transport = WikibaseTransport(api_client, url=config.api_url, default_params=api_params)
        client = WikibaseClient(transport)
        sessions = SessionManager(transport)

        session: AuthenticatedSession | None = None
        if not dry_run:
            session = await sessions.login(config.username, config.password)

        acceptance_index = None
        if validate_types:
            async with client_factory(config.sparql_resilience) as sparql_client:
                sparql = WikibaseTransport(sparql_client, url=config.sparql_url)
                acceptance_index = await build_acceptance_index(sparql)

        driver = ReconciliationDriver(
            lookup=client,
            writer=WikibaseClaimWriter(client, sessions),
            history=client,
            unit_of_work_factory=unit_of_work_factory,
            target_property=config.property_id,
            username=config.username,
            session=session,
            acceptance_index=acceptance_index,
            dry_run=dry_run,
        )
        return await driver.run(records, limit=limit)
