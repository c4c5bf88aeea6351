from __future__ import annotations

from datetime import timedelta

from dependency_injector import containers, providers

from ..core.ports import ShareTokenGenerator
from ..core.services import (
    AnalysisOrchestrator,
    ManifestLocator,
    ResponseInterpreter,
    SnapshotBuilder,
    VersionSniffer,
)
from ..core.usecases.analyze import AnalyzeLocalUseCase, AnalyzeRepoUseCase
from ..core.usecases.share import CreateShareUseCase, GetShareUseCase
from ..core.usecases.snapshot import SnapshotUseCase
from ..infra.api_client import FixEnvApiClient
from ..infra.database import init_database
from ..infra.github import init_github
from ..infra.llm import LLM
from ..infra.logging import AppLogger
from ..infra.rate_limiter import build_rate_limiter
from ..infra.result_store import SqlResultCache, SqlShareStore


class Container(containers.DeclarativeContainer):
    """DI container fed from AppConfig via ``config.from_pydantic``."""

    config = providers.Configuration()

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        AppLogger,
        logs_dir=config.directories.logs_dir,
        logger_name=config.logging.logger_name,
        file_output=config.logging.file_output,
        console_output=config.logging.console_output,
        level=config.logging.level,
    )

    # Storage (Resource: tables created on init, engine disposed on shutdown)
    database = providers.Resource(
        init_database,
        url=config.database_url,
    )

    result_cache = providers.Singleton(
        SqlResultCache,
        database=database,
        ttl=providers.Factory(timedelta, hours=config.cache.ttl_hours),
    )

    share_store = providers.Singleton(
        SqlShareStore,
        database=database,
    )

    token_gen = providers.Singleton(
        ShareTokenGenerator,
        length=config.share.token_length,
    )

    rate_limiter = providers.Singleton(
        build_rate_limiter,
        redis_url=config.rate_limit.redis_url,
        limits=providers.Callable(
            dict,
            **{
                "create-share": config.rate_limit.create_share,
                "get-share": config.rate_limit.get_share,
                "generate-snapshot": config.rate_limit.generate_snapshot,
            },
        ),
        window_seconds=config.rate_limit.window_seconds,
        logger=logger,
    )

    # Adapters with injected config
    github = providers.Resource(
        init_github,
        logger=logger,
        api_url=config.github.api_url,
        raw_url=config.github.raw_url,
        token=config.github.token.as_(lambda v: v or ""),
        timeout=config.github.timeout,
    )

    llm = providers.Factory(
        LLM,
        provider=config.llm.provider_name,
        model=config.llm.model_name,
        api_key=config.llm.api_key.as_(lambda v: v or ""),
        base_url=config.llm.base_url,
        temperature=config.llm.temperature,
        logger=logger,
    )

    api_client = providers.Factory(
        FixEnvApiClient,
        base_url=config.api.base_url,
        timeout=config.api.timeout,
    )

    # Domain services
    locator = providers.Factory(ManifestLocator, github=github, logger=logger)

    sniffer = providers.Factory(VersionSniffer, logger=logger)

    interpreter = providers.Singleton(ResponseInterpreter)

    analysis_orchestrator = providers.Factory(
        AnalysisOrchestrator,
        locator=locator,
        sniffer=sniffer,
        llm=llm,
        interpreter=interpreter,
        logger=logger,
    )

    snapshot_builder = providers.Factory(SnapshotBuilder, llm=llm, logger=logger)

    # Use cases
    analyze_repo_uc = providers.Factory(
        AnalyzeRepoUseCase,
        orchestrator=analysis_orchestrator,
        github=github,
        cache=result_cache,
        logger=logger,
        cache_enabled=config.cache.enabled,
    )

    analyze_local_uc = providers.Factory(
        AnalyzeLocalUseCase,
        orchestrator=analysis_orchestrator,
        logger=logger,
    )

    create_share_uc = providers.Factory(
        CreateShareUseCase,
        store=share_store,
        token_gen=token_gen,
        logger=logger,
        public_base_url=config.share.public_base_url,
        max_attempts=config.share.max_attempts,
    )

    get_share_uc = providers.Factory(
        GetShareUseCase,
        store=share_store,
        logger=logger,
    )

    snapshot_uc = providers.Factory(
        SnapshotUseCase,
        builder=snapshot_builder,
    )
