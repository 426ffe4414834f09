"""ARQ worker for background domain work.

Run with:
    arq multistore.core.jobs.worker.WorkerSettings
"""

from typing import Any, ClassVar

import structlog
from arq import cron
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from multistore.config import settings
from multistore.core.constants import SWEEP_INTERVAL_MINUTES
from multistore.core.jobs.tasks.domains import sweep_domain_challenges
from multistore.core.jobs.utils import get_redis_settings
from multistore.modules.domains.lookup import DnsResolver


log = structlog.get_logger()

SWEEP_MINUTES = set(range(0, 60, SWEEP_INTERVAL_MINUTES))


async def startup(ctx: dict[str, Any]) -> None:
    """Open the database engine and DNS resolver shared by jobs."""
    engine = create_async_engine(
        settings.async_database_url,
        pool_size=2,
        max_overflow=2,
        echo=settings.database_echo,
    )
    ctx["db_engine"] = engine
    ctx["db_session_factory"] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    ctx.setdefault("dns", DnsResolver())

    log.info(
        "worker_started",
        environment=settings.environment,
        sweep_minutes=sorted(SWEEP_MINUTES),
    )


async def shutdown(ctx: dict[str, Any]) -> None:
    engine = ctx.get("db_engine")
    if engine:
        await engine.dispose()
    log.info("worker_stopped")


class WorkerSettings:
    """ARQ worker settings.

    The sweep is a single unique cron job: a run that overlaps the next
    tick is skipped, not queued twice. DNS lookups are retried by the
    next sweep, so failed jobs are not retried.
    """

    functions: ClassVar[list[Any]] = [sweep_domain_challenges]

    cron_jobs: ClassVar[list[Any]] = [
        cron(sweep_domain_challenges, minute=SWEEP_MINUTES, unique=True),
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = get_redis_settings()

    max_jobs = 1
    job_timeout = SWEEP_INTERVAL_MINUTES * 60
    keep_result = 3600
    retry_jobs = False
