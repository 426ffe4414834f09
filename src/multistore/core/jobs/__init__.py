"""Background job processing with ARQ.

Provides Redis-based async background jobs; currently the custom
domain verification sweep.
"""

from multistore.core.jobs.worker import WorkerSettings


__all__ = [
    "WorkerSettings",
]
