"""Background job tasks.

This package contains all background job implementations.
Each task module should define async functions that can be
registered in the worker.
"""

from multistore.core.jobs.tasks.domains import sweep_domain_challenges


__all__ = [
    "sweep_domain_challenges",
]
