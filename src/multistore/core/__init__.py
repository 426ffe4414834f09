"""Core services and cross-cutting concerns.

Subpackages:
- auth: passwords, JWTs, the current user, cross-domain handoff
- database: engine, sessions, mixins, tenant-scoped sessions
- errors: domain exceptions and RFC 7807 handlers
- tenancy: hostname classification, tenant resolution, CORS
"""
