"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Tenant slugs (subdomain labels)
MIN_SLUG_LENGTH = 3
MAX_SLUG_LENGTH = 50

# Top-level paths and host labels that a tenant slug may never shadow
DEFAULT_RESERVED_SLUGS = frozenset(
    {
        "about",
        "account",
        "admin",
        "api",
        "app",
        "assets",
        "auth",
        "billing",
        "blog",
        "cart",
        "checkout",
        "dashboard",
        "docs",
        "health",
        "help",
        "info",
        "login",
        "logout",
        "mail",
        "media",
        "openapi.json",
        "platform",
        "redoc",
        "register",
        "signup",
        "sitemap.xml",
        "static",
        "status",
        "store",
        "support",
        "uploads",
        "verify",
        "www",
    }
)

# Domain names
MAX_DOMAIN_LENGTH = 253
MAX_LABEL_LENGTH = 63

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_TOKEN_LENGTH = 128

# Password requirements
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
BCRYPT_ROUNDS = 12

# Pagination defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Domain verification
VERIFICATION_TOKEN_BYTES = 24
CHALLENGE_RETENTION_DAYS = 7
SWEEP_INTERVAL_MINUTES = 15

# Token settings
HANDOFF_CODE_BYTES = 32
ACCESS_TOKEN_JTI_LENGTH = 32
LOGGED_TOKEN_PREFIX = 8

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
