"""Client-side session handling for store dashboards.

Models the browser half of multi-store sessions: tokens kept per store,
the handoff fragment consumed on landing, and an HTTP client that picks
the right token for the page being shown.
"""

from multistore.client.api import StoreApiClient
from multistore.client.credentials import CredentialStore
from multistore.client.handoff import HandoffError, HandoffReceiver, History
from multistore.client.navigation import StoreLocation, resolve_location, store_key_for_location


__all__ = [
    "CredentialStore",
    "HandoffError",
    "HandoffReceiver",
    "History",
    "StoreApiClient",
    "StoreLocation",
    "resolve_location",
    "store_key_for_location",
]
