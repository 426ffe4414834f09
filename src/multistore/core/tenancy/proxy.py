"""Trusted proxy checks for the host override header."""

import ipaddress
from collections.abc import Sequence
from functools import lru_cache


IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


@lru_cache(maxsize=32)
def _parse_networks(networks: tuple[str, ...]) -> tuple[IPNetwork, ...]:
    return tuple(ipaddress.ip_network(net, strict=False) for net in networks)


def is_trusted_peer(peer: str | None, networks: Sequence[str]) -> bool:
    """Check whether the direct peer of a request is an internal proxy.

    Args:
        peer: Peer address from the ASGI scope (``request.client.host``)
        networks: CIDR ranges of trusted internal proxies

    Returns:
        True only for a parseable address inside one of the networks
    """
    if not peer:
        return False
    try:
        address = ipaddress.ip_address(peer)
    except ValueError:
        return False
    return any(address in net for net in _parse_networks(tuple(networks)))
