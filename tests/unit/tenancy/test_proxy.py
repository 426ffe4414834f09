"""Unit tests for trusted proxy checks."""

from multistore.core.tenancy.proxy import is_trusted_peer


NETWORKS = ["10.0.0.0/8", "::1/128"]


def test_peer_inside_network_is_trusted():
    """An address inside a configured range is trusted."""
    assert is_trusted_peer("10.1.2.3", NETWORKS)
    assert is_trusted_peer("::1", NETWORKS)


def test_peer_outside_network_is_untrusted():
    """Any other address is untrusted."""
    assert not is_trusted_peer("203.0.113.7", NETWORKS)


def test_missing_or_malformed_peer_is_untrusted():
    """Unknown peers fail closed."""
    assert not is_trusted_peer(None, NETWORKS)
    assert not is_trusted_peer("", NETWORKS)
    assert not is_trusted_peer("testclient", NETWORKS)


def test_no_networks_trusts_nobody():
    """An empty list disables the override header."""
    assert not is_trusted_peer("10.1.2.3", [])
