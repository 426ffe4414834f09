"""Unit tests for custom domain normalization."""

import pytest

from multistore.config import Settings
from multistore.core.errors import InvalidDomainError
from multistore.modules.domains.services import normalize_domain


CONFIG = Settings(platform_root_domain="shopu.ge", platform_alias_domains=["shopu.app"])


class TestNormalizeDomain:
    """Tests for normalize_domain."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Shop.Example.com", "shop.example.com"),
            ("https://Shop.Example.com/products?x=1", "shop.example.com"),
            ("shop.example.com:8443", "shop.example.com"),
            ("shop.example.com.", "shop.example.com"),
            ("www.shop.example.com", "www.shop.example.com"),
        ],
    )
    def test_accepts_and_normalizes(self, raw, expected):
        """Pasted URLs and mixed case reduce to the hostname."""
        assert normalize_domain(raw, CONFIG) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "example",
            "192.168.1.10",
            "shop..example.com",
            "-shop.example.com",
            "shop_example.com",
            "shop.example.123",
            "acme.localhost",
            "shopu.ge",
            "acme.shopu.ge",
            "www.shopu.app",
        ],
    )
    def test_rejects(self, raw):
        """Malformed, local and platform hosts cannot be attached."""
        with pytest.raises(InvalidDomainError) as exc_info:
            normalize_domain(raw, CONFIG)

        assert exc_info.value.status_code == 422
        assert exc_info.value.error_code == "invalid_domain"
