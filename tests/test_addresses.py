"""
Tests for the SSRF hostname/IP classifier.

Range boundaries are checked on both sides: an off-by-one here is a hole.
"""

import pytest

from shortbox.core.addresses import is_blocked_hostname


class TestBlockedHostnames:
    @pytest.mark.parametrize("host", [
        "localhost",
        "LOCALHOST",
        "metadata.google.internal",
        "metadata.goog",
        "instance-data",
        "computemetadata",
    ])
    def test_exact_names_blocked(self, host):
        assert is_blocked_hostname(host)

    @pytest.mark.parametrize("host", [
        "localhost.",
        "metadata.google.internal.",
        "metadata.goog.",
        "printer.local.",
        "127.0.0.1.",
        "[::1].",
    ])
    def test_trailing_dot_still_blocked(self, host):
        assert is_blocked_hostname(host)

    @pytest.mark.parametrize("host", [
        "printer.local",
        "db.internal",
        "app.localhost",
        "nas.lan",
        "wiki.corp",
        "portal.intranet",
        "Portal.INTRANET",
    ])
    def test_internal_suffixes_blocked(self, host):
        assert is_blocked_hostname(host)

    @pytest.mark.parametrize("host", [
        "example.com",
        "localhost.example.com",
        "corp.example.com",
        "local",
        "internalsite.com",
    ])
    def test_public_names_allowed(self, host):
        assert not is_blocked_hostname(host)


class TestIPv4Ranges:
    @pytest.mark.parametrize("host", [
        "0.0.0.0",
        "0.255.255.255",
        "127.0.0.1",
        "127.255.255.254",
        "10.0.0.5",
        "10.255.255.255",
        "172.16.0.0",
        "172.31.255.255",
        "192.168.1.1",
        "169.254.169.254",
        "100.64.0.0",
        "100.127.255.255",
        "198.51.100.7",
        "203.0.113.200",
        "240.0.0.1",
        "254.255.255.255",
        "255.255.255.255",
    ])
    def test_private_and_reserved_blocked(self, host):
        assert is_blocked_hostname(host)

    @pytest.mark.parametrize("host", [
        "1.0.0.0",
        "8.8.8.8",
        "9.255.255.255",
        "11.0.0.0",
        "126.255.255.255",
        "128.0.0.0",
        "172.15.255.255",
        "172.32.0.0",
        "192.167.255.255",
        "192.169.0.0",
        "169.253.255.255",
        "100.63.255.255",
        "100.128.0.0",
        "198.51.99.255",
        "198.51.101.0",
        "203.0.112.255",
        "203.0.114.0",
        "239.255.255.255",
        "93.184.216.34",
    ])
    def test_public_addresses_allowed(self, host):
        assert not is_blocked_hostname(host)

    @pytest.mark.parametrize("host", ["999.1.1.1", "256.0.0.1", "01.2.3.4"])
    def test_malformed_dotted_quad_blocked(self, host):
        assert is_blocked_hostname(host)


class TestIPv6:
    @pytest.mark.parametrize("host", [
        "::1",
        "::",
        "[::1]",
        "::ffff:127.0.0.1",
        "::ffff:7f00:1",
        "fc00::1",
        "fd12:3456:789a::1",
        "fe80::1",
        "febf::1",
        "ff02::1",
        "FF02::1",
    ])
    def test_local_and_special_blocked(self, host):
        assert is_blocked_hostname(host)

    @pytest.mark.parametrize("host", [
        "2606:4700:4700::1111",
        "2001:4860:4860::8888",
        "fec0::1",
    ])
    def test_global_addresses_allowed(self, host):
        assert not is_blocked_hostname(host)

    def test_unparseable_colon_host_blocked(self):
        assert is_blocked_hostname("not:an:address")

    def test_classifier_is_pure(self):
        results = [is_blocked_hostname("10.0.0.1") for _ in range(3)]
        assert results == [True, True, True]
