"""Unit tests for SSURT formatting."""

from __future__ import annotations

from ssurtparse.parse import parse_url, reverse_host, ssurt_host


# =============================================================================
# reverse_host Tests
# =============================================================================


class TestReverseHost:
    """Dotted segments in reverse, comma-terminated."""

    def test_commas_become_dots(self) -> None:
        """A comma stays inside its segment, as a dot."""
        assert reverse_host(b"x,y.b.c") == b"c,b,x.y,"

    def test_three_segments(self) -> None:
        assert reverse_host(b"a.b.c") == b"c,b,a,"

    def test_single_segment(self) -> None:
        assert reverse_host(b"a") == b"a,"

    def test_empty_segments(self) -> None:
        """Leading, trailing and doubled dots leave empty segments."""
        assert reverse_host(b"a.") == b",a,"
        assert reverse_host(b".a") == b"a,,"
        assert reverse_host(b"a..b") == b"b,,a,"


# =============================================================================
# ssurt_host Tests
# =============================================================================


class TestSsurtHost:
    """IP addresses are left alone."""

    def test_ipv4(self) -> None:
        assert ssurt_host(b"192.0.2.1") == b"192.0.2.1"

    def test_ipv4_short_form(self) -> None:
        """Anything a browser takes as IPv4 counts."""
        assert ssurt_host(b"127.1") == b"127.1"
        assert ssurt_host(b"0x7f.0.0.1") == b"0x7f.0.0.1"

    def test_ipv6(self) -> None:
        assert ssurt_host(b"[::1]") == b"[::1]"

    def test_empty(self) -> None:
        assert ssurt_host(b"") == b""

    def test_domain(self) -> None:
        assert ssurt_host(b"www.example.com") == b"com,example,www,"

    def test_not_quite_ipv4(self) -> None:
        """Five numbers aren't an IPv4 address."""
        assert ssurt_host(b"1.2.3.4.5") == b"5,4,3,2,1,"


# =============================================================================
# ParsedUrl.ssurt Tests
# =============================================================================


class TestSsurt:
    """Whole-URL SSURT formatting."""

    def test_simple(self) -> None:
        """Host, slashes, scheme, path."""
        assert parse_url(b"http://a.example.com/").ssurt() == b"com,example,a,//:http/"

    def test_all_fields(self) -> None:
        """Port and credentials come between host and path."""
        url = parse_url(b"http://user:pw@www.example.com:8080/a?b#c")

        assert url.ssurt() == b"com,example,www,//:8080:http@user:pw/a?b#c"

    def test_ipv4_host(self) -> None:
        url = parse_url(b"https://192.0.2.1:8443/x")

        assert url.ssurt() == b"192.0.2.1//:8443:https/x"

    def test_ipv6_host(self) -> None:
        assert parse_url(b"http://[::1]/").ssurt() == b"[::1]//:http/"

    def test_opaque(self) -> None:
        """No host, so the scheme comes first."""
        assert parse_url(b"mailto:a@b.com").ssurt() == b":mailtoa@b.com"

    def test_junk_kept(self) -> None:
        """Leading and trailing junk stay at the ends."""
        assert parse_url(b" http://x/ ").ssurt() == b" x,//:http/ "

    def test_same_length_as_url(self) -> None:
        """Only the order changes, and the host's commas."""
        url = parse_url(b"ftp://u@a.b.c:21/d")

        assert len(url.ssurt()) == len(url.to_bytes()) + 1

    def test_siblings_share_prefix(self) -> None:
        """Subdomains of one parent group together."""
        a = parse_url("http://a.example.com/").ssurt()
        b = parse_url("http://b.example.com/").ssurt()

        assert a.startswith(b"com,example,")
        assert b.startswith(b"com,example,")

    def test_sort_order_groups_hosts(self) -> None:
        """Sorting the SSURTs puts a domain next to its subdomains."""
        urls = [
            "http://example.com/",
            "http://example.org/",
            "https://www.example.com/",
            "http://example.net/",
            "http://a.example.com/x",
        ]
        keys = sorted(parse_url(u).ssurt() for u in urls)

        assert keys == [
            b"com,example,//:http/",
            b"com,example,a,//:http/x",
            b"com,example,www,//:https/",
            b"net,example,//:http/",
            b"org,example,//:http/",
        ]

    def test_reflects_mutation(self) -> None:
        """ssurt() reads the current field values."""
        url = parse_url(b"http://example.com/")
        url.host = b"example.org"

        assert url.ssurt() == b"org,example,//:http/"

    def test_long_numeric_host(self) -> None:
        """A host of thousands of digits is a domain, not an address."""
        digits = b"1" * 5000

        assert ssurt_host(digits) == digits + b","
        assert parse_url(b"http://" + digits + b"/").ssurt() == digits + b",//:http/"
