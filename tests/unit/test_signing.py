"""
Unit tests for request canonicalization and signing.
"""

import base64
import hashlib
import hmac

from hypothesis import given
from hypothesis import strategies as st

from slslog.signing import (
    build_sign_string,
    canonicalize_headers,
    canonicalize_resource,
    content_md5,
    format_value,
    sign,
)
from strategies import header_maps, query_maps


class TestCanonicalizeHeaders:
    """Tests for canonicalize_headers."""

    def test_selects_log_and_acs_headers_sorted(self):
        headers = {
            "x-log-signaturemethod": "hmac-sha1",
            "content-type": "application/json",
            "x-acs-security-token": "sts-token",
            "x-log-apiversion": "0.6.0",
            "date": "Sat, 17 Oct 2026 10:00:00 GMT",
        }

        assert canonicalize_headers(headers) == (
            "x-acs-security-token:sts-token\n"
            "x-log-apiversion:0.6.0\n"
            "x-log-signaturemethod:hmac-sha1"
        )

    def test_lowercases_names_and_trims_values(self):
        headers = {"X-Log-BodyRawSize": "  42 ", "X-ACS-Thing": "\tv\t"}

        assert canonicalize_headers(headers) == "x-acs-thing:v\nx-log-bodyrawsize:42"

    def test_empty_when_no_matching_headers(self):
        assert canonicalize_headers({"content-type": "application/json"}) == ""
        assert canonicalize_headers({}) == ""

    def test_prefix_must_match_at_start(self):
        assert canonicalize_headers({"my-x-log-header": "v"}) == ""

    @given(header_maps)
    def test_independent_of_key_case(self, headers):
        upper = {name.upper(): value for name, value in headers.items()}
        mixed = {name.swapcase().title(): value for name, value in headers.items()}

        assert canonicalize_headers(upper) == canonicalize_headers(headers)
        assert canonicalize_headers(mixed) == canonicalize_headers(headers)

    @given(header_maps, st.randoms())
    def test_independent_of_key_order(self, headers, rnd):
        items = list(headers.items())
        rnd.shuffle(items)

        assert canonicalize_headers(dict(items)) == canonicalize_headers(headers)


class TestCanonicalizeResource:
    """Tests for canonicalize_resource."""

    def test_path_only_without_queries(self):
        assert canonicalize_resource("/logstores/app") == "/logstores/app"
        assert canonicalize_resource("/logstores/app", {}) == "/logstores/app"
        assert canonicalize_resource("/logstores/app", None) == "/logstores/app"

    def test_sorts_queries_by_key(self):
        assert canonicalize_resource("/p", {"b": 1, "a": 2}) == "/p?a=2&b=1"

    def test_none_renders_as_empty(self):
        assert canonicalize_resource("/p", {"query": None, "a": "x"}) == "/p?a=x&query="

    def test_booleans_render_lowercase(self):
        assert canonicalize_resource("/p", {"reverse": True, "powerSql": False}) == (
            "/p?powerSql=false&reverse=true"
        )

    def test_values_are_not_percent_encoded(self):
        resource = canonicalize_resource("/logstores/app", {"query": "status: 500 and *"})

        assert resource == "/logstores/app?query=status: 500 and *"

    @given(query_maps)
    def test_pairs_follow_sorted_keys(self, queries):
        resource = canonicalize_resource("/p", queries)

        if not queries:
            assert resource == "/p"
        else:
            expected = "&".join(f"{k}={format_value(queries[k])}" for k in sorted(queries))
            assert resource == f"/p?{expected}"


class TestSignString:
    """Tests for the six-field sign string."""

    def test_field_layout(self):
        headers = {
            "Content-MD5": "ABC123",
            "Content-Type": "application/x-protobuf",
            "Date": "Sat, 17 Oct 2026 10:00:00 GMT",
            "x-log-apiversion": "0.6.0",
        }

        sign_string = build_sign_string("post", "/logstores/app/shards/lb", headers)

        assert sign_string == (
            "POST\n"
            "ABC123\n"
            "application/x-protobuf\n"
            "Sat, 17 Oct 2026 10:00:00 GMT\n"
            "x-log-apiversion:0.6.0\n"
            "/logstores/app/shards/lb"
        )

    def test_empty_fields_keep_their_separators(self):
        sign_string = build_sign_string("GET", "/logstores", {})

        assert sign_string == "GET\n\n\n\n\n/logstores"
        assert len(sign_string.split("\n")) == 6


class TestSign:
    """Tests for sign()."""

    HEADERS = {
        "content-type": "application/json",
        "date": "Sat, 17 Oct 2026 10:00:00 GMT",
        "x-log-apiversion": "0.6.0",
        "x-log-signaturemethod": "hmac-sha1",
    }

    def test_header_format(self):
        value = sign("GET", "/logstores", self.HEADERS, "my-id", "my-secret")

        assert value.startswith("LOG my-id:")
        signature = value.split(":", 1)[1]
        assert len(base64.b64decode(signature)) == 20  # SHA-1 digest size

    def test_matches_hmac_sha1_of_sign_string(self):
        sign_string = (
            "GET\n\napplication/json\nSat, 17 Oct 2026 10:00:00 GMT\n"
            "x-log-apiversion:0.6.0\nx-log-signaturemethod:hmac-sha1\n"
            "/logstores?type=log"
        )
        expected = base64.b64encode(
            hmac.new(b"my-secret", sign_string.encode(), hashlib.sha1).digest()
        ).decode()

        value = sign("GET", "/logstores?type=log", self.HEADERS, "my-id", "my-secret")

        assert value == f"LOG my-id:{expected}"

    def test_deterministic(self):
        first = sign("POST", "/p", self.HEADERS, "id", "secret")
        second = sign("POST", "/p", dict(self.HEADERS), "id", "secret")

        assert first == second

    def test_secret_changes_signature(self):
        assert sign("GET", "/p", self.HEADERS, "id", "a") != sign("GET", "/p", self.HEADERS, "id", "b")

    @given(header_maps)
    def test_deterministic_for_any_headers(self, headers):
        assert sign("GET", "/p", headers, "id", "secret") == sign("GET", "/p", headers, "id", "secret")


class TestContentMd5:
    """Tests for content_md5."""

    def test_uppercase_hex(self):
        assert content_md5(b"") == "D41D8CD98F00B204E9800998ECF8427E"
        assert content_md5(b"hello") == hashlib.md5(b"hello").hexdigest().upper()
