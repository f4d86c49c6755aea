"""Tests for cw-reports:// deep link decoding."""

import pytest

from cw_reports.budget_client import BudgetClient
from cw_reports.deeplink import (
    DEEPLINK_SCHEME,
    fragment_items,
    handle_open_url,
    is_deeplink,
    query_items,
    url_host,
    url_scheme,
)
from cw_reports.models import AuthorizationStatus, QueryItem
from cw_reports.provider import BudgetProvider
from cw_reports.store import ACCESS_TOKEN_KEY, InMemoryKeyValueStore


class TestIsDeeplink:
    """Scheme matching."""

    def test_app_scheme(self):
        assert DEEPLINK_SCHEME == "cw-reports"
        assert is_deeplink("cw-reports://oauth")
        assert is_deeplink("cw-reports:oauth")

    @pytest.mark.parametrize(
        "url",
        [
            "CW-Reports://oauth",
            "CW-REPORTS://oauth",
            "https://app.ynab.com",
            "cw-report://oauth",
            "cw-reportsx://oauth",
            "//cw-reports/oauth",
            "cw-reports",
            "",
        ],
    )
    def test_other_schemes(self, url):
        """Anything other than the exact scheme is not a deep link."""
        assert not is_deeplink(url)

    def test_scheme_preserves_case(self):
        assert url_scheme("CW-Reports://oauth") == "CW-Reports"
        assert url_scheme("no scheme here") is None


class TestQueryItems:
    """Query string decomposition."""

    def test_duplicates_and_order_preserved(self):
        items = query_items("scheme://host?a=1&b=2&a=3")

        assert items == [("a", "1"), ("b", "2"), ("a", "3")]
        assert items[0] == QueryItem(name="a", value="1")

    def test_no_query_is_none(self):
        assert query_items("scheme://host") is None

    def test_empty_query_is_empty_list(self):
        assert query_items("scheme://host?") == []
        assert query_items("scheme://host?#frag") == []

    def test_question_mark_in_fragment_is_not_a_query(self):
        assert query_items("scheme://host#a=1?b=2") is None

    def test_query_stops_at_fragment(self):
        assert query_items("scheme://host?a=1#b=2") == [("a", "1")]

    def test_percent_decoding(self):
        items = query_items("scheme://host?na%20me=caf%C3%A9&x=%3D")

        assert items == [("na me", "café"), ("x", "=")]

    def test_plus_is_not_space(self):
        assert query_items("scheme://host?q=a+b") == [("q", "a+b")]

    def test_missing_and_empty_values(self):
        items = query_items("scheme://host?flag&empty=")

        assert items == [QueryItem("flag", None), QueryItem("empty", "")]

    def test_empty_parts_are_kept(self):
        assert query_items("scheme://host?a=1&&b=2") == [
            ("a", "1"),
            ("", None),
            ("b", "2"),
        ]

    def test_value_may_contain_equals(self):
        assert query_items("scheme://host?a=b=c") == [("a", "b=c")]


class TestFragmentItems:
    """Fragment decomposition."""

    def test_oauth_callback(self):
        url = (
            "cw-reports://oauth#access_token=aValidValue"
            "&token_type=Bearer&expires_in=7200"
        )

        items = fragment_items(url)

        assert items is not None
        assert len(items) == 3
        assert items["access_token"] == "aValidValue"
        assert items["token_type"] == "Bearer"
        assert items["expires_in"] == "7200"

    def test_last_duplicate_wins_and_bare_parts_dropped(self):
        assert fragment_items("scheme://host#x=1&y=2&y=3&z") == {"x": "1", "y": "3"}

    def test_empty_fragment_is_empty_dict(self):
        assert fragment_items("scheme://host#") == {}

    def test_no_fragment_is_none(self):
        assert fragment_items("scheme://host") is None
        assert fragment_items("scheme://host?a=1") is None

    def test_only_first_equals_splits(self):
        assert fragment_items("scheme://host#k=a=b") == {"k": "a=b"}

    def test_empty_key_and_value(self):
        assert fragment_items("scheme://host#=v&k=") == {"": "v", "k": ""}

    def test_no_percent_decoding(self):
        assert fragment_items("scheme://host#k=a%20b+c") == {"k": "a%20b+c"}

    def test_empty_parts_skipped(self):
        assert fragment_items("scheme://host#&&a=1&") == {"a": "1"}

    def test_fragment_query_characters_are_literal(self):
        """A '?' inside the fragment is plain text."""
        assert fragment_items("scheme://host?q=1#a=1?b=2") == {"a": "1?b=2"}


def test_operations_are_idempotent():
    """Repeated calls on the same URL give the same results."""
    url = "cw-reports://oauth?a=1&a=2#x=1&y=2&y=3&z"

    assert is_deeplink(url) == is_deeplink(url)
    assert query_items(url) == query_items(url)
    assert fragment_items(url) == fragment_items(url)
    assert url == "cw-reports://oauth?a=1&a=2#x=1&y=2&y=3&z"


class TestUrlHost:
    """Host extraction."""

    def test_simple_host(self):
        assert url_host("cw-reports://oauth#access_token=x") == "oauth"
        assert url_host("cw-reports://oauth/path?q=1") == "oauth"

    def test_no_authority(self):
        assert url_host("cw-reports:oauth") is None
        assert url_host("cw-reports://") is None
        assert url_host("cw-reports://#access_token=x") is None
        assert url_host("") is None

    def test_case_preserved(self):
        assert url_host("cw-reports://OAuth") == "OAuth"

    def test_userinfo_and_port_stripped(self):
        assert url_host("https://user:pw@example.com:8443/x") == "example.com"
        assert url_host("cw-reports://oauth:notaport") == "oauth"

    def test_ipv6_literal(self):
        assert url_host("https://[::1]:8080/") == "[::1]"

    @pytest.mark.parametrize(
        "url, host",
        [
            ("cw-reports://[oauth#access_token=x", "[oauth"),
            ("cw-reports://[x#a=1", "[x"),
            ("cw-reports://[", "["),
        ],
    )
    def test_unclosed_bracket_does_not_raise(self, url, host):
        assert url_host(url) == host


class TestHandleOpenUrl:
    """Routing of incoming deep links."""

    @pytest.fixture
    def store(self):
        return InMemoryKeyValueStore()

    @pytest.fixture
    def client(self):
        return BudgetClient.not_authorized_client()

    @pytest.fixture
    def ynab_provider(self, monkeypatch):
        """Replace the YNAB provider factory and record the tokens it receives."""
        tokens = []

        def fake_ynab(access_token):
            tokens.append(access_token)
            return BudgetProvider.noop()

        monkeypatch.setattr(BudgetProvider, "ynab", staticmethod(fake_ynab))
        return tokens

    def test_oauth_callback_updates_client(self, client, store, ynab_provider):
        url = "cw-reports://oauth#access_token=aValidValue&token_type=Bearer"

        assert handle_open_url(url, client, store)

        assert ynab_provider == ["aValidValue"]
        assert store.get_string(ACCESS_TOKEN_KEY) == "aValidValue"
        assert client.authorization_status == AuthorizationStatus.UNKNOWN
        assert client.fetch_budget_summaries() == []
        assert client.is_authenticated

    def test_empty_token_ignored(self, client, store, ynab_provider):
        assert not handle_open_url("cw-reports://oauth#access_token=", client, store)
        assert ynab_provider == []
        assert store.get_string(ACCESS_TOKEN_KEY) is None

    def test_missing_fragment_ignored(self, client, store, ynab_provider):
        assert not handle_open_url("cw-reports://oauth", client, store)
        assert ynab_provider == []

    def test_non_deeplink_ignored(self, client, store, ynab_provider):
        url = "https://oauth#access_token=aValidValue"

        assert not handle_open_url(url, client, store)
        assert ynab_provider == []
        assert len(store) == 0

    def test_unknown_host_ignored(self, client, store, ynab_provider):
        url = "cw-reports://reports#access_token=aValidValue"

        assert not handle_open_url(url, client, store)
        assert ynab_provider == []

    def test_host_match_is_case_sensitive(self, client, store, ynab_provider):
        url = "cw-reports://OAuth#access_token=aValidValue"

        assert not handle_open_url(url, client, store)
        assert ynab_provider == []

    def test_malformed_host_ignored(self, client, store, ynab_provider):
        url = "cw-reports://[oauth#access_token=aValidValue"

        assert not handle_open_url(url, client, store)
        assert ynab_provider == []
        assert store.get_string(ACCESS_TOKEN_KEY) is None
