"""Deep link decoding for cw-reports:// URLs."""

import logging
import re
from urllib.parse import unquote

from .budget_client import BudgetClient
from .models import QueryItem
from .store import KeyValueStore, update_ynab_provider

logger = logging.getLogger(__name__)

DEEPLINK_SCHEME = "cw-reports"

OAUTH_HOST = "oauth"

# RFC 3986 scheme, matched on the raw string (urlsplit lowercases it)
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")


def url_scheme(url: str) -> str | None:
    """Return the scheme exactly as written, or None for relative references."""
    match = _SCHEME_RE.match(url)
    return match.group(1) if match else None


def is_deeplink(url: str) -> bool:
    """Check whether a URL uses the app's scheme (case-sensitive)."""
    return url_scheme(url) == DEEPLINK_SCHEME


def url_host(url: str) -> str | None:
    """
    Return the host exactly as written, or None when there is none.

    The authority is read lexically so malformed hosts such as an unclosed
    IPv6 bracket come back as text instead of raising.
    """
    scheme = url_scheme(url)
    rest = url[len(scheme) + 1 :] if scheme is not None else url
    if not rest.startswith("//"):
        return None

    authority = re.split(r"[/?#]", rest[2:], maxsplit=1)[0]
    host = authority.rpartition("@")[2]
    if host.startswith("["):
        end = host.find("]")
        host = host[: end + 1] if end != -1 else host
    else:
        host = host.partition(":")[0]
    return host or None


def _raw_query(url: str) -> str | None:
    before_fragment = url.split("#", 1)[0]
    if "?" not in before_fragment:
        return None
    return before_fragment.split("?", 1)[1]


def _raw_fragment(url: str) -> str | None:
    if "#" not in url:
        return None
    return url.split("#", 1)[1]


def query_items(url: str) -> list[QueryItem] | None:
    """
    Parse the query string into ordered name/value items.

    Names and values are percent-decoded; '+' is left as-is. Duplicate names
    are kept in source order. A part with no '=' has a value of None.

    Args:
        url: The URL to inspect

    Returns:
        List of query items, [] for an empty query, None when there is no '?'
    """
    query = _raw_query(url)
    if query is None:
        return None
    if not query:
        return []

    items = []
    for part in query.split("&"):
        name, sep, value = part.partition("=")
        items.append(QueryItem(unquote(name), unquote(value) if sep else None))
    return items


def fragment_items(url: str) -> dict[str, str] | None:
    """
    Parse a 'key1=value1&key2=value2' fragment into a dictionary.

    Parts without '=' are skipped, the last duplicate key wins and no
    percent-decoding is applied.

    Args:
        url: The URL to inspect

    Returns:
        Dictionary of fragment items, or None when the URL has no '#'
    """
    fragment = _raw_fragment(url)
    if fragment is None:
        return None

    items: dict[str, str] = {}
    for part in fragment.split("&"):
        if not part:
            continue
        index = part.find("=")
        if index == -1:
            continue
        items[part[:index]] = part[index + 1 :]
    return items


def handle_open_url(url: str, client: BudgetClient, store: KeyValueStore) -> bool:
    """
    Route an incoming URL to the matching in-app handler.

    Only the OAuth callback (cw-reports://oauth#access_token=...) is handled:
    the token is persisted and the client switches to a YNAB provider.

    Returns:
        True if the URL was handled, False otherwise
    """
    host = url_host(url)
    if not is_deeplink(url) or host is None:
        logger.warning(
            f"Supplied url was not a known deeplink path (scheme: {url_scheme(url)})"
        )
        return False

    if host == OAUTH_HOST:
        access_token = (fragment_items(url) or {}).get("access_token")
        if access_token:
            update_ynab_provider(client, access_token, store)
            logger.info(
                "oauth url path handled, updated budget client with new access token."
            )
            return True
        logger.warning("oauth url did not contain an access token")
        return False

    logger.debug(f"No handler for deeplink host: {host}")
    return False
