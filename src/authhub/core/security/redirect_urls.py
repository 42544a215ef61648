"""Redirect URL validation against a tenancy's trusted domains."""

import fnmatch
import ipaddress
from collections.abc import Mapping
from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit, urlunsplit

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _has_unsafe_chars(url: str) -> bool:
    # Browsers read "\" as "/" in http(s) URLs; urlsplit does not.
    return any(ch == "\\" or ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url)


def _parse(url: str) -> SplitResult | None:
    if _has_unsafe_chars(url):
        return None
    try:
        parsed = urlsplit(url)
        # Accessing .port raises on malformed ports
        parsed.port  # noqa: B018
    except ValueError:
        return None
    if parsed.scheme not in _DEFAULT_PORTS or not parsed.hostname:
        return None
    if parsed.username is not None or parsed.password is not None:
        return None
    return parsed


def _effective_port(parsed: SplitResult) -> int:
    return parsed.port or _DEFAULT_PORTS[parsed.scheme]


def is_localhost(url: str) -> bool:
    """Whether the URL points at the local machine (localhost, *.localhost or loopback IPs)."""
    parsed = _parse(url)
    if parsed is None or parsed.hostname is None:
        return False
    hostname = parsed.hostname
    if hostname == "localhost" or hostname.endswith(".localhost"):
        return True
    try:
        return ipaddress.ip_address(hostname).is_loopback
    except ValueError:
        return False


def _matches_domain(target: SplitResult, domain: str) -> bool:
    base = _parse(domain)
    if base is None or base.hostname is None or target.hostname is None:
        return False
    if base.scheme != target.scheme:
        return False
    if _effective_port(base) != _effective_port(target):
        return False
    # "*.example.com" matches subdomains only, never the apex
    if "*" in base.hostname:
        if not fnmatch.fnmatchcase(target.hostname, base.hostname):
            return False
    elif base.hostname != target.hostname:
        return False

    base_path = base.path or "/"
    target_path = target.path or "/"
    if base_path.endswith("/"):
        return target_path.startswith(base_path)
    return target_path == base_path or target_path.startswith(base_path + "/")


def validate_redirect_url(url: str, domains: list[str], allow_localhost: bool) -> bool:
    """Check that ``url`` may be used as a redirect target for a tenancy.

    Args:
        url: Absolute http(s) URL to validate.
        domains: The tenancy's trusted domains, as base URLs
                 (``https://app.example.com``, ``https://*.example.com/auth``).
        allow_localhost: Whether the tenancy trusts any localhost URL.

    Returns:
        True if the URL is on a trusted domain (scheme, host, port and path
        prefix must all match), or is localhost and the tenancy allows it.
    """
    target = _parse(url)
    if target is None:
        return False
    if allow_localhost and is_localhost(url):
        return True
    return any(_matches_domain(target, domain) for domain in domains)


def add_query_params(url: str, params: Mapping[str, str]) -> str:
    """Return ``url`` with ``params`` set in its query string, replacing existing keys."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params]
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))
