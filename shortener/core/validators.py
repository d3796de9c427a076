"""
Input Validators

This module provides validation functions for destination URLs.

Security Considerations:
- Only http/https destinations are accepted
- Script and data schemes are rejected anywhere in the URL
- Loopback and private network hosts are rejected (basic SSRF protection)
- Length limits prevent DoS attacks
"""

import ipaddress
from typing import Optional
from urllib.parse import urlparse

from shortener.core.setting import settings

ALLOWED_SCHEMES = {"http", "https"}
MALICIOUS_PATTERNS = ("javascript:", "data:", "file:", "vbscript:")


def validate_url_length(url: str, max_length: Optional[int] = None) -> bool:
    """
    Validate URL length to prevent DoS attacks.

    Args:
        url: The URL to validate
        max_length: Maximum allowed length (default: MAX_URL_LENGTH setting)

    Returns:
        True if URL length is valid, False otherwise
    """
    if max_length is None:
        max_length = settings.MAX_URL_LENGTH
    return bool(url) and len(url) <= max_length


def is_private_host(hostname: str) -> bool:
    """
    Check whether a hostname points at the local machine or a private network.

    Only literal IP addresses and the 'localhost' name are inspected; no DNS
    resolution happens here.
    """
    hostname = hostname.lower().rstrip(".")
    if hostname == "localhost" or hostname.endswith(".localhost"):
        return True

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return False

    return (
        address.is_loopback
        or address.is_private
        or address.is_link_local
        or address.is_unspecified
    )


def is_valid_url(url: str, allow_private_hosts: Optional[bool] = None) -> bool:
    """
    Validate URL format and security.

    Checks that URL uses http/https, has a valid domain, and doesn't contain
    malicious patterns. Prevents javascript:, file:, and other dangerous schemes.

    Args:
        url: The URL string to validate
        allow_private_hosts: Accept localhost/private IPs (default: ALLOW_PRIVATE_HOSTS setting)

    Returns:
        True if valid and safe, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    if not validate_url_length(url):
        return False

    if allow_private_hosts is None:
        allow_private_hosts = settings.ALLOW_PRIVATE_HOSTS

    try:
        result = urlparse(url)
        hostname = result.hostname
    except ValueError:
        return False

    if not result.scheme or not hostname:
        return False

    if result.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    url_lower = url.lower()
    if any(pattern in url_lower for pattern in MALICIOUS_PATTERNS):
        return False

    if is_private_host(hostname):
        return allow_private_hosts

    # IPv6 literals have no dots but are still real hosts
    if "." not in hostname and ":" not in hostname:
        return False

    return True
