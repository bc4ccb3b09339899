"""Store detection for flyer URLs."""

import re
from urllib.parse import urlparse

UNKNOWN_STORE = "Store"

# Known grocery chains, matched against the flyer URL
STORE_PATTERNS = [
    (re.compile(r"walmart", re.IGNORECASE), "Walmart"),
    (re.compile(r"target", re.IGNORECASE), "Target"),
    (re.compile(r"kroger", re.IGNORECASE), "Kroger"),
    (re.compile(r"safeway", re.IGNORECASE), "Safeway"),
    (re.compile(r"costco", re.IGNORECASE), "Costco"),
]

KNOWN_STORES = [name for _, name in STORE_PATTERNS]


def detect_store(url: str) -> str:
    """Return the store name a flyer URL belongs to.

    Args:
        url: The flyer URL.

    Returns:
        The store name, or "Store" if the chain is not recognized.
    """
    for pattern, name in STORE_PATTERNS:
        if pattern.search(url):
            return name
    return UNKNOWN_STORE


def validate_flyer_url(url: str) -> str:
    """Strip and check that a flyer URL is an http(s) URL.

    Raises:
        ValueError: If the URL is empty or not http(s).
    """
    value = url.strip()
    if not value:
        raise ValueError("Flyer URL must not be empty")
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"Invalid flyer URL: {url}")
    return value
