"""
Redirect URL selection based on the request origin.
"""

import logging

from .errors import MissingConfiguration, OriginNotAllowed

logger = logging.getLogger(__name__)


def resolve_redirect_url(origin, redirect_urls):
    """
    Pick the configured redirect URL that matches the request origin.

    The first configured URL containing the origin as a substring wins.
    Matching is substring containment, not hostname comparison, so
    ``a.com`` also matches ``https://evil-a.com.attacker.net``.

    Args:
        origin: Origin declared by the request (may be None)
        redirect_urls: Ordered sequence of allowed redirect URLs

    Returns:
        str: The matching redirect URL

    Raises:
        MissingConfiguration: If no redirect URLs are configured
        OriginNotAllowed: If the origin is absent, empty, or matches nothing
    """
    if not redirect_urls:
        raise MissingConfiguration("Missing required variable: REDIRECT_URLS")

    # An empty string is a substring of every URL
    if not isinstance(origin, str) or not origin:
        logger.error("Request has no origin, cannot pick a redirect URL")
        raise OriginNotAllowed()

    for url in redirect_urls:
        if origin in url:
            logger.debug(f"Origin {origin} matched redirect URL {url}")
            return url

    logger.error(f"Origin {origin} does not match any redirect URL")
    raise OriginNotAllowed()
