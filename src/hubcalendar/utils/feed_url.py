"""Subscription URL building for calendar clients."""

from typing import Optional, Sequence
from urllib.parse import urlencode


def build_feed_url(
    base_url: str,
    sources: Optional[Sequence[str]] = None,
    user: Optional[str] = None,
    include_internal: bool = True,
    protocol: str = "https",
) -> str:
    """Build the URL a calendar client subscribes to.

    Args:
        base_url: The https URL of the feed endpoint.
        sources: Source ids to restrict the feed to.
        user: User id whose stored preferences should apply.
        include_internal: Whether internally authored events stay in.
        protocol: "https" or "webcal".

    Returns:
        The subscription URL.
    """
    if protocol not in ("https", "webcal"):
        raise ValueError(f"Unsupported protocol: {protocol}")

    url = base_url
    if protocol == "webcal":
        url = url.replace("https://", "webcal://", 1)

    params = []
    if sources:
        params.append(("sources", ",".join(sources)))
    if user:
        params.append(("user", user))
    if not include_internal:
        params.append(("internal", "false"))

    if not params:
        return url
    return f"{url}?{urlencode(params, safe=',')}"
