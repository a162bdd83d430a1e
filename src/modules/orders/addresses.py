"""Address display helpers.

Addresses are opaque strings on the order; these helpers only join them
for display and enrich country codes with a readable name.  A failing
country lookup never breaks the surrounding operation.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional, Union

import structlog

logger = structlog.get_logger(__name__)

CountryLookup = Union[Mapping[str, str], Callable[[str], Optional[str]]]


def format_address(*parts: str) -> str:
    """Join the non-blank parts, one per line, separated by commas."""
    return ",\n".join(part for part in parts if part)


def country_full(code: str, lookup: CountryLookup) -> str:
    """Return the display name for *code*.

    Unknown codes are returned unchanged; a lookup that raises degrades
    to ``""``.
    """
    if not code:
        return ""
    try:
        if callable(lookup):
            name = lookup(code)
        else:
            name = lookup.get(code)
    except Exception:
        logger.warning("address.country_lookup_failed", country=code, exc_info=True)
        return ""
    return name or code
