"""Engine configuration.

``OrderEngineConfig`` is built once per process from the ``ORDERS``
Django setting and handed to engine components at construction.  It is
frozen: changing statuses or the prefix means building a new config.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Mapping

from django.conf import settings

from modules.orders.constants import (
    DEFAULT_EDITABLE_STATUSES,
    DEFAULT_STATUS,
    DEFAULT_STATUSES,
)


@dataclass(frozen=True)
class OrderEngineConfig:
    statuses: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_STATUSES))
    editable_statuses: frozenset[str] = DEFAULT_EDITABLE_STATUSES
    default_status: str = DEFAULT_STATUS
    order_prefix: str = ""
    vendor_email: str = ""
    country_names: Mapping[str, str] = field(default_factory=dict)

    def is_valid_status(self, status: str) -> bool:
        return status in self.statuses

    def is_editable_status(self, status: str | None) -> bool:
        return (status or "") in self.editable_statuses

    def status_label(self, status: str) -> str:
        """Human-readable label, falling back to the raw value."""
        return self.statuses.get(status, status)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> OrderEngineConfig:
        return cls(
            statuses=dict(data.get("STATUSES", DEFAULT_STATUSES)),
            editable_statuses=frozenset(
                data.get("EDITABLE_STATUSES", DEFAULT_EDITABLE_STATUSES)
            ),
            default_status=data.get("DEFAULT_STATUS", DEFAULT_STATUS) or "",
            order_prefix=data.get("ORDER_PREFIX", "") or "",
            vendor_email=data.get("VENDOR_EMAIL", "") or "",
            country_names=dict(data.get("COUNTRY_NAMES", {})),
        )


@lru_cache(maxsize=1)
def get_engine_config() -> OrderEngineConfig:
    """Return the process-wide config built from ``settings.ORDERS``."""
    return OrderEngineConfig.from_mapping(getattr(settings, "ORDERS", {}))
