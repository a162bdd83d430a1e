"""Readiness of the order engine.

The engine can serve orders when its configuration is coherent and the
notification rules it dispatches on can be read.  Rules whose status is
not configured are reported but do not make the engine unready: they
simply never fire.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List

import structlog
from django.db import DatabaseError
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response

from modules.orders.conf import OrderEngineConfig, get_engine_config
from modules.orders.models import NotificationRule

logger = structlog.get_logger(__name__)


def engine_config_problems(config: OrderEngineConfig) -> List[str]:
    problems: List[str] = []
    if not config.statuses:
        problems.append("No order statuses are configured.")
    if config.default_status and not config.is_valid_status(config.default_status):
        problems.append(f"Default status {config.default_status!r} is not configured.")
    unknown = sorted(
        s for s in config.editable_statuses if s and not config.is_valid_status(s)
    )
    if unknown:
        problems.append(f"Editable statuses are not configured: {', '.join(unknown)}.")
    return problems


def notification_rules_state(config: OrderEngineConfig) -> Dict[str, Any]:
    start = time.monotonic()
    try:
        rule_statuses = set(NotificationRule.objects.values_list("status", flat=True))
    except DatabaseError:
        logger.exception("orders.readiness_rules_unavailable")
        return {"status": "down"}

    return {
        "status": "up",
        "statuses": sorted(rule_statuses),
        "unmatched_statuses": sorted(s for s in rule_statuses if not config.is_valid_status(s)),
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def readiness(request: Request) -> Response:
    """GET /api/v1/orders/ready/"""
    config = get_engine_config()
    problems = engine_config_problems(config)
    checks = {
        "engine_config": {"status": "down" if problems else "up", "problems": problems},
        "notification_rules": notification_rules_state(config),
    }
    ready = all(check["status"] == "up" for check in checks.values())

    logger.info("orders.readiness_checked", ready=ready)
    return Response(
        {"status": "ready" if ready else "not_ready", "checks": checks},
        status=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
