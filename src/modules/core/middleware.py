import uuid
from contextvars import ContextVar
from typing import Callable, Optional

import structlog
from django.http import HttpRequest, HttpResponse

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
current_actor_var: ContextVar[Optional[int]] = ContextVar("current_actor", default=None)

logger = structlog.get_logger()


class CorrelationIdMiddleware:
    """Middleware that extracts or generates a correlation ID for each request.

    Reads X-Request-ID header from the incoming request. If absent,
    generates a new UUID4. The ID is stored in a ContextVar so structlog
    processors can inject it into every log line, and is returned to the
    client via the X-Request-ID response header.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())
        correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        logger.info(
            "request_started",
            method=request.method,
            path=request.get_full_path(),
        )

        response = self.get_response(request)

        logger.info(
            "request_finished",
            method=request.method,
            path=request.get_full_path(),
            status_code=response.status_code,
        )

        response["X-Request-ID"] = cid
        return response


class CurrentActorMiddleware:
    """Publish the session-authenticated user id for the current request.

    Must run after ``AuthenticationMiddleware``.  The value is read by
    ``ContextActorResolver`` when an authorization check is made without
    an explicit actor.  Token-authenticated API requests pass the actor
    explicitly, so an anonymous session here is not an error.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        user = getattr(request, "user", None)
        actor_id = user.pk if user is not None and user.is_authenticated else None
        token = current_actor_var.set(actor_id)
        try:
            return self.get_response(request)
        finally:
            current_actor_var.reset(token)
