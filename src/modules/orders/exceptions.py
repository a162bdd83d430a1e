"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.  Authorization denials are not exceptions:
``AuthorizationGate`` returns booleans.
"""

from __future__ import annotations


class OrderNotFound(Exception):
    """The requested order does not exist."""


class InvalidOrderStatus(Exception):
    """The requested status is not part of the configured status set."""


class OrderNumberUnavailable(Exception):
    """No free order number could be generated within the retry budget."""
