"""Human-readable order numbers.

Format: ``[PREFIX-]GGGG-RRRR...-SSSS`` where the database id is left
zero-padded to at least eight digits, split after the first four, and
followed by a random four-digit suffix.  Ids of more than eight digits
keep every remaining digit in the second group.

Padding is deliberately on the left, unlike a right-padded id, so that
ids such as 1 and 10 never share a number.

The suffix is random, so this function alone cannot guarantee
uniqueness; ``LifecycleManager`` retries against the repository and the
``order_number`` column is unique.
"""

from __future__ import annotations

import secrets
from typing import Callable

from modules.orders.constants import (
    ORDER_NUMBER_GROUP_SIZE,
    ORDER_NUMBER_MIN_DIGITS,
    ORDER_NUMBER_SUFFIX_MAX,
    ORDER_NUMBER_SUFFIX_MIN,
)


def random_suffix() -> int:
    span = ORDER_NUMBER_SUFFIX_MAX - ORDER_NUMBER_SUFFIX_MIN + 1
    return ORDER_NUMBER_SUFFIX_MIN + secrets.randbelow(span)


class OrderNumberGenerator:
    def __init__(self, suffix_source: Callable[[], int] = random_suffix) -> None:
        self._suffix_source = suffix_source

    def generate(self, order_id: int, prefix: str = "") -> str:
        if order_id is None or int(order_id) < 0:
            raise ValueError(f"Cannot number an order without a valid id: {order_id!r}")

        padded = str(int(order_id)).zfill(ORDER_NUMBER_MIN_DIGITS)
        head = padded[:ORDER_NUMBER_GROUP_SIZE]
        tail = padded[ORDER_NUMBER_GROUP_SIZE:]
        number = f"{head}-{tail}-{self._suffix_source()}"

        return f"{prefix}-{number}" if prefix else number
