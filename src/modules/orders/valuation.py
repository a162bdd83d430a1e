"""Order valuation.

Totals are never stored; they are computed on demand from the order's
line items, discount and postage.  Every operand passes through the
matching ``UPDATE_*`` hook so collaborators can adjust an in-flight value.

Tax formula (per line item, ``n`` = number of items)::

    item_tax = ((price - discount / n) / 100) * tax_rate
    tax_total = sum(item_tax * quantity) + postage_tax

The discount is apportioned equally across items for the tax base only;
it is subtracted from the grand total exactly once::

    total = subtotal + postage - discount + tax_total

All arithmetic is done in ``Decimal`` at full context precision; only
``compute_totals`` rounds, to two places.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterator, Optional, Protocol, Sequence

from modules.orders.dtos import OrderTotalsDTO
from modules.orders.hooks import HookPoint, HookRegistry, hook_registry

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


class LineItemLike(Protocol):
    price: Any
    quantity: int
    tax_rate: Any
    title: str


class ValuedOrder(Protocol):
    discount_amount: Any
    postage_cost: Any
    postage_tax: Any

    def line_items(self) -> Sequence[LineItemLike]: ...


def to_decimal(value: Any) -> Decimal:
    """Coerce a monetary input to ``Decimal`` without binary-float drift."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class ItemSummary:
    """Restartable view over an order's items as ``"quantity x title"`` lines.

    Items are fetched each time iteration starts, so the summary always
    reflects the order's current items.
    """

    def __init__(self, order: ValuedOrder) -> None:
        self._order = order

    def __iter__(self) -> Iterator[str]:
        for item in self._order.line_items():
            yield f"{item.quantity} x {item.title}"

    def __str__(self) -> str:
        return "".join(f"{line};\n" for line in self)


class ValuationEngine:
    """Computes subtotal, postage, tax and grand total for an order."""

    def __init__(self, hooks: Optional[HookRegistry] = None) -> None:
        self._hooks = hooks if hooks is not None else hook_registry

    def subtotal(self, order: ValuedOrder) -> Decimal:
        total = ZERO
        for item in order.line_items():
            price = to_decimal(item.price)
            if price:
                total += price * item.quantity
        return to_decimal(self._hooks.adjust(HookPoint.UPDATE_SUBTOTAL, order, total))

    def postage(self, order: ValuedOrder) -> Decimal:
        cost = to_decimal(order.postage_cost)
        return to_decimal(self._hooks.adjust(HookPoint.UPDATE_POSTAGE, order, cost))

    def tax_total(self, order: ValuedOrder) -> Decimal:
        items = order.line_items()
        discount = to_decimal(order.discount_amount)
        share = discount / len(items) if items else ZERO

        total = ZERO
        for item in items:
            item_tax = ((to_decimal(item.price) - share) / HUNDRED) * to_decimal(
                item.tax_rate
            )
            total += item_tax * item.quantity

        postage_tax = to_decimal(order.postage_tax)
        if postage_tax:
            total += postage_tax

        return to_decimal(self._hooks.adjust(HookPoint.UPDATE_TAX_TOTAL, order, total))

    def total(self, order: ValuedOrder) -> Decimal:
        total = (
            self.subtotal(order)
            + self.postage(order)
            - to_decimal(order.discount_amount)
            + self.tax_total(order)
        )
        return to_decimal(self._hooks.adjust(HookPoint.UPDATE_TOTAL, order, total))

    def has_discount(self, order: ValuedOrder) -> bool:
        return to_decimal(order.discount_amount) > ZERO

    def item_summary(self, order: ValuedOrder) -> ItemSummary:
        return ItemSummary(order)

    def compute_totals(self, order: ValuedOrder) -> OrderTotalsDTO:
        return OrderTotalsDTO(
            subtotal=quantize_money(self.subtotal(order)),
            postage=quantize_money(self.postage(order)),
            tax_total=quantize_money(self.tax_total(order)),
            total=quantize_money(self.total(order)),
        )


def compute_totals(order: ValuedOrder) -> OrderTotalsDTO:
    """Totals for *order* using the process-wide hook registry."""
    return ValuationEngine().compute_totals(order)
