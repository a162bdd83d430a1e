"""Status notifications.

``NotificationRuleDjangoLookup`` finds the rules registered for a status;
``EmailNotificationSender`` turns one rule plus one order into a plain
text email sent through Django's mail backend.
"""

from __future__ import annotations

from typing import List, Optional

import structlog
from django.conf import settings
from django.core.mail import send_mail

from modules.orders.conf import OrderEngineConfig, get_engine_config
from modules.orders.constants import NotificationRecipient
from modules.orders.models import NotificationRule, Order
from modules.orders.valuation import ValuationEngine

logger = structlog.get_logger(__name__)


class NotificationRuleDjangoLookup:
    def find_by_status(self, status: str) -> List[NotificationRule]:
        return list(NotificationRule.objects.filter(status=status))


class EmailNotificationSender:
    def __init__(
        self,
        config: Optional[OrderEngineConfig] = None,
        valuation: Optional[ValuationEngine] = None,
    ) -> None:
        self._config = config if config is not None else get_engine_config()
        self._valuation = valuation if valuation is not None else ValuationEngine()

    def recipients(self, rule: NotificationRule, order: Order) -> List[str]:
        vendor = rule.vendor_email or self._config.vendor_email
        to: List[str] = []
        if rule.recipient in (NotificationRecipient.CUSTOMER, NotificationRecipient.BOTH):
            if order.email:
                to.append(order.email)
        if rule.recipient in (NotificationRecipient.VENDOR, NotificationRecipient.BOTH):
            if vendor:
                to.append(vendor)
        return to

    def subject(self, rule: NotificationRule, order: Order) -> str:
        if rule.custom_subject:
            return rule.custom_subject
        label = self._config.status_label(order.status)
        return f"Order {order.order_number}: {label}"

    def body(self, order: Order) -> str:
        totals = self._valuation.compute_totals(order)
        return (
            f"Order {order.order_number} is now "
            f"{self._config.status_label(order.status)}.\n\n"
            f"{self._valuation.item_summary(order)}\n"
            f"Subtotal: {totals.subtotal}\n"
            f"Postage: {totals.postage}\n"
            f"Tax: {totals.tax_total}\n"
            f"Total: {totals.total}\n"
        )

    def send(self, rule: NotificationRule, order: Order) -> bool:
        to = self.recipients(rule, order)
        if not to:
            logger.warning(
                "order.notification_no_recipients", order_id=order.pk, rule_id=str(rule.pk)
            )
            return False

        sent = send_mail(
            subject=self.subject(rule, order),
            message=self.body(order),
            from_email=rule.from_email or settings.DEFAULT_FROM_EMAIL,
            recipient_list=to,
        )
        logger.info(
            "order.notification_sent", order_id=order.pk, rule_id=str(rule.pk), recipients=len(to)
        )
        return bool(sent)
