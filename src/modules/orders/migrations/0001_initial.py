from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import uuid6
from django.conf import settings
from django.db import migrations, models

import modules.orders.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("status", models.CharField(blank=True, default=modules.orders.models.default_order_status, max_length=50)),
                ("order_number", models.CharField(blank=True, editable=False, max_length=64, null=True, unique=True)),
                ("company", models.CharField(blank=True, default="", max_length=255)),
                ("first_name", models.CharField(blank=True, default="", max_length=255)),
                ("surname", models.CharField(blank=True, default="", max_length=255)),
                ("address_1", models.CharField(blank=True, default="", max_length=255)),
                ("address_2", models.CharField(blank=True, default="", max_length=255)),
                ("city", models.CharField(blank=True, default="", max_length=255)),
                ("post_code", models.CharField(blank=True, default="", max_length=32)),
                ("country", models.CharField(blank=True, default="", max_length=2)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("phone_number", models.CharField(blank=True, default="", max_length=64)),
                ("delivery_first_names", models.CharField(blank=True, default="", max_length=255)),
                ("delivery_surname", models.CharField(blank=True, default="", max_length=255)),
                ("delivery_address_1", models.CharField(blank=True, default="", max_length=255)),
                ("delivery_address_2", models.CharField(blank=True, default="", max_length=255)),
                ("delivery_city", models.CharField(blank=True, default="", max_length=255)),
                ("delivery_post_code", models.CharField(blank=True, default="", max_length=32)),
                ("delivery_country", models.CharField(blank=True, default="", max_length=2)),
                (
                    "discount_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("postage_type", models.CharField(blank=True, default="", max_length=255)),
                ("postage_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("postage_tax", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("payment_no", models.CharField(blank=True, default="", max_length=255)),
                ("gateway_data", models.TextField(blank=True, default="")),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
                "permissions": [
                    ("change_order_status", "Can change the status of any order"),
                    ("view_order_history", "Can view the status history of an order"),
                ],
                "indexes": [
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["-created_at"], name="orders_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(blank=True, default="", max_length=255)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("tax_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_items",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="NotificationRule",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid6.uuid7, editable=False, primary_key=True, serialize=False)),
                ("status", models.CharField(db_index=True, max_length=50)),
                (
                    "recipient",
                    models.CharField(
                        choices=[("customer", "Customer"), ("vendor", "Vendor"), ("both", "Both")],
                        default="customer",
                        max_length=20,
                    ),
                ),
                ("from_email", models.EmailField(blank=True, default="", max_length=254)),
                ("vendor_email", models.EmailField(blank=True, default="", max_length=254)),
                ("custom_subject", models.CharField(blank=True, default="", max_length=255)),
            ],
            options={
                "db_table": "order_notification_rules",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid6.uuid7, editable=False, primary_key=True, serialize=False)),
                ("old_status", models.CharField(blank=True, max_length=50, null=True)),
                ("new_status", models.CharField(blank=True, max_length=50)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_status_history",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["order", "-created_at"], name="osh_order_created_idx"),
                ],
            },
        ),
    ]
