import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LedgerAccount",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[("user_wallet", "User Wallet"), ("platform_refunds", "Platform Refunds")],
                        help_text="Category of this account",
                        max_length=50,
                    ),
                ),
                (
                    "owner_id",
                    models.UUIDField(
                        blank=True,
                        db_index=True,
                        help_text="UUID of the user that owns this account",
                        null=True,
                    ),
                ),
                ("currency", models.CharField(default="ngn", help_text="ISO 4217 currency code", max_length=3)),
                (
                    "allow_negative",
                    models.BooleanField(
                        default=False, help_text="Whether this account can have a negative balance"
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(db_index=True, default=True, help_text="Whether this account is active"),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, db_index=True, help_text="Timestamp when this account was created"
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["type", "currency"], name="ledger_acct_type_cur_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("type", "owner_id", "currency"), name="unique_account_per_owner"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, db_index=True, help_text="Timestamp when this entry was recorded"
                    ),
                ),
                ("amount_kobo", models.PositiveBigIntegerField(help_text="Amount in kobo (always positive)")),
                ("currency", models.CharField(default="ngn", help_text="ISO 4217 currency code", max_length=3)),
                (
                    "entry_type",
                    models.CharField(
                        choices=[("wallet_credit", "Wallet Credit"), ("adjustment", "Adjustment")],
                        help_text="Category of this entry",
                        max_length=50,
                    ),
                ),
                (
                    "reference_id",
                    models.UUIDField(
                        blank=True, help_text="UUID of related business entity (e.g., refund ID)", null=True
                    ),
                ),
                (
                    "reference_type",
                    models.CharField(
                        blank=True,
                        help_text="Type of related entity (e.g., 'refund')",
                        max_length=50,
                        null=True,
                    ),
                ),
                (
                    "description",
                    models.TextField(blank=True, help_text="Human-readable description of this entry", null=True),
                ),
                (
                    "metadata",
                    models.JSONField(blank=True, default=dict, help_text="Arbitrary JSON data for extensibility"),
                ),
                (
                    "created_by",
                    models.CharField(
                        blank=True,
                        help_text="Identifier of service/user that created this entry",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "idempotency_key",
                    models.CharField(
                        help_text="Unique key to prevent duplicate entries", max_length=255, unique=True
                    ),
                ),
                (
                    "credit_account",
                    models.ForeignKey(
                        help_text="Account money is added to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_entries",
                        to="payments.ledgeraccount",
                    ),
                ),
                (
                    "debit_account",
                    models.ForeignKey(
                        help_text="Account money is taken from",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="debit_entries",
                        to="payments.ledgeraccount",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "ledger entries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["reference_type", "reference_id"], name="ledger_entry_ref_idx"),
                    models.Index(fields=["entry_type"], name="ledger_entry_type_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount_kobo__gt", 0)),
                        name="ledger_entry_amount_kobo_positive",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Refund",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, db_index=True, help_text="Timestamp when this record was created"
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified"),
                ),
                (
                    "payment_reference",
                    models.CharField(
                        blank=True,
                        help_text="Gateway transaction reference of the original payment",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(decimal_places=2, help_text="Refund amount in naira", max_digits=12),
                ),
                (
                    "currency",
                    models.CharField(default="ngn", help_text="ISO 4217 currency code (lowercase)", max_length=3),
                ),
                (
                    "refund_method",
                    models.CharField(
                        choices=[("wallet", "Wallet"), ("paystack", "Paystack"), ("manual", "Manual")],
                        help_text="Channel used to return the money",
                        max_length=20,
                    ),
                ),
                (
                    "state",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the refund (managed by FSM)",
                        max_length=50,
                    ),
                ),
                (
                    "paystack_refund_id",
                    models.CharField(
                        blank=True, db_index=True, help_text="Paystack refund id", max_length=255, null=True
                    ),
                ),
                (
                    "paystack_response",
                    models.JSONField(blank=True, help_text="Raw Paystack response body", null=True),
                ),
                (
                    "ledger_reference",
                    models.CharField(
                        blank=True,
                        help_text="Idempotency key of the wallet ledger entry",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1, help_text="Version for optimistic locking - incremented on each save"
                    ),
                ),
                (
                    "completed_at",
                    models.DateTimeField(blank=True, help_text="When refund was completed", null=True),
                ),
                (
                    "failed_at",
                    models.DateTimeField(blank=True, help_text="When refund last failed", null=True),
                ),
                (
                    "notes",
                    models.TextField(blank=True, default="", help_text="Refund reason and processing notes"),
                ),
                (
                    "failure_reason",
                    models.TextField(blank=True, help_text="Detailed reason if refund failed", null=True),
                ),
                (
                    "initiated_by",
                    models.ForeignKey(
                        help_text="User who requested this refund",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="initiated_refunds",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        help_text="Order being refunded",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="refunds",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Refund",
                "verbose_name_plural": "Refunds",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["order", "state"], name="refund_order_state_idx"),
                    models.Index(fields=["state", "created_at"], name="refund_state_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="refund_amount_positive",
                    )
                ],
            },
        ),
    ]
