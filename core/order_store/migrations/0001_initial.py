import django.db.models.deletion
from django.db import migrations, models


ORDER_STATUS_CHOICES = [
    ("NEW", "New"),
    ("PROCESSING", "Processing"),
    ("READY_FOR_PICKUP", "Ready For Pickup"),
    ("OUT_FOR_DELIVERY", "Out For Delivery"),
    ("COMPLETED", "Completed"),
    ("CANCELLED", "Cancelled"),
    ("DISPUTED", "Disputed"),
]

DISPUTE_STATUS_CHOICES = [
    ("NEW", "New"),
    ("CONTRACTOR_RESPONDED", "Contractor Responded"),
    ("SUPPLIER_RESPONDED", "Supplier Responded"),
    ("UNDER_ADMIN_REVIEW", "Under Admin Review"),
    ("RESOLVED", "Resolved"),
]

DISPUTE_REASON_CHOICES = [
    ("DAMAGED", "Damaged"),
    ("INCORRECT", "Incorrect"),
    ("MISSING", "Missing"),
    ("LATE", "Late"),
    ("OTHER", "Other"),
]

NOTIFICATION_TYPE_CHOICES = [
    ("NEW_ORDER", "New Order"),
    ("ORDER_STATUS_UPDATE", "Order Status Update"),
    ("NEW_MESSAGE", "New Message"),
    ("DISPUTE_UPDATE", "Dispute Update"),
    ("NEW_REVIEW", "New Review"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="OrderRecord",
            fields=[
                ("order_id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("order_number", models.CharField(max_length=64)),
                ("contractor_id", models.CharField(max_length=255)),
                ("supplier_id", models.CharField(max_length=255)),
                (
                    "driver_id",
                    models.CharField(
                        blank=True,
                        help_text="Denormalised from delivery for party lookups.",
                        max_length=255,
                        null=True,
                    ),
                ),
                ("lines", models.JSONField(default=list)),
                ("total", models.DecimalField(decimal_places=2, max_digits=14)),
                ("status", models.CharField(choices=ORDER_STATUS_CHOICES, max_length=32)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                ("delivery", models.JSONField(blank=True, null=True)),
                ("proof_of_delivery", models.JSONField(blank=True, null=True)),
                ("delivery_address", models.TextField(blank=True, default="")),
                ("version", models.PositiveIntegerField(default=1)),
            ],
            options={
                "db_table": "handover_orders",
                "ordering": ["-created_at", "order_id"],
                "indexes": [
                    models.Index(fields=["contractor_id"], name="idx_order_contractor"),
                    models.Index(fields=["supplier_id"], name="idx_order_supplier"),
                    models.Index(fields=["driver_id"], name="idx_order_driver"),
                    models.Index(fields=["status"], name="idx_order_status"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DisputeRecord",
            fields=[
                ("dispute_id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("order_id", models.CharField(max_length=64)),
                ("order_number", models.CharField(max_length=64)),
                ("contractor_id", models.CharField(max_length=255)),
                ("supplier_id", models.CharField(max_length=255)),
                ("raised_by", models.CharField(max_length=255)),
                ("reason", models.CharField(choices=DISPUTE_REASON_CHOICES, max_length=32)),
                ("status", models.CharField(choices=DISPUTE_STATUS_CHOICES, max_length=32)),
                ("created_at", models.DateTimeField()),
                (
                    "order_status_at_opening",
                    models.CharField(choices=ORDER_STATUS_CHOICES, max_length=32),
                ),
                ("participant_ids", models.JSONField(default=list)),
                ("resolution", models.JSONField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
            ],
            options={
                "db_table": "handover_disputes",
                "ordering": ["-created_at", "dispute_id"],
                "indexes": [
                    models.Index(fields=["order_id", "created_at"], name="idx_dispute_order"),
                    models.Index(fields=["contractor_id"], name="idx_dispute_contractor"),
                    models.Index(fields=["supplier_id"], name="idx_dispute_supplier"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DisputeMessageRecord",
            fields=[
                ("message_id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("sequence", models.PositiveIntegerField()),
                ("author_id", models.CharField(max_length=255)),
                ("author_name", models.CharField(blank=True, default="", max_length=255)),
                ("text", models.TextField()),
                ("sent_at", models.DateTimeField()),
                (
                    "dispute",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="messages",
                        to="order_store.disputerecord",
                    ),
                ),
            ],
            options={
                "db_table": "handover_dispute_messages",
                "ordering": ["dispute_id", "sequence"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("dispute", "sequence"),
                        name="uq_dispute_message_sequence",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReviewRecord",
            fields=[
                ("review_id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                (
                    "order_id",
                    models.CharField(
                        help_text="At most one review per order.",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("contractor_id", models.CharField(max_length=255)),
                ("supplier_id", models.CharField(max_length=255)),
                ("rating", models.PositiveSmallIntegerField()),
                ("comment", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField()),
            ],
            options={
                "db_table": "handover_reviews",
                "ordering": ["-created_at", "review_id"],
                "indexes": [
                    models.Index(fields=["supplier_id"], name="idx_review_supplier"),
                ],
            },
        ),
        migrations.CreateModel(
            name="NotificationRecord",
            fields=[
                (
                    "notification_id",
                    models.CharField(max_length=64, primary_key=True, serialize=False),
                ),
                ("recipient_id", models.CharField(max_length=255)),
                (
                    "notification_type",
                    models.CharField(choices=NOTIFICATION_TYPE_CHOICES, max_length=32),
                ),
                ("message", models.TextField()),
                ("created_at", models.DateTimeField()),
                ("is_read", models.BooleanField(default=False)),
                ("source_event_id", models.CharField(blank=True, max_length=64, null=True)),
            ],
            options={
                "db_table": "handover_notifications",
                "ordering": ["-created_at", "notification_id"],
                "indexes": [
                    models.Index(
                        fields=["recipient_id", "is_read"],
                        name="idx_notif_recipient_read",
                    ),
                ],
            },
        ),
    ]
