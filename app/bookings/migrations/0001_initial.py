import uuid

import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.db import migrations, models

import bookings.models.booking_request


BUDGET_CATEGORY_CHOICES = [
    ("venue", "Venue & Infrastructure"),
    ("catering", "Food & Beverage"),
    ("decoration", "Decoration & Design"),
    ("photography", "Photography & Video"),
    ("entertainment", "Entertainment"),
    ("attire", "Attire & Jewelry"),
    ("makeup", "Makeup & Hair"),
    ("transport", "Transport & Logistics"),
    ("invitations", "Invitations & Stationery"),
    ("gifts", "Gifts & Favors"),
    ("miscellaneous", "Miscellaneous"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BookingRequest",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Version for optimistic locking - incremented on each save",
                    ),
                ),
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
                    "event_id",
                    models.UUIDField(
                        db_index=True, help_text="Event this booking belongs to"
                    ),
                ),
                (
                    "function_id",
                    models.UUIDField(
                        blank=True,
                        help_text="Sub-event (function) this booking is for, if any",
                        null=True,
                    ),
                ),
                (
                    "vendor_id",
                    models.UUIDField(
                        db_index=True, help_text="Vendor asked to provide the service"
                    ),
                ),
                (
                    "planner_id",
                    models.UUIDField(
                        db_index=True, help_text="Planner who raised the request"
                    ),
                ),
                (
                    "service_category",
                    models.CharField(
                        help_text="Type of service requested (e.g., 'catering', 'photography')",
                        max_length=100,
                    ),
                ),
                (
                    "service_details",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Free-form requirements sent to the vendor",
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("draft", "Draft"),
                            ("quote_requested", "Quote Requested"),
                            ("quote_received", "Quote Received"),
                            ("negotiating", "Negotiating"),
                            ("confirmed", "Confirmed"),
                            ("deposit_paid", "Deposit Paid"),
                            ("in_progress", "In Progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("declined", "Declined"),
                        ],
                        db_index=True,
                        default="draft",
                        help_text="Current state of the booking (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "quoted_amount_cents",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Amount quoted by the vendor, in smallest currency unit",
                        null=True,
                    ),
                ),
                (
                    "agreed_amount_cents",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Amount agreed at confirmation, in smallest currency unit",
                        null=True,
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default=bookings.models.booking_request.default_currency,
                        help_text="ISO 4217 currency code (lowercase)",
                        max_length=3,
                    ),
                ),
                (
                    "payment_schedule",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Payment milestones: [{id, name, amount_cents, due_date, paid_date, status}]",
                    ),
                ),
                (
                    "requested_date",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When the booking was requested",
                    ),
                ),
                (
                    "response_date",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the vendor submitted a quote",
                        null=True,
                    ),
                ),
                (
                    "confirmation_date",
                    models.DateTimeField(
                        blank=True, help_text="When the quote was accepted", null=True
                    ),
                ),
                (
                    "notes",
                    models.TextField(
                        blank=True, default="", help_text="Notes shared with the vendor"
                    ),
                ),
                (
                    "internal_notes",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Planner-only notes (cancellation and decline reasons land here)",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking Request",
                "verbose_name_plural": "Booking Requests",
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(
                        fields=["event_id", "status"],
                        name="bookings_bo_event_i_5b1c2e_idx",
                    ),
                    models.Index(
                        fields=["planner_id", "status"],
                        name="bookings_bo_planner_8d0e4a_idx",
                    ),
                    models.Index(
                        fields=["vendor_id", "status"],
                        name="bookings_bo_vendor__3f7a91_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingMessage",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
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
                ("sender_type", models.CharField(default="system", max_length=20)),
                (
                    "message_type",
                    models.CharField(default="status_update", max_length=30),
                ),
                ("content", models.TextField()),
                (
                    "booking_request",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="bookings.bookingrequest",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking Message",
                "verbose_name_plural": "Booking Messages",
                "ordering": ["created_at"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="BudgetItem",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Version for optimistic locking - incremented on each save",
                    ),
                ),
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
                    "event_id",
                    models.UUIDField(
                        db_index=True, help_text="Event this budget line belongs to"
                    ),
                ),
                (
                    "function_id",
                    models.UUIDField(
                        blank=True,
                        help_text="Sub-event (function) this line is for, if any",
                        null=True,
                    ),
                ),
                (
                    "vendor_id",
                    models.UUIDField(
                        blank=True, help_text="Vendor being paid, if known", null=True
                    ),
                ),
                (
                    "category",
                    models.CharField(
                        choices=BUDGET_CATEGORY_CHOICES,
                        db_index=True,
                        help_text="Budget category",
                        max_length=20,
                    ),
                ),
                (
                    "description",
                    models.CharField(help_text="What the money is for", max_length=255),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "estimated_amount_cents",
                    models.PositiveBigIntegerField(
                        default=0,
                        help_text="Estimated cost in smallest currency unit",
                    ),
                ),
                (
                    "actual_amount_cents",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="Actual (quoted or invoiced) cost, null until known",
                        null=True,
                    ),
                ),
                (
                    "paid_amount_cents",
                    models.PositiveBigIntegerField(
                        default=0, help_text="Total paid so far - only increases"
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default=bookings.models.booking_request.default_currency,
                        help_text="ISO 4217 currency code (lowercase)",
                        max_length=3,
                    ),
                ),
                (
                    "booking_request",
                    models.ForeignKey(
                        blank=True,
                        help_text="Booking this line was created for",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="budget_items",
                        to="bookings.bookingrequest",
                    ),
                ),
            ],
            options={
                "verbose_name": "Budget Item",
                "verbose_name_plural": "Budget Items",
                "ordering": ["category", "-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(
                        fields=["event_id", "category"],
                        name="bookings_bu_event_i_9c4d17_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Version for optimistic locking - incremented on each save",
                    ),
                ),
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
                    "event_id",
                    models.UUIDField(
                        db_index=True, help_text="Event this payment belongs to"
                    ),
                ),
                (
                    "payment_type",
                    models.CharField(
                        choices=[
                            ("client_payment", "Client Payment"),
                            ("vendor_payment", "Vendor Payment"),
                            ("refund", "Refund"),
                            ("expense", "Expense"),
                        ],
                        help_text="Direction and nature of the money movement",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the payment (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("bank_transfer", "Bank Transfer"),
                            ("cash", "Cash"),
                            ("cheque", "Cheque"),
                            ("upi", "UPI"),
                            ("card", "Card"),
                            ("other", "Other"),
                        ],
                        default="bank_transfer",
                        help_text="How the money moved",
                        max_length=20,
                    ),
                ),
                (
                    "amount_cents",
                    models.PositiveBigIntegerField(
                        help_text="Payment amount in smallest currency unit"
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default=bookings.models.booking_request.default_currency,
                        help_text="ISO 4217 currency code (lowercase)",
                        max_length=3,
                    ),
                ),
                (
                    "paid_by",
                    models.CharField(
                        help_text="Who pays (client, planner, ...)", max_length=255
                    ),
                ),
                (
                    "paid_to",
                    models.CharField(
                        help_text="Who receives the money", max_length=255
                    ),
                ),
                (
                    "due_date",
                    models.DateTimeField(
                        blank=True,
                        db_index=True,
                        help_text="When the payment is due",
                        null=True,
                    ),
                ),
                (
                    "paid_date",
                    models.DateTimeField(
                        blank=True, help_text="When the payment completed", null=True
                    ),
                ),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        help_text="External transaction reference",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "receipt_url",
                    models.URLField(blank=True, max_length=500, null=True),
                ),
                (
                    "description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "booking_request",
                    models.ForeignKey(
                        blank=True,
                        help_text="Booking this payment is for, if any",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payments",
                        to="bookings.bookingrequest",
                    ),
                ),
                (
                    "budget_item",
                    models.ForeignKey(
                        blank=True,
                        help_text="Budget line credited when this payment completes",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payments",
                        to="bookings.budgetitem",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(
                        fields=["event_id", "status"],
                        name="bookings_pa_event_i_2e8b50_idx",
                    ),
                    models.Index(
                        fields=["status", "due_date"],
                        name="bookings_pa_status_71a3cf_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount_cents__gt", 0)),
                        name="booking_payment_amount_positive",
                    ),
                ],
            },
        ),
    ]
