import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "notification_type",
                    models.CharField(
                        choices=[
                            ("ticket_purchased", "Ticket purchased"),
                            ("ticket_refunded", "Ticket refunded"),
                            ("ticket_cancelled", "Ticket cancelled"),
                            ("ticket_no_show", "Ticket marked as no-show"),
                            ("ticket_restored", "Ticket restored"),
                            ("waitlist_promoted", "Promoted from waitlist"),
                            ("waitlist_promotion_organizer", "Waitlist promotion (organizer)"),
                            ("waitlist_rejected", "Waitlist request rejected"),
                            ("event_reminder", "Event reminder"),
                        ],
                        db_index=True,
                        max_length=50,
                    ),
                ),
                ("title", models.CharField(blank=True, default="", help_text="Rendered notification title", max_length=255)),
                ("body", models.TextField(blank=True, default="", help_text="Rendered notification body")),
                ("link", models.CharField(blank=True, default="", help_text="Frontend deep link", max_length=500)),
                ("context", models.JSONField(blank=True, default=dict, help_text="Structured context data")),
                ("read_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "get_latest_by": "created_at",
                "indexes": [
                    models.Index(fields=["user", "read_at"], name="notification_user_unread"),
                    models.Index(fields=["user", "created_at"], name="notification_user_timeline"),
                ],
            },
        ),
        migrations.CreateModel(
            name="NotificationDelivery",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "channel",
                    models.CharField(choices=[("in_app", "In-app"), ("email", "Email")], db_index=True, max_length=20),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("sent", "Sent"), ("failed", "Failed"), ("skipped", "Skipped")],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("attempted_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True, default="")),
                ("retry_count", models.PositiveIntegerField(default=0)),
                (
                    "notification",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="deliveries",
                        to="notifications.notification",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("notification", "channel"), name="unique_notification_channel")
                ],
            },
        ),
    ]
