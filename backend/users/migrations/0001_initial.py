import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("name", models.CharField(max_length=100)),
                (
                    "role",
                    models.CharField(
                        choices=[("user", "User"), ("admin", "Admin"), ("superadmin", "Superadmin")],
                        default="user",
                        max_length=20,
                    ),
                ),
                ("bio", models.CharField(blank=True, max_length=500)),
                ("avatar", models.CharField(blank=True, max_length=500)),
                ("website", models.CharField(blank=True, max_length=200)),
                ("is_active", models.BooleanField(default=True)),
                ("login_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "admin_request_status",
                    models.CharField(
                        choices=[
                            ("none", "None"),
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        default="none",
                        max_length=10,
                    ),
                ),
                ("admin_request_reason", models.CharField(blank=True, max_length=500)),
                ("admin_request_requested_at", models.DateTimeField(blank=True, null=True)),
                ("admin_request_reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("admin_request_message", models.CharField(blank=True, max_length=500)),
                (
                    "admin_request_reviewed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reviewed_admin_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "following",
                    models.ManyToManyField(
                        blank=True, related_name="followers", to=settings.AUTH_USER_MODEL
                    ),
                ),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "indexes": [
                    models.Index(fields=["role", "is_active"], name="user_role_active_idx"),
                    models.Index(fields=["admin_request_status"], name="user_admin_request_idx"),
                ],
            },
        ),
    ]
